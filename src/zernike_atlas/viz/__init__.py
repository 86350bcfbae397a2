"""matplotlib front end for the atlas.

`zernike_atlas.viz.figures` writes static PNGs on the Agg backend;
`zernike_atlas.viz.interactive` opens a window and drives the viewer. They
are separate modules so importing one never pins the other's backend.
"""
