from __future__ import annotations

import pytest

from zernike_atlas.catalog import all_modes, get_mode
from zernike_atlas.viewer import AtlasViewer, RepaintLoop


class _RecordingSurface:
    def __init__(self) -> None:
        self.rasters: dict[str, object] = {}
        self.meshes: list[object] = []
        self.frames: list[tuple[object, float]] = []

    def show_raster(self, key, image) -> None:
        self.rasters[key] = image

    def show_mesh(self, mesh) -> None:
        self.meshes.append(mesh)

    def render(self, mesh, rotation: float) -> None:
        self.frames.append((mesh, rotation))


def test_repaint_loop_only_runs_with_a_mesh() -> None:
    frames = []
    loop = RepaintLoop(lambda mesh, rotation: frames.append((mesh, rotation)), step=0.5)
    assert loop.tick() is False
    assert loop.replace("first") is None
    assert loop.tick() is True
    assert loop.tick() is True
    assert loop.replace("second") == "first"
    loop.tick()
    assert frames == [("first", 0.5), ("first", 1.0), ("second", 1.5)]
    assert loop.clear() == "second"
    assert loop.tick() is False
    assert loop.frames == 3


def test_build_pyramid_pushes_both_previews(small_config) -> None:
    surface = _RecordingSurface()
    viewer = AtlasViewer(surface, surface, config=small_config)
    rows = viewer.build_pyramid()
    assert [len(row) for row in rows] == [1, 2, 3, 4, 5]
    assert len(surface.rasters) == 2 * len(all_modes())
    thumb = rows[2][1]
    assert thumb.mode == get_mode(2, 0)
    assert surface.rasters["Z4/3d"] is thumb.preview_3d
    assert thumb.preview_2d.pixels.shape == (30, 140, 4)


def test_select_builds_detail_and_mesh(small_config) -> None:
    surface = _RecordingSurface()
    viewer = AtlasViewer(surface, surface, config=small_config)
    mode = viewer.select((2, 2))
    assert mode.name == "Vertical Astigmatism"
    assert viewer.selected is mode
    assert surface.rasters["detail"].pixels.shape == (120, 120, 4)
    assert len(viewer.detail.contours) == len(small_config.contour.levels)
    assert surface.meshes[-1] is viewer.loop.mesh

    viewer.loop.tick()
    first_mesh = viewer.loop.mesh
    viewer.select(4)
    assert viewer.selected == get_mode(2, 0)
    assert viewer.loop.mesh is not first_mesh
    viewer.loop.tick()
    assert surface.frames[-1][0] is viewer.loop.mesh
    assert surface.frames[-1][1] == pytest.approx(2 * small_config.animation.step)


def test_select_accepts_mode_and_rejects_unknown(small_config) -> None:
    surface = _RecordingSurface()
    viewer = AtlasViewer(surface, surface, config=small_config)
    piston = all_modes()[0]
    assert viewer.select(piston) is piston
    with pytest.raises(KeyError):
        viewer.select((5, 1))
    with pytest.raises(KeyError):
        viewer.select(99)
    with pytest.raises(TypeError):
        viewer.select("Z3")
    # failed selections leave the current one in place
    assert viewer.selected is piston


def test_close_releases_mesh(small_config) -> None:
    surface = _RecordingSurface()
    viewer = AtlasViewer(surface, surface, config=small_config)
    viewer.select(1)
    viewer.close()
    assert viewer.selected is None
    assert viewer.loop.mesh is None
    assert surface.meshes[-1] is None
    assert viewer.loop.tick() is False


def test_viewer_over_a_subset_of_modes(small_config) -> None:
    surface = _RecordingSurface()
    subset = [mode for mode in all_modes() if mode.n <= 1]
    viewer = AtlasViewer(surface, surface, config=small_config, modes=subset)
    assert [len(row) for row in viewer.build_pyramid()] == [1, 2]
    assert viewer.select(2) == get_mode(1, 1)
    with pytest.raises(KeyError):
        viewer.select(3)
