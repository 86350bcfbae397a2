"""UI adapter: selection state, display surfaces and the repaint loop.

The adapter is the only stateful piece of the atlas. It renders through the
pure core and hands results to surfaces it does not know the identity of;
the matplotlib front end in `zernike_atlas.viz` is one implementation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Union

from .catalog import Mode, all_modes, pyramid_rows
from .config import AtlasConfig
from .mesh import SurfaceMesh, build_mesh
from .raster import DetailRaster, RasterImage, render_detail_2d, render_preview_2d, render_preview_3d

_LOGGER = logging.getLogger(__name__)

Selection = Union[int, tuple[int, int], Mode]


class RasterSurface(Protocol):
    def show_raster(self, key: str, image: RasterImage) -> None: ...


class SceneSurface(Protocol):
    def show_mesh(self, mesh: Optional[SurfaceMesh]) -> None: ...

    def render(self, mesh: SurfaceMesh, rotation: float) -> None: ...


class RepaintLoop:
    """Fixed-cadence repaint of whichever mesh is currently active.

    `tick` is driven by the host's timer. Replacing the mesh is a single
    reference swap on the same thread as `tick`, so no locking is needed.
    """

    def __init__(self, render: Callable[[SurfaceMesh, float], None], *, step: float = 0.005) -> None:
        self._render = render
        self.step = float(step)
        self.rotation = 0.0
        self.frames = 0
        self._mesh: Optional[SurfaceMesh] = None

    @property
    def mesh(self) -> Optional[SurfaceMesh]:
        return self._mesh

    @property
    def active(self) -> bool:
        return self._mesh is not None

    def replace(self, mesh: SurfaceMesh) -> Optional[SurfaceMesh]:
        previous = self._mesh
        self._mesh = mesh
        return previous

    def clear(self) -> Optional[SurfaceMesh]:
        previous = self._mesh
        self._mesh = None
        return previous

    def tick(self) -> bool:
        mesh = self._mesh
        if mesh is None:
            return False
        self.rotation += self.step
        self.frames += 1
        self._render(mesh, self.rotation)
        return True


@dataclass(frozen=True)
class Thumbnail:
    mode: Mode
    preview_3d: RasterImage
    preview_2d: RasterImage

    @property
    def key(self) -> str:
        return self.mode.label


class AtlasViewer:
    def __init__(
        self,
        raster_surface: RasterSurface,
        scene_surface: SceneSurface,
        *,
        config: Optional[AtlasConfig] = None,
        modes: Optional[Sequence[Mode]] = None,
    ) -> None:
        self.config = config or AtlasConfig()
        self.modes = tuple(modes) if modes is not None else all_modes()
        self._raster_surface = raster_surface
        self._scene_surface = scene_surface
        self.loop = RepaintLoop(scene_surface.render, step=self.config.animation.step)
        self._selected: Optional[Mode] = None
        self._detail: Optional[DetailRaster] = None

    @property
    def selected(self) -> Optional[Mode]:
        return self._selected

    @property
    def detail(self) -> Optional[DetailRaster]:
        return self._detail

    def build_pyramid(self) -> list[list[Thumbnail]]:
        rows: list[list[Thumbnail]] = []
        for row in pyramid_rows(self.modes):
            thumbs = []
            for mode in row:
                thumb = Thumbnail(
                    mode=mode,
                    preview_3d=render_preview_3d(mode.n, mode.m, self.config.preview_3d),
                    preview_2d=render_preview_2d(mode.n, mode.m, self.config.preview_2d),
                )
                self._raster_surface.show_raster(f"{thumb.key}/3d", thumb.preview_3d)
                self._raster_surface.show_raster(f"{thumb.key}/2d", thumb.preview_2d)
                thumbs.append(thumb)
            rows.append(thumbs)
        _LOGGER.debug("pyramid built: %d rows, %d modes", len(rows), len(self.modes))
        return rows

    def resolve(self, selection: Selection) -> Mode:
        if isinstance(selection, Mode):
            return selection
        if isinstance(selection, tuple):
            n, m = selection
            for mode in self.modes:
                if mode.n == n and mode.m == m:
                    return mode
            raise KeyError(f"no catalog mode for (n={n}, m={m})")
        if isinstance(selection, bool) or not isinstance(selection, int):
            raise TypeError(f"selection must be an index, (n, m) or Mode, got {selection!r}")
        if selection < 0 or selection >= len(self.modes):
            raise KeyError(f"catalog index out of range: {selection} (size {len(self.modes)})")
        return self.modes[selection]

    def select(self, selection: Selection) -> Mode:
        mode = self.resolve(selection)
        contour_cfg = self.config.contour
        detail = render_detail_2d(
            mode.n,
            mode.m,
            self.config.detail,
            levels=contour_cfg.levels,
            samples=contour_cfg.samples,
            iterations=contour_cfg.iterations,
        )
        mesh = build_mesh(
            mode.n,
            mode.m,
            resolution=self.config.mesh.resolution,
            height_scale=self.config.mesh.height_scale,
        )
        # both artifacts are complete before anything visible changes
        self._raster_surface.show_raster("detail", detail.image)
        self._scene_surface.show_mesh(mesh)
        self.loop.replace(mesh)
        self._selected = mode
        self._detail = detail
        _LOGGER.info("selected %s", mode.title)
        return mode

    def close(self) -> None:
        self.loop.clear()
        self._scene_surface.show_mesh(None)
        self._selected = None
        self._detail = None


__all__ = ["AtlasViewer", "RasterSurface", "RepaintLoop", "SceneSurface", "Thumbnail"]
