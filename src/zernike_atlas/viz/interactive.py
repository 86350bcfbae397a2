"""Interactive atlas window: click a thumbnail to open its detail view."""
from __future__ import annotations

import logging
from typing import Any, Optional

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation

from ..config import AtlasConfig
from ..mesh import SurfaceMesh
from ..raster import RasterImage
from ..viewer import AtlasViewer
from .layout import draw_pyramid, hide_ticks, mesh_collection, setup_scene_axes, view_angles

_LOGGER = logging.getLogger(__name__)


class MatplotlibSurfaces:
    """Raster and scene surfaces backed by two axes of one figure."""

    def __init__(self, fig: Any, detail_ax: Any, scene_ax: Any) -> None:
        self.fig = fig
        self.detail_ax = detail_ax
        self.scene_ax = scene_ax
        self.images: dict[str, RasterImage] = {}
        self._detail_artist: Any = None
        self._collection: Any = None

    def show_raster(self, key: str, image: RasterImage) -> None:
        self.images[key] = image
        if key != "detail":
            return
        if self._detail_artist is None:
            self._detail_artist = self.detail_ax.imshow(image.pixels)
            hide_ticks(self.detail_ax)
        else:
            self._detail_artist.set_data(image.pixels)
        self.fig.canvas.draw_idle()

    def show_mesh(self, mesh: Optional[SurfaceMesh]) -> None:
        # the previous collection is dropped with the old mesh
        if self._collection is not None:
            self._collection.remove()
            self._collection = None
        if mesh is not None:
            self._collection = mesh_collection(mesh)
            self.scene_ax.add_collection3d(self._collection)
        setup_scene_axes(self.scene_ax, mesh)
        self.fig.canvas.draw_idle()

    def render(self, mesh: SurfaceMesh, rotation: float) -> None:
        elev, azim = view_angles(rotation)
        self.scene_ax.view_init(elev=elev, azim=azim)
        self.fig.canvas.draw_idle()


def run_interactive(config: Optional[AtlasConfig] = None) -> None:
    config = config or AtlasConfig()
    fig = plt.figure(figsize=(15.0, 7.0))
    detail_ax = fig.add_axes([0.50, 0.08, 0.24, 0.84])
    scene_ax = fig.add_axes([0.75, 0.08, 0.24, 0.84], projection="3d")
    surfaces = MatplotlibSurfaces(fig, detail_ax, scene_ax)
    viewer = AtlasViewer(surfaces, surfaces, config=config)
    axes_modes = draw_pyramid(fig, viewer.build_pyramid(), bounds=(0.01, 0.04, 0.46, 0.92))
    title = fig.suptitle("Click a mode to open it")

    def _on_click(event: Any) -> None:
        mode = axes_modes.get(event.inaxes)
        if mode is None:
            return
        viewer.select(mode)
        title.set_text(f"{mode.title}: {mode.description}")

    def _on_key(event: Any) -> None:
        if event.key == "escape" and viewer.selected is not None:
            viewer.close()
            title.set_text("Click a mode to open it")

    def _on_frame(_frame: int) -> list[Any]:
        viewer.loop.tick()
        return []

    fig.canvas.mpl_connect("button_press_event", _on_click)
    fig.canvas.mpl_connect("key_press_event", _on_key)
    # keep a reference: the animation stops when garbage collected
    animation = FuncAnimation(
        fig,
        _on_frame,
        interval=config.animation.interval_ms,
        cache_frame_data=False,
    )
    _LOGGER.info("atlas window open (%d modes)", len(viewer.modes))
    plt.show()
    del animation


__all__ = ["MatplotlibSurfaces", "run_interactive"]
