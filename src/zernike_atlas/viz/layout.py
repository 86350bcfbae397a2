"""Backend-agnostic drawing helpers shared by the static and interactive views."""
from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from ..catalog import Mode
from ..mesh import SurfaceMesh
from ..viewer import Thumbnail

# fraction of a pyramid cell used by the 3D preview, 2D preview and label
_CELL_SPLIT = (0.55, 0.30, 0.15)

# scene lighting: white ambient plus one directional light from (1, 1, 1)
AMBIENT_LIGHT = 0.6
DIRECTIONAL_LIGHT = 0.8
LIGHT_DIRECTION = (1.0, 1.0, 1.0)


def hide_ticks(ax: Any) -> None:
    ax.set_xticks([])
    ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_visible(False)


def draw_pyramid(
    fig: Any,
    rows: Sequence[Sequence[Thumbnail]],
    *,
    bounds: tuple[float, float, float, float] = (0.0, 0.0, 1.0, 1.0),
) -> dict[Any, Mode]:
    """Lay thumbnails out as a centred pyramid inside `bounds` (figure coords).

    Returns a mapping from every created axes to the mode it shows.
    """
    if not rows:
        raise ValueError("pyramid rows must be non-empty")
    left0, bottom0, width0, height0 = bounds
    n_rows = len(rows)
    n_cols = max(len(row) for row in rows)
    cell_w = width0 / n_cols
    cell_h = height0 / n_rows
    frac_3d, frac_2d, frac_label = _CELL_SPLIT
    axes_modes: dict[Any, Mode] = {}
    for row_idx, row in enumerate(rows):
        offset = (n_cols - len(row)) / 2.0
        top = bottom0 + height0 - row_idx * cell_h
        for col_idx, thumb in enumerate(row):
            left = left0 + (offset + col_idx) * cell_w
            ax3 = fig.add_axes([left, top - cell_h * frac_3d, cell_w, cell_h * frac_3d])
            ax3.imshow(thumb.preview_3d.pixels)
            ax2 = fig.add_axes(
                [left, top - cell_h * (frac_3d + frac_2d), cell_w, cell_h * frac_2d]
            )
            ax2.imshow(thumb.preview_2d.pixels)
            for ax in (ax3, ax2):
                hide_ticks(ax)
                axes_modes[ax] = thumb.mode
            fig.text(
                left + cell_w / 2.0,
                top - cell_h * (frac_3d + frac_2d + frac_label / 2.0),
                thumb.mode.label,
                ha="center",
                va="center",
                fontsize=9,
            )
    return axes_modes


def shaded_face_colors(
    mesh: SurfaceMesh,
    *,
    light: Sequence[float] = LIGHT_DIRECTION,
    ambient: float = AMBIENT_LIGHT,
    diffuse: float = DIRECTIONAL_LIGHT,
) -> np.ndarray:
    """Per-face RGBA lit by an ambient term plus one directional Lambert light.

    Face normals are the renormalised mean of their corner vertex normals.
    Alpha is left untouched.
    """
    base = mesh.colors[mesh.faces].mean(axis=1)
    normals = mesh.normals[mesh.faces].mean(axis=1)
    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    normals = normals / np.where(lengths > 0.0, lengths, 1.0)
    direction = np.asarray(light, dtype=np.float64)
    direction = direction / np.linalg.norm(direction)
    lambert = np.clip(normals @ direction, 0.0, None)
    intensity = ambient + diffuse * lambert
    shaded = base.copy()
    shaded[:, :3] = np.clip(base[:, :3] * intensity[:, None], 0.0, 1.0)
    return shaded


def mesh_collection(mesh: SurfaceMesh) -> Poly3DCollection:
    triangles = mesh.vertices[mesh.faces]
    face_colors = shaded_face_colors(mesh)
    collection = Poly3DCollection(triangles, facecolors=face_colors, linewidths=0.0)
    collection.set_edgecolor("none")
    return collection


def setup_scene_axes(ax: Any, mesh: SurfaceMesh | None) -> None:
    ax.set_xlim(-1.0, 1.0)
    ax.set_ylim(-1.0, 1.0)
    if mesh is not None and mesh.vertex_count:
        z_abs = float(np.max(np.abs(mesh.vertices[:, 2])))
    else:
        z_abs = 1.0
    z_lim = max(z_abs, 0.1)
    ax.set_zlim(-z_lim, z_lim)
    ax.set_box_aspect((1.0, 1.0, 0.6))
    ax.set_xlabel("x")
    ax.set_ylabel("y")


def view_angles(rotation: float) -> tuple[float, float]:
    """(elev, azim) in degrees for a camera at (2, 2, 2) spun by `rotation` rad."""
    return 35.26, 45.0 + float(np.degrees(rotation))


__all__ = [
    "AMBIENT_LIGHT",
    "DIRECTIONAL_LIGHT",
    "LIGHT_DIRECTION",
    "draw_pyramid",
    "hide_ticks",
    "mesh_collection",
    "setup_scene_axes",
    "shaded_face_colors",
    "view_angles",
]
