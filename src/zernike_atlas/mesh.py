"""Disk-clipped triangular surface mesh of a Zernike mode."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from .colormap import colors_for
from .zernike import evaluate, validate_mode

_LOGGER = logging.getLogger(__name__)

DEFAULT_RESOLUTION = 300
DEFAULT_HEIGHT_SCALE = 0.5


def _normalize_vertices(vertices: Any) -> np.ndarray:
    verts = np.asarray(vertices, dtype=np.float64)
    if verts.ndim != 2 or verts.shape[1] != 3:
        raise ValueError(f"mesh vertices must be (N, 3), got shape {verts.shape}")
    return verts


def _normalize_faces(faces: Any, n_vertices: int) -> np.ndarray:
    face_arr = np.asarray(faces, dtype=np.int64)
    if face_arr.size == 0:
        return face_arr.reshape(0, 3)
    if face_arr.ndim != 2 or face_arr.shape[1] != 3:
        raise ValueError(f"mesh faces must be (F, 3), got shape {face_arr.shape}")
    min_idx = int(face_arr.min())
    max_idx = int(face_arr.max())
    if min_idx < 0 or max_idx >= n_vertices:
        raise ValueError(f"mesh faces index out of range: [{min_idx}, {max_idx}] vs {n_vertices}")
    return face_arr


def validate_mesh(vertices: Any, faces: Any) -> tuple[np.ndarray, np.ndarray]:
    verts = _normalize_vertices(vertices)
    return verts, _normalize_faces(faces, verts.shape[0])


@dataclass(frozen=True)
class SurfaceMesh:
    vertices: np.ndarray
    faces: np.ndarray
    normals: np.ndarray
    colors: np.ndarray

    def __post_init__(self) -> None:
        verts, _ = validate_mesh(self.vertices, self.faces)
        count = verts.shape[0]
        if np.shape(self.normals) != (count, 3):
            raise ValueError(f"mesh normals must be ({count}, 3), got {np.shape(self.normals)}")
        if np.shape(self.colors) != (count, 4):
            raise ValueError(f"mesh colors must be ({count}, 4), got {np.shape(self.colors)}")

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def face_count(self) -> int:
        return int(self.faces.shape[0])


def compute_vertex_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Area-weighted vertex normals; isolated vertices point along +z."""
    verts = np.asarray(vertices, dtype=np.float64)
    normals = np.zeros_like(verts)
    if faces.size:
        v0 = verts[faces[:, 0]]
        v1 = verts[faces[:, 1]]
        v2 = verts[faces[:, 2]]
        # cross product length is twice the triangle area
        face_normals = np.cross(v1 - v0, v2 - v0)
        for corner in range(3):
            np.add.at(normals, faces[:, corner], face_normals)
    lengths = np.linalg.norm(normals, axis=1)
    flat = lengths <= 0.0
    normals[flat] = (0.0, 0.0, 1.0)
    lengths[flat] = 1.0
    return normals / lengths[:, None]


def build_mesh(
    n: int,
    m: int,
    *,
    resolution: int = DEFAULT_RESOLUTION,
    height_scale: float = DEFAULT_HEIGHT_SCALE,
) -> SurfaceMesh:
    n, m = validate_mode(n, m)
    if resolution <= 0:
        raise ValueError(f"mesh resolution must be > 0, got {resolution}")
    nodes = resolution + 1
    xs = np.linspace(-1.0, 1.0, nodes)
    ys = np.linspace(1.0, -1.0, nodes)
    grid_x, grid_y = np.meshgrid(xs, ys, indexing="xy")
    r = np.hypot(grid_x, grid_y)
    inside = r <= 1.0

    # CONTRACT: grid nodes outside the disk get no vertex (index -1).
    index_map = np.full(inside.shape, -1, dtype=np.int64)
    index_map[inside] = np.arange(int(inside.sum()), dtype=np.int64)

    x = grid_x[inside]
    y = grid_y[inside]
    values = np.asarray(evaluate(n, m, r[inside], np.arctan2(y, x)), dtype=np.float64)
    vertices = np.column_stack([x, y, values * float(height_scale)])

    a = index_map[:-1, :-1]
    b = index_map[1:, :-1]
    c = index_map[1:, 1:]
    d = index_map[:-1, 1:]
    tris = np.stack([np.stack([a, b, d], axis=-1), np.stack([b, c, d], axis=-1)], axis=2)
    tris = tris.reshape(-1, 3)
    faces = tris[(tris >= 0).all(axis=1)]

    normals = compute_vertex_normals(vertices, faces)
    _LOGGER.debug(
        "mesh (n=%d, m=%d): %d vertices, %d faces at resolution %d",
        n,
        m,
        vertices.shape[0],
        faces.shape[0],
        resolution,
    )
    return SurfaceMesh(
        vertices=vertices,
        faces=faces,
        normals=normals,
        colors=colors_for(values),
    )


def save_mesh_npz(path: str | Path, mesh: SurfaceMesh) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savez_compressed(
        path,
        vertices=mesh.vertices,
        faces=mesh.faces,
        normals=mesh.normals,
        colors=mesh.colors,
    )
    return path


def load_mesh_npz(path: str | Path) -> SurfaceMesh:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"mesh file not found: {path}")
    with np.load(path, allow_pickle=False) as data:
        missing = [key for key in ("vertices", "faces") if key not in data]
        if missing:
            raise ValueError(f"mesh .npz must contain vertices and faces arrays, missing {missing}")
        vertices, faces = validate_mesh(data["vertices"], data["faces"])
        normals = np.asarray(data["normals"]) if "normals" in data else None
        colors = np.asarray(data["colors"]) if "colors" in data else None
    if normals is None:
        normals = compute_vertex_normals(vertices, faces)
    if colors is None:
        colors = colors_for(vertices[:, 2])
    return SurfaceMesh(vertices=vertices, faces=faces, normals=normals, colors=colors)


__all__ = [
    "DEFAULT_HEIGHT_SCALE",
    "DEFAULT_RESOLUTION",
    "SurfaceMesh",
    "build_mesh",
    "compute_vertex_normals",
    "load_mesh_npz",
    "save_mesh_npz",
    "validate_mesh",
]
