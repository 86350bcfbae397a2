"""Command line entrypoint for the Zernike atlas."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from .catalog import all_modes, get_mode, mode_at
from .config import AtlasConfig, load_config
from .mesh import build_mesh, save_mesh_npz
from .raster import render_detail_2d
from .viewer import AtlasViewer

_LOGGER = logging.getLogger(__name__)


def _configure_logging(cfg: AtlasConfig) -> None:
    if logging.getLogger().handlers:
        return
    level = getattr(logging, cfg.logging.level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=cfg.logging.format)


class _CollectingSurface:
    """Raster/scene surface that just keeps what the viewer hands it."""

    def __init__(self) -> None:
        self.images: dict[str, Any] = {}
        self.mesh: Any = None

    def show_raster(self, key: str, image: Any) -> None:
        self.images[key] = image

    def show_mesh(self, mesh: Any) -> None:
        self.mesh = mesh

    def render(self, mesh: Any, rotation: float) -> None:
        return None


def _cmd_list(args: argparse.Namespace, cfg: AtlasConfig) -> int:
    for mode in all_modes():
        _LOGGER.info("%s: %s (n=%d, m=%d) - %s", mode.label, mode.name, mode.n, mode.m, mode.description)
    return 0


def _cmd_atlas(args: argparse.Namespace, cfg: AtlasConfig) -> int:
    from .viz.figures import plot_atlas

    surface = _CollectingSurface()
    viewer = AtlasViewer(surface, surface, config=cfg)
    rows = viewer.build_pyramid()
    out = Path(args.out) if args.out else Path(cfg.output.dir) / "atlas.png"
    plot_atlas(out, rows, dpi=cfg.output.dpi)
    _LOGGER.info("atlas written to %s", out)
    return 0


def _resolve_mode(args: argparse.Namespace) -> Any:
    if args.index is not None:
        if args.n is not None or args.m is not None:
            raise ValueError("use either --index or N M, not both")
        return mode_at(args.index)
    if args.n is None or args.m is None:
        raise ValueError("mode requires N M or --index")
    return get_mode(args.n, args.m)


def _cmd_mode(args: argparse.Namespace, cfg: AtlasConfig) -> int:
    from .viz.figures import plot_mode_detail, save_raster_png

    mode = _resolve_mode(args)
    out_dir = Path(args.out_dir) if args.out_dir else Path(cfg.output.dir)
    detail = render_detail_2d(
        mode.n,
        mode.m,
        cfg.detail,
        levels=cfg.contour.levels,
        samples=cfg.contour.samples,
        iterations=cfg.contour.iterations,
    )
    mesh = build_mesh(mode.n, mode.m, resolution=cfg.mesh.resolution, height_scale=cfg.mesh.height_scale)
    stem = f"{mode.label.lower()}_n{mode.n}_m{mode.m}"
    raster_path = save_raster_png(out_dir / f"{stem}_detail2d.png", detail.image)
    figure_path = plot_mode_detail(out_dir / f"{stem}.png", mode, detail.image, mesh, dpi=cfg.output.dpi)
    _LOGGER.info("%s: raster %s, figure %s", mode.title, raster_path, figure_path)
    empty = [f"{c.level:+.1f}" for c in detail.contours if c.is_empty]
    if empty:
        _LOGGER.info("levels not attained: %s", ", ".join(empty))
    if args.mesh:
        mesh_path = save_mesh_npz(out_dir / f"{stem}_mesh.npz", mesh)
        _LOGGER.info("mesh (%d vertices, %d faces) written to %s", mesh.vertex_count, mesh.face_count, mesh_path)
    return 0


def _cmd_show(args: argparse.Namespace, cfg: AtlasConfig) -> int:
    from .viz.interactive import run_interactive

    run_interactive(cfg)
    return 0


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Zernike mode atlas")
    parser.add_argument("--config", default=None, help="Path to atlas.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List catalog modes").set_defaults(func=_cmd_list)

    atlas = sub.add_parser("atlas", help="Write the thumbnail pyramid as PNG")
    atlas.add_argument("--out", default=None, help="Output PNG path")
    atlas.set_defaults(func=_cmd_atlas)

    mode = sub.add_parser("mode", help="Write the detail view of one mode")
    mode.add_argument("n", nargs="?", type=int, default=None, help="Radial order")
    mode.add_argument("m", nargs="?", type=int, default=None, help="Azimuthal frequency")
    mode.add_argument("--index", type=int, default=None, help="Catalog index instead of N M")
    mode.add_argument("--out-dir", default=None, help="Output directory")
    mode.add_argument("--mesh", action="store_true", help="Also write the surface mesh (.npz)")
    mode.set_defaults(func=_cmd_mode)

    sub.add_parser("show", help="Open the interactive atlas").set_defaults(func=_cmd_show)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    cfg = load_config(Path(args.config).expanduser() if args.config else None)
    _configure_logging(cfg)
    return int(args.func(args, cfg))


if __name__ == "__main__":
    raise SystemExit(main())
