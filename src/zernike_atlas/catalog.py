"""Static catalog of the Zernike modes shown in the atlas (n <= 4)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .zernike import validate_mode

MAX_RADIAL_ORDER = 4


@dataclass(frozen=True)
class Mode:
    n: int
    m: int
    name: str
    description: str

    def __post_init__(self) -> None:
        validate_mode(self.n, self.m)

    @property
    def index(self) -> int:
        """ANSI single index j = (n(n+2) + m) / 2."""
        return (self.n * (self.n + 2) + self.m) // 2

    @property
    def label(self) -> str:
        return f"Z{self.index}"

    @property
    def title(self) -> str:
        return f"{self.label}: {self.name} (n={self.n}, m={self.m})"


_MODES: tuple[Mode, ...] = (
    Mode(0, 0, "Piston", "Constant phase shift across the aperture."),
    Mode(1, -1, "Vertical Tilt", "Tilt in the vertical direction."),
    Mode(1, 1, "Horizontal Tilt", "Tilt in the horizontal direction."),
    Mode(2, -2, "Oblique Astigmatism", "Astigmatism at 45°."),
    Mode(2, 0, "Defocus", "Focus error."),
    Mode(2, 2, "Vertical Astigmatism", "Astigmatism at 0° or 90°."),
    Mode(3, -3, "Vertical Trefoil", "Three-fold symmetry, vertical."),
    Mode(3, -1, "Vertical Coma", "Coma in the vertical direction."),
    Mode(3, 1, "Horizontal Coma", "Coma in the horizontal direction."),
    Mode(3, 3, "Oblique Trefoil", "Three-fold symmetry, oblique."),
    Mode(4, -4, "Oblique Quadrafoil", "Four-fold symmetry, oblique."),
    Mode(4, -2, "Oblique Secondary Astigmatism", "Secondary astigmatism, oblique."),
    Mode(4, 0, "Primary Spherical", "Spherical aberration."),
    Mode(4, 2, "Vertical Secondary Astigmatism", "Secondary astigmatism, vertical."),
    Mode(4, 4, "Vertical Quadrafoil", "Four-fold symmetry, vertical."),
)


def validate_catalog(modes: Sequence[Mode], *, max_order: int = MAX_RADIAL_ORDER) -> None:
    seen: set[tuple[int, int]] = set()
    for mode in modes:
        validate_mode(mode.n, mode.m)
        key = (mode.n, mode.m)
        if key in seen:
            raise ValueError(f"duplicate catalog entry for (n={mode.n}, m={mode.m})")
        seen.add(key)
    expected = {(n, m) for n in range(max_order + 1) for m in range(-n, n + 1, 2)}
    missing = sorted(expected - seen)
    if missing:
        raise ValueError(f"catalog is missing modes: {missing}")
    extra = sorted(seen - expected)
    if extra:
        raise ValueError(f"catalog has modes beyond n={max_order}: {extra}")


# CONTRACT: the catalog is checked once at import; a bad table fails loudly.
validate_catalog(_MODES)


def all_modes() -> tuple[Mode, ...]:
    return _MODES


def get_mode(n: int, m: int) -> Mode:
    for mode in _MODES:
        if mode.n == n and mode.m == m:
            return mode
    raise KeyError(f"no catalog mode for (n={n}, m={m})")


def mode_at(index: int) -> Mode:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"catalog index must be an int, got {type(index).__name__}")
    if index < 0 or index >= len(_MODES):
        raise KeyError(f"catalog index out of range: {index} (size {len(_MODES)})")
    return _MODES[index]


def mode_index(n: int, m: int) -> int:
    """Position of (n, m) in the catalog, -1 when absent."""
    for idx, mode in enumerate(_MODES):
        if mode.n == n and mode.m == m:
            return idx
    return -1


def pyramid_rows(modes: Sequence[Mode] | None = None) -> list[list[Mode]]:
    """Group modes by radial order, m ascending inside each row."""
    if modes is None:
        modes = _MODES
    if not modes:
        return []
    max_n = max(mode.n for mode in modes)
    lookup = {(mode.n, mode.m): mode for mode in modes}
    rows: list[list[Mode]] = []
    for n in range(max_n + 1):
        row = [lookup[(n, m)] for m in range(-n, n + 1, 2) if (n, m) in lookup]
        rows.append(row)
    return rows


__all__ = [
    "MAX_RADIAL_ORDER",
    "Mode",
    "all_modes",
    "get_mode",
    "mode_at",
    "mode_index",
    "pyramid_rows",
    "validate_catalog",
]
