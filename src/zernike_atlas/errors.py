"""Error types raised by the atlas core."""
from __future__ import annotations


class InvalidMode(ValueError):
    """(n, m) does not index a Zernike mode (needs n >= 0, |m| <= n, n - |m| even)."""

    def __init__(self, n: object, m: object, reason: str) -> None:
        super().__init__(f"invalid zernike mode (n={n}, m={m}): {reason}")
        self.n = n
        self.m = m
        self.reason = reason


__all__ = ["InvalidMode"]
