"""Zernike polynomial evaluation (ANSI ordering, no normalization factor)."""
from __future__ import annotations

from functools import lru_cache
from numbers import Integral
from typing import Any

import numpy as np

from .errors import InvalidMode


def validate_mode(n: Any, m: Any) -> tuple[int, int]:
    if isinstance(n, bool) or isinstance(m, bool):
        raise InvalidMode(n, m, "n and m must be integers")
    if not isinstance(n, Integral) or not isinstance(m, Integral):
        raise InvalidMode(n, m, "n and m must be integers")
    n_i, m_i = int(n), int(m)
    if n_i < 0:
        raise InvalidMode(n, m, "n must be >= 0")
    if abs(m_i) > n_i:
        raise InvalidMode(n, m, "|m| must be <= n")
    if (n_i - abs(m_i)) % 2 != 0:
        raise InvalidMode(n, m, "n - |m| must be even")
    return n_i, m_i


def factorial(k: int) -> int:
    # CONTRACT: callers only pass k >= 0 once (n, m) passed validate_mode.
    assert k >= 0, f"factorial of negative argument {k}"
    result = 1
    for i in range(2, k + 1):
        result *= i
    return result


@lru_cache(maxsize=None)
def radial_coefficients(n: int, m: int) -> tuple[tuple[int, float], ...]:
    """(power, coefficient) pairs of the radial polynomial R_n^m.

    R_n^m(r) = sum_k (-1)^k (n-k)! / (k! ((n+|m|)/2-k)! ((n-|m|)/2-k)!) r^(n-2k)
    """
    n, m = validate_mode(n, m)
    m_abs = abs(m)
    half_sum = (n + m_abs) // 2
    half_diff = (n - m_abs) // 2
    terms = []
    for k in range(half_diff + 1):
        numerator = factorial(n - k)
        denominator = factorial(k) * factorial(half_sum - k) * factorial(half_diff - k)
        sign = -1 if k % 2 else 1
        terms.append((n - 2 * k, float(sign * numerator // denominator)))
    return tuple(terms)


def radial(n: int, m: int, r: Any) -> Any:
    r_arr = np.asarray(r, dtype=np.float64)
    out = np.zeros_like(r_arr)
    for power, coeff in radial_coefficients(n, m):
        out = out + coeff * np.power(r_arr, power)
    if out.ndim == 0:
        return float(out)
    return out


def angular(m: int, theta: Any) -> Any:
    theta_arr = np.asarray(theta, dtype=np.float64)
    if m >= 0:
        out = np.cos(m * theta_arr)
    else:
        out = np.sin(abs(m) * theta_arr)
    if out.ndim == 0:
        return float(out)
    return out


def evaluate(n: int, m: int, r: Any, theta: Any) -> Any:
    """Raw Zernike value R_n^m(r) * angular(theta).

    `r` must already be restricted to [0, 1]; outside the unit disk the
    polynomial is still computed but has no meaning for the aperture.
    """
    n, m = validate_mode(n, m)
    value = np.asarray(radial(n, m, r)) * np.asarray(angular(m, theta))
    if value.ndim == 0:
        return float(value)
    return value


def evaluate_grid(n: int, m: int, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    x_arr = np.asarray(x, dtype=np.float64)
    y_arr = np.asarray(y, dtype=np.float64)
    if x_arr.shape != y_arr.shape:
        raise ValueError(f"x and y must have the same shape, got {x_arr.shape} vs {y_arr.shape}")
    r = np.hypot(x_arr, y_arr)
    theta = np.arctan2(y_arr, x_arr)
    inside = r <= 1.0
    values = np.full(r.shape, np.nan, dtype=np.float64)
    if inside.any():
        values[inside] = evaluate(n, m, r[inside], theta[inside])
    return values, inside


__all__ = [
    "angular",
    "evaluate",
    "evaluate_grid",
    "factorial",
    "radial",
    "radial_coefficients",
    "validate_mode",
]
