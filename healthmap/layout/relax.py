from __future__ import annotations
from typing import Optional
import numpy as np

__all__ = ["ALPHA_MIN", "relax_positions"]

ALPHA_MIN = 0.001
# cools from 1 to ALPHA_MIN over 300 ticks
ALPHA_DECAY = 1.0 - ALPHA_MIN ** (1.0 / 300.0)
JIGGLE = 1e-6


def _collide(
    X: np.ndarray, Y: np.ndarray,
    VX: np.ndarray, VY: np.ndarray,
    radius: float,
    rng: np.random.Generator,
) -> None:
    """
    One pass of pairwise overlap resolution on predicted positions (x + v).

    Each overlapping pair is pushed apart along the line between them by the
    full overlap, split by relative radius (equal radii -> half each).
    Velocities are updated in place.
    """
    n = X.size
    r = 2.0 * radius
    r2 = r * r
    share = 0.5  # rj^2 / (ri^2 + rj^2) with equal radii
    for i in range(n):
        xi = X[i] + VX[i]
        yi = Y[i] + VY[i]
        for j in range(i + 1, n):
            dx = xi - X[j] - VX[j]
            dy = yi - Y[j] - VY[j]
            d2 = dx * dx + dy * dy
            if d2 >= r2:
                continue
            if dx == 0:
                dx = (rng.random() - 0.5) * JIGGLE
                d2 += dx * dx
            if dy == 0:
                dy = (rng.random() - 0.5) * JIGGLE
                d2 += dy * dy
            d = float(np.sqrt(d2))
            k = (r - d) / d
            dx *= k
            dy *= k
            VX[i] += dx * share
            VY[i] += dy * share
            VX[j] -= dx * (1.0 - share)
            VY[j] -= dy * (1.0 - share)


def _hold_inside(P: np.ndarray, V: np.ndarray, lo: float, hi: float) -> None:
    out = (P < lo) | (P > hi)
    np.clip(P, lo, hi, out=P)
    V[out] = 0.0


def relax_positions(
    X: np.ndarray, Y: np.ndarray,
    AX: np.ndarray, AY: np.ndarray,
    *,
    iterations: int = 250,
    attraction: float = 0.02,
    radius: float = 60.0,
    velocity_decay: float = 0.6,
    seed: Optional[int] = 42,
    bounds: Optional[tuple[float, float, float, float]] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Fixed-iteration force relaxation of label positions.

    Per tick: cool alpha, pull each point toward its anchor on x and y
    independently (attraction * alpha), resolve pairwise collisions for points
    closer than 2 * radius, damp velocities and integrate. With `bounds`
    (xmin, ymin, xmax, ymax) points are held inside the box after every tick
    and lose their velocity into the wall. Coincident points are
    separated by a tiny jiggle from a seeded generator, so the result depends
    only on input order, iteration count and seed.
    """
    X = np.array(X, dtype=float, copy=True)
    Y = np.array(Y, dtype=float, copy=True)
    AX = np.asarray(AX, dtype=float)
    AY = np.asarray(AY, dtype=float)
    if X.size == 0:
        return X, Y

    VX = np.zeros_like(X)
    VY = np.zeros_like(Y)
    rng = np.random.default_rng(seed)
    alpha = 1.0

    for _ in range(int(iterations)):
        alpha += (0.0 - alpha) * ALPHA_DECAY
        VX += (AX - X) * attraction * alpha
        VY += (AY - Y) * attraction * alpha
        _collide(X, Y, VX, VY, radius, rng)
        VX *= velocity_decay
        VY *= velocity_decay
        X += VX
        Y += VY
        if bounds is not None:
            _hold_inside(X, VX, bounds[0], bounds[2])
            _hold_inside(Y, VY, bounds[1], bounds[3])

    return X, Y
