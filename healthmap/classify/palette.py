from __future__ import annotations
from plotly.colors import sample_colorscale

__all__ = ["REDS", "discrete_palette", "continuous_palette", "palette_for"]

# ColorBrewer sequential "Reds", keyed by class count
REDS: dict[int, tuple[str, ...]] = {
    3: ("#fee0d2", "#fc9272", "#de2d26"),
    4: ("#fee5d9", "#fcae91", "#fb6a4a", "#cb181d"),
    5: ("#fee5d9", "#fcae91", "#fb6a4a", "#de2d26", "#a50f15"),
    6: ("#fee5d9", "#fcbba1", "#fc9272", "#fb6a4a", "#de2d26", "#a50f15"),
    7: ("#fee5d9", "#fcbba1", "#fc9272", "#fb6a4a", "#ef3b2c", "#cb181d", "#99000d"),
    8: ("#fff5f0", "#fee0d2", "#fcbba1", "#fc9272", "#fb6a4a", "#ef3b2c", "#cb181d", "#99000d"),
    9: ("#fff5f0", "#fee0d2", "#fcbba1", "#fc9272", "#fb6a4a", "#ef3b2c", "#cb181d", "#a50f15", "#67000d"),
}

_SCHEMES: dict[str, dict[int, tuple[str, ...]]] = {"reds": REDS}
MAX_DISCRETE = 9


def discrete_palette(n: int, name: str = "Reds") -> tuple[str, ...]:
    """Fixed scheme of n colours; below the smallest scheme, its first n entries."""
    scheme = _SCHEMES.get(name.lower())
    if scheme is None:
        raise ValueError(f"Unknown palette '{name}'. Available: {sorted(_SCHEMES)}")
    if n < 1 or n > MAX_DISCRETE:
        raise ValueError(f"discrete palette size must be in 1..{MAX_DISCRETE}, got {n}")
    smallest = min(scheme)
    if n < smallest:
        return scheme[smallest][:n]
    return scheme[n]


def continuous_palette(n: int, name: str = "Reds") -> tuple[str, ...]:
    """n colours sampled from the continuous ramp at i/(n-1)."""
    if n < 2:
        raise ValueError("continuous palette needs at least 2 colours")
    ts = [i / (n - 1) for i in range(n)]
    return tuple(sample_colorscale(name, ts))


def palette_for(n: int, name: str = "Reds") -> tuple[str, ...]:
    return discrete_palette(n, name) if n <= MAX_DISCRETE else continuous_palette(n, name)
