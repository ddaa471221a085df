from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Optional, Sequence
import logging
import math
import numpy as np
import mapclassify

from ..errors import InsufficientDataError
from ..utils.fp import unique_stable
from .buckets import Bucket, BucketTag, NoData, Overflow, bucket_index
from .palette import palette_for

__all__ = [
    "ClassMode",
    "ColorMap",
    "Classification",
    "quantile_breaks",
    "natural_breaks",
    "classify",
]

log = logging.getLogger(__name__)

ClassMode = Literal["quantile", "natural_breaks"]


@dataclass(frozen=True)
class ColorMap:
    """
    Threshold colour function.

    colors has one entry per bucket plus one for values above the last break,
    so overflow is coloured but still reported as Overflow by `tag`.
    """
    breaks: tuple[float, ...]
    colors: tuple[str, ...]
    no_data_color: str = "#ccc"

    def __post_init__(self):
        if len(self.colors) != len(self.breaks) + 1:
            raise ValueError(
                f"need {len(self.breaks) + 1} colours for {len(self.breaks)} breaks, got {len(self.colors)}"
            )

    def tag(self, value: Optional[float]) -> BucketTag:
        if value is None or not math.isfinite(value):
            return NoData("invalid")
        i = bucket_index(value, self.breaks)
        if i >= len(self.breaks):
            return Overflow()
        return Bucket(i, self.breaks[i])

    def color_of(self, tag: BucketTag) -> str:
        if isinstance(tag, Bucket):
            return self.colors[tag.index]
        if isinstance(tag, Overflow):
            return self.colors[-1]
        return self.no_data_color

    def __call__(self, value: Optional[float]) -> str:
        return self.color_of(self.tag(value))


@dataclass(frozen=True)
class Classification:
    breaks: tuple[float, ...]
    color_map: ColorMap
    mode: ClassMode
    unique_count: int


# ---------- break algorithms ----------

def quantile_breaks(sample: np.ndarray, n_classes: int = 5) -> tuple[float, ...]:
    """n_classes - 1 interior quantiles (linear interpolation); duplicates are kept."""
    probs = np.arange(1, n_classes) / n_classes
    return tuple(float(q) for q in np.quantile(sample, probs))


def natural_breaks(sample: np.ndarray, k: int) -> tuple[float, ...]:
    """
    Fisher-Jenks upper class bounds (the sample minimum is implicit), with
    equal bounds collapsed.
    """
    fj = mapclassify.FisherJenks(sample, k=k)
    bounds = unique_stable(float(b) for b in fj.bins)
    return tuple(sorted(bounds))


# ---------- entry point ----------

def classify(
    sample: Sequence[float] | np.ndarray,
    *,
    field: Optional[str] = None,
    max_classes: int = 9,
    quantile_classes: int = 5,
    min_unique: int = 5,
    palette: str = "Reds",
    no_data_color: str = "#ccc",
) -> Classification:
    """
    Class breaks and colour map for a numeric sample.

    Fewer than `min_unique` distinct values -> quantile breaks over a fixed
    `quantile_classes` palette. Otherwise natural breaks with
    k = min(max_classes, distinct - 1), sized palette per resulting bucket count.
    """
    x = np.asarray(sample, dtype=float)
    x = np.sort(x[np.isfinite(x)])
    if x.size < 2:
        raise InsufficientDataError(field, int(x.size))

    n_unique = int(np.unique(x).size)

    if n_unique < min_unique:
        log.warning("few_unique_values_using_quantile", extra={"field": field, "unique": n_unique})
        breaks = quantile_breaks(x, quantile_classes)
        colors = palette_for(quantile_classes, palette)
        mode: ClassMode = "quantile"
    else:
        k = min(max_classes, n_unique - 1)
        breaks = natural_breaks(x, k)
        colors = palette_for(len(breaks) + 1, palette)
        mode = "natural_breaks"

    cm = ColorMap(breaks=breaks, colors=colors, no_data_color=no_data_color)
    log.info(
        "classified",
        extra={"field": field, "mode": mode, "unique": n_unique, "n_breaks": len(breaks), "breaks": breaks},
    )
    return Classification(breaks=breaks, color_map=cm, mode=mode, unique_count=n_unique)
