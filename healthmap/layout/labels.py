from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Mapping, Optional, Sequence, Union
import logging
import math
import numpy as np

from ..config_model.model import LabelsCfg
from .relax import relax_positions

__all__ = [
    "Point",
    "Viewport",
    "BubbleSize",
    "LabelTarget",
    "PlacedLabel",
    "seed_position",
    "place_labels",
    "finalize_labels",
]

log = logging.getLogger(__name__)

Point = tuple[float, float]


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float


@dataclass(frozen=True)
class BubbleSize:
    width: float
    height: float


@dataclass(frozen=True)
class LabelTarget:
    """A selected region as the layout engine sees it."""
    key: str
    centroid: Optional[Point]
    text: str                       # display value (raw field text)
    value: Optional[float] = None


@dataclass(frozen=True)
class PlacedLabel:
    key: str
    text: str
    anchor: Point
    position: Point
    size: Optional[BubbleSize] = None


Measure = Union[Callable[[PlacedLabel], BubbleSize], Mapping[str, BubbleSize]]


# ---------- helpers ----------

def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(v, hi))


def _fit_span(v: float, half: float, pad: float, extent: float) -> float:
    """Clamp a centre so [v - half, v + half] fits in [pad, extent - pad]; centred if it cannot."""
    lo, hi = half + pad, extent - half - pad
    if lo > hi:
        return extent / 2.0
    return _clamp(v, lo, hi)


def _finite_point(p: Optional[Point]) -> bool:
    if p is None:
        return False
    try:
        return len(p) == 2 and all(math.isfinite(float(c)) for c in p)
    except (TypeError, ValueError):
        return False


def _labelable(t: LabelTarget, skip_zero: bool) -> bool:
    if not (t.text or "").strip():
        return False
    if t.value is None or not math.isfinite(t.value):
        return False
    if skip_zero and t.value == 0:
        return False
    return True


def seed_position(
    centroid: Point,
    index: int,
    viewport: Viewport,
    cfg: LabelsCfg,
) -> Point:
    """
    Initial label point for the index-th selected region.

    Angle (index - angle_offset) * angle_step degrees around the centroid; the
    radius walks down from seed_radius until the point is inside the padded
    viewport or the radius reaches min_radius, then the point is clamped.
    """
    cx, cy = float(centroid[0]), float(centroid[1])
    pad = cfg.seed_padding
    max_x, max_y = viewport.width, viewport.height
    angle = math.radians((index - cfg.angle_offset) * cfg.angle_step)
    radius = cfg.seed_radius

    x = cx + radius * math.cos(angle)
    y = cy + radius * math.sin(angle)
    while radius > cfg.min_radius:
        x = cx + radius * math.cos(angle)
        y = cy + radius * math.sin(angle)
        if pad <= x <= max_x - pad and pad <= y <= max_y - pad:
            break
        radius -= cfg.radius_step

    return (_clamp(x, pad, max_x - pad), _clamp(y, pad, max_y - pad))


# ---------- phase 1: seed + relax ----------

def place_labels(
    targets: Sequence[LabelTarget],
    viewport: Viewport,
    cfg: Optional[LabelsCfg] = None,
    *,
    seed: Optional[int] = 42,
) -> tuple[PlacedLabel, ...]:
    """
    Provisional label positions for a selection.

    Targets with no display value (empty, invalid, or zero when cfg.skip_zero)
    are not labelled; targets whose centroid is missing or not finite are
    skipped and logged. Survivors are seeded around their centroids, relaxed
    together, and clamped into the padded viewport. Bubble sizes are unknown
    until `finalize_labels`.
    """
    cfg = cfg or LabelsCfg()
    keys: list[str] = []
    texts: list[str] = []
    anchors: list[Point] = []
    seeds: list[Point] = []
    skipped: list[str] = []

    for i, t in enumerate(targets):
        if not _labelable(t, cfg.skip_zero):
            continue
        if not _finite_point(t.centroid):
            skipped.append(t.key)
            continue
        anchor = (float(t.centroid[0]), float(t.centroid[1]))
        keys.append(t.key)
        texts.append(t.text.strip())
        anchors.append(anchor)
        seeds.append(seed_position(anchor, i, viewport, cfg))

    if skipped:
        log.warning("labels_skipped_degenerate_geometry", extra={"skipped": skipped})
    if not keys:
        return ()

    pad = cfg.seed_padding
    A = np.asarray(anchors, dtype=float)
    S = np.asarray(seeds, dtype=float)
    X, Y = relax_positions(
        S[:, 0], S[:, 1], A[:, 0], A[:, 1],
        iterations=cfg.iterations,
        attraction=cfg.attraction,
        radius=cfg.collision_radius,
        velocity_decay=cfg.velocity_decay,
        seed=seed,
        bounds=(pad, pad, viewport.width - pad, viewport.height - pad),
    )

    out = []
    for k, txt, a, x, y in zip(keys, texts, anchors, X.tolist(), Y.tolist()):
        if not (math.isfinite(x) and math.isfinite(y)):
            log.warning("label_relaxation_diverged", extra={"key": k})
            x, y = seed_position(a, 0, viewport, cfg)
        pos = (_clamp(x, pad, viewport.width - pad), _clamp(y, pad, viewport.height - pad))
        out.append(PlacedLabel(key=k, text=txt, anchor=a, position=pos))

    log.info("labels_placed", extra={"count": len(out), "iterations": cfg.iterations})
    return tuple(out)


# ---------- phase 2: measured reclamp ----------

def _size_for(label: PlacedLabel, measure: Measure) -> BubbleSize:
    if callable(measure):
        return measure(label)
    return measure[label.key]


def finalize_labels(
    labels: Iterable[PlacedLabel],
    measure: Measure,
    viewport: Viewport,
    cfg: Optional[LabelsCfg] = None,
) -> tuple[PlacedLabel, ...]:
    """
    Clamp each label so its whole measured bubble stays inside the viewport
    minus cfg.bubble_padding. `measure` is either a callable returning the
    bubble size for a label or a mapping of region key -> size. A bubble
    larger than the padded viewport on an axis is centred on that axis.
    """
    cfg = cfg or LabelsCfg()
    pad = cfg.bubble_padding
    out = []
    for lb in labels:
        size = _size_for(lb, measure)
        hw, hh = size.width / 2.0, size.height / 2.0
        x = _fit_span(lb.position[0], hw, pad, viewport.width)
        y = _fit_span(lb.position[1], hh, pad, viewport.height)
        out.append(replace(lb, position=(x, y), size=size))
    return tuple(out)
