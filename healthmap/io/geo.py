from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence
import logging
import math
import numpy as np
import shapely
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from .readers import read_json

__all__ = ["Region", "fit_equirectangular", "regions_from_geojson", "load_regions", "region_centroid"]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    key: str
    geometry: BaseGeometry      # viewport coordinates, y down


def _project_xy(lon: np.ndarray, lat: np.ndarray, lat0: float) -> tuple[np.ndarray, np.ndarray]:
    """Crude equirectangular; y flipped so north is up on screen."""
    k = math.cos(math.radians(lat0))
    return lon * k, -lat


def fit_equirectangular(
    geoms: Sequence[BaseGeometry],
    width: float,
    height: float,
    *,
    margin: float = 20.0,
) -> list[BaseGeometry]:
    """
    Project lon/lat geometries and fit them, centred, into a width x height
    viewport with `margin` on every side.
    """
    live = [g for g in geoms if g is not None and not g.is_empty]
    if not live:
        return list(geoms)
    minx, miny, maxx, maxy = shapely.total_bounds(live)
    lat0 = (miny + maxy) / 2.0

    projected = [
        shapely.transform(g, lambda c: np.column_stack(_project_xy(c[:, 0], c[:, 1], lat0)))
        if g is not None else g
        for g in geoms
    ]
    pminx, pminy, pmaxx, pmaxy = shapely.total_bounds([g for g in projected if g is not None and not g.is_empty])
    dx = max(1e-12, pmaxx - pminx)
    dy = max(1e-12, pmaxy - pminy)
    scale = min((width - 2 * margin) / dx, (height - 2 * margin) / dy)
    ox = (width - scale * dx) / 2.0 - scale * pminx
    oy = (height - scale * dy) / 2.0 - scale * pminy

    def _fit(c: np.ndarray) -> np.ndarray:
        return np.column_stack((c[:, 0] * scale + ox, c[:, 1] * scale + oy))

    return [shapely.transform(g, _fit) if g is not None else g for g in projected]


def regions_from_geojson(
    collection: Mapping[str, Any],
    *,
    key_property: str = "NAME",
    width: float = 960.0,
    height: float = 700.0,
    margin: float = 20.0,
) -> list[Region]:
    """Regions keyed by a feature property, projected into the viewport."""
    feats = collection.get("features")
    if feats is None:
        raise ValueError("expected a GeoJSON FeatureCollection with 'features'")
    keys: list[str] = []
    geoms: list[BaseGeometry] = []
    for f in feats:
        props = f.get("properties") or {}
        if key_property not in props:
            log.warning("feature_without_key", extra={"key_property": key_property})
            continue
        keys.append(str(props[key_property]))
        g = f.get("geometry")
        geoms.append(shape(g) if g else shapely.Polygon())

    fitted = fit_equirectangular(geoms, width, height, margin=margin)
    return [Region(key=k, geometry=g) for k, g in zip(keys, fitted)]


def load_regions(
    path: str | Path,
    *,
    key_property: str = "NAME",
    width: float = 960.0,
    height: float = 700.0,
    margin: float = 20.0,
) -> list[Region]:
    return regions_from_geojson(
        read_json(path), key_property=key_property, width=width, height=height, margin=margin
    )


def region_centroid(region: Region) -> Optional[tuple[float, float]]:
    """Area-weighted centroid in viewport coordinates; None for degenerate geometry."""
    g = region.geometry
    if g is None or g.is_empty:
        return None
    c = g.centroid
    if c.is_empty:
        return None
    x, y = float(c.x), float(c.y)
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return (x, y)
