from __future__ import annotations
from typing import Iterable, Optional, Sequence
import plotly.graph_objects as go
from shapely.geometry.base import BaseGeometry

from ..classify.buckets import tag_label
from ..classify.result import ClassificationResult
from ..io.geo import Region
from ..layout.labels import PlacedLabel
from .common import apply_theme, theme_from_cfg

# ---------- helpers ----------

def _polygons(geom: BaseGeometry) -> list:
    if geom is None or geom.is_empty:
        return []
    if geom.geom_type == "Polygon":
        return [geom]
    if hasattr(geom, "geoms"):
        out = []
        for g in geom.geoms:
            out.extend(_polygons(g))
        return out
    return []

def _geom_xy(geom: BaseGeometry) -> tuple[list, list]:
    """Exterior rings as one x/y path, rings separated by None."""
    xs: list = []
    ys: list = []
    for poly in _polygons(geom):
        cx, cy = poly.exterior.xy
        if xs:
            xs.append(None); ys.append(None)
        xs.extend(float(v) for v in cx)
        ys.extend(float(v) for v in cy)
    return xs, ys

def _hover(result: ClassificationResult, key: str) -> str:
    rec = result.records.get(key)
    shown = rec.raw if rec is not None and rec.raw else "No data"
    return f"<b>{key}</b><br>{result.field}: {shown}"

# ---------------------------------------------------------------------------

def choropleth_map(
    regions: Sequence[Region],
    result: ClassificationResult,
    *,
    width: float,
    height: float,
    highlighted: Iterable[str] = (),
    title: Optional[str] = None,
    theme_name: str = "light",
) -> go.Figure:
    """Regions filled by bucket colour; highlighted regions drawn last with a heavier stroke."""
    theme = theme_from_cfg(theme_name)
    hi = set(highlighted)
    ordered = [r for r in regions if r.key not in hi] + [r for r in regions if r.key in hi]

    fig = go.Figure()
    for r in ordered:
        xs, ys = _geom_xy(r.geometry)
        if not xs:
            continue
        lit = r.key in hi
        fig.add_trace(go.Scatter(
            x=xs, y=ys, mode="lines", fill="toself",
            fillcolor=result.color_for(r.key),
            line=dict(color=theme["highlight"] if lit else theme["stroke"], width=2 if lit else 0.5),
            hoveron="fills", hoverinfo="text", text=_hover(result, r.key),
            name=r.key, meta=tag_label(result.tag_for(r.key)),
            showlegend=False,
        ))

    fig.update_layout(
        title=title or result.field,
        width=int(width), height=int(height),
        xaxis=dict(range=[0, width], visible=False, fixedrange=True),
        yaxis=dict(range=[height, 0], visible=False, fixedrange=True, scaleanchor="x"),
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return apply_theme(fig, theme)

def add_callouts(
    fig: go.Figure,
    labels: Sequence[PlacedLabel],
    *,
    font_px: float = 11.0,
    theme_name: str = "light",
) -> go.Figure:
    """Leader line from each anchor to its label, plus a bubble with name and value."""
    theme = theme_from_cfg(theme_name)
    for lb in labels:
        (ax, ay), (x, y) = lb.anchor, lb.position
        fig.add_shape(
            type="line", x0=ax, y0=ay, x1=x, y1=y,
            line=dict(color=theme["stroke"], width=1),
            name="county-callout",
        )
        if lb.size is not None:
            w, h = lb.size.width, lb.size.height
            fig.add_shape(
                type="rect", x0=x - w / 2, x1=x + w / 2, y0=y - h / 2, y1=y + h / 2,
                fillcolor="rgba(255, 255, 255, 0.8)",
                line=dict(color=theme["highlight"], width=2),
                name="county-callout-bubble",
            )
        fig.add_annotation(
            x=x, y=y, text=f"{lb.key}<br>{lb.text}", showarrow=False,
            font=dict(size=font_px, family=theme["font"], color="#111111"),
            align="center", name="county-callout-text",
        )
    return fig
