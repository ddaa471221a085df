from __future__ import annotations
from typing import Optional
import plotly.graph_objects as go

from ..classify.buckets import Bucket
from ..classify.result import ClassificationResult
from .common import apply_theme, theme_from_cfg

def threshold_chart(
    result: ClassificationResult,
    *,
    width: float = 420,
    height: float = 320,
    source_url: Optional[str] = None,
    title: Optional[str] = None,
    theme_name: str = "light",
    marker_size: int = 16,
) -> go.Figure:
    """
    Lollipop chart of the class breaks: one stem + dot per break, dot coloured
    like its bucket on the map, hover text giving the bucket's value range.
    """
    theme = theme_from_cfg(theme_name)
    breaks = list(result.breaks)
    xs = list(range(len(breaks)))

    vmin, vmax = float(result.sample[0]), float(result.sample[-1])
    buffer = (vmax - vmin) * 0.5 or 1.0
    y_lo, y_hi = vmin - buffer, vmax + buffer

    fig = go.Figure()

    # stems from the chart floor up to each break (behind the dots)
    stem_x: list = []
    stem_y: list = []
    for x, b in zip(xs, breaks):
        stem_x += [x, x, None]
        stem_y += [y_lo, b, None]
    fig.add_scatter(
        x=stem_x, y=stem_y, mode="lines",
        line=dict(color=theme["neutral"], width=1),
        hoverinfo="skip", showlegend=False, name="stem",
    )

    fig.add_scatter(
        x=xs, y=breaks, mode="markers",
        marker=dict(
            size=marker_size,
            color=[result.color_map.color_of(Bucket(i, b)) for i, b in enumerate(breaks)],
            line=dict(width=1, color=theme["neutral"]),
        ),
        customdata=breaks,
        hovertext=[result.range_label(i) for i in range(len(breaks))],
        hoverinfo="text",
        showlegend=False, name="break",
    )

    if y_lo <= 0 <= y_hi:
        fig.add_hline(y=0, line=dict(color=theme["neutral"], dash="dash", width=1))

    annotations = []
    if source_url:
        annotations.append(dict(
            x=0, y=1.0, xref="paper", yref="paper", xanchor="left", yanchor="bottom",
            text=f'<a href="{source_url}" target="_blank">Data Source</a>',
            showarrow=False, font=dict(size=10, color=theme["neutral"]),
        ))

    fig.update_layout(
        title=dict(text=title or result.field, font=dict(size=12), x=0.02),
        width=int(width), height=int(height),
        xaxis=dict(
            tickmode="array", tickvals=xs,
            ticktext=[result.format_value(b) for b in breaks],
            range=[-0.5, len(breaks) - 0.5], showgrid=False,
        ),
        yaxis=dict(range=[y_lo, y_hi], nticks=5, showgrid=True, gridcolor=theme["grid"]),
        annotations=annotations,
        margin=dict(l=40, r=10, t=40, b=30),
    )
    return apply_theme(fig, theme)
