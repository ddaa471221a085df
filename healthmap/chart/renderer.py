from __future__ import annotations
from pathlib import Path
from typing import Optional, Protocol, Sequence
import logging
import plotly.graph_objects as go

from ..classify.result import ClassificationResult
from ..config_model.model import RootCfg
from ..io.geo import Region
from ..layout.labels import BubbleSize, PlacedLabel, Viewport
from .choropleth import add_callouts, choropleth_map
from .common import export_html
from .threshold import threshold_chart

log = logging.getLogger(__name__)

# -------- Public interface (easy to mock in tests) --------

class Renderer(Protocol):
    # consumed by the engine
    def measure_label_bubble(self, name: str, text: str) -> BubbleSize: ...
    def get_viewport_bounds(self) -> Viewport: ...
    # exposed by the engine
    def on_classified(self, result: ClassificationResult) -> None: ...
    def on_labels_placed(self, labels: Sequence[PlacedLabel], selected: Sequence[str] = ()) -> None: ...
    def on_highlight_cleared(self) -> None: ...
    def on_classification_failed(self, field: str, message: str) -> None: ...

# -------- Plotly backend --------

class PlotlyRenderer(Renderer):
    """
    Keeps the current map and chart figures in step with engine callbacks.

    Text is not laid out by a browser here, so bubble sizes are estimated from
    character counts at the configured font size.
    """

    CHAR_WIDTH_EM = 0.6

    def __init__(self, regions: Sequence[Region], cfg: Optional[RootCfg] = None):
        self.cfg = cfg or RootCfg()
        self.regions = tuple(regions)
        self.result: Optional[ClassificationResult] = None
        self.map_figure: Optional[go.Figure] = None
        self.chart_figure: Optional[go.Figure] = None
        self.labels: tuple[PlacedLabel, ...] = ()
        self.message: Optional[str] = None

    # consumed
    def measure_label_bubble(self, name: str, text: str) -> BubbleSize:
        lc = self.cfg.labels
        chars = max(len(name), len(text))
        width = chars * lc.font_px * self.CHAR_WIDTH_EM + 2 * lc.bubble_text_padding
        return BubbleSize(width=width, height=lc.bubble_height)

    def get_viewport_bounds(self) -> Viewport:
        return Viewport(width=self.cfg.viewport.width, height=self.cfg.viewport.height)

    # exposed
    def on_classified(self, result: ClassificationResult) -> None:
        self.result = result
        self.message = None
        self.labels = ()
        self.map_figure = self._base_map()
        self.chart_figure = threshold_chart(
            result,
            width=self.cfg.charts.chart_width,
            height=self.cfg.charts.chart_height,
            source_url=self.cfg.data.source_url,
            theme_name=self.cfg.charts.theme,
        )

    def on_labels_placed(self, labels: Sequence[PlacedLabel], selected: Sequence[str] = ()) -> None:
        if self.result is None:
            return
        self.labels = tuple(labels)
        lit = list(selected) or [lb.key for lb in labels]
        fig = self._base_map(highlighted=lit)
        self.map_figure = add_callouts(
            fig, self.labels, font_px=self.cfg.labels.font_px, theme_name=self.cfg.charts.theme
        )

    def on_highlight_cleared(self) -> None:
        self.labels = ()
        if self.result is not None:
            self.map_figure = self._base_map()

    def on_classification_failed(self, field: str, message: str) -> None:
        self.result = None
        self.map_figure = None
        self.chart_figure = None
        self.labels = ()
        self.message = message
        log.error("render_aborted", extra={"field": field, "reason": message})

    # output
    def _base_map(self, highlighted: Sequence[str] = ()) -> go.Figure:
        assert self.result is not None
        return choropleth_map(
            self.regions, self.result,
            width=self.cfg.viewport.width, height=self.cfg.viewport.height,
            highlighted=highlighted, theme_name=self.cfg.charts.theme,
        )

    def write_html(self, out_dir: str | Path) -> dict[str, Path]:
        if self.map_figure is None or self.chart_figure is None:
            raise RuntimeError(self.message or "nothing rendered yet")
        out = Path(out_dir)
        return {
            "map": export_html(self.map_figure, out / "map.html"),
            "chart": export_html(self.chart_figure, out / "chart.html"),
        }
