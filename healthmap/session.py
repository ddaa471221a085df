from __future__ import annotations
from typing import Optional, Sequence
import pandas as pd

from .chart.renderer import Renderer
from .classify.breaks import classify
from .classify.result import ClassificationResult, build_result
from .cleaning.fields import eligible_fields, parse_field
from .config_model.model import RootCfg
from .errors import InsufficientDataError
from .io.geo import Region, region_centroid
from .layout.labels import LabelTarget, Measure, PlacedLabel, finalize_labels, place_labels
from .utils.log import get_logger

__all__ = ["MapSession"]


class MapSession:
    """
    Owns the current field selection and everything derived from it.

    Entry points are plain method calls (no UI toolkit): `select_field`,
    `on_select_break`, `on_clear_selection`, plus the two-phase
    `layout_labels` / `finalize_labels` for renderers that measure later.
    Each call runs to completion before returning.
    """

    def __init__(
        self,
        table: pd.DataFrame,
        regions: Sequence[Region],
        renderer: Renderer,
        cfg: Optional[RootCfg] = None,
    ):
        self.cfg = cfg or RootCfg()
        self.log = get_logger("healthmap", self.cfg.logging.level, self.cfg.logging.structured_json)
        self._table = table
        self._regions = tuple(regions)
        self._renderer = renderer
        self._fields = eligible_fields(table, reserved=self.cfg.data.reserved_columns)
        # geometry is immutable, so centroids are computed once
        self._centroids = {r.key: region_centroid(r) for r in self._regions}
        self._result: Optional[ClassificationResult] = None
        self._pending: tuple[PlacedLabel, ...] = ()
        self._labels: tuple[PlacedLabel, ...] = ()
        self._selected: Optional[int] = None

        missing = [r.key for r in self._regions if self._centroids[r.key] is None]
        self.log.info(
            "session_ready",
            extra={"rows": len(table), "regions": len(self._regions), "fields": self._fields, "degenerate": missing},
        )

    # ---------- state ----------

    @property
    def fields(self) -> list[str]:
        return list(self._fields)

    @property
    def result(self) -> Optional[ClassificationResult]:
        return self._result

    @property
    def field(self) -> Optional[str]:
        return self._result.field if self._result else None

    @property
    def labels(self) -> tuple[PlacedLabel, ...]:
        return self._labels

    @property
    def selected_break(self) -> Optional[int]:
        return self._selected

    def _require_result(self) -> ClassificationResult:
        if self._result is None:
            raise RuntimeError("no field is classified; call select_field first")
        return self._result

    # ---------- field selection ----------

    def start(self) -> ClassificationResult:
        """Classify the default field (first eligible column)."""
        if not self._fields:
            raise ValueError("table has no numeric fields to map")
        return self.select_field(self._fields[0])

    def select_field(self, field: str) -> ClassificationResult:
        """
        Replace the selection and every derived value (records, breaks, colours,
        bucket assignments). On InsufficientDataError the previous result is
        dropped too, the renderer is told why, and the error propagates.
        """
        if field not in self._table.columns:
            raise KeyError(field)
        if field not in self._fields:
            raise ValueError(f"{field!r} is not a mappable numeric field; choose one of {self._fields}")

        self.on_clear_selection()
        c = self.cfg.classify
        try:
            parsed = parse_field(self._table, field, key_column=self.cfg.data.key_column)
            classification = classify(
                parsed.sample,
                field=field,
                max_classes=c.max_classes,
                quantile_classes=c.quantile_classes,
                min_unique=c.min_unique,
                palette=c.palette,
                no_data_color=c.no_data_color,
            )
        except InsufficientDataError as e:
            self._result = None
            self.log.error("classification_failed", extra={"field": field, "valid": e.n_valid})
            self._renderer.on_classification_failed(field, str(e))
            raise

        result = build_result(parsed, classification, (r.key for r in self._regions))
        self._result = result
        self.log.info("field_selected", extra={"field": field, "mode": result.mode, "tags": result.tag_counts()})
        self._renderer.on_classified(result)
        return result

    # ---------- highlight ----------

    def _targets(self, result: ClassificationResult, index: int) -> list[LabelTarget]:
        out = []
        for key in result.keys_in_bucket(index):
            rec = result.records[key]
            out.append(LabelTarget(key=key, centroid=self._centroids.get(key), text=rec.raw, value=rec.value))
        return out

    def layout_labels(self, break_value: float) -> tuple[PlacedLabel, ...]:
        """Phase 1: provisional label positions for the regions in a break's bucket."""
        result = self._require_result()
        index = result.break_index(break_value)
        self._selected = index
        self._labels = ()
        self._pending = place_labels(
            self._targets(result, index),
            self._renderer.get_viewport_bounds(),
            self.cfg.labels,
            seed=self.cfg.env.seed,
        )
        return self._pending

    def finalize_labels(self, measurements: Measure) -> tuple[PlacedLabel, ...]:
        """Phase 2: reclamp provisional labels with measured bubble sizes and hand them to the renderer."""
        result = self._require_result()
        if self._selected is None:
            return ()
        final = finalize_labels(
            self._pending, measurements, self._renderer.get_viewport_bounds(), self.cfg.labels
        )
        self._pending = ()
        self._labels = final
        self._renderer.on_labels_placed(final, selected=result.keys_in_bucket(self._selected))
        return final

    def on_select_break(self, break_value: float) -> tuple[PlacedLabel, ...]:
        """Highlight one bucket: discard any previous placement, lay out, measure, finalize."""
        self.on_clear_selection()
        self.layout_labels(break_value)
        return self.finalize_labels(lambda lb: self._renderer.measure_label_bubble(lb.key, lb.text))

    def on_clear_selection(self) -> None:
        """Drop any highlight and labels. Safe to call repeatedly."""
        self._pending = ()
        self._labels = ()
        self._selected = None
        self._renderer.on_highlight_cleared()
