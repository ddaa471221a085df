from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping
import numpy as np

from ..cleaning.fields import ParsedField, Record, format_display
from ..utils.fp import count_by
from .breaks import Classification, ColorMap
from .buckets import Bucket, BucketTag, NoData, assign_buckets, tag_label

__all__ = ["ClassificationResult", "build_result"]


@dataclass(frozen=True)
class ClassificationResult:
    """
    Everything derived from one field selection. Never mutated; a new
    selection produces a new instance.
    """
    field: str
    is_ratio: bool
    records: Mapping[str, Record]
    sample: np.ndarray
    classification: Classification
    assignments: Mapping[str, BucketTag]   # region key -> tag, in region order

    @property
    def breaks(self) -> tuple[float, ...]:
        return self.classification.breaks

    @property
    def color_map(self) -> ColorMap:
        return self.classification.color_map

    @property
    def mode(self) -> str:
        return self.classification.mode

    def tag_for(self, key: str) -> BucketTag:
        return self.assignments.get(key, NoData("join_miss"))

    def color_for(self, key: str) -> str:
        return self.color_map.color_of(self.tag_for(key))

    def break_index(self, break_value: float) -> int:
        """Index of the first break equal to break_value."""
        for i, b in enumerate(self.breaks):
            if b == break_value:
                return i
        raise ValueError(f"{break_value!r} is not a break of {self.field!r}: {list(self.breaks)}")

    def keys_in_bucket(self, index: int) -> list[str]:
        return [k for k, t in self.assignments.items() if isinstance(t, Bucket) and t.index == index]

    def break_range(self, index: int) -> tuple[float, float]:
        """(lower, upper) of a bucket; the first bucket starts at the sample minimum."""
        upper = self.breaks[index]
        lower = float(self.sample[0]) if index == 0 else self.breaks[index - 1]
        return lower, upper

    def format_value(self, value: float) -> str:
        return format_display(value, self.is_ratio)

    def range_label(self, index: int) -> str:
        lo, hi = self.break_range(index)
        return f"Range: {self.format_value(lo)} – {self.format_value(hi)}"

    def tag_counts(self) -> dict[str, int]:
        return count_by(tag_label(t) for t in self.assignments.values())


def build_result(
    parsed: ParsedField,
    classification: Classification,
    region_keys: Iterable[str],
) -> ClassificationResult:
    records = parsed.by_key()
    tags = assign_buckets(region_keys, records, classification.breaks)
    return ClassificationResult(
        field=parsed.name,
        is_ratio=parsed.is_ratio,
        records=MappingProxyType(records),
        sample=parsed.sample,
        classification=classification,
        assignments=MappingProxyType(tags),
    )
