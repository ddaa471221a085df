from __future__ import annotations

# Public API re-exports (keep small & stable)
from .buckets import Bucket, Overflow, NoData, BucketTag, assign_bucket, assign_buckets, tag_label
from .breaks import ColorMap, Classification, classify, quantile_breaks, natural_breaks
from .palette import palette_for
from .result import ClassificationResult, build_result
