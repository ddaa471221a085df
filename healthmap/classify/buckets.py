from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Literal, Mapping, Optional, Sequence, Union
import math
import numpy as np

from ..cleaning.fields import Record

__all__ = [
    "Bucket",
    "Overflow",
    "NoData",
    "BucketTag",
    "bucket_index",
    "assign_bucket",
    "assign_buckets",
    "tag_label",
]


@dataclass(frozen=True)
class Bucket:
    index: int
    upper: float


@dataclass(frozen=True)
class Overflow:
    pass


@dataclass(frozen=True)
class NoData:
    reason: Literal["join_miss", "invalid"]


BucketTag = Union[Bucket, Overflow, NoData]


def bucket_index(value: float, breaks: Sequence[float]) -> int:
    """
    Index of the first break >= value; len(breaks) means above the last break.

    A value equal to a break belongs to that break's bucket, and when several
    breaks are equal the lowest one wins.
    """
    return int(np.digitize(value, breaks, right=True))


def assign_bucket(record: Optional[Record], breaks: Sequence[float]) -> BucketTag:
    if record is None:
        return NoData("join_miss")
    v = record.value
    if v is None or not math.isfinite(v):
        return NoData("invalid")
    i = bucket_index(v, breaks)
    if i >= len(breaks):
        return Overflow()
    return Bucket(i, float(breaks[i]))


def assign_buckets(
    keys: Iterable[str],
    records_by_key: Mapping[str, Record],
    breaks: Sequence[float],
) -> dict[str, BucketTag]:
    """Join region keys (exact, case-sensitive) to records and tag each one."""
    keys = list(keys)
    found = [records_by_key.get(k) for k in keys]
    values = np.array(
        [np.nan if r is None or r.value is None else r.value for r in found], dtype=float
    )
    valid = np.isfinite(values)
    with np.errstate(invalid="ignore"):
        idx = np.digitize(values, breaks, right=True)

    n = len(breaks)
    out: dict[str, BucketTag] = {}
    for k, rec, ok, i in zip(keys, found, valid.tolist(), idx.tolist()):
        if rec is None:
            out[k] = NoData("join_miss")
        elif not ok:
            out[k] = NoData("invalid")
        elif i >= n:
            out[k] = Overflow()
        else:
            out[k] = Bucket(i, float(breaks[i]))
    return out


def tag_label(tag: BucketTag) -> str:
    """Short text for a tag: the break value, 'overflow' or 'none'."""
    if isinstance(tag, Bucket):
        return repr(tag.upper)
    if isinstance(tag, Overflow):
        return "overflow"
    return "none"
