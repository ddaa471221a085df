from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional
import logging
import math
import warnings
import numpy as np
import pandas as pd

from ..errors import CoercionWarning, DuplicateRegionKeyError

__all__ = [
    "Record",
    "ParsedField",
    "RATIO_SEP",
    "coerce_numeric",
    "eligible_fields",
    "parse_field",
    "format_number",
    "format_display",
]

log = logging.getLogger(__name__)

RATIO_SEP = ":"
DEFAULT_RESERVED = ("county", "fips", "deaths")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Record:
    key: str
    raw: str                  # original text, used for display only
    value: Optional[float]    # None -> invalid ("no data")

    @property
    def is_valid(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ParsedField:
    name: str
    is_ratio: bool
    records: tuple[Record, ...]
    sample: np.ndarray        # ascending, finite values only

    @property
    def n_invalid(self) -> int:
        return sum(1 for r in self.records if not r.is_valid)

    def by_key(self) -> dict[str, Record]:
        return {r.key: r for r in self.records}


# ---------------------------------------------------------------------------
# Helpers: coercion
# ---------------------------------------------------------------------------

def _as_text(s: pd.Series) -> pd.Series:
    return s.astype("string").str.strip().fillna("")


def _canonical_sample(text: pd.Series) -> str:
    """First non-blank value of a column; '' when the column is blank throughout."""
    non_blank = text[text != ""]
    return str(non_blank.iloc[0]) if len(non_blank) else ""


def coerce_numeric(s: pd.Series) -> pd.Series:
    """
    Coerce raw field text to float (NaN = invalid).

    - "2331:1"  -> 2331.0  (numerator of ratio notation)
    - "1,234.5" -> 1234.5  (grouping commas stripped)
    - "", "n/a", "inf" -> NaN
    """
    if pd.api.types.is_numeric_dtype(s.dtype):
        x = pd.to_numeric(s, errors="coerce").astype(float)
    else:
        text = _as_text(s)
        numer = text.str.split(RATIO_SEP, n=1).str[0]
        cleaned = numer.str.replace(",", "", regex=False).str.strip()
        x = pd.to_numeric(cleaned.astype(object), errors="coerce").astype(float)
    # non-finite values are as unusable as unparseable ones
    return x.where(np.isfinite(x))


def _is_coercible(val: str) -> bool:
    if not val:
        return False
    return bool(coerce_numeric(pd.Series([val], dtype="string")).notna().iloc[0])


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def eligible_fields(
    table: pd.DataFrame,
    *,
    reserved: Iterable[str] = DEFAULT_RESERVED,
) -> list[str]:
    """
    Columns that can be mapped, in table order.

    Reserved identifier/count columns are excluded whatever they contain; the
    rest must have a numeric-coercible canonical sample value.
    """
    skip = set(reserved)
    out: list[str] = []
    for col in table.columns:
        if col in skip:
            continue
        if _is_coercible(_canonical_sample(_as_text(table[col]))):
            out.append(str(col))
    return out


def parse_field(
    table: pd.DataFrame,
    field: str,
    *,
    key_column: str = "county",
) -> ParsedField:
    """
    Parse one field of the table into typed records and a numeric sample.

    Every record keeps its raw text next to the coerced value. Values that fail
    coercion are kept as invalid records (value=None) and left out of the sample;
    a single CoercionWarning reports how many there were.
    """
    for c in (key_column, field):
        if c not in table.columns:
            raise KeyError(c)

    keys = table[key_column].astype("string").str.strip()
    dup = keys[keys.duplicated(keep=False)]
    if len(dup):
        raise DuplicateRegionKeyError(sorted(set(dup.dropna().tolist())))

    text = _as_text(table[field])
    is_ratio = RATIO_SEP in _canonical_sample(text)
    values = coerce_numeric(table[field])

    records = tuple(
        Record(
            key=str(k),
            raw=str(t),
            value=None if (v is None or math.isnan(v)) else float(v),
        )
        for k, t, v in zip(keys.tolist(), text.tolist(), values.tolist())
    )

    sample = np.sort(values.dropna().to_numpy(dtype=float))
    sample.setflags(write=False)

    parsed = ParsedField(name=field, is_ratio=is_ratio, records=records, sample=sample)
    bad = parsed.n_invalid
    if bad:
        msg = f"{bad} value(s) of {field!r} could not be read as numbers and are shown as no data"
        warnings.warn(msg, CoercionWarning, stacklevel=2)
        log.warning("coercion_failed", extra={"field": field, "invalid": bad, "total": len(records)})
    log.debug("field_parsed", extra={"field": field, "is_ratio": is_ratio, "valid": int(sample.size)})
    return parsed


def format_number(value: float) -> str:
    """Thousands separators; two decimals for fractional values, none otherwise."""
    v = float(value)
    if not math.isfinite(v):
        return str(v)
    if v % 1 != 0:
        return f"{v:,.2f}"
    return f"{v:,.0f}"


def format_display(value: float, is_ratio: bool) -> str:
    """Format a value the way the field was written: 42 -> '42:1' for ratio fields."""
    txt = format_number(value)
    return f"{txt}{RATIO_SEP}1" if is_ratio else txt
