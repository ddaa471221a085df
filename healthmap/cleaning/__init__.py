from __future__ import annotations

# Public API re-exports (keep small & stable)
from .fields import (
    Record,
    ParsedField,
    coerce_numeric,
    eligible_fields,
    parse_field,
    format_number,
    format_display,
)
