from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional
import json
import pandas as pd

_EXTS = (".csv", ".tsv", ".txt")

def _infer_ext(path: str) -> str:
    p = path.lower()
    for e in _EXTS:
        if p.endswith(e):
            return e
    # default to csv if unknown
    return ".csv"

def read_bytes(path: str | Path) -> bytes:
    p = Path(str(path)[7:] if str(path).startswith("file://") else path)
    if not p.exists():
        raise FileNotFoundError(p)
    return p.read_bytes()

def read_table(
    path: str | Path,
    *,
    fmt: Optional[str] = None,
    csv_options: Optional[Dict[str, Any]] = None,
) -> pd.DataFrame:
    """
    Read the indicator table with every cell kept as text.

    Values such as "2,331" or "2331:1" must reach the field parser untouched,
    so pandas type inference is switched off and blanks stay blank.
    """
    opts = {"dtype": str, "keep_default_na": False}
    opts.update(csv_options or {})
    fmt = (fmt or _infer_ext(str(path))).lstrip(".").lower()
    if fmt == "tsv":
        opts.setdefault("sep", "\t")
    data = read_bytes(path)
    df = pd.read_csv(BytesIO(data), **opts)
    df.columns = [str(c).strip() for c in df.columns]
    return df

def read_json(path: str | Path) -> Any:
    return json.loads(read_bytes(path).decode("utf-8-sig"))
