from __future__ import annotations
from typing import Dict, Iterable, List, TypeVar

from toolz import frequencies as _frequencies
from more_itertools import unique_everseen as _unique_everseen

A = TypeVar("A")

def unique_stable(seq: Iterable[A]) -> List[A]:
    # Delegate to more-itertools; preserves first-seen order
    return list(_unique_everseen(seq))

def count_by(seq: Iterable[A]) -> Dict[A, int]:
    # toolz.frequencies keeps first-seen key order
    return dict(_frequencies(seq))
