import math
import warnings
import numpy as np
import pandas as pd
import pytest

from healthmap.cleaning.fields import (
    coerce_numeric, eligible_fields, parse_field, format_number, format_display,
)
from healthmap.errors import CoercionWarning, DuplicateRegionKeyError

def test_coerce_numeric_ratio_commas_and_junk():
    s = pd.Series(["2331:1", "1,234.5", "", "n/a", "inf", " 42 "], dtype="string")
    out = coerce_numeric(s).tolist()
    assert out[0] == 2331.0
    assert out[1] == 1234.5
    assert all(math.isnan(v) for v in out[2:5])
    assert out[5] == 42.0

def test_coerce_numeric_passes_numbers_through():
    out = coerce_numeric(pd.Series([1, 2.5, np.inf]))
    assert out.iloc[0] == 1.0 and out.iloc[1] == 2.5
    assert math.isnan(out.iloc[2])

def test_eligible_fields_skip_reserved_and_text(county_table):
    assert eligible_fields(county_table) == [
        "Premature Death", "Primary Care Physicians Ratio", "Uninsured",
    ]
    # reserved list is configurable
    assert "deaths" in eligible_fields(county_table, reserved=("county", "fips"))

def test_eligible_fields_use_first_non_blank_value():
    t = pd.DataFrame({"county": ["a", "b"], "late": ["", "7"], "words": ["x", "7"]})
    assert eligible_fields(t) == ["late"]

def test_parse_ratio_field(county_table):
    with pytest.warns(CoercionWarning):
        pf = parse_field(county_table, "Primary Care Physicians Ratio")
    assert pf.is_ratio is True
    by = pf.by_key()
    assert by["Adams"].value == 2331.0
    assert by["Adams"].raw == "2331:1"
    assert by["Clark"].value == 3050.0
    # blank raw value is excluded from the sample and shown as no data
    assert by["Iron"].value is None and not by["Iron"].is_valid
    assert pf.n_invalid == 1
    assert pf.sample.size == 7
    assert list(pf.sample) == sorted(pf.sample)
    assert not pf.sample.flags.writeable

def test_parse_plain_field_emits_no_coercion_warning(county_table):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        pf = parse_field(county_table, "Premature Death")
    assert not [w for w in caught if issubclass(w.category, CoercionWarning)]
    assert pf.is_ratio is False
    assert pf.by_key()["Adams"].value == 9871.0
    assert pf.sample[0] == 5120.0 and pf.sample[-1] == 11402.0

def test_parse_field_unreadable_value_warns(county_table):
    with pytest.warns(CoercionWarning, match="1 value"):
        pf = parse_field(county_table, "Uninsured")
    assert pf.by_key()["Vilas"].value is None
    assert pf.by_key()["Vilas"].raw == "n/a"

def test_parse_field_errors(county_table):
    with pytest.raises(KeyError):
        parse_field(county_table, "Nope")
    dup = pd.concat([county_table, county_table.iloc[[0]]], ignore_index=True)
    with pytest.raises(DuplicateRegionKeyError) as ei:
        parse_field(dup, "Premature Death")
    assert ei.value.keys == ["Adams"]

def test_ratio_display_round_trip():
    t = pd.DataFrame({"county": ["Adams"], "ratio": ["42:1"]})
    pf = parse_field(t, "ratio")
    assert pf.is_ratio and pf.records[0].value == 42.0
    assert format_display(pf.records[0].value, pf.is_ratio) == "42:1"

def test_format_number():
    assert format_number(1500) == "1,500"
    assert format_number(1234.5) == "1,234.50"
    assert format_number(0.5) == "0.50"
    assert format_display(1.6, False) == "1.60"
