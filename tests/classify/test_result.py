import dataclasses
import pandas as pd
import pytest

from healthmap.classify.breaks import classify
from healthmap.classify.buckets import Bucket, NoData, Overflow
from healthmap.classify.result import build_result
from healthmap.cleaning.fields import parse_field

@pytest.fixture
def result():
    t = pd.DataFrame({
        "county": ["A", "B", "C", "D", "E", "Z"],
        "rate": ["1", "1", "2", "2", "3", "2"],
    })
    pf = parse_field(t, "rate")
    c = classify(pf.sample, field="rate")
    # "Ghost" has geometry but no row, "Z" has a row but no geometry
    return build_result(pf, c, ["A", "B", "C", "D", "E", "Ghost"])

def test_breaks_and_tags(result):
    assert result.mode == "quantile"
    assert result.breaks == pytest.approx((1.0, 2.0, 2.0, 2.0))
    assert result.tag_for("A") == Bucket(0, 1.0)
    assert result.tag_for("C") == Bucket(1, 2.0)
    assert result.tag_for("E") == Overflow()
    assert result.tag_for("Ghost") == NoData("join_miss")
    assert result.tag_for("never-seen") == NoData("join_miss")
    assert list(result.assignments) == ["A", "B", "C", "D", "E", "Ghost"]

def test_colors_follow_tags(result):
    cm = result.color_map
    assert result.color_for("A") == cm.colors[0]
    assert result.color_for("E") == cm.colors[-1]
    assert result.color_for("Ghost") == "#ccc"

def test_bucket_queries(result):
    assert result.keys_in_bucket(0) == ["A", "B"]
    assert result.keys_in_bucket(1) == ["C", "D"]
    assert result.break_index(2.0) == 1
    with pytest.raises(ValueError):
        result.break_index(1.5)
    assert result.break_range(0) == (1.0, 1.0)
    assert result.break_range(1) == (1.0, 2.0)
    assert result.range_label(1) == "Range: 1 – 2"

def test_tag_counts(result):
    assert result.tag_counts() == {"1.0": 2, "2.0": 2, "overflow": 1, "none": 1}

def test_result_is_immutable(result):
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.field = "other"
    with pytest.raises(TypeError):
        result.assignments["A"] = Overflow()
    with pytest.raises(TypeError):
        result.records["A"] = None
