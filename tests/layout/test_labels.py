import itertools
import math
import pytest

from healthmap.config_model.model import LabelsCfg
from healthmap.layout.labels import (
    BubbleSize, LabelTarget, PlacedLabel, Viewport, finalize_labels, place_labels, seed_position,
)

VP = Viewport(960, 700)

def test_seed_position_angle_and_radius():
    x, y = seed_position((480.0, 350.0), 0, VP, LabelsCfg())
    a = math.radians(-18.0)
    assert x == pytest.approx(480.0 + 60.0 * math.cos(a))
    assert y == pytest.approx(350.0 + 60.0 * math.sin(a))

def test_seed_position_near_edge_stays_inside_padding():
    cfg = LabelsCfg()
    for i in range(6):
        x, y = seed_position((2.0, 698.0), i, VP, cfg)
        assert 10.0 <= x <= 950.0
        assert 10.0 <= y <= 690.0

@pytest.mark.parametrize("centroid", [
    (480.0, 350.0),   # centre
    (15.0, 15.0),     # top-left corner
    (950.0, 690.0),   # bottom-right corner
    (480.0, 690.0),   # bottom edge
    (945.0, 350.0),   # right edge
])
def test_coincident_centroids_are_spread_apart(centroid):
    targets = [LabelTarget(key=f"c{i}", centroid=centroid, text=str(i + 1), value=float(i + 1)) for i in range(6)]
    labels = place_labels(targets, VP, LabelsCfg())
    assert [lb.key for lb in labels] == [t.key for t in targets]
    for lb in labels:
        assert lb.anchor == centroid
        assert lb.size is None
        assert 10.0 <= lb.position[0] <= 950.0
        assert 10.0 <= lb.position[1] <= 690.0
    for a, b in itertools.combinations(labels, 2):
        assert math.dist(a.position, b.position) >= 60.0

def test_placement_is_deterministic():
    targets = [LabelTarget(key=f"c{i}", centroid=(100.0 + i, 100.0), text="5", value=5.0) for i in range(4)]
    assert place_labels(targets, VP, seed=1) == place_labels(targets, VP, seed=1)

def test_unlabelled_targets_are_skipped():
    targets = [
        LabelTarget("empty", (100.0, 100.0), "", None),
        LabelTarget("invalid", (120.0, 100.0), "n/a", None),
        LabelTarget("zero", (140.0, 100.0), "0", 0.0),
        LabelTarget("nowhere", None, "12", 12.0),
        LabelTarget("nan", (float("nan"), 3.0), "12", 12.0),
        LabelTarget("ok", (400.0, 300.0), " 7 ", 7.0),
    ]
    labels = place_labels(targets, VP)
    assert [lb.key for lb in labels] == ["ok"]
    assert labels[0].text == "7"

def test_zero_kept_when_configured():
    labels = place_labels([LabelTarget("zero", (140.0, 100.0), "0", 0.0)], VP, LabelsCfg(skip_zero=False))
    assert [lb.key for lb in labels] == ["zero"]

def test_nothing_to_place():
    assert place_labels([], VP) == ()

def test_finalize_clamps_whole_bubble():
    labels = [
        PlacedLabel("tl", "1", (0.0, 0.0), (2.0, 2.0)),
        PlacedLabel("br", "2", (960.0, 700.0), (958.0, 699.0)),
        PlacedLabel("mid", "3", (480.0, 350.0), (480.0, 350.0)),
    ]
    size = BubbleSize(100.0, 28.0)
    out = finalize_labels(labels, {"tl": size, "br": size, "mid": size}, VP, LabelsCfg())
    assert out[0].position == (56.0, 20.0)
    assert out[1].position == (960.0 - 56.0, 700.0 - 20.0)
    assert out[2].position == (480.0, 350.0)
    assert all(lb.size == size for lb in out)
    # callable measure works the same
    again = finalize_labels(labels, lambda lb: size, VP, LabelsCfg())
    assert again == out

def test_finalize_centres_bubble_too_big_for_viewport():
    lb = PlacedLabel("wide", "1", (100.0, 100.0), (100.0, 100.0))
    out = finalize_labels([lb], {"wide": BubbleSize(2000.0, 28.0)}, VP, LabelsCfg())
    assert out[0].position == (480.0, 100.0)
    out = finalize_labels([lb], {"wide": BubbleSize(50.0, 900.0)}, VP, LabelsCfg())
    assert out[0].position == (100.0, 350.0)
