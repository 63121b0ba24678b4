import numpy as np
import pandas as pd
import pytest

from gg_notes.core.exceptions import LayerError
from gg_notes.core.positions import apply_position, resolution


def _make_bars() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "x": [1.0, 1.0, 2.0, 2.0],
            "y": [2.0, 3.0, 1.0, 1.0],
            "group": [0, 1, 0, 1],
            "width": 0.9,
        }
    )


def test_resolution():
    assert resolution(pd.Series([1.0, 3.0, 3.5])) == 0.5
    assert resolution(pd.Series([4.0])) == 1.0


def test_identity_is_a_no_op():
    frame = _make_bars()

    assert apply_position("identity", frame, {}) is frame


def test_stack_accumulates_per_x():
    out = apply_position("stack", _make_bars(), {})

    assert out["ymin"].tolist() == [0.0, 2.0, 0.0, 1.0]
    assert out["ymax"].tolist() == [2.0, 5.0, 1.0, 2.0]
    assert (out["y"] == out["ymax"]).all()


def test_stack_does_not_cross_panels():
    frame = _make_bars().assign(PANEL=[1, 2, 1, 2])

    out = apply_position("stack", frame, {})

    assert out["ymin"].tolist() == [0.0, 0.0, 0.0, 0.0]


def test_fill_normalises_each_stack():
    out = apply_position("fill", _make_bars(), {})

    assert out.groupby("x")["ymax"].max().tolist() == [1.0, 1.0]
    assert out["ymax"].tolist() == pytest.approx([0.4, 1.0, 0.5, 1.0])


def test_dodge_splits_width_between_groups():
    out = apply_position("dodge", _make_bars(), {})

    assert out["x"].tolist() == pytest.approx([0.775, 1.225, 1.775, 2.225])
    assert out["width"].tolist() == pytest.approx([0.45] * 4)


def test_jitter_is_seeded_and_bounded():
    frame = pd.DataFrame({"x": [1.0, 2.0, 3.0] * 10, "y": np.arange(30, dtype=float), "group": 0})

    a = apply_position("jitter", frame, {"seed": 7})
    b = apply_position("jitter", frame, {"seed": 7})
    c = apply_position("jitter", frame, {"seed": 8})

    pd.testing.assert_frame_equal(a, b)
    assert not a["x"].equals(c["x"])
    assert (np.abs(a["x"] - frame["x"]) <= 0.4).all()


def test_jitter_leaves_a_discrete_y_on_its_categories():
    frame = pd.DataFrame({"x": [1.0, 2.0, 3.0, 4.0], "y": ["low", "high", "low", "mid"], "group": 0})

    out = apply_position("jitter", frame, {"seed": 1})

    assert out["y"].tolist() == ["low", "high", "low", "mid"]
    assert not out["x"].equals(frame["x"])
    assert (np.abs(out["x"] - frame["x"]) <= 0.4).all()


def test_stack_without_y_and_empty_frames_pass_through():
    no_y = pd.DataFrame({"x": [1.0], "group": [0]})
    empty = pd.DataFrame(columns=["x", "y", "group"])

    assert apply_position("stack", no_y, {}) is no_y
    assert apply_position("dodge", empty, {}) is empty


def test_unknown_position_raises():
    with pytest.raises(LayerError):
        apply_position("nudge", _make_bars(), {})
