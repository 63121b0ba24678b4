import numpy as np
import pandas as pd
import pytest

from gg_notes.core.prep import (
    add_product_column,
    bucket_column,
    expand_grid,
    join_boundaries,
    midrange_by_group,
    round_any,
    sample_rows,
    summarise_by,
)


def _make_frame(n: int = 50) -> pd.DataFrame:
    rng = np.random.default_rng(0)
    return pd.DataFrame(
        {
            "x": rng.normal(size=n),
            "y": rng.normal(size=n),
            "z": rng.uniform(1, 2, size=n),
            "g": ["a", "b"] * (n // 2),
        }
    )


def _make_boundaries() -> pd.DataFrame:
    # Two regions, vertices stored in drawing order
    return pd.DataFrame(
        {
            "long": [0.0, 1.0, 1.0, 0.0, 2.0, 3.0, 3.0, 2.0],
            "lat": [0.0, 0.0, 1.0, 1.0, 0.0, 0.0, 1.0, 1.0],
            "group": [1, 1, 1, 1, 2, 2, 2, 2],
            "order": [1, 2, 3, 4, 5, 6, 7, 8],
            "region": ["north", "north", "north", "north", "south", "south", "south", "south"],
        }
    )


@pytest.mark.parametrize("seed", [0, 1, 42, 1410, 2**31 - 1])
def test_sample_rows_is_deterministic_for_a_seed(seed):
    frame = _make_frame()

    first = sample_rows(frame, n=10, seed=seed)
    second = sample_rows(frame, n=10, seed=seed)

    assert list(first.index) == list(second.index)
    pd.testing.assert_frame_equal(first, second)


def test_sample_rows_differs_between_seeds():
    frame = _make_frame()

    a = sample_rows(frame, n=10, seed=1)
    b = sample_rows(frame, n=10, seed=2)

    assert list(a.index) != list(b.index)


def test_sample_rows_has_no_duplicate_rows():
    frame = _make_frame()

    sub = sample_rows(frame, n=25, seed=3)

    assert len(sub) == 25
    assert sub.index.is_unique


def test_add_product_column_multiplies_columns():
    frame = _make_frame(4)

    out = add_product_column(frame, "volume", ["x", "y", "z"])

    np.testing.assert_allclose(out["volume"], frame["x"] * frame["y"] * frame["z"])
    assert "volume" not in frame.columns


def test_add_product_column_requires_a_column():
    with pytest.raises(ValueError):
        add_product_column(_make_frame(4), "empty", [])


def test_add_product_column_missing_column_raises_key_error():
    with pytest.raises(KeyError):
        add_product_column(_make_frame(4), "v", ["x", "missing"])


def test_round_any_modes():
    values = pd.Series([1.2, 2.6, 7.4, -3.3])

    assert round_any(values, 5).tolist() == [0.0, 5.0, 5.0, -5.0]
    assert round_any(values, 5, how="floor").tolist() == [0.0, 0.0, 5.0, -5.0]
    assert round_any(values, 5, how="ceil").tolist() == [5.0, 5.0, 10.0, -0.0]


def test_round_any_scalar_and_array():
    assert round_any(12.3, 0.5) == pytest.approx(12.5)
    np.testing.assert_allclose(round_any(np.array([0.26, 0.74]), 0.25), [0.25, 0.75])


def test_round_any_rejects_bad_arguments():
    with pytest.raises(ValueError):
        round_any(1.0, 0)
    with pytest.raises(ValueError):
        round_any(1.0, 1, how="nearest")


def test_bucket_column_keeps_source_column():
    frame = pd.DataFrame({"bill": [3.0, 11.0, 18.5]})

    out = bucket_column(frame, "bill", 5, name="bucket")

    assert out["bucket"].tolist() == [5.0, 10.0, 20.0]
    assert out["bill"].tolist() == [3.0, 11.0, 18.5]


def test_join_boundaries_preserves_vertex_order():
    boundaries = _make_boundaries()
    # Statistics listed in the opposite order to the boundaries
    stats = pd.DataFrame({"region": ["south", "north"], "value": [2.0, 1.0]})

    joined = join_boundaries(boundaries, stats)

    assert joined["order"].tolist() == boundaries["order"].tolist()
    assert joined[["long", "lat"]].equals(boundaries[["long", "lat"]])
    assert joined.loc[joined["region"] == "south", "value"].unique().tolist() == [2.0]


def test_join_boundaries_after_shuffle_restores_order():
    boundaries = _make_boundaries().sample(frac=1.0, random_state=7)
    stats = pd.DataFrame({"region": ["north", "south"], "value": [1.0, 2.0]})

    joined = join_boundaries(boundaries, stats)

    assert joined["order"].tolist() == sorted(boundaries["order"].tolist())
    assert joined.index.tolist() == list(range(len(joined)))


def test_join_boundaries_inner_drops_unmatched_regions():
    stats = pd.DataFrame({"region": ["north"], "value": [1.0]})

    joined = join_boundaries(_make_boundaries(), stats)

    assert set(joined["region"]) == {"north"}
    assert len(joined) == 4


def test_join_boundaries_missing_key_raises():
    stats = pd.DataFrame({"name": ["north"], "value": [1.0]})

    with pytest.raises(KeyError):
        join_boundaries(_make_boundaries(), stats)


def test_midrange_by_group():
    mid = midrange_by_group(_make_boundaries(), "region", ["long", "lat"])

    assert mid["region"].tolist() == ["north", "south"]
    assert mid["long"].tolist() == [0.5, 2.5]
    assert mid["lat"].tolist() == [0.5, 0.5]


def test_summarise_by_named_aggregations():
    frame = pd.DataFrame({"day": ["a", "a", "b"], "tip": [1.0, 3.0, 5.0]})

    out = summarise_by(frame, "day", n=("tip", "size"), avg=("tip", "mean"))

    assert out.to_dict("list") == {"day": ["a", "b"], "n": [2, 1], "avg": [2.0, 5.0]}


def test_summarise_by_requires_aggregation():
    with pytest.raises(ValueError):
        summarise_by(pd.DataFrame({"a": [1]}), "a")


def test_expand_grid_size_and_uniqueness():
    grid = expand_grid(a=[1, 2, 3], b=["x", "y"])

    assert len(grid) == 3 * 2
    assert not grid.duplicated().any()
    assert list(grid.columns) == ["a", "b"]
    assert grid["a"].tolist() == [1, 1, 2, 2, 3, 3]


def test_expand_grid_deduplicates_domains():
    grid = expand_grid(a=[1, 1, 2], b=["x", "y", "x"])

    assert len(grid) == 2 * 2
    assert not grid.duplicated().any()


def test_expand_grid_keeps_numeric_dtype():
    grid = expand_grid(a=np.linspace(0, 1, 5), b=["x"])

    assert pd.api.types.is_float_dtype(grid["a"])
