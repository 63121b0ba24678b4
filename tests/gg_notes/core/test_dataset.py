import numpy as np
import pandas as pd
import pytest

from gg_notes.core.dataset import Dataset
from gg_notes.core.exceptions import DatasetSchemaError


def _make_dataset(n: int = 40) -> Dataset:
    frame = pd.DataFrame(
        {
            "x": np.arange(n, dtype=float),
            "day": (["Sat", "Sun", "Thur", "Fri"] * n)[:n],
            "smoker": (["No", "Yes"] * n)[:n],
        }
    )
    return Dataset(name="toy", group="Test", frame=frame)


def test_duplicate_columns_are_rejected():
    frame = pd.DataFrame([[1, 2]], columns=["a", "a"])

    with pytest.raises(DatasetSchemaError):
        Dataset(name="dup", group="Test", frame=frame)


def test_shape_properties():
    ds = _make_dataset(10)

    assert ds.n_rows == 10
    assert ds.columns == ["x", "day", "smoker"]


def test_require_columns_names_missing():
    ds = _make_dataset()

    ds.require_columns(["x", "day"])
    with pytest.raises(DatasetSchemaError, match="nope"):
        ds.require_columns(["x", "nope"])


def test_sample_is_deterministic_and_cached():
    ds = _make_dataset()

    first = ds.sample(10, seed=5)
    second = ds.sample(10, seed=5)

    assert first is second
    assert first.n_rows == 10
    assert first.name == ds.name


def test_sample_cache_is_bounded():
    ds = _make_dataset()

    for seed in range(Dataset.MAX_SAMPLE_CACHE + 5):
        ds.sample(3, seed=seed)

    assert len(ds._sample_cache) == Dataset.MAX_SAMPLE_CACHE


def test_sample_same_seed_on_fresh_dataset_gives_same_rows():
    a = _make_dataset().sample(8, seed=99)
    b = _make_dataset().sample(8, seed=99)

    assert a.frame.index.tolist() == b.frame.index.tolist()


def test_subset_equality_and_membership():
    ds = _make_dataset(8)

    sub = ds.subset(day=["Sat", "Sun"], smoker="No")

    assert set(sub.frame["day"]) <= {"Sat", "Sun"}
    assert set(sub.frame["smoker"]) == {"No"}
    assert sub.n_rows == 2
    assert ds.n_rows == 8


def test_subset_unknown_column_raises():
    with pytest.raises(DatasetSchemaError):
        _make_dataset().subset(missing=1)


def test_schema_table():
    schema = _make_dataset(8).schema()

    assert schema["column"].tolist() == ["x", "day", "smoker"]
    assert schema.set_index("column").loc["day", "n_unique"] == 4
