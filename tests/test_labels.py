"""Tests for council/labels.py."""

import pytest

from council.labels import LabelTable, label_for_index
from council.models import ModelAnswer


@pytest.mark.parametrize(
    "index, expected",
    [
        (0, "Response A"),
        (1, "Response B"),
        (25, "Response Z"),
        (26, "Response A1"),
        (51, "Response Z1"),
        (52, "Response A2"),
    ],
)
def test_label_for_index(index, expected):
    assert label_for_index(index) == expected


def test_label_for_negative_index_raises():
    with pytest.raises(ValueError):
        label_for_index(-1)


def test_labels_unique_past_alphabet():
    labels = [label_for_index(i) for i in range(80)]
    assert len(set(labels)) == 80


def _answers(*models: str) -> list[ModelAnswer]:
    return [ModelAnswer(model=m, content=f"text {i}") for i, m in enumerate(models)]


def test_label_table_bijection():
    table = LabelTable(_answers("m/one", "m/two", "m/three"))
    assert len(table) == 3
    assert table.labels == ("Response A", "Response B", "Response C")
    for i, label in enumerate(table.labels):
        assert table.index_of(label) == i
        assert table.label_at(i) == label


def test_label_table_label_to_model():
    table = LabelTable(_answers("m/one", "m/two"))
    assert table.label_to_model() == {"Response A": "m/one", "Response B": "m/two"}
    assert table.model_for("Response B") == "m/two"


def test_label_table_duplicate_models_get_distinct_labels():
    table = LabelTable(_answers("x-ai/grok-4", "m/other", "x-ai/grok-4"))
    assert table.labels_for_model("x-ai/grok-4") == ["Response A", "Response C"]
    assert len(set(table.label_to_model())) == 3


def test_label_table_contains():
    table = LabelTable(_answers("m/one"))
    assert "Response A" in table
    assert "Response B" not in table


def test_label_table_anonymized_keeps_content_order():
    table = LabelTable(_answers("m/one", "m/two"))
    anon = table.anonymized()
    assert [a.label for a in anon] == ["Response A", "Response B"]
    assert anon[1].content == "text 1"


def test_empty_label_table():
    table = LabelTable([])
    assert len(table) == 0
    assert table.label_to_model() == {}
