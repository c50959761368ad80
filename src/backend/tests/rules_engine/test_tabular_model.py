import pytest

from common.rules_engine.config import EmptySheetPolicy
from common.rules_engine.context import TabularModel, flatten_columns


def test_from_mapping_shapes_are_equivalent():
    rows = [{"id": 1, "address": {"city": "Oslo"}}]
    a = TabularModel.from_mapping({"Customers": rows})
    b = TabularModel.from_mapping({"sheets": {"Customers": {"rows": rows}}})
    assert a == b
    assert a.get_sheet("Customers").columns == ["id", "address.city"]


def test_columns_are_merged_across_rows_in_first_seen_order():
    model = TabularModel.from_mapping({"S": [{"a": 1}, {"b": 2, "a": 3}]})
    assert model.get_sheet("S").columns == ["a", "b"]


def test_declared_columns_win_over_rows():
    model = TabularModel.from_mapping({"S": {"columns": ["x"], "rows": [{"y": 1}]}})
    assert model.get_sheet("S").columns == ["x"]


def test_sheet_emptiness_policies():
    model = TabularModel.from_mapping({"S": {"columns": ["x"], "rows": []}, "T": None})
    s, t = model.get_sheet("S"), model.get_sheet("T")
    assert s.is_empty(EmptySheetPolicy.NO_DATA)
    assert s.is_empty(EmptySheetPolicy.NO_ROWS)
    assert not s.is_empty(EmptySheetPolicy.NO_COLUMNS)
    assert not t.is_empty(EmptySheetPolicy.PRESENT)
    assert model.sheet_names() == ["S", "T"]


def test_column_groups():
    assert flatten_columns({"a": {"b": {"c": 1}}, "d": {}}) == ["a.b.c", "d"]
    sheet = TabularModel.from_mapping({"S": [{"a": {"b": 1}}]}).get_sheet("S")
    assert sheet.has_column("a")
    assert sheet.has_column("a.b")
    assert not sheet.has_column("a.c")
    assert not sheet.has_column("ab")


def test_non_mapping_model_is_rejected():
    with pytest.raises(ValueError):
        TabularModel.from_mapping(["Customers"])
