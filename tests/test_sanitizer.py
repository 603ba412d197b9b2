"""
Tests for the category / work-item sanitizer (sanitizer.py).

Tests:
1-3. Incomplete items — blank type, unnamed custom type, non-object
4.   Empty categories survive, but a project with no items fails
5-6. Fatal category errors — missing key or name, empty list
7-9. Defaults, categoryKey stamping, kind derivation
10.  Out-of-range values are reported with their input path
"""

import pytest

from conftest import sample_work_item
from estimator.errors import ProjectValidationError
from estimator.sanitizer import is_incomplete_work_item, sanitize_categories
from estimator.schemas import CustomWorkItem, StandardWorkItem


def _category(work_items, key="kitchen", name="Kitchen"):
    return {"key": key, "name": name, "workItems": work_items}


# ============================================================
# Incomplete items are dropped
# ============================================================

@pytest.mark.parametrize("item", [
    {"type": ""},
    {"type": "   "},
    {"name": "No type at all"},
    {"type": "custom-work-type", "customWorkTypeName": ""},
    {"type": "custom-work-type", "customWorkTypeName": "  "},
    {"type": "custom-work-type"},
    "kitchen-flooring",
    None,
])
def test_incomplete_items(item):
    assert is_incomplete_work_item(item)


def test_complete_items():
    assert not is_incomplete_work_item({"type": "kitchen-flooring"})
    assert not is_incomplete_work_item({"type": "custom-work-type", "customWorkTypeName": "Wine rack"})


def test_incomplete_items_are_dropped_not_rejected():
    categories = sanitize_categories([_category([
        sample_work_item(),
        {"type": "", "name": "Half-filled row"},
        {"type": "custom-work-type", "customWorkTypeName": " "},
    ])])
    assert len(categories[0].work_items) == 1
    assert categories[0].work_items[0].type == "kitchen-flooring"


def test_empty_category_is_kept():
    categories = sanitize_categories([
        _category([sample_work_item()]),
        _category([{"type": "custom-work-type", "customWorkTypeName": ""}], key="bathroom", name="Bathroom"),
    ])
    assert [c.key for c in categories] == ["kitchen", "bathroom"]
    assert categories[1].work_items == []


def test_lone_unnamed_custom_item_fails_the_project():
    with pytest.raises(ProjectValidationError) as exc:
        sanitize_categories([_category([{"type": "custom-work-type", "customWorkTypeName": ""}])])
    assert exc.value.messages == ["Project must contain at least one valid work item."]
    assert exc.value.paths == ["categories"]


# ============================================================
# Fatal category errors
# ============================================================

@pytest.mark.parametrize("bad", [
    {"name": "Kitchen", "workItems": []},
    {"key": "kitchen", "workItems": []},
    {"key": "  ", "name": "Kitchen"},
    "kitchen",
])
def test_category_missing_key_or_name_fails(bad):
    with pytest.raises(ProjectValidationError) as exc:
        sanitize_categories([_category([sample_work_item()]), bad])
    assert exc.value.messages == ["Category at index 1 is missing a key or name."]
    assert exc.value.paths == ["categories.1"]


@pytest.mark.parametrize("raw", [[], None, "categories", {"key": "kitchen"}])
def test_no_categories_fails(raw):
    with pytest.raises(ProjectValidationError) as exc:
        sanitize_categories(raw)
    assert exc.value.messages == ["Project must have at least one category."]


# ============================================================
# Rebuilt items
# ============================================================

def test_defaults_are_applied():
    categories = sanitize_categories([_category([{"type": "kitchen-flooring"}])])
    item = categories[0].work_items[0]
    assert item.name == "Unnamed Work Item"
    assert item.measurement_type == "sqft"
    assert item.material_cost == 0
    assert item.labor_cost == 0
    assert item.surfaces == []


def test_category_key_is_overwritten():
    categories = sanitize_categories([_category([sample_work_item(categoryKey="bathroom")])])
    assert categories[0].work_items[0].category_key == "kitchen"


def test_kind_follows_type():
    categories = sanitize_categories([_category([
        sample_work_item(kind="custom"),
        {"type": "custom-work-type", "customWorkTypeName": " Wine rack ", "kind": "standard"},
    ])])
    standard, custom = categories[0].work_items
    assert isinstance(standard, StandardWorkItem)
    assert isinstance(custom, CustomWorkItem)
    assert custom.custom_work_type_name == "Wine rack"


def test_measurement_types_are_normalized():
    item = sample_work_item(
        measurementType="Linear Ft",
        surfaces=[{"linearFt": "12"}, {"measurementType": "Units", "units": 2}],
    )
    surfaces = sanitize_categories([_category([item])])[0].work_items[0].surfaces
    assert surfaces[0].measurement_type == "linear-foot"
    assert surfaces[0].linear_ft == 12
    assert surfaces[1].measurement_type == "by-unit"


def test_negative_cost_reports_input_path():
    with pytest.raises(ProjectValidationError) as exc:
        sanitize_categories([_category([
            {"type": ""},
            sample_work_item(materialCost=-5),
        ])])
    assert exc.value.paths == ["categories.0.workItems.1.materialCost"]
