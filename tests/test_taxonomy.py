"""
Tests for the work-type taxonomy (taxonomy.py).

Tests:
1-5. Validator rules — custom work type, custom category, listed type,
     unlisted type, unknown category
6-7. Category key validation
8-10. Loading — bundled table, synthetic file, missing file
"""

import json

import pytest

from estimator.config import DEFAULT_TAXONOMY_PATH
from estimator.taxonomy import CUSTOM_WORK_TYPE, Taxonomy, get_taxonomy, load_taxonomy


def _synthetic():
    return Taxonomy({"attic": ["attic-insulation", "attic-ladder"]}, version="test")


def test_custom_work_type_valid_in_any_category():
    taxonomy = _synthetic()
    assert taxonomy.is_valid_work_type("attic", CUSTOM_WORK_TYPE)
    # Even a category the table doesn't know
    assert taxonomy.is_valid_work_type("kitchen", CUSTOM_WORK_TYPE)


def test_custom_category_allows_any_type():
    taxonomy = _synthetic()
    assert taxonomy.is_valid_work_type("custom_sunroom", "glass-walls")


def test_listed_type_is_valid():
    assert _synthetic().is_valid_work_type("attic", "attic-ladder")


def test_unlisted_type_is_invalid():
    assert not _synthetic().is_valid_work_type("attic", "kitchen-flooring")


def test_unknown_category_is_invalid():
    assert not _synthetic().is_valid_work_type("garage", "garage-door")
    assert not _synthetic().is_valid_work_type("", "attic-ladder")
    assert not _synthetic().is_valid_work_type("attic", "")


def test_category_keys():
    taxonomy = _synthetic()
    assert taxonomy.is_valid_category_key("attic")
    assert taxonomy.is_valid_category_key("custom_anything")
    assert not taxonomy.is_valid_category_key("kitchen")
    assert not taxonomy.is_valid_category_key(None)


def test_custom_category_prefix_must_lead():
    assert not _synthetic().is_custom_category("my_custom_room")


def test_bundled_table_loads():
    taxonomy = load_taxonomy(str(DEFAULT_TAXONOMY_PATH))
    assert "kitchen" in taxonomy.category_keys
    assert "walk-in-closet" in taxonomy.category_keys
    assert len(taxonomy.category_keys) == 14
    assert taxonomy.is_valid_work_type("kitchen", "kitchen-flooring")
    assert taxonomy.is_valid_work_type("plumbing", "plumbing-sewer-line")
    assert not taxonomy.is_valid_work_type("kitchen", "bathroom-toilet")


def test_get_taxonomy_uses_configured_path():
    assert get_taxonomy().is_valid_work_type("bathroom", "bathroom-vanity")


def test_synthetic_file(tmp_path):
    path = tmp_path / "taxonomy.json"
    path.write_text(json.dumps({
        "version": "9",
        "categories": {"shed": ["shed-roof"]},
    }))
    taxonomy = Taxonomy.from_file(path)
    assert taxonomy.version == "9"
    assert taxonomy.category_keys == ["shed"]
    assert taxonomy.is_valid_work_type("shed", "shed-roof")


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Taxonomy.from_file(tmp_path / "nope.json")
