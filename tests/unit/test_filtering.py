"""Unit tests for usermirror/core/filtering.py"""
import pytest

from usermirror.core.filtering import apply_filter, matches_criteria
from usermirror.core.models import FilterCriteria, UserRecord


@pytest.fixture
def records(ann_and_bo):
    extra = [
        {"id": 3, "name": "Joanna", "email": "jo@example.com", "gender": "female", "status": "inactive"},
        {"id": 4, "name": "DANIEL", "email": "dan@example.com", "gender": "male", "status": "active"},
    ]
    return [UserRecord.from_api(u) for u in ann_and_bo + extra]


def test_default_criteria_returns_collection_unchanged(records):
    assert apply_filter(records, FilterCriteria()) == records


def test_male_filter_scenario(records):
    visible = apply_filter(records[:2], FilterCriteria(gender_filter="male", name_filter=""))
    assert [r.id for r in visible] == [2]


def test_name_filter_is_case_insensitive_substring(records):
    visible = apply_filter(records[:2], FilterCriteria(gender_filter="all", name_filter="an"))
    assert [r.id for r in visible] == [1]


def test_name_filter_matches_anywhere_in_name(records):
    visible = apply_filter(records, FilterCriteria(name_filter="AN"))
    assert [r.id for r in visible] == [1, 3, 4]


def test_gender_and_name_filters_combine(records):
    visible = apply_filter(records, FilterCriteria(gender_filter="female", name_filter="an"))
    assert [r.id for r in visible] == [1, 3]


def test_result_preserves_input_order(records):
    reversed_records = list(reversed(records))
    visible = apply_filter(reversed_records, FilterCriteria(gender_filter="female"))
    assert [r.id for r in visible] == [3, 1]


@pytest.mark.parametrize(
    "criteria",
    [
        FilterCriteria(),
        FilterCriteria(gender_filter="male"),
        FilterCriteria(gender_filter="female", name_filter="o"),
        FilterCriteria(name_filter="zzz"),
    ],
)
def test_only_matching_records_and_idempotent(records, criteria):
    once = apply_filter(records, criteria)
    assert all(matches_criteria(r, criteria) for r in once)
    assert [r for r in records if matches_criteria(r, criteria)] == once
    assert apply_filter(once, criteria) == once


def test_filter_does_not_modify_input(records):
    snapshot = list(records)
    apply_filter(records, FilterCriteria(gender_filter="male", name_filter="bo"))
    assert records == snapshot


def test_unknown_gender_filter_rejected():
    with pytest.raises(ValueError, match="gender_filter must be one of"):
        FilterCriteria(gender_filter="other")


@pytest.mark.parametrize("name_filter", [5, ["bo"], {"name": "bo"}])
def test_non_string_name_filter_rejected(name_filter):
    with pytest.raises(ValueError, match="name_filter must be a string"):
        FilterCriteria(name_filter=name_filter)


def test_missing_name_filter_means_no_name_constraint(records):
    assert apply_filter(records, FilterCriteria(name_filter=None)) == records
