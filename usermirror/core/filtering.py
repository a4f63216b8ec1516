"""Local filtering of the users mirror.

Pure functions: no side effects, stable input order, re-run on every read.
"""
from __future__ import annotations
from typing import Iterable, List

from .models import FilterCriteria, UserRecord


def matches_criteria(record: UserRecord, criteria: FilterCriteria) -> bool:
    """Return True when the record passes both the gender and name filters."""
    if criteria.gender_filter != "all" and record.gender != criteria.gender_filter:
        return False

    if criteria.name_filter and criteria.name_filter.lower() not in record.name.lower():
        return False

    return True


def apply_filter(records: Iterable[UserRecord], criteria: FilterCriteria) -> List[UserRecord]:
    """Return the records matching criteria, in their original order."""
    return [record for record in records if matches_criteria(record, criteria)]
