"""
Tests for date grouping of folders and tree expansion state.
"""

from datetime import datetime

import pytest

from neuranote.models.records import Folder
from neuranote.records.grouping import ExpansionState, group_by_date, month_key, week_of_month


def folder(folder_id, created_at):
    return Folder(id=folder_id, name=f"Folder {folder_id}", created_at=created_at)


@pytest.mark.parametrize("day,week", [(1, 1), (7, 1), (8, 2), (14, 2), (15, 3), (28, 4), (29, 5), (31, 5)])
def test_week_of_month(day, week):
    assert week_of_month(day) == week


class TestGroupByDate:
    """Tests for group_by_date."""

    def test_year_month_week_buckets(self):
        folders = [
            folder(1, datetime(2024, 5, 1, 10)),
            folder(2, datetime(2024, 5, 9, 10)),
            folder(3, datetime(2024, 5, 3, 10)),
            folder(4, datetime(2023, 12, 31, 10)),
        ]

        grouped = group_by_date(folders)

        assert set(grouped) == {2024, 2023}
        assert [f.id for f in grouped[2024]["May"][1]] == [1, 3]
        assert [f.id for f in grouped[2024]["May"][2]] == [2]
        assert [f.id for f in grouped[2023]["Dec"][5]] == [4]

    def test_missing_timestamp_is_excluded(self):
        dated = folder(2, datetime(2024, 1, 2))
        grouped = group_by_date([folder(1, None), dated])

        assert grouped == {2024: {"Jan": {1: [dated]}}}

    def test_does_not_mutate_input(self):
        folders = [folder(2, datetime(2024, 1, 20)), folder(1, datetime(2024, 1, 2))]
        group_by_date(folders)
        assert [f.id for f in folders] == [2, 1]

    def test_empty(self):
        assert group_by_date([]) == {}


class TestExpansionState:
    """Tests for ExpansionState."""

    def test_defaults_to_current_year_and_month(self):
        state = ExpansionState(now=lambda: datetime(2026, 1, 9))
        state.reset_to_current()

        assert state.is_year_expanded(2026)
        assert state.is_month_expanded(2026, "Jan")
        assert not state.is_month_expanded(2025, "Jan")

    def test_toggles_are_independent(self):
        state = ExpansionState(now=lambda: datetime(2026, 1, 9))
        state.reset_to_current()

        state.toggle_year(2026)
        state.toggle_month(2025, "Dec")

        assert not state.is_year_expanded(2026)
        assert state.is_month_expanded(2026, "Jan")
        assert state.is_month_expanded(2025, "Dec")

    def test_month_key(self):
        assert month_key(2024, "May") == "2024-May"
