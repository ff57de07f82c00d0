"""
Grouping Engine - year / month / week buckets for the folder tree
"""

import math
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..models.records import Folder

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

GroupedFolders = Dict[int, Dict[str, Dict[int, List[Folder]]]]


def week_of_month(day: int) -> int:
    return math.ceil(day / 7)


def _local(value: datetime) -> datetime:
    return value.astimezone() if value.tzinfo else value


def group_by_date(folders: Iterable[Folder]) -> GroupedFolders:
    """Bucket folders by creation year, month and week of month.

    Folders without a usable timestamp are left out. Buckets keep the order
    in which folders are given.
    """
    grouped: GroupedFolders = {}
    for folder in folders:
        if folder.created_at is None:
            continue
        created = _local(folder.created_at)
        month = MONTH_NAMES[created.month - 1]
        week = week_of_month(created.day)
        grouped.setdefault(created.year, {}).setdefault(month, {}).setdefault(week, []).append(folder)
    return grouped


def month_key(year: int, month: str) -> str:
    return f"{year}-{month}"


class ExpansionState:
    """Which years and year-months of the tree are expanded"""

    def __init__(self, now: Callable[[], datetime] = datetime.now):
        self.now = now
        self.expanded_years: Set[int] = set()
        self.expanded_months: Set[str] = set()

    def reset_to_current(self, now: Optional[datetime] = None):
        now = now or self.now()
        self.expanded_years = {now.year}
        self.expanded_months = {month_key(now.year, MONTH_NAMES[now.month - 1])}

    def toggle_year(self, year: int):
        self.expanded_years ^= {year}

    def toggle_month(self, year: int, month: str):
        self.expanded_months ^= {month_key(year, month)}

    def is_year_expanded(self, year: int) -> bool:
        return year in self.expanded_years

    def is_month_expanded(self, year: int, month: str) -> bool:
        return month_key(year, month) in self.expanded_months
