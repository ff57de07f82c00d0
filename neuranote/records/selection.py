"""
Selection Model - multi-selected folder ids for bulk operations
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List


class SelectionModel:
    """Ordered set of selected ids"""

    def __init__(self):
        self._selected: List[int] = []
        self._listeners: List[Callable[[], None]] = []

    @property
    def selected(self) -> List[int]:
        return list(self._selected)

    def __contains__(self, item_id: int) -> bool:
        return item_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def add_listener(self, callback: Callable[[], None]):
        self._listeners.append(callback)

    def _notify(self):
        for callback in self._listeners:
            callback()

    def toggle(self, item_id: int):
        if item_id in self._selected:
            self._selected.remove(item_id)
        else:
            self._selected.append(item_id)
        self._notify()

    def toggle_all(self, visible_ids: Iterable[int]):
        """Select exactly the visible set, or clear when it is already selected"""
        visible = list(visible_ids)
        if visible and set(self._selected) == set(visible):
            self._selected = []
        else:
            self._selected = visible
        self._notify()

    def is_all_selected(self, visible_ids: Iterable[int]) -> bool:
        visible = set(visible_ids)
        return bool(visible) and set(self._selected) == visible

    def replace(self, item_ids: Iterable[int]):
        self._selected = list(dict.fromkeys(item_ids))
        self._notify()

    def clear(self):
        if self._selected:
            self._selected = []
            self._notify()


@dataclass
class BulkDeleteResult:
    """Per-item outcome of a bulk delete"""
    succeeded: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def message(self) -> str:
        if not self.failed:
            return f"Deleted {len(self.succeeded)} projects"
        if not self.succeeded:
            return f"Bulk delete failed for {len(self.failed)} projects"
        return f"Deleted {len(self.succeeded)} projects, {len(self.failed)} failed"
