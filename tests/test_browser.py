"""
Tests for the records browser: selection rules, bulk delete and folder operations.
"""

import asyncio
from datetime import datetime

import pytest

from neuranote.records.browser import RecordsBrowser
from neuranote.records.filtering import TypeFilter
from neuranote.services.errors import DeleteError, ValidationError
from neuranote.services.events import FOLDER_RESOLVED, RECORDS_CHANGED


@pytest.fixture
def loaded(backend):
    """Browser over three loaded folders."""
    for name in ("Acme visit", "Bolt review", "Crane audit"):
        backend.add_folder(name)
    browser = RecordsBrowser(backend)
    asyncio.run(browser.refresh())
    return browser


class TestSelectionRules:
    """Selection follows the visible set."""

    def test_search_excluding_selected_folder_clears_selection(self, loaded):
        loaded.toggle_select_all()
        assert len(loaded.selection) == 3

        loaded.set_search("acme")

        assert loaded.selection.selected == []

    def test_search_keeping_membership_keeps_selection(self, loaded):
        loaded.toggle_select_all()

        loaded.set_search("")

        assert len(loaded.selection) == 3

    def test_type_filter_change_in_note_mode_clears_selection(self, backend):
        folder = backend.add_folder("Acme visit")
        backend.add_note(folder.id, {'customer_information': 'Acme', 'action_items': []})
        browser = RecordsBrowser(backend)
        asyncio.run(browser.open_folder(folder.id))
        browser.selection.toggle(folder.id)

        browser.set_type_filter(TypeFilter.ACTION)

        assert browser.selection.selected == []

    def test_opening_folder_resets_view(self, loaded):
        folder_id = loaded.index.folders[0].id
        loaded.set_search("acme")
        loaded.selection.toggle(folder_id)

        asyncio.run(loaded.open_folder(folder_id))

        assert loaded.view.search_query == ""
        assert loaded.selection.selected == []
        assert loaded.active_folder_id == folder_id


class TestBulkDelete:
    """Tests for bulk delete."""

    def test_partial_failure(self, backend):
        """Three selected, one fails: two removed, the failed id stays selected."""
        folders = [backend.add_folder(name) for name in ("A", "B", "C", "D")]
        failing = folders[1]
        backend.failing_deletes.add(failing.id)
        browser = RecordsBrowser(backend)
        asyncio.run(browser.refresh())
        for folder in folders[:3]:
            browser.selection.toggle(folder.id)

        result = asyncio.run(browser.bulk_delete())

        assert sorted(result.succeeded) == sorted([folders[0].id, folders[2].id])
        assert result.failed == [failing.id]
        assert result.message == "Deleted 2 projects, 1 failed"
        assert {f.id for f in browser.index.folders} == {failing.id, folders[3].id}
        assert browser.selection.selected == [failing.id]

    def test_partial_failure_survives_refresh(self, backend, event_bus):
        folders = [backend.add_folder(name) for name in ("A", "B", "C")]
        backend.failing_deletes.add(folders[0].id)
        browser = RecordsBrowser(backend, event_bus=event_bus)
        asyncio.run(browser.refresh())
        browser.toggle_select_all()

        asyncio.run(browser.bulk_delete())

        assert [f.id for f in browser.index.folders] == [folders[0].id]
        assert browser.selection.selected == [folders[0].id]
        assert browser.index.refresh_counter == 2

    def test_empty_selection_does_nothing(self, loaded, backend):
        result = asyncio.run(loaded.bulk_delete())

        assert result.succeeded == [] and result.failed == []
        assert backend.calls_to("delete_folder") == []

    def test_all_succeed(self, loaded):
        loaded.toggle_select_all()

        result = asyncio.run(loaded.bulk_delete())

        assert result.ok
        assert loaded.index.folders == []
        assert loaded.selection.selected == []


class TestFolderOperations:
    """Tests for create, favorite and single delete."""

    def test_create_folder(self, backend, event_bus):
        changes = []
        event_bus.subscribe(RECORDS_CHANGED, lambda: changes.append(True))
        browser = RecordsBrowser(backend)
        browser.event_bus = event_bus

        folder_id = asyncio.run(browser.create_folder("  Site walk ", "#10B981"))

        assert backend.calls_to("create_folder") == [("Site walk", "#10B981")]
        assert browser.index.folder(folder_id).name == "Site walk"
        assert changes == [True]

    def test_create_folder_requires_name(self, backend):
        browser = RecordsBrowser(backend)
        with pytest.raises(ValidationError):
            asyncio.run(browser.create_folder("   ", "#10B981"))

    def test_toggle_favorite(self, loaded, backend):
        folder = loaded.index.folders[0]

        asyncio.run(loaded.toggle_favorite(folder))

        assert backend.calls_to("set_favorite") == [(folder.id, True)]
        assert [f.id for f in loaded.index.favorites] == [folder.id]

    def test_failed_single_delete_raises(self, loaded, backend):
        folder_id = loaded.index.folders[0].id
        backend.failing_deletes.add(folder_id)

        with pytest.raises(DeleteError) as excinfo:
            asyncio.run(loaded.delete_folder(folder_id))

        assert excinfo.value.item_id == folder_id
        assert loaded.index.folder(folder_id) is not None


class TestNotes:
    """Tests for note detail and delete."""

    def test_delete_open_note(self, backend):
        folder = backend.add_folder("Acme visit")
        note = backend.add_note(folder.id, {'customer_information': 'Acme'})
        browser = RecordsBrowser(backend)
        asyncio.run(browser.open_folder(folder.id))
        browser.open_note(browser.index.notes[0])

        asyncio.run(browser.delete_note(note.id))

        assert browser.selected_note is None
        assert browser.index.notes == []


class TestEvents:
    """Tests for event bus wiring."""

    def test_resolved_folder_becomes_active(self, backend, event_bus):
        folder = backend.add_folder("Meeting_2024-05-01")
        browser = RecordsBrowser(backend, event_bus=event_bus)

        asyncio.run(event_bus.publish(FOLDER_RESOLVED, folder.id))

        assert browser.active_folder_id == folder.id

    def test_records_changed_refreshes(self, backend, event_bus):
        browser = RecordsBrowser(backend, event_bus=event_bus)
        backend.add_folder("Late arrival")

        asyncio.run(event_bus.publish(RECORDS_CHANGED))

        assert [f.name for f in browser.index.folders] == ["Late arrival"]

    def test_expansion_opens_current_month_on_first_load(self, backend):
        backend.add_folder("Acme visit", created_at=datetime(2020, 1, 1))
        browser = RecordsBrowser(backend)
        now = datetime.now()

        asyncio.run(browser.refresh())

        assert browser.expansion.is_year_expanded(now.year)
        browser.expansion.toggle_year(now.year)
        asyncio.run(browser.refresh())
        assert not browser.expansion.is_year_expanded(now.year)
