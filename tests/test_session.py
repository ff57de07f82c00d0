"""
Tests for the capture session state machine.
"""

import asyncio
from datetime import date

import pytest

from neuranote.capture.folder_resolver import FolderResolver
from neuranote.capture.page_store import to_data_url
from neuranote.capture.prompt_resolver import PromptLibrary
from neuranote.capture.session import CaptureSession, SessionStatus
from neuranote.models.records import CaptureMode, Note
from neuranote.services.backend_client import APIResponse
from neuranote.services.errors import FolderResolutionError, SubmissionError, ValidationError
from neuranote.services.events import ANALYSIS_COMPLETED, NAVIGATE, RECORDS_CHANGED

FRAME = to_data_url(b"\xff\xd8\xff", "image/jpeg")


def make_session(backend, event_bus=None):
    resolver = FolderResolver(backend, "#0EA5E9", today=lambda: date(2024, 5, 1))
    return CaptureSession(backend, resolver, PromptLibrary(backend), event_bus=event_bus)


class TestMergeInvariant:
    """Tests for the automatic merge flag."""

    def test_two_pages_force_merge(self, backend):
        session = make_session(backend)
        session.add_captured_frame(FRAME)
        assert session.merge_pages is False

        session.add_captured_frame(FRAME)
        assert session.merge_pages is True

    def test_merge_stays_on_when_back_to_one_page(self, backend):
        session = make_session(backend)
        first = session.add_captured_frame(FRAME)
        session.add_captured_frame(FRAME)

        session.remove_page(first.id)

        assert len(session.pages) == 1
        assert session.merge_pages is True

    def test_merge_cannot_be_disabled_with_several_pages(self, backend):
        session = make_session(backend)
        session.add_captured_frame(FRAME)
        session.add_captured_frame(FRAME)

        session.merge_pages = False

        assert session.merge_pages is True

    def test_merge_can_be_toggled_with_one_page(self, backend):
        session = make_session(backend)
        session.add_captured_frame(FRAME)

        session.merge_pages = True
        assert session.merge_pages is True
        session.merge_pages = False
        assert session.merge_pages is False


class TestInput:
    """Tests for has_input and can_submit."""

    def test_empty_session_cannot_submit(self, backend):
        session = make_session(backend)
        assert not session.has_input
        assert not session.can_submit

    def test_whitespace_text_is_not_input(self, backend):
        session = make_session(backend)
        session.set_text("   ")
        assert not session.has_input

        session.set_text("Met with Acme")
        assert session.can_submit

    def test_submit_without_input_raises(self, backend):
        session = make_session(backend)
        with pytest.raises(ValidationError):
            asyncio.run(session.submit())
        assert session.status == SessionStatus.IDLE


class TestSubmit:
    """Tests for a full submission."""

    def test_submit_on_fresh_day_creates_folder(self, backend, event_bus):
        """No Meeting_2024-05-01 folder yet: one is created and the note lands in it."""
        backend.add_folder("Meeting_2024-04-30")
        session = make_session(backend, event_bus)
        session.add_captured_frame(FRAME)

        note = asyncio.run(session.submit())

        created = [f for f in backend.folders if f.name == "Meeting_2024-05-01"]
        assert len(created) == 1
        assert isinstance(note, Note)
        assert note.folder_id == created[0].id
        request = backend.calls_to("analyze")[0][0]
        assert request.folder_id == created[0].id
        assert request.custom_prompt == "Standard Meeting: "

    def test_success_resets_input_and_publishes(self, backend, event_bus):
        received = []
        event_bus.subscribe(ANALYSIS_COMPLETED, lambda data: received.append((ANALYSIS_COMPLETED, data)))
        event_bus.subscribe(RECORDS_CHANGED, lambda: received.append((RECORDS_CHANGED, None)))
        event_bus.subscribe(NAVIGATE, lambda tab: received.append((NAVIGATE, tab)))
        session = make_session(backend, event_bus)
        session.set_mode(CaptureMode.TEXT)
        session.set_text("Met with Acme")
        session.set_freeform_prompt("focus on pricing")

        note = asyncio.run(session.submit(12))

        assert session.status == SessionStatus.SUCCEEDED
        assert session.text_content == ""
        assert session.freeform_prompt == ""
        assert not session.has_input
        assert [event for event, _ in received] == [ANALYSIS_COMPLETED, RECORDS_CHANGED, NAVIGATE]
        assert received[0][1] is note
        assert received[2][1] == "records"

        request = backend.calls_to("analyze")[0][0]
        assert request.mode == "text"
        assert request.folder_id == 12
        assert request.custom_prompt == "Standard Meeting: focus on pricing"

    def test_backend_rejection_keeps_input(self, backend):
        backend.failing.add("analyze")
        session = make_session(backend)
        session.add_captured_frame(FRAME)
        session.add_captured_frame(FRAME)

        with pytest.raises(SubmissionError) as excinfo:
            asyncio.run(session.submit(3))

        assert excinfo.value.message == "analyze failed"
        assert session.status == SessionStatus.FAILED
        assert session.last_error == "analyze failed"
        assert len(session.pages) == 2
        assert session.can_submit

    @pytest.mark.parametrize("error,shown", [
        ("Analysis timed out", "Analysis timed out"),
        (None, "Analysis Failed"),
    ])
    def test_failure_message_shown_to_user(self, backend, error, shown):
        async def failing_analyze(request):
            return APIResponse(success=False, error=error)

        backend.analyze = failing_analyze
        session = make_session(backend)
        session.set_text("notes")

        with pytest.raises(SubmissionError):
            asyncio.run(session.submit(3))

        assert session.last_error == shown

    def test_folder_failure_aborts_before_analysis(self, backend):
        backend.failing.add("list_folders")
        session = make_session(backend)
        session.set_text("notes")

        with pytest.raises(FolderResolutionError):
            asyncio.run(session.submit())

        assert backend.calls_to("analyze") == []
        assert session.status == SessionStatus.FAILED
        assert session.text_content == "notes"

    def test_editing_after_failure_returns_to_idle(self, backend):
        backend.failing.add("analyze")
        session = make_session(backend)
        session.set_text("notes")
        with pytest.raises(SubmissionError):
            asyncio.run(session.submit(3))

        session.set_text("more notes")

        assert session.status == SessionStatus.IDLE

    def test_second_submit_while_in_flight_is_ignored(self, backend):
        gate_holder = {}
        original_analyze = backend.analyze

        async def slow_analyze(request):
            await gate_holder['gate'].wait()
            return await original_analyze(request)

        backend.analyze = slow_analyze
        session = make_session(backend)
        session.set_text("notes")

        async def run():
            gate_holder['gate'] = asyncio.Event()
            first = asyncio.ensure_future(session.submit(3))
            await asyncio.sleep(0)
            assert session.status == SessionStatus.SUBMITTING
            assert not session.can_submit
            second = await session.submit(3)
            gate_holder['gate'].set()
            return await first, second

        first, second = asyncio.run(run())

        assert first is not None
        assert second is None
        assert len(backend.calls_to("analyze")) == 1
