"""
Tests for destination folder resolution.
"""

import asyncio
from datetime import date

import pytest

from neuranote.capture.folder_resolver import FolderResolver, dated_folder_name
from neuranote.services.errors import FolderResolutionError
from neuranote.services.events import FOLDER_RESOLVED


def make_resolver(backend, event_bus=None):
    return FolderResolver(backend, "#0EA5E9", today=lambda: date(2024, 5, 1), event_bus=event_bus)


def test_dated_folder_name():
    assert dated_folder_name(date(2024, 5, 1)) == "Meeting_2024-05-01"
    assert dated_folder_name(date(2024, 12, 31), "Visit_") == "Visit_2024-12-31"


def test_explicit_folder_skips_network(backend):
    resolver = make_resolver(backend)

    assert asyncio.run(resolver.resolve(5)) == 5
    assert backend.calls == []


def test_creates_dated_folder(backend):
    resolver = make_resolver(backend)

    folder_id = asyncio.run(resolver.resolve())

    assert backend.calls_to("create_folder") == [("Meeting_2024-05-01", "#0EA5E9")]
    assert [f.id for f in backend.folders] == [folder_id]


def test_reuses_folder_with_same_name(backend):
    resolver = make_resolver(backend)

    async def resolve_twice():
        return await resolver.resolve(), await resolver.resolve()

    first, second = asyncio.run(resolve_twice())

    assert first == second
    assert len(backend.calls_to("create_folder")) == 1
    assert len(backend.folders) == 1


def test_existing_folder_is_found(backend):
    existing = backend.add_folder("Meeting_2024-05-01")
    backend.add_folder("Meeting_2024-04-30")
    resolver = make_resolver(backend)

    assert asyncio.run(resolver.resolve()) == existing.id
    assert backend.calls_to("create_folder") == []


@pytest.mark.parametrize("failing", ["list_folders", "create_folder"])
def test_failures_raise_resolution_error(backend, failing):
    backend.failing.add(failing)
    resolver = make_resolver(backend)

    with pytest.raises(FolderResolutionError):
        asyncio.run(resolver.resolve())


def test_publishes_resolved_folder(backend, event_bus):
    received = []
    event_bus.subscribe(FOLDER_RESOLVED, received.append)
    resolver = make_resolver(backend, event_bus)

    async def run():
        await resolver.resolve(7)
        return await resolver.resolve()

    folder_id = asyncio.run(run())

    assert received == [folder_id]
