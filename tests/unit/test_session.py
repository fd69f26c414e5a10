"""Tests for upload session records and stores."""
import asyncio
import threading
import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

from videoupload import SessionStoreError
from videoupload.core.session import (
    UploadSession,
    SessionStatus,
    MemorySessionStore,
    SQLiteSessionStore,
    SessionRecorder,
    PersistedSession,
    EphemeralSession,
)

FILE = SimpleNamespace(name="tour.mp4", size=95)


def new_session(**kwargs) -> UploadSession:
    data = dict(file_name="tour.mp4", file_size=95, total_chunks=10)
    data.update(kwargs)
    return UploadSession(**data)


class TestUploadSession:
    """Test suite for UploadSession."""

    def test_defaults(self):
        """Test a new session is an in-progress chunked upload."""
        session = new_session()

        assert session.status == SessionStatus.IN_PROGRESS
        assert session.upload_type == "chunked"
        assert session.uploaded_chunk_indices == set()
        assert session.completed_at is None
        assert not session.is_terminal

    def test_invalid_status(self):
        """Test unknown statuses are rejected."""
        with pytest.raises(ValueError):
            new_session(status="paused")

    def test_to_dict_sorts_uploaded_chunks(self):
        """Test uploaded chunks serialize as a sorted list."""
        data = new_session(uploaded_chunk_indices={3, 0, 1}).to_dict()

        assert data["uploaded_chunks"] == [0, 1, 3]
        assert data["completed_at"] is None

    def test_json_round_trip(self):
        """Test JSON serialization keeps every field."""
        session = new_session(id="abc", uploaded_chunk_indices={1, 2})

        loaded = UploadSession.from_json(session.to_json())

        assert loaded == session

    def test_from_rest_row(self):
        """Test parsing a row as PostgREST returns it."""
        row = {
            "id": 42,
            "file_name": "tour.mp4",
            "file_size": "95",
            "total_chunks": 10,
            "uploaded_chunks": "[0, 1]",
            "status": "completed",
            "upload_type": "chunked",
            "created_at": "2024-03-01T10:00:00Z",
            "updated_at": "2024-03-01T10:05:00+00:00",
            "completed_at": "2024-03-01T10:05:00Z",
        }

        session = UploadSession.from_dict(row)

        assert session.id == "42"
        assert session.file_size == 95
        assert session.uploaded_chunk_indices == {0, 1}
        assert session.created_at == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert session.is_terminal

    def test_matches(self):
        """Test matching on name, size and chunk count."""
        session = new_session()

        assert session.matches("tour.mp4", 95, 10)
        assert not session.matches("tour.mp4", 96, 10)
        assert not session.matches("other.mp4", 95, 10)
        assert not session.matches("tour.mp4", 95, 11)

    def test_handles(self):
        """Test persisted and ephemeral handles."""
        assert PersistedSession(id="abc").is_persisted
        assert not EphemeralSession().is_persisted
        assert EphemeralSession().id == "temp-session"


class TestMemorySessionStore:
    """Test suite for MemorySessionStore."""

    @pytest.fixture
    def store(self):
        return MemorySessionStore()

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store):
        """Test inserted sessions get an id and can be loaded."""
        session_id = await store.insert(new_session())

        loaded = await store.get(session_id)

        assert session_id
        assert loaded.id == session_id
        assert loaded.file_name == "tour.mp4"
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_update(self, store):
        """Test updates merge into the stored record."""
        session_id = await store.insert(new_session())

        await store.update(session_id, {"uploaded_chunks": [0, 1, 2]})
        await store.update(session_id, {"status": SessionStatus.FAILED})

        loaded = await store.get(session_id)
        assert loaded.uploaded_chunk_indices == {0, 1, 2}
        assert loaded.status == SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_update_unknown(self, store):
        """Test updating a missing session raises."""
        with pytest.raises(SessionStoreError):
            await store.update("missing", {"status": SessionStatus.FAILED})

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        """Test loading a missing session returns None."""
        assert await store.get("missing") is None


class TestSQLiteSessionStore:
    """Test suite for SQLiteSessionStore."""

    @pytest.fixture
    def store(self, tmp_path):
        store = SQLiteSessionStore("uploads", base_path=tmp_path)
        yield store
        store.close_sync()

    def test_path(self, store, tmp_path):
        """Test store name gets the .sessions extension."""
        assert store.path == tmp_path / "uploads.sessions"
        assert store.path.exists()

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store):
        """Test sessions survive a round trip through SQLite."""
        session_id = await store.insert(new_session(uploaded_chunk_indices={0, 4}))

        loaded = await store.get(session_id)

        assert loaded.id == session_id
        assert loaded.file_size == 95
        assert loaded.total_chunks == 10
        assert loaded.uploaded_chunk_indices == {0, 4}
        assert loaded.status == SessionStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_update(self, store):
        """Test column updates."""
        session_id = await store.insert(new_session())

        await store.update(session_id, {"uploaded_chunks": {2, 0, 1}})
        await store.update(session_id, {
            "status": SessionStatus.COMPLETED,
            "completed_at": "2024-03-01T10:05:00+00:00",
        })

        loaded = await store.get(session_id)
        assert loaded.uploaded_chunk_indices == {0, 1, 2}
        assert loaded.status == SessionStatus.COMPLETED
        assert loaded.completed_at == datetime(2024, 3, 1, 10, 5, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_update_unknown_column(self, store):
        """Test unknown columns are rejected."""
        session_id = await store.insert(new_session())

        with pytest.raises(SessionStoreError):
            await store.update(session_id, {"bogus": 1})

    @pytest.mark.asyncio
    async def test_update_unknown_session(self, store):
        """Test updating a missing row raises."""
        with pytest.raises(SessionStoreError):
            await store.update("missing", {"status": SessionStatus.FAILED})

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, store, tmp_path):
        """Test a second store on the same file sees earlier sessions."""
        session_id = await store.insert(new_session())
        store.close_sync()

        with SQLiteSessionStore(tmp_path / "uploads.sessions") as reopened:
            loaded = await reopened.get(session_id)

        assert loaded is not None
        assert loaded.file_name == "tour.mp4"

    @pytest.mark.asyncio
    async def test_queries_run_off_the_event_loop(self, store, monkeypatch):
        """Test SQLite calls happen in a worker thread."""
        threads = []
        original = store._get

        def recording_get(session_id):
            threads.append(threading.get_ident())
            return original(session_id)

        monkeypatch.setattr(store, "_get", recording_get)
        session_id = await store.insert(new_session())

        results = await asyncio.gather(store.get(session_id), store.get("missing"))

        assert results[0].id == session_id
        assert results[1] is None
        assert len(threads) == 2
        assert threading.get_ident() not in threads


class TestSessionRecorder:
    """Test suite for SessionRecorder."""

    @pytest.mark.asyncio
    async def test_create_without_store(self):
        """Test no store means an ephemeral session."""
        handle = await SessionRecorder().create(FILE, 10)

        assert handle == EphemeralSession()

    @pytest.mark.asyncio
    async def test_lifecycle(self, session_store):
        """Test create, update and close against a store."""
        recorder = SessionRecorder(session_store)

        handle = await recorder.create(FILE, 10)
        await recorder.update(handle, [2, 0, 1])
        await recorder.close(handle)

        record = await session_store.get(handle.id)
        assert handle.is_persisted
        assert record.uploaded_chunk_indices == {0, 1, 2}
        assert record.status == SessionStatus.COMPLETED
        assert record.completed_at is not None

    @pytest.mark.asyncio
    async def test_fail(self, session_store):
        """Test failed sessions are marked failed."""
        recorder = SessionRecorder(session_store)
        handle = await recorder.create(FILE, 10)

        await recorder.fail(handle)

        assert (await session_store.get(handle.id)).status == SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_insert_error_degrades(self):
        """Test insert errors yield an ephemeral session."""
        store = AsyncMock()
        store.insert.side_effect = SessionStoreError("HTTP 500")

        handle = await SessionRecorder(store).create(FILE, 10)

        assert not handle.is_persisted

    @pytest.mark.asyncio
    async def test_empty_id_degrades(self):
        """Test a store that returns no id yields an ephemeral session."""
        store = AsyncMock()
        store.insert.return_value = None

        handle = await SessionRecorder(store).create(FILE, 10)

        assert not handle.is_persisted

    @pytest.mark.asyncio
    async def test_ephemeral_never_touches_store(self):
        """Test update, close and fail skip the store for ephemeral handles."""
        store = AsyncMock()
        recorder = SessionRecorder(store)

        await recorder.update(EphemeralSession(), [0])
        await recorder.close(EphemeralSession())
        await recorder.fail(EphemeralSession())

        store.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_errors_are_swallowed(self):
        """Test store errors during update are logged only."""
        store = AsyncMock()
        store.update.side_effect = SessionStoreError("HTTP 500")
        recorder = SessionRecorder(store)

        await recorder.update(PersistedSession(id="abc"), [0])
        await recorder.close(PersistedSession(id="abc"))

        assert store.update.await_count == 2

    @pytest.mark.asyncio
    async def test_resume_filters_out_of_range_indices(self, session_store):
        """Test resume drops indices outside the plan."""
        session_id = await session_store.insert(new_session(uploaded_chunk_indices={0, 3, 12}))

        session = await SessionRecorder(session_store).resume(session_id, FILE, 10)

        assert session.uploaded_chunk_indices == {0, 3}

    @pytest.mark.asyncio
    async def test_resume_rejects(self, session_store):
        """Test resume returns None for missing, finished or foreign sessions."""
        recorder = SessionRecorder(session_store)
        done = await session_store.insert(new_session(status=SessionStatus.FAILED))
        foreign = await session_store.insert(new_session(file_size=1))

        assert await recorder.resume("missing", FILE, 10) is None
        assert await recorder.resume(done, FILE, 10) is None
        assert await recorder.resume(foreign, FILE, 10) is None
        assert await SessionRecorder().resume(done, FILE, 10) is None

    @pytest.mark.asyncio
    async def test_resume_store_error(self):
        """Test a failing get means no resume."""
        store = AsyncMock()
        store.get.side_effect = SessionStoreError("unreachable")

        assert await SessionRecorder(store).resume("abc", FILE, 10) is None
