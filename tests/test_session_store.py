"""
Tests for the session stores.
"""

import asyncio
import json
import os
import stat

import pytest

from finance_crm.models.session import Session
from finance_crm.services.storage import (
    FileSessionStore,
    InMemorySessionStore,
    SessionStoreError,
)


class TestInMemorySessionStore:
    """Tests for the tab-lifetime store."""

    def test_empty_store_has_no_session(self):
        """Test that a new store returns None."""
        assert asyncio.run(InMemorySessionStore().get_session()) is None

    def test_set_then_get(self):
        """Test that the stored session is returned as-is."""
        store = InMemorySessionStore()
        session = Session(user_email="demo@demo.com", api_token="t1")
        asyncio.run(store.set_session(session))
        assert asyncio.run(store.get_session()) is session

    def test_set_replaces_whole_session(self):
        """Test that a second set replaces the first entirely."""
        store = InMemorySessionStore(Session(user_email="a@a.com", api_token="old"))
        asyncio.run(store.set_session(Session(user_email="b@b.com", api_token="new")))

        current = asyncio.run(store.get_session())
        assert current.user_email == "b@b.com"
        assert current.api_token == "new"

    def test_clear(self):
        """Test that clear forgets the session."""
        store = InMemorySessionStore(Session(user_email="a@a.com", api_token="t"))
        asyncio.run(store.clear())
        assert asyncio.run(store.get_session()) is None


class TestFileSessionStore:
    """Tests for the persisted store."""

    def test_missing_file_means_no_session(self, tmp_path):
        """Test that no file reads as logged out."""
        store = FileSessionStore(str(tmp_path / "session.json"))
        assert asyncio.run(store.get_session()) is None

    def test_round_trip_across_instances(self, tmp_path):
        """Test that a session written by one store is read by another."""
        path = tmp_path / "session.json"
        asyncio.run(FileSessionStore(str(path)).set_session(
            Session(user_email="demo@demo.com", api_token="persisted")
        ))

        restored = asyncio.run(FileSessionStore(str(path)).get_session())
        assert restored.user_email == "demo@demo.com"
        assert restored.api_token == "persisted"
        assert restored.authorization_header == "Bearer persisted"

    def test_write_leaves_no_temp_files(self, tmp_path):
        """Test that the atomic write cleans up after itself."""
        path = tmp_path / "session.json"
        store = FileSessionStore(str(path))
        asyncio.run(store.set_session(Session(user_email="a@a.com", api_token="1")))
        asyncio.run(store.set_session(Session(user_email="a@a.com", api_token="2")))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["session.json"]
        assert json.loads(path.read_text(encoding="utf-8"))["api_token"] == "2"

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_file_is_private(self, tmp_path):
        """Test that the token file is readable by the owner only."""
        path = tmp_path / "session.json"
        asyncio.run(FileSessionStore(str(path)).set_session(
            Session(user_email="a@a.com", api_token="secret")
        ))
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_creates_parent_directory(self, tmp_path):
        """Test that a nested path is created on first write."""
        path = tmp_path / "nested" / "dir" / "session.json"
        asyncio.run(FileSessionStore(str(path)).set_session(Session(user_email="a@a.com")))
        assert path.exists()

    def test_corrupt_file_reads_as_no_session(self, tmp_path):
        """Test that garbage on disk does not crash the app."""
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")
        assert asyncio.run(FileSessionStore(str(path)).get_session()) is None

    def test_clear_removes_file(self, tmp_path):
        """Test that clear deletes the persisted session."""
        path = tmp_path / "session.json"
        store = FileSessionStore(str(path))
        asyncio.run(store.set_session(Session(user_email="a@a.com", api_token="t")))
        asyncio.run(store.clear())

        assert not path.exists()
        assert asyncio.run(store.get_session()) is None

    def test_clear_without_file_is_fine(self, tmp_path):
        """Test that clearing an empty store does not raise."""
        asyncio.run(FileSessionStore(str(tmp_path / "none.json")).clear())

    def test_unwritable_location_raises_store_error(self, tmp_path):
        """Test that I/O failures surface as SessionStoreError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = FileSessionStore(str(blocker / "session.json"))

        with pytest.raises(SessionStoreError):
            asyncio.run(store.set_session(Session(user_email="a@a.com")))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
