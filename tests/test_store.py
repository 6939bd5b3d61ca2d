"""Tests for the SharedStore, Token and Gate."""

import threading
from unittest.mock import patch

import pytest

from gate import Gate, GateNotHeldError
from store import Parity, SharedStore, StoreError, Token


@pytest.fixture
def gate():
    return Gate()


@pytest.fixture
def store(tmp_path, gate):
    """Create a reset store in a temporary directory."""
    s = SharedStore(tmp_path / "numbers.txt", gate)
    s.reset()
    return s


class TestToken:
    """Test Token encoding and parity."""

    def test_encode_is_decimal_text(self):
        assert Token(42).encode() == "42"

    def test_decode(self):
        assert Token.decode("17") == Token(17)

    def test_parity(self):
        assert Token(4).parity is Parity.EVEN
        assert Token(7).parity is Parity.ODD
        assert Token(0).parity is Parity.EVEN


class TestGate:
    """Test the mutual-exclusion gate."""

    def test_tracks_owner(self, gate):
        assert not gate.held_by_current_thread()
        with gate:
            assert gate.held_by_current_thread()
            assert gate.locked()
        assert not gate.locked()

    def test_counts_acquisitions(self, gate):
        with gate:
            pass
        with gate:
            pass
        assert gate.acquisitions == 2

    def test_released_when_body_raises(self, gate):
        with pytest.raises(StoreError):
            with gate:
                raise StoreError("disk gone")
        assert not gate.locked()

    def test_release_without_owning_raises(self, gate):
        with pytest.raises(GateNotHeldError):
            gate.release()

    def test_release_from_other_thread_raises(self, gate):
        errors = []

        def other():
            try:
                gate.release()
            except GateNotHeldError as e:
                errors.append(e)

        with gate:
            t = threading.Thread(target=other)
            t.start()
            t.join(timeout=2)
        assert len(errors) == 1

    def test_excludes_other_threads(self, gate):
        inside = []

        def worker(n):
            for _ in range(200):
                with gate:
                    inside.append(n)
                    assert len(inside) == 1
                    inside.pop()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert inside == []


class TestSharedStoreReset:
    """Test resetting the backing file."""

    def test_reset_creates_empty_file(self, tmp_path, gate):
        s = SharedStore(tmp_path / "sub" / "numbers.txt", gate)
        s.reset()
        assert s.path.exists()
        assert s.size() == 0

    def test_reset_truncates_existing_content(self, tmp_path, gate):
        path = tmp_path / "numbers.txt"
        path.write_text("1 2 3 ", encoding="ascii")
        s = SharedStore(path, gate)
        s.reset()
        with gate:
            assert s.read_all() == []

    def test_reset_failure_raises_store_error(self, tmp_path, gate):
        s = SharedStore(tmp_path / "numbers.txt", gate)
        with patch("pathlib.Path.write_text", side_effect=PermissionError("denied")):
            with pytest.raises(StoreError):
                s.reset()


class TestSharedStoreAppendRead:
    """Test append and full-read semantics."""

    def test_append_requires_gate(self, store):
        with pytest.raises(GateNotHeldError):
            store.append(Token(2))

    def test_read_requires_gate(self, store):
        with pytest.raises(GateNotHeldError):
            store.read_all()

    def test_file_format(self, store, gate):
        with gate:
            store.append(Token(12))
            store.append(Token(7))
        assert store.path.read_text(encoding="ascii") == "12 7 "

    def test_read_returns_append_order(self, store, gate):
        values = [4, 9, 0, 99, 98, 1]
        with gate:
            for v in values:
                store.append(Token(v))
            tokens = store.read_all()
        assert [t.value for t in tokens] == values

    def test_missing_file_reads_empty(self, tmp_path, gate):
        s = SharedStore(tmp_path / "never_written.txt", gate)
        with gate:
            assert s.read_all() == []
        assert s.size() == 0

    def test_append_failure_raises_store_error(self, store, gate):
        with patch("pathlib.Path.open", side_effect=OSError("disk full")):
            with pytest.raises(StoreError) as exc_info:
                with gate:
                    store.append(Token(2))
        assert isinstance(exc_info.value.__cause__, OSError)
        assert not gate.locked()

    def test_read_failure_raises_store_error(self, store, gate):
        with patch("pathlib.Path.read_text", side_effect=OSError("io error")):
            with pytest.raises(StoreError):
                with gate:
                    store.read_all()
        assert not gate.locked()

    def test_non_ascii_bytes_raise_store_error(self, store, gate):
        store.path.write_bytes(b"1 2 \xff ")
        with pytest.raises(StoreError):
            with gate:
                store.read_all()
        assert not gate.locked()

    def test_malformed_token_raises_store_error(self, store, gate):
        store.path.write_text("1 2 x3 ", encoding="ascii")
        with pytest.raises(StoreError):
            with gate:
                store.read_all()

    def test_concurrent_appends_never_tear(self, store, gate):
        def writer(base):
            for i in range(100):
                with gate:
                    store.append(Token(base + i * 2))

        threads = [threading.Thread(target=writer, args=(b,)) for b in (0, 1)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        with gate:
            tokens = store.read_all()
        assert len(tokens) == 200
        evens = [t.value for t in tokens if t.parity is Parity.EVEN]
        odds = [t.value for t in tokens if t.parity is Parity.ODD]
        # Each writer's own values keep their relative order
        assert evens == sorted(evens)
        assert odds == sorted(odds)
