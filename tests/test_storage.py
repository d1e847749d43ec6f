# tests/test_storage.py
import os
import sys
import json
import stat
import time
import asyncio
import pytest

from browserplex.config import sanitize_name, session_file_path, lock_file_path
from browserplex.errors import FilesystemFailure, StoredSessionNotFound
from browserplex.locking import domain_lock
from browserplex.storage import StorageManager

from _fakes import FakeContext

## We DO NOT want to use pytest-asyncio.
## Instead, use event_loop.run_until_complete()!


@pytest.fixture(scope="function")
def event_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


@pytest.fixture
def storage(tmp_path):
    return StorageManager(str(tmp_path), lock_timeout_secs=300)


STATE = {"cookies": [{"name": "sid", "value": "abc", "domain": "github.com"}], "origins": []}


# ------------------------------
# Path sanitization
# ------------------------------

@pytest.mark.parametrize("raw,expected", [
    ("github.com", "github.com"),
    ("../../etc", "____etc"),
    ("a/b\\c", "a_b_c"),
    ("..", "_"),
    ("", "_"),
    (".", "_"),
])
def test_sanitize_name(raw, expected):
    assert sanitize_name(raw) == expected


def test_paths_stay_inside_root(tmp_path):
    root = tmp_path / "sessions"
    p = session_file_path(root, "../../etc", "../passwd")
    assert p.parent.parent == root
    assert p.name == "__passwd.json"
    assert lock_file_path(root, "github.com") == root / "github.com" / ".lock"


# ------------------------------
# Records
# ------------------------------

def test_save_then_load(event_loop, storage):
    async def test_logic():
        path = await storage.save(FakeContext(STATE), "github.com", "alice")
        assert path.endswith(os.path.join("sessions", "github.com", "alice.json"))
        assert await storage.exists("github.com", "alice")
        loaded = await storage.load("github.com", "alice")
        assert loaded == STATE

    event_loop.run_until_complete(test_logic())


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_saved_file_is_user_only(event_loop, storage):
    async def test_logic():
        path = await storage.save(FakeContext(STATE), "github.com", "alice")
        mode = stat.S_IMODE(os.stat(path).st_mode)
        assert mode == 0o600

    event_loop.run_until_complete(test_logic())


def test_save_overwrites_and_leaves_no_temp_file(event_loop, storage):
    async def test_logic():
        await storage.save(FakeContext(STATE), "github.com", "alice")
        newer = {"cookies": [], "origins": [{"origin": "https://github.com", "localStorage": []}]}
        await storage.save(FakeContext(newer), "github.com", "alice")
        assert await storage.load("github.com", "alice") == newer
        leftovers = [p.name for p in storage.session_path("github.com", "alice").parent.iterdir()]
        assert leftovers == ["alice.json"]

    event_loop.run_until_complete(test_logic())


def test_load_missing_names_domain_and_name(event_loop, storage):
    async def test_logic():
        with pytest.raises(StoredSessionNotFound) as excinfo:
            await storage.load("github.com", "nobody")
        assert str(excinfo.value) == "Session 'nobody' not found for domain 'github.com'"
        assert not await storage.exists("github.com", "nobody")

    event_loop.run_until_complete(test_logic())


def test_load_corrupt_record_is_filesystem_failure(event_loop, storage):
    path = storage.session_path("github.com", "alice")
    path.parent.mkdir(parents=True)
    path.write_text("{broken")

    async def test_logic():
        with pytest.raises(FilesystemFailure) as excinfo:
            await storage.load("github.com", "alice")
        assert "alice" in str(excinfo.value)
        assert "not valid JSON" in str(excinfo.value)
        assert excinfo.value.category == "filesystem_failure"

    event_loop.run_until_complete(test_logic())


@pytest.mark.skipif(
    sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
    reason="needs POSIX permissions enforced for the current user",
)
def test_list_skips_unreadable_domain_dir(event_loop, storage):
    async def test_logic():
        await storage.save(FakeContext(STATE), "github.com", "alice")
        await storage.save(FakeContext(STATE), "gitlab.com", "carol")
        hidden = storage.session_path("github.com", "alice").parent
        os.chmod(hidden, 0o000)
        try:
            listed = await storage.list()
        finally:
            os.chmod(hidden, 0o700)
        assert [(s.domain, s.name) for s in listed] == [("gitlab.com", "carol")]

    event_loop.run_until_complete(test_logic())


def test_list_all_and_by_domain(event_loop, storage):
    async def test_logic():
        assert await storage.list() == []
        await storage.save(FakeContext(STATE), "github.com", "alice")
        await storage.save(FakeContext(STATE), "github.com", "bob")
        await storage.save(FakeContext(STATE), "gitlab.com", "carol")
        await storage.acquire_lock("github.com")

        everything = await storage.list()
        assert [(s.domain, s.name) for s in everything] == [
            ("github.com", "alice"),
            ("github.com", "bob"),
            ("gitlab.com", "carol"),
        ]
        assert all(s.modified_at for s in everything)

        only_github = await storage.list("github.com")
        assert [s.name for s in only_github] == ["alice", "bob"]
        assert await storage.list("unknown.org") == []

    event_loop.run_until_complete(test_logic())


def test_delete_prunes_empty_domain_dir(event_loop, storage):
    async def test_logic():
        await storage.save(FakeContext(STATE), "github.com", "alice")
        await storage.save(FakeContext(STATE), "github.com", "bob")
        domain_dir = storage.session_path("github.com", "alice").parent

        await storage.delete("github.com", "alice")
        assert domain_dir.is_dir()

        await storage.delete("github.com", "bob")
        assert not domain_dir.exists()

        with pytest.raises(StoredSessionNotFound):
            await storage.delete("github.com", "bob")

    event_loop.run_until_complete(test_logic())


# ------------------------------
# Domain lock
# ------------------------------

def test_lock_acquire_is_exclusive(event_loop, storage):
    async def test_logic():
        assert await storage.acquire_lock("github.com") is True
        assert await storage.is_locked("github.com") is True
        assert await storage.acquire_lock("github.com") is False

        info = await storage.lock_info("github.com")
        assert info.pid == os.getpid()
        assert info.domain == "github.com"
        assert info.owner_alive()

        assert await storage.release_lock("github.com") is True
        assert await storage.is_locked("github.com") is False
        assert await storage.acquire_lock("github.com") is True

    event_loop.run_until_complete(test_logic())


def test_lock_record_format(event_loop, storage):
    async def test_logic():
        await storage.acquire_lock("github.com")
        raw = json.loads(storage.lock_path("github.com").read_text())
        assert set(raw) == {"domain", "acquiredAt", "pid"}
        assert abs(raw["acquiredAt"] / 1000 - time.time()) < 60

    event_loop.run_until_complete(test_logic())


def test_stale_lock_is_taken_over(event_loop, storage):
    path = storage.lock_path("github.com")
    path.parent.mkdir(parents=True)
    stale_ms = int((time.time() - 301) * 1000)
    path.write_text(json.dumps({"domain": "github.com", "acquiredAt": stale_ms, "pid": 999999}))

    async def test_logic():
        assert await storage.is_locked("github.com") is False
        # is_locked never removes the file
        assert path.exists()
        assert await storage.acquire_lock("github.com") is True
        assert (await storage.lock_info("github.com")).pid == os.getpid()

    event_loop.run_until_complete(test_logic())


def test_old_corrupt_lock_is_treated_as_stale(event_loop, storage):
    path = storage.lock_path("github.com")
    path.parent.mkdir(parents=True)
    path.write_text("{not json")
    old = time.time() - 301
    os.utime(path, (old, old))

    async def test_logic():
        assert await storage.is_locked("github.com") is False
        assert path.exists()
        assert await storage.acquire_lock("github.com") is True
        assert (await storage.lock_info("github.com")).pid == os.getpid()

    event_loop.run_until_complete(test_logic())


@pytest.mark.parametrize("content", ["", "{\"domain\": \"git"])
def test_fresh_unwritten_lock_is_respected(event_loop, storage, content):
    # a competitor between its exclusive create and its write
    path = storage.lock_path("github.com")
    path.parent.mkdir(parents=True)
    path.write_text(content)

    async def test_logic():
        assert await storage.is_locked("github.com") is True
        assert await storage.acquire_lock("github.com") is False
        assert path.read_text() == content

    event_loop.run_until_complete(test_logic())


def test_acquire_loses_exclusive_create_race(tmp_path, monkeypatch):
    path = tmp_path / "github.com" / ".lock"

    def racing_open(*args, **kwargs):
        raise FileExistsError(17, "File exists", str(path))

    monkeypatch.setattr(domain_lock.os, "open", racing_open)
    assert domain_lock.acquire(path, "github.com", 300) is False
    assert not path.exists()


def test_release_ignores_foreign_lock(event_loop, storage):
    path = storage.lock_path("github.com")
    path.parent.mkdir(parents=True)
    now_ms = int(time.time() * 1000)
    path.write_text(json.dumps({"domain": "github.com", "acquiredAt": now_ms, "pid": os.getpid() + 1}))

    async def test_logic():
        assert await storage.release_lock("github.com") is False
        assert path.exists()
        assert await storage.is_locked("github.com") is True
        assert await storage.acquire_lock("github.com") is False

    event_loop.run_until_complete(test_logic())


def test_release_without_lock_is_noop(tmp_path):
    assert domain_lock.release(tmp_path / "nothing" / ".lock") is False


def test_lock_info_staleness():
    info = domain_lock.LockInfo(domain="d", acquired_at=1_000_000, pid=1)
    assert info.age_secs(now=1_100.0) == pytest.approx(100.0)
    assert not info.is_stale(300, now=1_100.0)
    assert info.is_stale(300, now=1_400.5)
