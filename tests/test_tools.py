# tests/test_tools.py
import io
import json
import asyncio
import pytest
from types import SimpleNamespace

from PIL import Image as PILImage
from mcp.server.fastmcp import Image

from browserplex.context import build_app_context
from browserplex.decorators import tool_envelope
from browserplex.errors import (
    DuplicateSession,
    InvalidArgument,
    LockConflict,
    RefNotFound,
    SessionNotFound,
    StoredSessionNotFound,
)
from browserplex.tools import (
    sessions,
    persistence,
    navigation,
    interaction,
    snapshots,
    debugging,
)

from _fakes import EngineFactory

## We DO NOT want to use pytest-asyncio.
## Instead, use event_loop.run_until_complete()!


@pytest.fixture(scope="function")
def event_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


@pytest.fixture
def factory():
    return EngineFactory()


@pytest.fixture
def app(tmp_path, factory):
    config = {
        "state_dir": str(tmp_path),
        "default_browser": "chromium",
        "headless": None,
        "lock_timeout_secs": 300,
        "default_timeout_ms": 5000,
    }
    return build_app_context(config, engine_factory=factory)


def _png(width, height):
    buf = io.BytesIO()
    PILImage.new("RGB", (width, height), (200, 10, 10)).save(buf, format="PNG")
    return buf.getvalue()


# ------------------------------
# Session management
# ------------------------------

def test_session_lifecycle_messages(event_loop, app):
    async def test_logic():
        assert await sessions.session_list(app) == "No active sessions"

        assert await sessions.session_create(app, "work") == "Created chromium session 'work'"
        assert await sessions.session_create(app, "stealth", "camoufox") == (
            "Created camoufox session 'stealth' (headed)"
        )
        assert await sessions.session_list(app) == (
            "Active sessions:\n"
            "- work (chromium): about:blank\n"
            "- stealth (camoufox): about:blank"
        )

        with pytest.raises(DuplicateSession):
            await sessions.session_create(app, "work")

        assert await sessions.session_destroy(app, "work") == "Destroyed session 'work'"
        with pytest.raises(SessionNotFound):
            await sessions.session_destroy(app, "work")

    event_loop.run_until_complete(test_logic())


def test_session_create_validates_arguments(event_loop, app, factory):
    async def test_logic():
        with pytest.raises(InvalidArgument):
            await sessions.session_create(app, "x", "netscape")
        with pytest.raises(InvalidArgument):
            await sessions.session_create(app, "x", domain="github.com")
        with pytest.raises(StoredSessionNotFound):
            await sessions.session_create(app, "x", domain="github.com", stored_name="alice")
        assert "x" not in app.registry
        assert factory.engines == []

    event_loop.run_until_complete(test_logic())


def test_save_and_restore_stored_session(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "login")
        live = app.registry.get("login")
        live.context.state = {"cookies": [{"name": "sid", "value": "1"}], "origins": []}

        msg = await persistence.session_save(app, "login", "github.com", "alice")
        assert msg.startswith("Saved session 'login' as 'alice' for 'github.com' -> ")

        listing = await persistence.stored_sessions_list(app)
        assert listing.startswith("Stored sessions (1):\n- github.com/alice (modified ")

        out = await sessions.session_create(app, "reuse", domain="github.com", stored_name="alice")
        assert out == "Created chromium session 'reuse' with stored session 'alice' for 'github.com'"
        assert app.registry.get("reuse").context.initial_state == live.context.state

        assert await persistence.stored_session_delete(app, "github.com", "alice") == (
            "Deleted stored session 'alice' for 'github.com'"
        )
        assert await persistence.stored_sessions_list(app, "github.com") == (
            "No stored sessions for 'github.com'"
        )

    event_loop.run_until_complete(test_logic())


def test_domain_lock_tools(event_loop, app):
    async def test_logic():
        status = json.loads(await persistence.domain_lock_status(app, "github.com"))
        assert status == {"domain": "github.com", "locked": False}

        assert await persistence.domain_lock_acquire(app, "github.com") == "Acquired lock for 'github.com'"
        with pytest.raises(LockConflict) as excinfo:
            await persistence.domain_lock_acquire(app, "github.com")
        assert excinfo.value.owner_pid is not None

        status = json.loads(await persistence.domain_lock_status(app, "github.com"))
        assert status["locked"] is True
        assert status["owner_alive"] is True

        assert await persistence.domain_lock_release(app, "github.com") == "Released lock for 'github.com'"
        assert await persistence.domain_lock_release(app, "github.com") == (
            "No lock held by this process for 'github.com'"
        )

    event_loop.run_until_complete(test_logic())


# ------------------------------
# Snapshot and refs
# ------------------------------

def test_snapshot_refs_drive_interactions(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        page = app.registry.get("work").page
        page.aria_tree = '- heading "Login"\n- textbox "Email"\n- button "Go"'

        out = await snapshots.browser_snapshot(app, "work", interactive=True)
        tree, footer = out.split("\n\n")
        assert tree == '- textbox "Email" [ref=e1]\n- button "Go" [ref=e2]'
        assert footer.startswith("[2 refs, 2 interactive")

        assert await interaction.browser_type(app, "work", "@e1", "me@x.org", submit=True) == (
            "Typed into '@e1' and submitted"
        )
        assert await interaction.browser_click(app, "work", "e2") == "Clicked 'e2'"

        fill, press, click = page.calls[-3:]
        assert fill[0] == "fill" and fill[1].role == "textbox" and fill[2] == ("me@x.org",)
        assert press[0] == "press" and press[2] == ("Enter",)
        assert click[0] == "click" and click[1].name == "Go" and click[3] == {"timeout": 5000}

    event_loop.run_until_complete(test_logic())


def test_new_snapshot_invalidates_old_refs(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        page = app.registry.get("work").page
        page.aria_tree = '- button "A"\n- button "B"\n- button "C"'
        await snapshots.browser_snapshot(app, "work")

        page.aria_tree = '- button "Only"'
        await snapshots.browser_snapshot(app, "work")

        with pytest.raises(RefNotFound):
            await interaction.browser_click(app, "work", "@e3")

    event_loop.run_until_complete(test_logic())


def test_snapshot_rejects_negative_depth(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        with pytest.raises(InvalidArgument):
            await snapshots.browser_snapshot(app, "work", max_depth=-1)

    event_loop.run_until_complete(test_logic())


def test_tools_require_existing_session(event_loop, app):
    async def test_logic():
        with pytest.raises(SessionNotFound) as excinfo:
            await navigation.browser_navigate(app, "ghost", "https://example.com")
        assert "Create it first with session_create" in str(excinfo.value)

    event_loop.run_until_complete(test_logic())


# ------------------------------
# Page actions
# ------------------------------

def test_navigation_and_wait(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        page = app.registry.get("work").page

        assert await navigation.browser_navigate(app, "work", "https://example.com") == (
            "Navigated to https://example.com"
        )
        assert page.calls[-1][3] == {"wait_until": "domcontentloaded"}
        assert await navigation.browser_navigate_back(app, "work") == "Navigated back to about:previous"

        assert await navigation.browser_wait_for(app, "work") == "Page load complete"
        assert page.calls[-1][2] == ("networkidle",)
        assert await navigation.browser_wait_for(app, "work", "#done", "hidden", 1000) == (
            "Element '#done' is hidden"
        )
        with pytest.raises(InvalidArgument):
            await navigation.browser_wait_for(app, "work", "#done", "shiny")

    event_loop.run_until_complete(test_logic())


def test_tabs(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")

        assert await navigation.browser_tabs(app, "work") == "Tabs (1):\n0: about:blank *"
        assert await navigation.browser_tabs(app, "work", "new", url="https://a.test") == (
            "Created new tab at https://a.test"
        )
        assert await navigation.browser_tabs(app, "work", "list") == (
            "Tabs (2):\n0: about:blank\n1: https://a.test *"
        )
        assert await navigation.browser_tabs(app, "work", "switch", index=0) == (
            "Switched to tab 0: about:blank"
        )

        with pytest.raises(InvalidArgument) as excinfo:
            await navigation.browser_tabs(app, "work", "switch", index=5)
        assert str(excinfo.value) == "Invalid tab index. Valid range: 0-1"

        assert await navigation.browser_tabs(app, "work", "close") == "Closed tab 0"
        assert app.registry.get("work").page.url == "https://a.test"

        with pytest.raises(InvalidArgument) as excinfo:
            await navigation.browser_tabs(app, "work", "close")
        assert str(excinfo.value) == "Cannot close the last tab"

        with pytest.raises(InvalidArgument):
            await navigation.browser_tabs(app, "work", "explode")

    event_loop.run_until_complete(test_logic())


def test_select_option_requires_a_choice(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        with pytest.raises(InvalidArgument) as excinfo:
            await interaction.browser_select_option(app, "work", "#country")
        assert str(excinfo.value) == "Must provide value, label, or index"

        out = await interaction.browser_select_option(app, "work", "#country", label="Germany")
        assert out == "Selected option(s): Germany"

    event_loop.run_until_complete(test_logic())


def test_fill_form_and_upload(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        fields = [{"selector": "#a", "value": "1"}, {"selector": "#b", "value": "2"}]
        assert await interaction.browser_fill_form(app, "work", fields) == "Filled 2 form field(s)"

        with pytest.raises(InvalidArgument):
            await interaction.browser_fill_form(app, "work", [{"selector": "#a"}])

        assert await interaction.browser_file_upload(app, "work", "#file", ["/tmp/a.txt"]) == (
            "Uploaded 1 file(s) to '#file'"
        )

    event_loop.run_until_complete(test_logic())


def test_dialog_handler_is_one_shot(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        out = await interaction.browser_handle_dialog(app, "work", "accept", "yes")
        assert out == "Dialog handler set to accept with text 'yes'"
        assert len(app.registry.get("work").page.once_handlers["dialog"]) == 1

        with pytest.raises(InvalidArgument):
            await interaction.browser_handle_dialog(app, "work", "ignore")

    event_loop.run_until_complete(test_logic())


def test_evaluate_resize_and_logs(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        s = app.registry.get("work")

        assert await debugging.browser_evaluate(app, "work", "1+1") == '{\n  "script": "1+1"\n}'
        assert await debugging.browser_resize(app, "work", 800, 600) == "Resized viewport to 800x600"
        assert s.page.viewport == {"width": 800, "height": 600}
        with pytest.raises(InvalidArgument):
            await debugging.browser_resize(app, "work", 0, 600)

        assert await debugging.browser_console_messages(app, "work") == "No console messages"
        s.page.emit("console", SimpleNamespace(type="warning", text="careful"))
        out = await debugging.browser_console_messages(app, "work", clear=True)
        assert out.startswith("Console messages (1):\n[")
        assert out.endswith("[warning] careful")
        assert await debugging.browser_console_messages(app, "work") == "No console messages"

        req = SimpleNamespace(url="https://x.test/a", method="POST")
        s.page.emit("request", req)
        s.page.emit("response", SimpleNamespace(request=req, status=201))
        out = await debugging.browser_network_requests(app, "work")
        assert out.endswith("POST https://x.test/a -> 201")

        bad = SimpleNamespace(url="https://x.test/b", method="GET", failure="net::ERR_CONNECTION_REFUSED")
        s.page.emit("request", bad)
        s.page.emit("requestfailed", bad)
        out = await debugging.browser_network_requests(app, "work", clear=True)
        assert out.startswith("Network requests (2):")
        assert out.endswith("GET https://x.test/b -> failed (net::ERR_CONNECTION_REFUSED)")

    event_loop.run_until_complete(test_logic())


def test_screenshot_is_scaled_and_returned_as_image(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        app.registry.get("work").page.png = _png(2000, 1000)

        image, caption = await snapshots.browser_take_screenshot(app, "work")
        assert isinstance(image, Image)
        assert caption == "Screenshot 1280x640 (resized from 2000x1000)"

        app.registry.get("work").page.png = _png(300, 200)
        _, caption = await snapshots.browser_take_screenshot(app, "work")
        assert caption == "Screenshot 300x200"

    event_loop.run_until_complete(test_logic())


def test_page_text(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        app.registry.get("work").page.html = "<body><h2>Docs</h2><a href='/x'>Next</a></body>"
        out = await snapshots.browser_page_text(app, "work")
        assert out == "Title: Fake Title\nURL: about:blank\n\n[H2] Docs\n[link: Next]"

    event_loop.run_until_complete(test_logic())


def test_debug_info_lists_sessions(event_loop, app):
    async def test_logic():
        await sessions.session_create(app, "work")
        out = await debugging.get_debug_info(app)
        assert "Live sessions     : 1" in out
        assert "work (chromium)" in out

    event_loop.run_until_complete(test_logic())


# ------------------------------
# Through the envelope
# ------------------------------

def test_enveloped_tool_reports_typed_failure(event_loop, app):
    wrapped = tool_envelope(sessions.session_destroy)

    async def test_logic():
        payload = json.loads(await wrapped(app, "ghost"))
        assert payload["ok"] is False
        assert payload["error"]["type"] == "SessionNotFound"
        assert payload["error"]["category"] == "session_not_found"
        assert payload["error"]["message"] == "Session 'ghost' not found"

    event_loop.run_until_complete(test_logic())


def test_corrupt_stored_session_is_reported_not_raised(event_loop, app, factory):
    path = app.storage.session_path("github.com", "alice")
    path.parent.mkdir(parents=True)
    path.write_text("{broken")
    wrapped = tool_envelope(sessions.session_create)

    async def test_logic():
        payload = json.loads(await wrapped(app, "reuse", domain="github.com", stored_name="alice"))
        assert payload["ok"] is False
        assert payload["error"]["type"] == "FilesystemFailure"
        assert payload["error"]["category"] == "filesystem_failure"
        assert "not valid JSON" in payload["error"]["message"]
        assert "reuse" not in app.registry
        assert factory.engines == []

    event_loop.run_until_complete(test_logic())
