"""Page-level utilities: script evaluation, viewport and dialogs."""

import json
from typing import Any, Optional

from ..browser.registry import Session
from ..errors import InvalidArgument
from .elements import interaction_errors


DIALOG_ACTIONS = ("accept", "dismiss")


async def evaluate(session: Session, script: str) -> Any:
    with interaction_errors():
        return await session.page.evaluate(script)


def format_result(value: Any) -> str:
    """Pretty JSON for evaluation results; repr for anything JSON cannot hold."""
    try:
        return json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


async def resize(session: Session, width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise InvalidArgument("width and height must be positive")
    with interaction_errors():
        await session.page.set_viewport_size({"width": int(width), "height": int(height)})


def handle_next_dialog(session: Session, action: str, prompt_text: Optional[str] = None) -> None:
    """Answer the next alert/confirm/prompt on the active page, once."""
    if action not in DIALOG_ACTIONS:
        raise InvalidArgument(f"action must be one of {', '.join(DIALOG_ACTIONS)}")

    async def _handler(dialog):
        if action == "accept":
            if prompt_text is not None:
                await dialog.accept(prompt_text)
            else:
                await dialog.accept()
        else:
            await dialog.dismiss()

    session.page.once("dialog", _handler)


__all__ = [
    "DIALOG_ACTIONS",
    "evaluate",
    "format_result",
    "resize",
    "handle_next_dialog",
]
