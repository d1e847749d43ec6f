"""Element interaction on the session's active page."""

import contextlib
from typing import Dict, List, Optional, Sequence

from playwright.async_api import Error as PlaywrightError

from ..browser.registry import Session
from ..errors import InvalidArgument, translate_engine_error
from .locators import resolve_locator


@contextlib.contextmanager
def interaction_errors(target: Optional[str] = None):
    """Re-raise engine errors as actionable ElementInteractionFailure subclasses."""
    try:
        yield
    except PlaywrightError as e:
        raise translate_engine_error(e, target) from e


def locate(session: Session, selector: str):
    """Locator for a ref (from the session's last snapshot) or a raw selector."""
    return resolve_locator(session.page, session.refs, selector)


async def click(session: Session, selector: str, timeout: float) -> None:
    locator = locate(session, selector)
    with interaction_errors(selector):
        await locator.click(timeout=timeout)


async def hover(session: Session, selector: str, timeout: float) -> None:
    locator = locate(session, selector)
    with interaction_errors(selector):
        await locator.hover(timeout=timeout)


async def type_text(session: Session, selector: str, text: str, submit: bool, timeout: float) -> None:
    """Fill an input; press Enter afterwards when `submit` is set."""
    locator = locate(session, selector)
    with interaction_errors(selector):
        await locator.fill(text, timeout=timeout)
        if submit:
            await locator.press("Enter", timeout=timeout)


async def drag(session: Session, source: str, target: str, timeout: float) -> None:
    src = locate(session, source)
    dst = locate(session, target)
    with interaction_errors(f"{source} -> {target}"):
        await src.drag_to(dst, timeout=timeout)


async def select_option(
    session: Session,
    selector: str,
    value: Optional[str] = None,
    label: Optional[str] = None,
    index: Optional[int] = None,
    timeout: float = 5000,
) -> List[str]:
    """
    Select one option of a <select> by value, label or index (first one given wins).

    Returns:
        Values of the selected options
    """
    if value is not None:
        option: Dict = {"value": value}
    elif label is not None:
        option = {"label": label}
    elif index is not None:
        option = {"index": index}
    else:
        raise InvalidArgument("Must provide value, label, or index")

    locator = locate(session, selector)
    with interaction_errors(selector):
        return await locator.select_option(**option, timeout=timeout)


async def upload_files(session: Session, selector: str, files: Sequence[str], timeout: float) -> None:
    if not files:
        raise InvalidArgument("files must contain at least one path")
    locator = locate(session, selector)
    with interaction_errors(selector):
        await locator.set_input_files(list(files), timeout=timeout)


async def fill_form(session: Session, fields: Sequence[Dict[str, str]], timeout: float) -> int:
    """
    Fill several fields in order; stops at the first failure.

    Returns:
        Number of fields filled
    """
    for field in fields:
        if not isinstance(field, dict) or "selector" not in field or "value" not in field:
            raise InvalidArgument("Each field needs a 'selector' and a 'value'")
    for field in fields:
        locator = locate(session, field["selector"])
        with interaction_errors(field["selector"]):
            await locator.fill(str(field["value"]), timeout=timeout)
    return len(fields)


__all__ = [
    "interaction_errors",
    "locate",
    "click",
    "hover",
    "type_text",
    "drag",
    "select_option",
    "upload_files",
    "fill_form",
]
