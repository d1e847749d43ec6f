# browserplex/cleaners.py

import re
from typing import Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

SKIP_TAGS = ("script", "style", "noscript", "template", "svg", "canvas", "head")

HIDDEN_CLASS_PAT = re.compile(r"(sr-only|visually-hidden|offscreen)", re.I)
_STYLE_HIDDEN_PAT = re.compile(r"display\s*:\s*none\b|visibility\s*:\s*hidden\b", re.I)
_HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")


def _is_hidden(el: Tag) -> bool:
    """
    Best-effort visibility check from markup alone: the hidden attribute,
    aria-hidden, inline display/visibility styles, and screen-reader-only classes.
    """
    if el.has_attr("hidden"):
        return True
    if str(el.get("aria-hidden", "")).strip().lower() == "true":
        return True
    style_val = el.get("style")
    if isinstance(style_val, str) and _STYLE_HIDDEN_PAT.search(style_val):
        return True
    classes = el.get("class") or []
    classv = " ".join(classes) if isinstance(classes, (list, tuple)) else str(classes)
    if HIDDEN_CLASS_PAT.search(classv):
        return True
    if el.name == "input" and str(el.get("type", "")).lower() == "hidden":
        return True
    return False


def _is_button_like(el: Tag) -> bool:
    tag = (el.name or "").lower()
    if tag == "button":
        return True
    typ = str(el.get("type", "")).lower()
    if tag == "input" and typ in ("button", "submit", "reset", "image"):
        return True
    return str(el.get("role", "")).lower() == "button"


def _walk(node) -> str:
    if isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return str(node).strip()
    if not isinstance(node, Tag):
        return ""

    tag = (node.name or "").lower()
    if tag in SKIP_TAGS or _is_hidden(node):
        return ""

    if tag == "input" and not _is_button_like(node):
        typ = node.get("type") or "text"
        label = node.get("placeholder") or node.get("aria-label") or ""
        return f"[input:{typ} {label}]".replace(" ]", "]")

    text = " ".join(t for t in (_walk(c) for c in node.children) if t)

    if tag in _HEADINGS:
        return f"[{tag.upper()}] {text}\n"
    if tag == "a" and node.get("href"):
        return f"[link: {text}]"
    if _is_button_like(node):
        if tag == "input":
            text = node.get("value") or node.get("aria-label") or text
        return f"[button: {text}]"
    if tag in ("p", "div", "section", "article", "li", "tr", "br", "main", "header", "footer", "nav"):
        return f"{text}\n" if text else ""
    return text


def page_outline(html: str, max_chars: int = 0) -> Tuple[str, bool]:
    """
    Render the visible text of a page with light structure markers:
    [H1]..[H6] for headings, [link: ...], [button: ...] and [input:type label].

    Args:
        html: Page HTML
        max_chars: Truncate the result to this many characters (0 = no limit)

    Returns:
        (outline, truncated)
    """
    soup = BeautifulSoup(html or "", "html.parser")
    root = soup.body or soup
    text = _walk(root)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{2,}", "\n", text).strip()
    if max_chars and len(text) > max_chars:
        return text[:max_chars], True
    return text, False


__all__ = [
    "page_outline",
]
