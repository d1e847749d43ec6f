"""
Accessibility snapshots with embedded refs for deterministic element selection.

The engine's ARIA snapshot is a line-oriented tree:

    - banner:
      - heading "Example Domain" [level=1]
      - link "More information...":
        - /url: https://www.iana.org/domains/example
    - button "Submit"

Every addressable node gets a short-lived ref (e1, e2, ...) that interaction
tools accept in place of a selector:

    - heading "Example Domain" [ref=e1] [level=1]
    - button "Submit" [ref=e3]

Refs are only valid until the session's next snapshot. When two nodes share a
(role, name) pair the ref map records which occurrence each ref is ("nth"),
so the ref can be resolved back to exactly one element later.
"""

import re
import math
import enum
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .constants import EMPTY_TREE, NO_INTERACTIVE_ELEMENTS


# ============================================================================
# Role classification
# ============================================================================

class RoleClass(enum.Enum):
    INTERACTIVE = "interactive"
    CONTENT = "content"
    STRUCTURAL = "structural"
    OTHER = "other"


_INTERACTIVE = (
    "button", "link", "textbox", "checkbox", "radio", "combobox", "listbox",
    "menuitem", "menuitemcheckbox", "menuitemradio", "option", "searchbox",
    "slider", "spinbutton", "switch", "tab", "treeitem",
)

_CONTENT = (
    "heading", "cell", "gridcell", "columnheader", "rowheader", "listitem",
    "article", "region", "main", "navigation",
)

_STRUCTURAL = (
    "generic", "group", "list", "table", "row", "rowgroup", "grid", "treegrid",
    "menu", "menubar", "toolbar", "tablist", "tree", "directory", "document",
    "application", "presentation", "none",
)

ROLE_TABLE: Dict[str, RoleClass] = {
    **{role: RoleClass.INTERACTIVE for role in _INTERACTIVE},
    **{role: RoleClass.CONTENT for role in _CONTENT},
    **{role: RoleClass.STRUCTURAL for role in _STRUCTURAL},
}


def classify_role(role: str) -> RoleClass:
    return ROLE_TABLE.get((role or "").lower(), RoleClass.OTHER)


# ============================================================================
# Types
# ============================================================================

@dataclass
class SnapshotOptions:
    """
    Filters applied while walking the tree.

    Attributes:
        interactive: Only emit interactive elements (flattened)
        compact: Drop structural branches that carry nothing addressable
        max_depth: Drop lines nested deeper than this (0 = top level only)
        selector: CSS selector scoping the snapshot to a sub-tree
    """

    interactive: bool = False
    compact: bool = False
    max_depth: Optional[int] = None
    selector: Optional[str] = None


@dataclass
class RefEntry:
    role: str
    name: Optional[str] = None
    nth: Optional[int] = None


@dataclass
class EnhancedSnapshot:
    tree: str
    refs: Dict[str, RefEntry] = field(default_factory=dict)


@dataclass
class ParsedLine:
    depth: int
    prefix: str
    role: str
    raw_name: Optional[str]
    suffix: str

    @property
    def name(self) -> Optional[str]:
        if self.raw_name is None:
            return None
        return self.raw_name.replace('\\"', '"').replace("\\\\", "\\")

    @property
    def role_lower(self) -> str:
        return self.role.lower()


# ============================================================================
# Line parsing
# ============================================================================

_LINE_PAT = re.compile(r'^(\s*-\s*)(\w+)(?:\s+"((?:[^"\\]|\\.)*)")?(.*)$')
_VALUE_PAT = re.compile(r":\s*\S")


def indent_level(line: str) -> int:
    """Depth of a line: leading spaces / 2."""
    return (len(line) - len(line.lstrip(" "))) // 2


def parse_line(line: str) -> Optional[ParsedLine]:
    m = _LINE_PAT.match(line)
    if not m:
        return None
    prefix, role, raw_name, suffix = m.groups()
    return ParsedLine(
        depth=indent_level(line),
        prefix=prefix,
        role=role,
        raw_name=raw_name,
        suffix=suffix or "",
    )


def _carries_value(line: str) -> bool:
    """True for lines with an inline value, e.g. '- paragraph: Some text' or '- /url: /'."""
    parsed = parse_line(line)
    if parsed is not None:
        return bool(_VALUE_PAT.search(parsed.suffix))
    stripped = line.rstrip()
    return ":" in stripped and not stripped.endswith(":")


def _carries_ref(line: str) -> bool:
    return "[ref=" in line


# ============================================================================
# Tree processing
# ============================================================================

class _SnapshotBuilder:
    """Per-call state: the ref counter, the ref map and the (role, name) tracker."""

    def __init__(self, options: SnapshotOptions):
        self.options = options
        self.refs: Dict[str, RefEntry] = {}
        self._counter = 0
        self._occurrences: Counter = Counter()

    def _next_ref(self) -> str:
        self._counter += 1
        return f"e{self._counter}"

    def register(self, role: str, name: Optional[str]) -> Tuple[str, int]:
        """Assign a ref; returns (ref, occurrence index of this role/name pair)."""
        ref = self._next_ref()
        key = (role, name or "")
        nth = self._occurrences[key]
        self._occurrences[key] += 1
        self.refs[ref] = RefEntry(role=role, name=name, nth=nth)
        return ref, nth

    def finalize(self) -> Dict[str, RefEntry]:
        """Strip nth from refs whose role/name pair turned out to be unique."""
        for entry in self.refs.values():
            if self._occurrences[(entry.role, entry.name or "")] == 1:
                entry.nth = None
        return self.refs

    def _should_have_ref(self, parsed: ParsedLine) -> bool:
        cls = classify_role(parsed.role)
        return cls is RoleClass.INTERACTIVE or (cls is RoleClass.CONTENT and bool(parsed.name))

    def _annotate(self, parsed: ParsedLine, ref: str, nth: int, prefix: str, suffix: str) -> str:
        out = f"{prefix}{parsed.role}"
        if parsed.raw_name:
            out += f' "{parsed.raw_name}"'
        out += f" [ref={ref}]"
        if nth > 0:
            out += f" [nth={nth}]"
        return out + suffix

    def process_line(self, line: str) -> Optional[str]:
        opts = self.options
        if opts.max_depth is not None and indent_level(line) > opts.max_depth:
            return None

        parsed = parse_line(line)
        if parsed is None:
            return None if opts.interactive else line

        cls = classify_role(parsed.role)
        if opts.interactive and cls is not RoleClass.INTERACTIVE:
            return None
        if opts.compact and cls is RoleClass.STRUCTURAL and not parsed.name:
            return None
        if not self._should_have_ref(parsed):
            return line

        ref, nth = self.register(parsed.role_lower, parsed.name)
        if opts.interactive:
            # Flattened output: keep bracketed attributes, drop the child marker
            suffix = parsed.suffix if "[" in parsed.suffix else ""
            return self._annotate(parsed, ref, nth, "- ", suffix.rstrip(":").rstrip())
        return self._annotate(parsed, ref, nth, parsed.prefix, parsed.suffix)

    def build(self, aria_tree: str) -> EnhancedSnapshot:
        result: List[str] = []
        for line in aria_tree.split("\n"):
            processed = self.process_line(line)
            if processed is not None:
                result.append(processed)

        refs = self.finalize()

        if self.options.interactive:
            return EnhancedSnapshot(tree="\n".join(result) or NO_INTERACTIVE_ELEMENTS, refs=refs)
        if self.options.compact:
            result = compact_lines(result)
        return EnhancedSnapshot(tree="\n".join(result), refs=refs)


def compact_lines(lines: List[str]) -> List[str]:
    """
    Drop structural lines with nothing addressable underneath.

    A structural line survives if it has a ref, has an inline value, or has a
    descendant (deeper lines until indentation returns to its level) with a
    ref or an inline value.
    """
    kept: List[str] = []
    for i, line in enumerate(lines):
        parsed = parse_line(line)
        if parsed is None or classify_role(parsed.role) is not RoleClass.STRUCTURAL:
            kept.append(line)
            continue
        if _carries_ref(line) or _carries_value(line):
            kept.append(line)
            continue

        depth = indent_level(line)
        for child in lines[i + 1:]:
            if indent_level(child) <= depth:
                break
            if _carries_ref(child) or _carries_value(child):
                kept.append(line)
                break
    return kept


def process_aria_tree(aria_tree: str, options: Optional[SnapshotOptions] = None) -> EnhancedSnapshot:
    """Turn a raw ARIA snapshot into an annotated tree plus its ref map."""
    if not aria_tree or not aria_tree.strip():
        return EnhancedSnapshot(tree=EMPTY_TREE, refs={})
    return _SnapshotBuilder(options or SnapshotOptions()).build(aria_tree)


async def take_snapshot(page, options: Optional[SnapshotOptions] = None) -> EnhancedSnapshot:
    """
    Capture the page's ARIA snapshot and annotate it with refs.

    Args:
        page: Live page handle
        options: Filters; options.selector scopes the walk to a sub-tree

    Returns:
        EnhancedSnapshot with the filtered tree text and the ref map
    """
    options = options or SnapshotOptions()
    locator = page.locator(options.selector) if options.selector else page.locator(":root")
    aria_tree = await locator.aria_snapshot()
    return process_aria_tree(aria_tree or "", options)


def snapshot_stats(tree: str, refs: Dict[str, RefEntry]) -> dict:
    interactive = sum(1 for r in refs.values() if classify_role(r.role) is RoleClass.INTERACTIVE)
    return {
        "lines": len(tree.split("\n")),
        "chars": len(tree),
        "tokens": math.ceil(len(tree) / 4),
        "refs": len(refs),
        "interactive": interactive,
    }


__all__ = [
    "RoleClass",
    "ROLE_TABLE",
    "classify_role",
    "SnapshotOptions",
    "RefEntry",
    "EnhancedSnapshot",
    "ParsedLine",
    "indent_level",
    "parse_line",
    "compact_lines",
    "process_aria_tree",
    "take_snapshot",
    "snapshot_stats",
]
