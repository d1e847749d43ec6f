"""
browserplex: an MCP server that drives several named browser sessions at once.

Layers, bottom-up:

- snapshot: turns an ARIA snapshot into a tree annotated with [ref=eN]
  markers plus the ref map used to turn refs back into locators.
- browser: engines (Playwright chromium/firefox/webkit, Camoufox) and the
  registry of named sessions.
- storage / locking: persisted storage state per (domain, name) and the
  per-domain advisory lock file.
- actions: page operations against one session.
- tools: the MCP tool surface; registered in __main__.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
