"""
Flattening of a Notion block tree into plain-text lines.

Each block becomes exactly one line (a line may itself contain newlines, e.g.
code or tables), emitted depth-first: a block's own line first, then its
children, siblings in the order the API returns them. Child pages are never
inlined. Children are fetched page by page while the lines are consumed.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from .notion_service import NotionService, iter_pages

logger = logging.getLogger(__name__)

Block = Dict[str, Any]

DIVIDER = "-" * 26

CHILD_PAGE = "child_page"

# Blocks whose children are already part of their own line.
SELF_CONTAINED = frozenset({"table"})

# Rich text rendered after a fixed marker.
TEXT_PREFIXES: Dict[str, str] = {
    "paragraph": "",
    "heading_1": "# ",
    "heading_2": "## ",
    "heading_3": "### ",
    "bulleted_list_item": "- ",
    "numbered_list_item": "* ",
    "quote": "> ",
    "toggle": "^ ",
    "callout": "! ",
    "template": "Template: ",
}

# Hosted-or-external files, rendered as "<label>: <url>".
FILE_LABELS: Dict[str, str] = {
    "image": "Image",
    "audio": "Audio",
    "video": "Video",
    "file": "File",
    "pdf": "PDF",
}

# Plain links, rendered as "<label>: <url>".
URL_LABELS: Dict[str, str] = {
    "embed": "Embed",
    "bookmark": "Bookmark",
    "link_preview": "Preview",
}

# No text of their own.
STRUCTURAL = frozenset({
    "table_of_contents",
    "breadcrumb",
    "column_list",
    "column",
    "synced_block",
})


def rich_text_to_plain(rich_text: Optional[List[Dict[str, Any]]]) -> str:
    """Concatenate the plain_text of every run, dropping all styling."""
    return "".join(rt.get("plain_text") or "" for rt in rich_text or [])


def file_url(payload: Dict[str, Any]) -> str:
    """URL of a file object, whether uploaded to Notion or linked externally."""
    kind = payload.get("type")
    if kind in ("file", "external"):
        return (payload.get(kind) or {}).get("url") or ""
    return ""


def _render_to_do(payload: Dict[str, Any]) -> str:
    prefix = "[x] " if payload.get("checked") else "[ ] "
    return prefix + rich_text_to_plain(payload.get("rich_text"))


def _render_code(payload: Dict[str, Any]) -> str:
    return "```\n" + rich_text_to_plain(payload.get("rich_text")) + "\n```"


def _render_link_to_page(payload: Dict[str, Any]) -> str:
    kind = payload.get("type")
    if kind in ("page_id", "database_id"):
        return "Link: " + (payload.get(kind) or "")
    return ""


def _render_table_row(payload: Dict[str, Any]) -> str:
    return ", ".join(rich_text_to_plain(cell) for cell in payload.get("cells") or [])


_RENDERERS: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "to_do": _render_to_do,
    "code": _render_code,
    "divider": lambda payload: DIVIDER,
    "equation": lambda payload: "Expression: " + (payload.get("expression") or ""),
    "link_to_page": _render_link_to_page,
    "table_row": _render_table_row,
}


class ContentFlattener:
    def __init__(self, service: NotionService):
        self._service = service

    def flatten(self, block_id: str) -> Iterator[str]:
        """
        Lines for *block_id* and all of its descendants.

        The root of a database row is the row's own page: its line is
        skipped but its children form the body.
        """
        block = self._service.find_block(block_id)
        logger.debug("[live] fetched block %s type=%s", block_id, block.get("type"))

        kind = block.get("type")
        if kind != CHILD_PAGE:
            yield self.render(block)
        if block.get("has_children") and kind not in SELF_CONTAINED:
            yield from self._flatten_children(block_id)

    def _flatten_children(self, block_id: str) -> Iterator[str]:
        for child in self.children(block_id):
            kind = child.get("type")
            if kind == CHILD_PAGE:
                continue
            yield self.render(child)
            if child.get("has_children") and kind not in SELF_CONTAINED:
                yield from self._flatten_children(child["id"])

    def children(self, block_id: str) -> Iterator[Block]:
        def fetch(cursor: Optional[str]) -> Dict[str, Any]:
            response = self._service.find_block_children(block_id, start_cursor=cursor)
            logger.debug(
                "[live] fetched child blocks for %s cursor=%s found=%d",
                block_id, cursor, len(response.get("results", [])),
            )
            return response

        return iter_pages(fetch)

    def render(self, block: Block) -> str:
        kind = block.get("type") or ""
        payload = block.get(kind) or {}

        if kind in TEXT_PREFIXES:
            return TEXT_PREFIXES[kind] + rich_text_to_plain(payload.get("rich_text"))
        if kind in FILE_LABELS:
            return f"{FILE_LABELS[kind]}: {file_url(payload)}"
        if kind in URL_LABELS:
            return f"{URL_LABELS[kind]}: {payload.get('url') or ''}"
        if kind in _RENDERERS:
            return _RENDERERS[kind](payload)
        if kind == "table":
            return "\n".join(self.render(row) for row in self.children(block["id"]))
        if kind not in STRUCTURAL:
            logger.debug("[live] no text for block %s type=%s", block.get("id"), kind)
        return ""
