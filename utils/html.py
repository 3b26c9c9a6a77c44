"""
Utility to render extracted sheets into HTML ``<table>`` previews.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from dto.workbook import Sheet, Workbook

EMPTY_SHEET_TEXT = "No data was extracted for this sheet."
NO_ROWS_TEXT = "No data rows found."


def _escape_html(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _render_row(cells: Sequence[str], tag: str) -> List[str]:
    parts = ["    <tr>"]
    for cell in cells:
        parts.append(f"      <{tag}>{_escape_html(cell or '')}</{tag}>")
    parts.append("    </tr>")
    return parts


def render_sheet_html(sheet: Sheet, max_rows: Optional[int] = None) -> str:
    """
    Render one sheet as a titled HTML table.

    Row 0 is rendered as ``<thead>``; the rest (capped at *max_rows* body
    rows when given) as ``<tbody>``.
    """
    parts: List[str] = [f"<h3>{_escape_html(sheet.name)}</h3>"]

    if sheet.is_empty:
        parts.append(f"<p>{EMPTY_SHEET_TEXT}</p>")
        return "\n".join(parts)

    headers = sheet.grid[0]
    rows = sheet.grid[1:]
    if max_rows is not None:
        rows = rows[:max_rows]

    parts.append('<table border="1" cellpadding="5" cellspacing="0">')

    # <thead>
    parts.append("  <thead>")
    parts.extend(_render_row(headers, "th"))
    parts.append("  </thead>")

    # <tbody>
    parts.append("  <tbody>")
    for row in rows:
        parts.extend(_render_row(row, "td"))
    if not rows:
        parts.append("    <tr>")
        parts.append(f'      <td colspan="{max(len(headers), 1)}">{NO_ROWS_TEXT}</td>')
        parts.append("    </tr>")
    parts.append("  </tbody>")

    parts.append("</table>")
    return "\n".join(parts)


def render_workbook_html(workbook: Workbook, max_rows: Optional[int] = None) -> str:
    return "\n".join(render_sheet_html(sheet, max_rows) for sheet in workbook.sheets)
