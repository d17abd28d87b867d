"""Formatted detail pane for the selected feature or requirement, and help text."""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, field
from html import unescape
from html.parser import HTMLParser

from aha_cli.navigation.hierarchy import FeatureRow, Level

_BLOCK_TAGS = {"p", "div", "br", "li", "ul", "ol", "h1", "h2", "h3", "h4", "tr", "pre"}


@dataclass(frozen=True)
class DetailView:
    title: str
    lines: list[str] = field(default_factory=list)
    status: str = ""
    status_color: str = ""


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []

    def handle_starttag(self, tag, attrs) -> None:
        if tag == "li":
            self.parts.append("\n- ")
        elif tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_endtag(self, tag) -> None:
        if tag in _BLOCK_TAGS and tag != "li":
            self.parts.append("\n")

    def handle_data(self, data) -> None:
        self.parts.append(data)


def html_to_text(html: str, width: int) -> list[str]:
    extractor = _TextExtractor()
    extractor.feed(html or "")
    extractor.close()
    text = unescape("".join(extractor.parts))
    text = re.sub(r"\n{3,}", "\n\n", text).strip()
    lines: list[str] = []
    for paragraph in text.split("\n"):
        if not paragraph.strip():
            lines.append("")
            continue
        lines.extend(textwrap.wrap(paragraph, width=max(width, 10)) or [""])
    return lines


def format_detail(row: FeatureRow, width: int) -> DetailView:
    record = row.record
    kind = "Requirement" if row.is_requirement else "Feature"
    # Keep the text clear of the pane border.
    body_width = width - 8 if width % 2 == 0 else width - 9
    assignee = record.assigned_to_user.name if record.has_assignee() else ""
    lines = [
        f"{record.name} [{record.status_name}]",
        assignee or "Unassigned",
        record.url or "",
        "",
        *html_to_text(record.description_body, body_width),
    ]
    return DetailView(
        title=f"{kind} {record.reference_num}",
        lines=lines,
        status=record.status_name,
        status_color=record.status_color,
    )


def help_text(level: Level) -> DetailView:
    lines = [
        "Keys",
        "===================",
        "k ↑ - up a list",
        "j ↓ - down a list",
        "l → enter - enter selected item",
        "h ← - previous section",
        "s - search",
        "q - exit",
        "esc - to close popups",
    ]
    if level != Level.PROJECT:
        lines += [
            "",
            "Release Actions:",
            "c - create feature if a release is selected.",
            "c - create requirement if a feature is selected.",
        ]
    return DetailView(title="Help", lines=lines)
