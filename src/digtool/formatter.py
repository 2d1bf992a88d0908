from __future__ import annotations

from typing import List, Optional

from .models import DEFAULT_STATUS, ParsedResult, ResourceRecord

# Re-rendering from the parsed form keeps the display stable across dig versions.
SECTIONS = (
    ("ANSWER", "answer"),
    ("AUTHORITY", "authority"),
    ("ADDITIONAL", "additional"),
)


def _header_line(parsed: ParsedResult) -> Optional[str]:
    h = parsed.header
    if h.is_empty():
        if parsed.status != DEFAULT_STATUS:
            return f";; status: {parsed.status}"
        return None

    parts = []
    if h.id is not None:
        parts.append(f"id: {h.id}({hex(h.id)})" if h.id else f"id: {h.id}")
    if h.opcode:
        parts.append(f"opcode: {h.opcode}")
    parts.append(f"status: {parsed.status}")
    if h.flags:
        parts.append(f"flags: {h.flags}")
    return ";; " + ", ".join(parts)


def _section_lines(title: str, records: List[ResourceRecord]) -> List[str]:
    return [f";; {title} SECTION:", *(r.to_text() for r in records), ""]


def format_dig_output(parsed: ParsedResult, original_query: Optional[str] = None) -> str:
    lines: List[str] = []

    if original_query:
        lines.append(f"; {original_query}")

    header = _header_line(parsed)
    if header:
        lines.append(header)

    if parsed.subnet:
        lines.append(f";; response subnet: ECS {parsed.subnet.subnet} scope/{parsed.subnet.scope}")

    lines.append("")

    for title, attr in SECTIONS:
        records = getattr(parsed, attr)
        if records:
            lines.extend(_section_lines(title, records))

    return "\n".join(lines).strip()
