"""
Parser for dig's default (non +short, non +yaml) text output.

This is an adapter over a human-readable format, not a protocol decoder. It
reads what it recognizes and skips the rest:

  ;; ->>HEADER<<- opcode: QUERY, status: NOERROR, id: 49969
  ;; flags: qr rd ra; QUERY: 1, ANSWER: 2, AUTHORITY: 0, ADDITIONAL: 1
  ; CLIENT-SUBNET: 101.249.112.0/24/24
  ;; ANSWER SECTION:
  www.example.com.  300  IN  CNAME  edge.example.net.
  edge.example.net. 60   IN  A      93.184.216.34

Record lines inside a section are split on whitespace; anything with fewer than
five fields is treated as a continuation/comment and ignored.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .models import DEFAULT_STATUS, DigHeader, ParsedResult, ResourceRecord, SubnetEcho

SECTION_MARKERS = (
    (";; ANSWER SECTION:", "answer"),
    (";; AUTHORITY SECTION:", "authority"),
    (";; ADDITIONAL SECTION:", "additional"),
)

_ID = re.compile(r"id:\s*(\d+)")
_OPCODE = re.compile(r"opcode:\s*(\w+)")
_FLAGS = re.compile(r"flags:\s*(.+)")
_FLAGS_LINE = re.compile(r"^;;\s*flags:\s*([^;]*)")
_STATUS = re.compile(r"status:\s*(\w+)")
_ECS = re.compile(r"ECS\s+([0-9A-Fa-f.:]+/\d+)\s+scope/(\d+)")
_CLIENT_SUBNET = re.compile(r"CLIENT-SUBNET:\s*([0-9A-Fa-f.:]+)/(\d+)/(\d+)")


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


def parse_record_line(line: str) -> Optional[ResourceRecord]:
    parts = line.split()
    if len(parts) < 5:
        return None
    return ResourceRecord(
        name=parts[0],
        ttl=_to_int(parts[1]),
        record_class=parts[2],
        type=parts[3],
        rdata=" ".join(parts[4:]),
    )


def _parse_header(line: str, header: DigHeader) -> None:
    m = _ID.search(line)
    if m:
        header.id = int(m.group(1))
    m = _OPCODE.search(line)
    if m:
        header.opcode = m.group(1)
    m = _FLAGS.search(line)
    if m:
        header.flags = m.group(1).strip()


def _parse_subnet(line: str) -> Optional[SubnetEcho]:
    m = _ECS.search(line)
    if m:
        return SubnetEcho(subnet=m.group(1), scope=int(m.group(2)))
    m = _CLIENT_SUBNET.search(line)
    if m:
        return SubnetEcho(subnet=f"{m.group(1)}/{m.group(2)}", scope=int(m.group(3)))
    return None


def infer_status_from_text(text: str) -> Optional[str]:
    """
    Best-effort status guess for output that carries no explicit status line.

    Lower confidence than a parsed `status:` field: it only looks for the
    literal words and will also fire on e.g. a TXT record mentioning them.
    """
    if "NXDOMAIN" in text:
        return "NXDOMAIN"
    if "SERVFAIL" in text:
        return "SERVFAIL"
    return None


def parse_dig_output(output: str) -> ParsedResult:
    result = ParsedResult()
    section = "header"

    for raw in output.splitlines():
        line = raw.strip()

        if ("id:" in line and "opcode:" in line) or line.startswith((";; opcode:", ";; status:")):
            _parse_header(line, result.header)
        elif result.header.flags is None:
            m = _FLAGS_LINE.match(line)
            if m and m.group(1).strip():
                result.header.flags = m.group(1).strip()

        if "subnet:" in line or "SUBNET:" in line:
            echo = _parse_subnet(line)
            if echo:
                result.subnet = echo

        m = _STATUS.search(line)
        if m:
            result.status = m.group(1)

        switched = False
        for marker, name in SECTION_MARKERS:
            if marker in line:
                section = name
                switched = True
                break
        if switched:
            continue

        if section == "header" or not line or line.startswith(";"):
            continue

        record = parse_record_line(line)
        if record is None:
            continue

        records: List[ResourceRecord] = getattr(result, section)
        records.append(record)
        if section == "answer" and record.type == "CNAME":
            result.last_cname = record.rdata

    if not result.answer and result.status == DEFAULT_STATUS:
        guessed = infer_status_from_text(output)
        if guessed:
            result.status = guessed

    return result
