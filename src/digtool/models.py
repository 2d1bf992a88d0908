from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import dns.rcode
import dns.rdataclass


DEFAULT_STATUS = "SUCCESS"


@dataclass(frozen=True)
class DigOptions:
    domain: str
    record_type: str = "A"
    subnet: Optional[str] = None


@dataclass
class ResourceRecord:
    name: str
    ttl: int
    record_class: str
    type: str
    rdata: str

    def class_code(self) -> Optional[int]:
        """Numeric class (IN -> 1, CH -> 3, CLASS65280 -> 65280); None if the text is not a class."""
        try:
            return int(dns.rdataclass.from_text(self.record_class))
        except (dns.rdataclass.UnknownRdataclass, ValueError):
            return None

    def to_text(self) -> str:
        return f"{self.name} {self.ttl} {self.record_class} {self.type} {self.rdata}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ttl": self.ttl,
            "class": self.record_class,
            "classCode": self.class_code(),
            "type": self.type,
            "rdata": self.rdata,
            "rdlength": len(self.rdata),
        }


@dataclass
class DigHeader:
    id: Optional[int] = None
    opcode: Optional[str] = None
    flags: Optional[str] = None

    def is_empty(self) -> bool:
        return self.id is None and not self.opcode and not self.flags

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "opcode": self.opcode, "flags": self.flags}


@dataclass(frozen=True)
class SubnetEcho:
    """ECS prefix echoed back by the server, with the scope it answered for."""
    subnet: str
    scope: int

    def to_dict(self) -> Dict[str, Any]:
        return {"subnet": self.subnet, "scope": self.scope}


@dataclass
class ParsedResult:
    status: str = DEFAULT_STATUS
    header: DigHeader = field(default_factory=DigHeader)
    subnet: Optional[SubnetEcho] = None
    answer: List[ResourceRecord] = field(default_factory=list)
    authority: List[ResourceRecord] = field(default_factory=list)
    additional: List[ResourceRecord] = field(default_factory=list)
    last_cname: Optional[str] = None

    def rcode(self) -> Optional[int]:
        """DNS rcode for the status (NOERROR -> 0, NXDOMAIN -> 3); None for SUCCESS or unknown text."""
        try:
            return int(dns.rcode.from_text(self.status))
        except (dns.rcode.UnknownRcode, ValueError):
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "rcode": self.rcode(),
            "header": None if self.header.is_empty() else self.header.to_dict(),
            "subnet": self.subnet.to_dict() if self.subnet else None,
            "answer": [r.to_dict() for r in self.answer],
            "authority": [r.to_dict() for r in self.authority],
            "additional": [r.to_dict() for r in self.additional],
            "lastCname": self.last_cname,
        }


@dataclass
class DigResult:
    output: str
    parsed: ParsedResult
    command: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output": self.output,
            "parsed": self.parsed.to_dict(),
            "command": self.command,
        }


@dataclass
class ToolInfo:
    available: bool
    path: str
    version: Optional[str] = None
    error: Optional[str] = None
