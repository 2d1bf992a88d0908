import re
from dataclasses import dataclass, field
from typing import List, Optional

from digtool.models import DigOptions

# Everything validated here ends up as a dig argument, so anything not provably
# safe is rejected rather than escaped.

# Invalid user input base error
class InvalidTarget(ValueError):
    """Base error for invalid user input targets."""

# One or more query parameters failed validation
class InvalidQuery(InvalidTarget):
    """Raised by require_query(); carries every violated rule."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


VALID_RECORD_TYPES = (
    "A", "AAAA", "CNAME", "MX", "NS", "TXT", "SOA", "PTR", "SRV",
    "CAA", "DS", "DNSKEY", "NSEC", "NSEC3", "RRSIG", "TLSA",
    "ANY", "AXFR", "IXFR",
)
DEFAULT_RECORD_TYPE = "A"

_INVALID_DOMAIN_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_ALPHA = re.compile(r"^[a-zA-Z]+$")
_DANGEROUS = (
    re.compile(r"[;&|`$()]"),
    re.compile(r"\s"),
    re.compile(r"\.\."),
    re.compile(r"//"),
    re.compile(r"\\\\"),
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
)
_INVALID_TYPE_CHARS = re.compile(r"[^A-Z0-9]")
# ASCII digits only
_IPV4_CIDR = re.compile(r"^([0-9]{1,3}\.){3}[0-9]{1,3}/[0-9]{1,2}$")
_IPV6_CIDR = re.compile(r"^([0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}/[0-9]{1,3}$")


# Check the domain format (not existence). Returns the first violated rule, or None.
def validate_domain(domain: Optional[str]) -> Optional[str]:
    d = (domain or "").strip()
    if not d:
        return "Domain must not be empty"
    if len(d) > 253:
        return "Domain must not exceed 253 characters"
    if _INVALID_DOMAIN_CHARS.search(d):
        return "Domain may only contain letters, digits, dots and hyphens"
    if d.startswith(".") or d.endswith("."):
        return "Domain must not start or end with a dot"
    if ".." in d:
        return "Domain must not contain consecutive dots"
    if d.startswith("-") or d.endswith("-"):
        return "Domain must not start or end with a hyphen"

    labels = d.split(".")
    for label in labels:
        if not label:
            return "Domain labels must not be empty"
        if len(label) > 63:
            return "Domain labels must not exceed 63 characters"
        if label.startswith("-") or label.endswith("-"):
            return "Domain labels must not start or end with a hyphen"

    if "." not in d:
        return "Please enter a full domain name including the top-level domain"

    tld = labels[-1]
    if len(tld) < 2:
        return "Top-level domain must be at least 2 characters"
    if not _ALPHA.match(tld):
        return "Top-level domain may only contain letters"

    # Second line of defence against injection attempts
    if any(p.search(d) for p in _DANGEROUS):
        return "Domain contains forbidden characters or patterns"
    return None


def normalize_record_type(record_type: Optional[str]) -> str:
    return (record_type or "").strip().upper()


def validate_record_type(record_type: Optional[str]) -> Optional[str]:
    t = normalize_record_type(record_type)
    if not t:
        return "Record type must not be empty"
    if t not in VALID_RECORD_TYPES:
        return f"Unsupported record type: {record_type}. Supported types: {', '.join(VALID_RECORD_TYPES)}"
    if _INVALID_TYPE_CHARS.search(t):
        return "Record type may only contain letters and digits"
    return None


# Subnet is optional: blank is fine.
def validate_subnet(subnet: Optional[str]) -> Optional[str]:
    s = (subnet or "").strip()
    if not s:
        return None

    if _IPV4_CIDR.match(s):
        ip, prefix = s.split("/")
        if not 0 <= int(prefix) <= 32:
            return "IPv4 subnet prefix length must be between 0 and 32"
        if any(int(part) > 255 for part in ip.split(".")):
            return "Invalid IPv4 address"
        return None

    if _IPV6_CIDR.match(s):
        _, prefix = s.split("/")
        if not 0 <= int(prefix) <= 128:
            return "IPv6 subnet prefix length must be between 0 and 128"
        return None

    return "Invalid subnet format, use IPv4 or IPv6 CIDR notation (e.g. 192.168.1.0/24)"


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    domain: str = ""
    record_type: str = DEFAULT_RECORD_TYPE
    subnet: Optional[str] = None

    def to_options(self) -> DigOptions:
        return DigOptions(domain=self.domain, record_type=self.record_type, subnet=self.subnet)


def validate_query_params(
    domain: Optional[str],
    record_type: Optional[str] = DEFAULT_RECORD_TYPE,
    subnet: Optional[str] = None,
) -> ValidationResult:
    """
    Validate all query parameters together so every problem is reported at once.
    Never raises; a missing record type falls back to "A".
    """
    errors: List[str] = []

    err = validate_domain(domain)
    if err:
        errors.append(err)

    if record_type is None or not record_type.strip():
        record_type = DEFAULT_RECORD_TYPE
    err = validate_record_type(record_type)
    if err:
        errors.append(err)

    err = validate_subnet(subnet)
    if err:
        errors.append(err)

    return ValidationResult(
        valid=not errors,
        errors=errors,
        domain=(domain or "").strip(),
        record_type=normalize_record_type(record_type),
        subnet=(subnet or "").strip() or None,
    )


# Validates and returns ready-to-run options, raising InvalidQuery otherwise
def require_query(domain: Optional[str], record_type: Optional[str] = DEFAULT_RECORD_TYPE, subnet: Optional[str] = None) -> DigOptions:
    v = validate_query_params(domain, record_type, subnet)
    if not v.valid:
        raise InvalidQuery(v.errors)
    return v.to_options()
