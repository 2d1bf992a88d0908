"""
dig wrapper: run the external tool, parse its text output, re-render it.

Public entrypoints: DigService, parse_dig_output, format_dig_output
"""

from .formatter import format_dig_output
from .models import DigOptions, DigResult, ParsedResult, ResourceRecord
from .parser import parse_dig_output
from .service import DigExecutionError, DigService

__all__ = [
    "DigExecutionError",
    "DigOptions",
    "DigResult",
    "DigService",
    "ParsedResult",
    "ResourceRecord",
    "format_dig_output",
    "parse_dig_output",
]
