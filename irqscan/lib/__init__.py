"""Low-level text parsing helpers for kernel pseudo files."""

from irqscan.lib.cursor import Cursor
from irqscan.lib.ranges import format_range_list, parse_range_list

__all__ = [
    "Cursor",
    "format_range_list",
    "parse_range_list",
]
