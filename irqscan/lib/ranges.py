"""Parser for compact CPU range lists such as "0-3,8,10-11"."""

from irqscan.core.records import CPURange
from irqscan.lib.cursor import Cursor

_COMMA = ord(",")
_DASH = ord("-")


def parse_range_list(data: bytes | str) -> list[CPURange]:
    """
    Parse a comma-separated list of numbers and from-to number ranges.

    A number is only accepted when followed by the end of the input, a
    comma, or a complete "-<number>". Anything else invalidates the
    whole token and ends parsing; only ranges completed before the bad
    token are returned.

    Args:
        data: Range list without trailing newline, e.g. b"1-3,42"

    Returns:
        List of CPURange in input order (possibly empty)
    """
    if isinstance(data, str):
        data = data.encode("ascii", errors="replace")
    cur = Cursor(data)
    ranges: list[CPURange] = []
    while not cur.at_end():
        low = cur.parse_uint()
        if low is None:
            break
        if cur.at_end():
            ranges.append(CPURange(low, low))
            break
        delim = cur.next()
        if delim == _COMMA:
            ranges.append(CPURange(low, low))
            continue
        if delim != _DASH:
            break
        high = cur.parse_uint()
        if high is None:
            break
        ranges.append(CPURange(low, high))
        cur.skip_literal(b",")
    return ranges


def format_range_list(ranges: list[CPURange]) -> str:
    """Render ranges back into the kernel's compact list notation."""
    return ",".join(
        str(r.low) if r.low == r.high else f"{r.low}-{r.high}" for r in ranges
    )
