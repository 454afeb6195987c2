"""
Streaming parser for the /proc/interrupts counter table.

The table starts with a header line naming the online CPUs ("CPU0 CPU1
..."), followed by one line per IRQ: the right-aligned IRQ number and a
colon, one counter column per online CPU, then free-form chip, domain,
trigger and action text that is ignored here. Numbered IRQ lines always
come first; architecture-specific interrupts with names instead of
numbers ("NMI:", "LOC:", ...) trail them and end the parse.
"""

from bisect import bisect_left
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any

from irqscan.core.records import IRQCounters
from irqscan.lib.cursor import Cursor

if TYPE_CHECKING:
    from irqscan.core.context import Context

PROC_INTERRUPTS_PATH = "/proc/interrupts"

_LF = 0x0A
_CR = 0x0D

Observer = Callable[..., Any]


class UnsortedIRQsError(ValueError):
    """IRQ allow-list is not sorted in ascending order."""

    pass


def parse_cpu_header(line: bytes) -> list[int]:
    """
    Parse the header line of /proc/interrupts into online CPU numbers.

    Every field must be "CPU<number>"; a single field in any other form
    renders the whole header malformed.

    Args:
        line: Header line, with or without its line ending

    Returns:
        CPU numbers in column order, or an empty list if malformed
    """
    cur = Cursor(line, end=_line_end(line))
    num_fields = cur.count_fields()
    if num_fields == 0:
        return []
    cpus = []
    while not cur.skip_spaces():
        if not cur.skip_literal(b"CPU"):
            break
        cpu = cur.parse_uint()
        if cpu is None:
            break
        cpus.append(cpu)
    if len(cpus) != num_fields:
        return []
    return cpus


def check_sorted(irqs: list[int]) -> None:
    """
    Check that an IRQ allow-list is sorted in ascending order.

    Raises:
        UnsortedIRQsError: If an IRQ number is smaller than its predecessor
    """
    for prev, irq in zip(irqs, irqs[1:]):
        if irq < prev:
            raise UnsortedIRQsError(
                f"IRQ list must be sorted in ascending order: {irq} follows {prev}"
            )


def _line_end(line: bytes) -> int:
    """Length of line without its trailing newline or CRLF."""
    end = len(line)
    if end and line[end - 1] == _LF:
        end -= 1
    if end and line[end - 1] == _CR:
        end -= 1
    return end


def _wanted(irqs: list[int], irq: int) -> bool:
    idx = bisect_left(irqs, irq)
    return idx < len(irqs) and irqs[idx] == irq


def iter_counters(
    stream: Iterable[bytes],
    irqs: list[int] | None = None,
    observer: Observer | None = None,
) -> Iterator[IRQCounters]:
    """
    Iterate over the IRQ counters in /proc/interrupts format.

    The allow-list is checked before the generator is created, so an
    unsorted list fails right away instead of on the first next().

    Args:
        stream: Lines of the table as bytes, e.g. a binary file object
        irqs: Optional ascending list of the only IRQ numbers to produce
        observer: Optional callable receiving (message, **extra) whenever
            the stream ends early or a line is skipped

    Returns:
        Single-use iterator of IRQCounters; the counters list of each
        record is reused for the next one

    Raises:
        UnsortedIRQsError: If irqs is not sorted in ascending order
    """
    if irqs is not None:
        check_sorted(irqs)
    return _iter_counters(stream, irqs, observer)


def _iter_counters(
    stream: Iterable[bytes],
    irqs: list[int] | None,
    observer: Observer | None,
) -> Iterator[IRQCounters]:
    def stop(reason: str, **extra: Any) -> None:
        if observer is not None:
            observer("counter table ended", reason=reason, **extra)

    lines = iter(stream)
    header = next(lines, None)
    if header is None:
        stop("no header line")
        return
    cpus = parse_cpu_header(header)
    if not cpus:
        stop("malformed header")
        return
    num_cpus = len(cpus)
    counters = [0] * num_cpus

    for line in lines:
        cur = Cursor(line, end=_line_end(line))
        if cur.skip_spaces():
            stop("blank line")
            return
        irq = cur.parse_uint()
        if irq is None:
            # Named architecture-specific interrupts follow all numbered ones.
            stop("end of numbered IRQs")
            return
        if not cur.skip_literal(b":"):
            stop("missing colon", irq=irq)
            return

        if irqs is not None and not _wanted(irqs, irq):
            continue

        for idx in range(num_cpus):
            if cur.skip_spaces():
                stop("short line", irq=irq)
                return
            count = cur.parse_uint()
            if count is None:
                stop("malformed counter", irq=irq)
                return
            counters[idx] = count

        yield IRQCounters(num=irq, counters=counters, cpus=cpus)


def _iter_file_counters(
    root: str,
    irqs: list[int] | None,
    context: "Context | None",
    observer: Observer | None,
) -> Iterator[IRQCounters]:
    if context is None:
        from irqscan.core.context import Context
        context = Context()

    path = root.rstrip("/") + PROC_INTERRUPTS_PATH
    try:
        f = context.open_binary(path)
    except OSError as e:
        if observer is not None:
            observer("counter table unavailable", path=path, reason=str(e))
        return
    with f:
        yield from _iter_counters(f, irqs, observer)


def all_counters(
    root: str = "",
    context: "Context | None" = None,
    observer: Observer | None = None,
) -> Iterator[IRQCounters]:
    """
    Iterate over the counters of all numbered IRQs in /proc/interrupts.

    Counters are only reported for CPUs that are currently online. The
    file is opened on the first next() and closed when the iterator is
    exhausted or closed; if it cannot be opened, nothing is produced.

    Args:
        root: Path prefix of the proc filesystem, "" for the live system
        context: Filesystem access (for testing)
        observer: Optional diagnostics callable, see iter_counters

    Returns:
        Single-use iterator of IRQCounters
    """
    return _iter_file_counters(root, None, context, observer)


def counters_for(
    irqs: list[int],
    root: str = "",
    context: "Context | None" = None,
    observer: Observer | None = None,
) -> Iterator[IRQCounters]:
    """
    Iterate over the counters of only the listed IRQs in /proc/interrupts.

    IRQs that do not exist are silently missing from the output; rows of
    IRQs not listed are skipped without parsing their counters.

    Args:
        irqs: IRQ numbers, sorted in ascending order
        root: Path prefix of the proc filesystem, "" for the live system
        context: Filesystem access (for testing)
        observer: Optional diagnostics callable, see iter_counters

    Returns:
        Single-use iterator of IRQCounters

    Raises:
        UnsortedIRQsError: If irqs is not sorted in ascending order
    """
    check_sorted(irqs)
    return _iter_file_counters(root, irqs, context, observer)
