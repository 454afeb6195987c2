"""Per-CPU interrupt counters and IRQ details from /proc and /sys."""

__version__ = "0.1.0"

from irqscan.core import (
    CPURange,
    Context,
    DetailsPipeline,
    IRQCounters,
    IRQDetails,
    UnsortedIRQsError,
    all_counters,
    all_irq_details,
    counters_for,
)
from irqscan.lib import parse_range_list

__all__ = [
    "CPURange",
    "Context",
    "DetailsPipeline",
    "IRQCounters",
    "IRQDetails",
    "UnsortedIRQsError",
    "__version__",
    "all_counters",
    "all_irq_details",
    "counters_for",
    "parse_range_list",
]
