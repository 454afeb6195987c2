"""Core irqscan functionality."""

from irqscan.core.records import CPURange, IRQCounters, IRQDetails
from irqscan.core.context import Context
from irqscan.core.counters import (
    UnsortedIRQsError,
    all_counters,
    counters_for,
    iter_counters,
    parse_cpu_header,
)
from irqscan.core.details import DetailsPipeline, all_irq_details

__all__ = [
    "CPURange",
    "Context",
    "DetailsPipeline",
    "IRQCounters",
    "IRQDetails",
    "UnsortedIRQsError",
    "all_counters",
    "all_irq_details",
    "counters_for",
    "iter_counters",
    "parse_cpu_header",
]
