"""Records produced by the counter and details streams."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CPURange:
    """Inclusive range of CPU numbers; a single CPU n is CPURange(n, n)."""

    low: int
    high: int

    def cpus(self) -> range:
        """CPU numbers covered by this range."""
        return range(self.low, self.high + 1)


@dataclass
class IRQCounters:
    """
    Per-CPU interrupt counters of a single IRQ.

    The counters list belongs to the generator that produced this record
    and gets overwritten in place when the next record is produced. Use
    copy() to keep counters beyond the current iteration step.
    """

    num: int
    counters: list[int]
    cpus: list[int]

    def copy(self) -> "IRQCounters":
        """Return a record with its own copy of the counters."""
        return IRQCounters(num=self.num, counters=list(self.counters), cpus=self.cpus)

    def per_cpu(self) -> dict[int, int]:
        """Map online CPU numbers to their counter values."""
        return dict(zip(self.cpus, self.counters))


@dataclass
class IRQDetails:
    """Actions and effective CPU affinities of a single IRQ."""

    num: int
    actions: list[str] = field(default_factory=list)
    affinities: list[CPURange] = field(default_factory=list)
