"""
Concurrent collection of IRQ actions and effective CPU affinities.

The details of each IRQ are spread over two tiny pseudo files:

- /sys/kernel/irq/<n>/actions: comma-separated action names
- /proc/irq/<n>/effective_affinity_list: CPU range list, e.g. "0-3,8"

Reading them one IRQ after another is dominated by per-file latency, so a
pool of worker threads reads them concurrently, letting the kernel render
many pseudo files in parallel.

Pipeline layout per run:

    producer --> jobs queue --> N workers --> results queue --> consumer
                                    |                              ^
                                    +--> completion (joins workers,
                                         ends the results queue) --+

Both queues are bounded. Cancellation is cooperative: the consumer sets
an event when its caller stops early, and every stage checks it between
queue operations. A read already in progress is never interrupted.

An exception escaping the producer or a worker, e.g. from the observer,
cancels the run as well and is re-raised to the consumer.
"""

import os
import queue
import threading
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from irqscan.core.records import IRQDetails
from irqscan.lib.cursor import Cursor
from irqscan.lib.ranges import parse_range_list

if TYPE_CHECKING:
    from irqscan.core.context import Context

SYS_KERNEL_IRQ_PATH = "/sys/kernel/irq/"
PROC_IRQ_PATH = "/proc/irq/"

ACTIONS_NODE = "/actions"
EFFECTIVE_AFFINITY_NODE = "/effective_affinity_list"

DEFAULT_WORKERS = 16
DEFAULT_QUEUE_SIZE = 16

# How long a blocked queue operation waits before re-checking cancellation.
POLL_INTERVAL = 0.05

SCRATCH_SIZE = 512

_NEWLINE = 0x0A

Observer = Callable[..., Any]


class _EndOfQueue:
    """Marker put onto a queue after its last item."""

    def __repr__(self) -> str:
        return "<end of queue>"


END = _EndOfQueue()


class _Run:
    """Queues and cancellation state of a single pipeline run."""

    def __init__(self, queue_size: int, external: threading.Event | None):
        self.jobs: queue.Queue = queue.Queue(maxsize=queue_size)
        self.results: queue.Queue = queue.Queue(maxsize=queue_size)
        self.done = threading.Event()
        self.external = external
        self.error: Exception | None = None
        self._lock = threading.Lock()

    def cancelled(self) -> bool:
        return self.done.is_set() or (
            self.external is not None and self.external.is_set()
        )

    def cancel(self) -> None:
        self.done.set()

    def fail(self, error: Exception) -> None:
        """Record the first error of any stage and cancel the run."""
        with self._lock:
            if self.error is None:
                self.error = error
        self.cancel()

    def put(self, q: queue.Queue, item: Any) -> bool:
        """Put item onto q unless cancelled first; True if it was put."""
        while not self.cancelled():
            try:
                q.put(item, timeout=POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def get(self, q: queue.Queue) -> Any:
        """Take the next item off q, or END when cancelled first."""
        while not self.cancelled():
            try:
                return q.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue
        return END


class DetailsPipeline:
    """
    Collects the details of all numbered IRQs using a pool of threads.

    Each iteration over a pipeline is an independent, single-use run
    that starts its threads on the first next(). Records come out in no
    particular order. If the observer raises, the run is cancelled and the
    exception surfaces from the iterator.

    Usage:
        for details in DetailsPipeline(workers=8):
            print(details.num, details.actions, details.affinities)
    """

    def __init__(
        self,
        root: str = "",
        workers: int = DEFAULT_WORKERS,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        context: "Context | None" = None,
        observer: Observer | None = None,
        cancel: threading.Event | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            root: Path prefix of the proc and sys trees, "" for the live system
            workers: Number of concurrent reader threads
            queue_size: Capacity of the job and result queues
            context: Filesystem access (for testing)
            observer: Optional callable receiving (message, **extra) for
                every skipped IRQ; called from worker threads
            cancel: Optional event that cancels running iterations when set

        Raises:
            ValueError: If workers or queue_size is less than 1
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        if queue_size < 1:
            raise ValueError(f"queue_size must be at least 1, got {queue_size}")
        if context is None:
            from irqscan.core.context import Context
            context = Context()

        self.root = root.rstrip("/")
        self.workers = workers
        self.queue_size = queue_size
        self.context = context
        self.observer = observer
        self.cancel = cancel

    def __iter__(self) -> Iterator[IRQDetails]:
        return self._run()

    def _notify(self, message: str, **extra: Any) -> None:
        if self.observer is not None:
            self.observer(message, **extra)

    def _run(self) -> Iterator[IRQDetails]:
        run = _Run(self.queue_size, self.cancel)
        workers = [
            threading.Thread(
                target=self._work,
                args=(run,),
                name=f"irqscan-worker-{i}",
                daemon=True,
            )
            for i in range(self.workers)
        ]
        for worker in workers:
            worker.start()
        threading.Thread(
            target=self._produce, args=(run,), name="irqscan-producer", daemon=True
        ).start()
        threading.Thread(
            target=self._complete,
            args=(run, workers),
            name="irqscan-completion",
            daemon=True,
        ).start()

        try:
            while True:
                details = run.get(run.results)
                if details is END:
                    break
                yield details
            if run.error is not None:
                raise run.error
        finally:
            # Also reached when the caller closes or drops this generator.
            run.cancel()

    def _produce(self, run: _Run) -> None:
        """Feed the names of all IRQ directories to the workers."""
        try:
            self._feed(run)
        except Exception as e:
            run.fail(e)

    def _feed(self, run: _Run) -> None:
        path = self.root + SYS_KERNEL_IRQ_PATH
        try:
            entries = self.context.list_dir(path)
        except OSError as e:
            self._notify("IRQ directory unavailable", path=path, reason=str(e))
            entries = []
        for name, is_dir in entries:
            if not is_dir:
                continue
            if not run.put(run.jobs, name):
                return
        for _ in range(self.workers):
            if not run.put(run.jobs, END):
                return

    def _work(self, run: _Run) -> None:
        """Turn IRQ names from the job queue into details records."""
        scratch = bytearray(SCRATCH_SIZE)
        while True:
            name = run.get(run.jobs)
            if name is END:
                return
            try:
                details = self._collect(name, scratch)
            except Exception as e:
                run.fail(e)
                return
            if details is None:
                continue
            if not run.put(run.results, details):
                return

    def _complete(self, run: _Run, workers: list[threading.Thread]) -> None:
        """End the result queue once no worker can put into it anymore."""
        for worker in workers:
            worker.join()
        run.put(run.results, END)

    def _collect(self, name: str, scratch: bytearray) -> IRQDetails | None:
        """Read and parse the details of a single IRQ, None if unusable."""
        cur = Cursor(os.fsencode(name))
        num = cur.parse_uint()
        if num is None or not cur.at_end():
            self._notify("skipped IRQ", irq=name, reason="not an IRQ number")
            return None

        actions = self._read_line(
            self.root + SYS_KERNEL_IRQ_PATH + name + ACTIONS_NODE, name, scratch
        )
        if actions is None:
            return None
        affinity = self._read_line(
            self.root + PROC_IRQ_PATH + name + EFFECTIVE_AFFINITY_NODE, name, scratch
        )
        if affinity is None:
            return None
        affinities = parse_range_list(affinity)
        if not affinities:
            self._notify("skipped IRQ", irq=name, reason="no effective affinity")
            return None

        return IRQDetails(
            num=num,
            actions=actions.decode("utf-8", errors="replace").split(","),
            affinities=affinities,
        )

    def _read_line(self, path: str, name: str, scratch: bytearray) -> bytes | None:
        """Read a newline-terminated pseudo file, without its newline."""
        try:
            size = self.context.read_into(path, scratch)
        except OSError as e:
            self._notify("skipped IRQ", irq=name, path=path, reason=str(e))
            return None
        if size < 1:
            self._notify("skipped IRQ", irq=name, path=path, reason="empty file")
            return None
        if scratch[size - 1] != _NEWLINE:
            self._notify("skipped IRQ", irq=name, path=path, reason="missing newline")
            return None
        return bytes(scratch[: size - 1])


def all_irq_details(root: str = "", **kwargs: Any) -> Iterator[IRQDetails]:
    """
    Iterate over the actions and effective affinities of all numbered IRQs.

    IRQs lacking actions or affinity information are skipped; if the IRQ
    directory cannot be listed, nothing is produced.

    Args:
        root: Path prefix of the proc and sys trees, "" for the live system
        **kwargs: Further DetailsPipeline arguments (workers, queue_size,
            context, observer, cancel)

    Returns:
        Single-use iterator of IRQDetails in no particular order
    """
    return iter(DetailsPipeline(root, **kwargs))
