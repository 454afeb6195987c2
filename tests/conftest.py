"""Shared test fixtures."""

import io
import sys
import threading
import time
from pathlib import Path

import pytest

# Add project root to path for irqscan and tests.conftest imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class MockContext:
    """Mock Context for testing without real /proc and /sys access."""

    def __init__(self, file_contents: dict[str, str | bytes | Exception] | None = None):
        self.file_contents = file_contents or {}
        self.files_read: list[str] = []
        self._lock = threading.Lock()

    def _content(self, path: str) -> bytes:
        with self._lock:
            self.files_read.append(path)
        if path not in self.file_contents:
            raise FileNotFoundError(f"No mock content for: {path}")
        content = self.file_contents[path]
        if isinstance(content, Exception):
            raise content
        if isinstance(content, str):
            content = content.encode()
        return content

    def open_binary(self, path: str) -> io.BytesIO:
        """Return mocked file content as a binary stream."""
        return io.BytesIO(self._content(path))

    def list_dir(self, path: str) -> list[tuple[str, bool]]:
        """List entries derived from the mocked file paths."""
        prefix = path.rstrip("/") + "/"
        entries: dict[str, bool] = {}
        for file_path in self.file_contents:
            if not file_path.startswith(prefix):
                continue
            name, sep, _ = file_path[len(prefix):].partition("/")
            entries[name] = entries.get(name, False) or bool(sep)
        if not entries:
            raise FileNotFoundError(f"No mock directory: {path}")
        return list(entries.items())

    def read_into(self, path: str, buffer: bytearray) -> int:
        """Copy mocked file content into the buffer."""
        content = self._content(path)
        if len(buffer) < len(content):
            buffer.extend(bytes(len(content) - len(buffer)))
        buffer[: len(content)] = content
        return len(content)


@pytest.fixture
def mock_context():
    """Factory fixture for creating MockContext instances."""
    def _create(**kwargs) -> MockContext:
        return MockContext(**kwargs)
    return _create


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return FIXTURES_DIR


def load_fixture(category: str, name: str) -> bytes:
    """Load a fixture file by category and name."""
    fixture_path = FIXTURES_DIR / category / name
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture not found: {fixture_path}")
    return fixture_path.read_bytes()


def irq_tree(root: Path, irqs: dict[str, tuple[str | None, str | None]]) -> Path:
    """
    Create a synthetic /sys/kernel/irq and /proc/irq tree.

    Args:
        root: Directory to create the tree in
        irqs: Maps IRQ directory names to (actions, effective affinity)
            file contents; None leaves the file out

    Returns:
        root
    """
    for name, (actions, affinity) in irqs.items():
        sys_dir = root / "sys" / "kernel" / "irq" / name
        proc_dir = root / "proc" / "irq" / name
        sys_dir.mkdir(parents=True, exist_ok=True)
        proc_dir.mkdir(parents=True, exist_ok=True)
        if actions is not None:
            (sys_dir / "actions").write_text(actions)
        if affinity is not None:
            (proc_dir / "effective_affinity_list").write_text(affinity)
    return root


def wait_for_threads_gone(prefix: str = "irqscan-", timeout: float = 2.0) -> list[str]:
    """Wait for pipeline threads to end; return the names still alive."""
    deadline = time.monotonic() + timeout
    while True:
        alive = [t.name for t in threading.enumerate() if t.name.startswith(prefix)]
        if not alive or time.monotonic() >= deadline:
            return alive
        time.sleep(0.01)


@pytest.fixture
def mixed_irq_root(tmp_path) -> Path:
    """Synthetic tree with two usable IRQs and several unusable entries."""
    root = irq_tree(tmp_path, {
        "42": ("foo,bar\n", "1-3,42\n"),
        "43": ("baz\n", "0-8,15\n"),
        "44": ("nonl", "1\n"),
        "45": ("qux\n", "\n"),
        "46": ("quux\n", None),
        "47": ("", "2\n"),
        "nonsense": ("foo\n", "1\n"),
    })
    (root / "sys" / "kernel" / "irq" / "99").write_text("not a directory\n")
    return root
