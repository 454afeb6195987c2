"""Forward-only scanner over a single line of kernel pseudo-file text."""

# Largest value an unsigned 64-bit kernel counter can hold.
UINT64_MAX = 2**64 - 1

_SPACE = 0x20
_DIGIT_0 = 0x30
_DIGIT_9 = 0x39


class Cursor:
    """
    Parse position within one line of bytes.

    The line is borrowed, not copied: a cursor is only meaningful while
    the line it was created for is still the current one. The position
    never moves backwards. Bytes from end on are outside the line, so a
    trailing line ending can be excluded without slicing.
    """

    __slots__ = ("buf", "pos", "end")

    def __init__(self, buf: bytes, pos: int = 0, end: int | None = None):
        self.buf = buf
        self.pos = pos
        self.end = len(buf) if end is None else end

    def at_end(self) -> bool:
        """True when the whole line has been consumed."""
        return self.pos >= self.end

    def skip_spaces(self) -> bool:
        """
        Skip over space (0x20) characters; tabs are not spaces here.

        Returns:
            True if the end of the line was reached while skipping
        """
        buf = self.buf
        pos = self.pos
        end = self.end
        while pos < end and buf[pos] == _SPACE:
            pos += 1
        self.pos = pos
        return pos >= end

    def skip_literal(self, text: bytes) -> bool:
        """
        Skip text at the current position if it is there.

        Args:
            text: Bytes expected at the current position

        Returns:
            True if text matched and was skipped; otherwise the position
            is left unchanged
        """
        end = self.pos + len(text)
        if self.pos >= self.end or end > self.end:
            return False
        if self.buf[self.pos:end] != text:
            return False
        self.pos = end
        return True

    def parse_uint(self) -> int | None:
        """
        Parse an unsigned decimal number at the current position.

        At least one digit is required; the longest run of digits is
        consumed. Numbers that do not fit into 64 bits are rejected.

        Returns:
            The number, or None with the position unchanged
        """
        buf = self.buf
        pos = self.pos
        end = self.end
        num = 0
        while pos < end:
            ch = buf[pos]
            if ch < _DIGIT_0 or ch > _DIGIT_9:
                break
            num = num * 10 + (ch - _DIGIT_0)
            pos += 1
        if pos == self.pos or num > UINT64_MAX:
            return None
        self.pos = pos
        return num

    def count_fields(self) -> int:
        """
        Count the space-separated fields from the current position on.

        Does not change the position.
        """
        buf = self.buf
        pos = self.pos
        end = self.end
        num = 0
        while True:
            while pos < end and buf[pos] == _SPACE:
                pos += 1
            if pos >= end:
                return num
            num += 1
            while pos < end and buf[pos] != _SPACE:
                pos += 1

    def next(self) -> int | None:
        """Consume and return the next byte, or None at the end of the line."""
        if self.pos >= self.end:
            return None
        ch = self.buf[self.pos]
        self.pos += 1
        return ch

    def __repr__(self) -> str:
        return f"Cursor({self.buf!r}, pos={self.pos}, end={self.end})"
