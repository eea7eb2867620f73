from typing import List, TextIO

from atmfjstc.lib.kotlin_codegen.errors import EmitStateError


WRAP_POINT = '♢'
NON_BREAKING_SPACE = '·'

_SPECIAL_CHARACTERS = (' ', '\n', NON_BREAKING_SPACE, WRAP_POINT)


class LineWrapper:
    """
    Implements soft line wrapping on top of a text sink.

    Text is added using `append`, which interprets formatting characters:

    - ``♢`` marks a wrap point: a place where a line break may be inserted instead of a space
    - ``\\n`` forces a line break
    - ``·`` and plain spaces are rendered as non-breaking spaces

    Use `append_non_wrapping` to add text that never wraps and is never interpreted.

    The text of the current line is held as a list of segments separated by wrap points, and is only laid out once the
    line is complete (at a newline, or when the wrapper is closed). At that point, segments are joined by spaces for as
    long as they fit within the column limit; whenever a segment would overflow, a line break is emitted instead,
    followed by the indentation and line prefix that were in effect for the wraps on that line. A single segment wider
    than the limit is emitted unbroken.

    Widths are measured in codepoints.
    """

    _out: TextIO
    _indent: str
    _column_limit: int
    _closed: bool = False

    # Never empty: contains a lone empty string if no text was added since the last newline
    _segments: List[str]
    _indent_level: int = -1
    _line_prefix: str = ''

    def __init__(self, out: TextIO, indent: str, column_limit: int):
        self._out = out
        self._indent = indent
        self._column_limit = column_limit
        self._segments = ['']

    @property
    def has_pending_segments(self) -> bool:
        """Whether there is any buffered text for the current line"""
        return (len(self._segments) != 1) or (self._segments[0] != '')

    def append(self, text: str, indent_level: int = -1, line_prefix: str = ''):
        """
        Adds text, handling formatting characters.

        Args:
            text: The text to add
            indent_level: The number of indents to apply to lines created by wrapping at the wrap points in this
                text
            line_prefix: A prefix to add after the indentation in lines created by wrapping (e.g. `` * `` in doc
                comments)
        """
        self._check_not_closed()

        pos = 0
        while pos < len(text):
            char = text[pos]

            if char == WRAP_POINT:
                self._indent_level = indent_level
                self._line_prefix = line_prefix
                self._segments.append('')
                pos += 1
            elif char == '\n':
                self.newline()
                pos += 1
            elif char in (' ', NON_BREAKING_SPACE):
                self._segments[-1] += ' '
                pos += 1
            else:
                next_pos = _find_any(text, _SPECIAL_CHARACTERS, pos)
                self._segments[-1] += text[pos:next_pos]
                pos = next_pos

    def append_non_wrapping(self, text: str):
        """Adds text verbatim. The text must not contain newlines."""
        self._check_not_closed()
        if '\n' in text:
            raise ValueError(f"Non-wrapping text must be a single-line string, got {text!r}")

        self._segments[-1] += text

    def newline(self):
        self._check_not_closed()

        self._emit_current_line()
        self._out.write('\n')
        self._indent_level = -1

    def close(self):
        """Flushes any outstanding text and forbids future writes to this line wrapper."""
        if self._closed:
            return

        self._emit_current_line()
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _check_not_closed(self):
        if self._closed:
            raise EmitStateError("Line wrapper is closed")

    def _emit_current_line(self):
        start = 0
        column_count = len(self._segments[0])

        for index in range(1, len(self._segments)):
            segment = self._segments[index]
            new_column_count = column_count + 1 + len(segment)

            # If this segment doesn't fit in the current run, print the current run and start a new one
            if new_column_count > self._column_limit:
                self._emit_segment_range(start, index)
                start = index
                column_count = len(segment) + len(self._indent) * max(self._indent_level, 0)
                continue

            column_count = new_column_count

        self._emit_segment_range(start, len(self._segments))

        self._segments = ['']

    def _emit_segment_range(self, start: int, end: int):
        # A wrapped line needs a newline and an indent
        if start > 0:
            self._out.write('\n' + self._indent * max(self._indent_level, 0) + self._line_prefix)

        self._out.write(' '.join(self._segments[start:end]))


def _find_any(text: str, chars, start: int) -> int:
    positions = [pos for pos in (text.find(char, start) for char in chars) if pos != -1]

    return min(positions) if len(positions) > 0 else len(text)
