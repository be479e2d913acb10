"""Structural segmentation of extracted text into sections and tables.

Lines are folded one at a time into an immutable ``_SegmentState``; no
accumulator is mutated in place, so each call depends only on its arguments.
"""

import re
from functools import reduce
from pathlib import PureWindowsPath
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from knowledge_import.models.document import ContentMetadata, ParsedContent, Section, Table

# Returns a heading level for a line, or None when the line is body text
HeadingRule = Callable[[str], Optional[int]]

MAX_HEADING_LEVEL = 6
DETECTED_TABLE_TITLE = "Data Table"

_MARKDOWN_HEADING = re.compile(r"^(#+)\s*(.*)$")
_LAST_EXTENSION = re.compile(r"\.[^/.]+$")


def all_caps_heading(line: str) -> Optional[int]:
    """Treat an all-uppercase line longer than three characters as a level-2 heading.

    Pipe-delimited lines are never headings. Short acronyms and numeric lines
    that happen to be data will still match; pass ``heading_rule=None`` to
    ``segment_text`` to switch this off.
    """
    if len(line) > 3 and line == line.upper() and "|" not in line:
        return 2
    return None


class _OpenSection(NamedTuple):
    title: str
    level: int
    order: int
    lines: Tuple[str, ...] = ()

    def close(self) -> Section:
        return Section(
            title=self.title,
            level=self.level,
            content="\n".join(self.lines),
            order=self.order,
        )


class _SegmentState(NamedTuple):
    closed: Tuple[Section, ...] = ()
    current: Optional[_OpenSection] = None
    next_order: int = 1

    def start(self, title: str, level: int) -> "_SegmentState":
        closed = self.closed + (self.current.close(),) if self.current else self.closed
        return _SegmentState(
            closed=closed,
            current=_OpenSection(title=title, level=level, order=self.next_order),
            next_order=self.next_order + 1,
        )

    def append(self, line: str) -> "_SegmentState":
        if self.current is None:
            return self
        return self._replace(current=self.current._replace(lines=self.current.lines + (line,)))

    def finish(self) -> Tuple[Section, ...]:
        if self.current is None:
            return self.closed
        return self.closed + (self.current.close(),)


def _make_step(heading_rule: Optional[HeadingRule]):
    def step(state: _SegmentState, line: str) -> _SegmentState:
        if line.startswith("#"):
            match = _MARKDOWN_HEADING.match(line)
            level = min(len(match.group(1)), MAX_HEADING_LEVEL)
            return state.start(match.group(2).strip(), level)

        if heading_rule is not None:
            level = heading_rule(line)
            if level is not None:
                return state.start(line, min(max(level, 1), MAX_HEADING_LEVEL))

        return state.append(line)

    return step


def split_lines(text: str) -> List[str]:
    """Non-blank lines of ``text``, stripped."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def source_title(filename: str) -> str:
    """Base name of ``filename`` with its last extension removed."""
    base = PureWindowsPath(filename).name
    return _LAST_EXTENSION.sub("", base)


def detect_sections(
    lines: Sequence[str],
    heading_rule: Optional[HeadingRule] = all_caps_heading,
) -> List[Section]:
    """Partition stripped lines into sections; lines before the first heading are dropped."""
    state = reduce(_make_step(heading_rule), lines, _SegmentState())
    return list(state.finish())


def detect_pipe_table(lines: Sequence[str]) -> Optional[Table]:
    """
    Build one table from pipe-delimited lines.

    A candidate line contains ``|`` and splits into more than two fields. The
    first candidate supplies the headers and the rest supply rows; a single
    candidate line is not enough for a table.
    """
    candidates = [line for line in lines if "|" in line and len(line.split("|")) > 2]
    if len(candidates) < 2:
        return None

    grid = [[cell.strip() for cell in line.split("|") if cell.strip()] for line in candidates]
    return Table(title=DETECTED_TABLE_TITLE, headers=grid[0], rows=grid[1:])


def count_words(text: str) -> int:
    return len(text.split())


def segment_text(
    text: str,
    filename: str,
    tables: Optional[Sequence[Table]] = None,
    heading_rule: Optional[HeadingRule] = all_caps_heading,
) -> ParsedContent:
    """
    Turn extracted text into ``ParsedContent``.

    Args:
        text: Flat text from an extractor
        filename: Source filename, used to title the fallback section
        tables: Tables already read from the source. When given they are used
            as-is and pipe-table detection is skipped.
        heading_rule: Implicit heading classifier, or None to recognise only
            ``#`` headings

    Returns:
        ParsedContent with at least one section
    """
    lines = split_lines(text)
    sections = detect_sections(lines, heading_rule)

    if not sections:
        sections = [Section(title=source_title(filename), level=1, content=text, order=1)]

    if tables is None:
        detected = detect_pipe_table(lines)
        result_tables = [detected] if detected else []
    else:
        result_tables = list(tables)

    return ParsedContent(
        sections=sections,
        tables=result_tables,
        metadata=ContentMetadata(
            total_sections=len(sections),
            total_tables=len(result_tables),
            word_count=count_words(text),
        ),
    )
