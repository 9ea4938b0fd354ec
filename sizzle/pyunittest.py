"""Line analysis and report building for Python unittest output."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Union

from . import burp
from .lines import (
    CommandOutputLine,
    ItemAccumulator,
    LineAnalysis,
    LinePattern,
    LineType,
    Stats,
)
from .standard import LineAnalyzer, Report, is_ignored, line_analyzer_function

logger = logging.getLogger(__name__)

_FAIL = re.compile(r"^FAIL:\s+\S+\s+\((?P<key>.+)\)")
_LOCATION = re.compile(r'^\s+File ".+", line \d+')
_LOCATION_PARTS = re.compile(r'\s+File "(.+)", line (\d+)')
_GARBAGE = (
    re.compile(r"={50,}").fullmatch,
    re.compile(r"-{50,}").fullmatch,
    re.compile(r"^Traceback \(most recent call last\)").search,
)


def analyze_line(cmd_line: CommandOutputLine) -> LineAnalysis:
    """Analyse one line of unittest output; styled lines are never special."""
    text = cmd_line.content.if_unstyled()
    if text is None:
        return LineAnalysis.normal()
    match = _FAIL.search(text)
    if match:
        return LineAnalysis.fail(match.group("key"))
    if _LOCATION.search(text):
        return LineAnalysis.of_type(LineType.LOCATION)
    if any(check(text) for check in _GARBAGE):
        return LineAnalysis.garbage()
    return LineAnalysis.normal()


def build_report(
    cmd_lines: Iterable[CommandOutputLine],
    line_analyzer: Union[LineAnalyzer, object],
    ignored_lines: Iterable[LinePattern] | None = None,
) -> Report:
    """Build a report from unittest output.

    The first location of each failure is rewritten as a BURP location line.
    """
    analyze = line_analyzer_function(line_analyzer)
    ignored = list(ignored_lines) if ignored_lines is not None else None
    items = ItemAccumulator()
    location_written = False
    for cmd_line in cmd_lines:
        if is_ignored(cmd_line, ignored):
            continue
        line_type = analyze(cmd_line).line_type
        if line_type == LineType.GARBAGE:
            continue
        if line_type.is_title:
            items.start_item(line_type.kind)
            location_written = False
        elif line_type == LineType.LOCATION and not location_written:
            text = cmd_line.content.if_unstyled()
            if text is not None:
                match = _LOCATION_PARTS.search(text)
                if match:
                    path, line = match.groups()
                    items.push_line(LineType.LOCATION, burp.location_line(path, line))
                    location_written = True
                else:
                    logger.warning("unconsistent line parsing")
                continue
        items.push_line(line_type, cmd_line.content)
    lines = items.lines()
    stats = Stats.from_lines(lines)
    logger.debug("stats: %r", stats)
    return Report(lines=lines, stats=stats)