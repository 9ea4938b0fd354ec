"""Line analysis and report building for eslint output."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Union

from . import burp
from .lines import (
    CommandOutputLine,
    ItemAccumulator,
    Kind,
    LineAnalysis,
    LinePattern,
    LineType,
    Stats,
    TLine,
    TString,
)
from .standard import LineAnalyzer, Report, is_ignored, line_analyzer_function

logger = logging.getLogger(__name__)

CSI_LOCATION_PATH = "\x1b[4m"
CSI_LINE_COL = "\x1b[2m"
CSI_ERROR = "\x1b[31m"
CSI_WARNING = "\x1b[33m"
CSI_SUM = "\x1b[31m\x1b[1m"

_LINE_COL = re.compile(r"\d+:\d+")
_SUM = re.compile(r"✖ \d+ problems \(\d+ errors, \d+ warnings\)")
_LOCATION_PATH = re.compile(r"\s*/\S+\.\w+s\s*")
_WHITESPACE = re.compile(r"\s+")


def analyze_line(cmd_line: CommandOutputLine) -> LineAnalysis:
    """Analyse one line of eslint output."""
    content = cmd_line.content
    if _is_line_col_line(content, CSI_ERROR, "error"):
        return LineAnalysis.of_type(LineType.title(Kind.ERROR))
    if _is_line_col_line(content, CSI_WARNING, "warning"):
        return LineAnalysis.of_type(LineType.title(Kind.WARNING))
    if _get_location_path(content) is not None:
        return LineAnalysis.of_type(LineType.LOCATION)
    if _is_sum(content):
        return LineAnalysis.of_type(LineType.title(Kind.SUM))
    return LineAnalysis.normal()


def build_report(
    cmd_lines: Iterable[CommandOutputLine],
    line_analyzer: Union[LineAnalyzer, object],
    ignored_lines: Iterable[LinePattern] | None = None,
) -> Report:
    """Build a report from eslint output.

    eslint gives the path of a file before its problems, each problem
    carrying only a line and column; every problem gets a location line.
    """
    analyze = line_analyzer_function(line_analyzer)
    ignored = list(ignored_lines) if ignored_lines is not None else None
    items = ItemAccumulator()
    last_location_path: str | None = None
    for cmd_line in cmd_lines:
        if is_ignored(cmd_line, ignored):
            continue
        line_type = analyze(cmd_line).line_type
        content = cmd_line.content
        if line_type == LineType.GARBAGE:
            continue
        if line_type.is_title:
            items.start_item(line_type.kind)
        elif line_type == LineType.LOCATION:
            path = _get_location_path(content)
            if path is not None:
                last_location_path = path
                continue
            logger.warning("unconsistent line parsing")
        items.push_line(line_type, _cleaned_tline(content))
        if line_type.is_title:
            if len(content.strings) < 2:
                logger.warning("unconsistent line parsing")
                continue
            if last_location_path is None:
                logger.warning("no location given before error")
                continue
            line_col = content.strings[1].raw
            items.push_line(
                LineType.LOCATION, burp.location_line(last_location_path, line_col)
            )
    lines = items.lines()
    stats = Stats.from_lines(lines)
    logger.debug("stats: %r", stats)
    return Report(lines=lines, stats=stats)


def _is_line_col_line(content: TLine, csi: str, word: str) -> bool:
    """Whether the line is like "  67:52  error  Some message  rule-name"."""
    if len(content.strings) < 4:
        return False
    first, second, third, fourth = content.strings[:4]
    return (
        first.is_blank()
        and second.csi == CSI_LINE_COL
        and _LINE_COL.fullmatch(second.raw) is not None
        and third.is_blank()
        and fourth.csi == csi
        and fourth.raw == word
    )


def _is_sum(content: TLine) -> bool:
    if not content.strings:
        return False
    first, *rest = content.strings
    if first.csi != CSI_SUM or _SUM.fullmatch(first.raw) is None:
        return False
    return all(s.is_blank() for s in rest)


def _get_location_path(content: TLine) -> str | None:
    if not content.strings:
        return None
    first = content.strings[0]
    if first.csi != CSI_LOCATION_PATH:
        return None
    if _LOCATION_PATH.fullmatch(first.raw) is None:
        return None
    return first.raw


def _cleaned_tline(content: TLine) -> TLine:
    """Drop the line:col part and collapse runs of blanks."""
    strings: list[TString] = []
    last_is_blank = True
    for ts in content.strings:
        if ts.csi == CSI_LINE_COL and _LINE_COL.fullmatch(ts.raw):
            continue
        raw = _WHITESPACE.sub(" ", ts.raw)
        is_blank = not raw.strip()
        if not (is_blank and last_is_blank):
            strings.append(TString(ts.csi, raw))
        last_is_blank = is_blank
    return TLine(strings)