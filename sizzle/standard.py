"""Line analysis and report building for standard cargo and rustc output."""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence, Union

from .lines import (
    CSI_BOLD,
    CSI_BOLD_4BIT_YELLOW,
    CSI_BOLD_BLUE,
    CSI_BOLD_RED,
    CSI_BOLD_WHITE,
    CSI_BOLD_YELLOW,
    CSI_GREEN,
    CSI_RED,
    CommandOutputLine,
    CommandStream,
    Kind,
    Line,
    LineAnalysis,
    LinePattern,
    LineType,
    Stats,
    TLine,
    TString,
)

logger = logging.getLogger(__name__)

_ON_WINDOWS = sys.platform == "win32"

CSI_ERROR_BODY = CSI_BOLD_WHITE if _ON_WINDOWS else CSI_BOLD
_WARNING_TITLE_CSIS = (
    (CSI_BOLD_YELLOW, CSI_BOLD_4BIT_YELLOW) if _ON_WINDOWS else (CSI_BOLD_YELLOW,)
)

_TEST_NAME = re.compile(
    r"^(?:test\s+)?(.+?)(?: - should panic\s*)?(?: - compile\s*)?\s+...\s*$"
)
_TEST_RESULT = re.compile(
    r"^(?:test\s+)?(.+?)(?: - should panic\s*)?(?: - compile\s*)?\s+...\s+(\w+)$"
)
_FAIL_TITLE = re.compile(r"^---- (.+) stdout ----$")
_UNSTYLED_ERROR = re.compile(r"^error: ")
_ABORTING = re.compile(r"^error: aborting due to")
_UNSTYLED_WARNING = re.compile(r"^warning: ")
_GENERATED_WARNINGS_END = re.compile(r"generated \d+ warnings?$")
_FAILURES = re.compile(r"^failures:$")
_BACKTRACE = re.compile(r"[Rr]un with (`)?RUST_BACKTRACE=")
_TEST_LOCATION = re.compile(r""", [^:\s'"]+:\d+:\d+$""")
_ARROW_LOCATION = re.compile(r"""^\s+--> [^:\s'"]+:\d+:\d+$""")
_PANIC_LOCATION = re.compile(r"""^thread '.+' panicked at [^:\s'"]+:\d+:\d+:$""")
_N_WARNINGS_EMITTED = re.compile(r"^: \d+ warnings? emitted")
_GENERATED_WARNINGS = re.compile(r"generated \d+ warnings?")
_BUILD_FAILED = re.compile(r"^\s*build failed")

_ASCII_WHITESPACE = frozenset(" \t\n\r\x0c")

LineAnalyzer = Callable[[CommandOutputLine], LineAnalysis]


@dataclass
class Report:
    """The result of analysing the whole output of a command."""

    lines: list[Line] = field(default_factory=list)
    stats: Stats = field(default_factory=Stats)
    suggest_backtrace: bool = False
    output: list[CommandOutputLine] = field(default_factory=list)
    failure_keys: list[str] = field(default_factory=list)


def analyze_line(cmd_line: CommandOutputLine) -> LineAnalysis:
    """Analyse one line of cargo, rustc or cargo test output."""
    content = cmd_line.content
    if content.is_blank():
        return LineAnalysis.normal()
    text = content.if_unstyled()
    if text is not None:
        return _analyze_unstyled(text, cmd_line.origin)
    return _analyze_styled(content)


def _analyze_unstyled(text: str, origin: CommandStream) -> LineAnalysis:
    result = _as_test_result(text)
    if result is not None:
        key, passed = result
        return LineAnalysis.test_result(key, passed)
    key = _as_fail_result_title(text)
    if key is not None:
        return LineAnalysis.title_key(Kind.TEST_FAIL, key)
    if (
        origin is CommandStream.STDERR
        and _UNSTYLED_ERROR.search(text)
        and not _ABORTING.search(text)
    ):
        # errors without styling, as produced by miri for example
        return LineAnalysis.of_type(LineType.title(Kind.ERROR))
    if (
        origin is CommandStream.STDERR
        and _UNSTYLED_WARNING.search(text)
        and not _GENERATED_WARNINGS_END.search(text)
    ):
        return LineAnalysis.of_type(LineType.title(Kind.WARNING))
    if _FAILURES.search(text):
        return LineAnalysis.of_type(LineType.title(Kind.SUM))
    if _BACKTRACE.search(text):
        return LineAnalysis.of_type(LineType.BACKTRACE_SUGGESTION)
    if (
        _TEST_LOCATION.search(text)
        or _ARROW_LOCATION.search(text)
        or _PANIC_LOCATION.search(text)
    ):
        return LineAnalysis.of_type(LineType.LOCATION)
    return LineAnalysis.normal()


def _analyze_styled(content: TLine) -> LineAnalysis:
    if len(content.strings) < 2:
        return LineAnalysis.normal()
    title, body = content.strings[0], content.strings[1]
    if title.csi == CSI_BOLD_RED and body.csi == CSI_ERROR_BODY:
        if title.raw == "error" and body.raw.startswith(": aborting due to"):
            return LineAnalysis.of_type(LineType.title(Kind.SUM))
        if title.raw.startswith("error"):
            return LineAnalysis.of_type(LineType.title(Kind.ERROR))
    if title.csi in _WARNING_TITLE_CSIS and title.raw == "warning":
        return LineAnalysis.of_type(_determine_warning_type(body.raw, content))
    if title.csi == "":
        if body.csi == CSI_BOLD_BLUE and body.raw == "--> " and _is_spaces(title.raw):
            return LineAnalysis.of_type(LineType.LOCATION)
        if (
            body.csi in (CSI_BOLD_RED, CSI_RED)
            and body.raw == "FAILED"
            and len(content.strings) == 2
        ):
            return _named_test_result(title.raw, False)
        if body.csi == CSI_GREEN and body.raw == "ok":
            return _named_test_result(title.raw, True)
    return LineAnalysis.normal()


def _named_test_result(text: str, passed: bool) -> LineAnalysis:
    key = _as_test_name(text)
    if key is None:
        return LineAnalysis.normal()
    return LineAnalysis.test_result(key, passed)


def _determine_warning_type(body_raw: str, content: TLine) -> LineType:
    strings = content.strings
    if (
        _N_WARNINGS_EMITTED.search(body_raw)
        or _is_generated_n_warnings(strings)
        or _is_build_failed(strings[2] if len(strings) > 2 else None)
    ):
        return LineType.title(Kind.SUM)
    return LineType.title(Kind.WARNING)


def _is_spaces(text: str) -> bool:
    return all(c in _ASCII_WHITESPACE for c in text)


def _is_generated_n_warnings(strings: Sequence[TString]) -> bool:
    return any(_GENERATED_WARNINGS.search(s.raw) for s in strings)


def _is_build_failed(string: TString | None) -> bool:
    return string is not None and _BUILD_FAILED.search(string.raw) is not None


def _as_test_name(text: str) -> str | None:
    """The test name of a styled result line, without the FAILED or ok part."""
    match = _TEST_NAME.search(text)
    return match.group(1) if match else None


def _as_test_result(text: str) -> tuple[str, bool] | None:
    """The key and outcome of a line like "test some::test ... ok"."""
    match = _TEST_RESULT.search(text)
    if match is None:
        return None
    key, outcome = match.group(1), match.group(2)
    if outcome == "ok":
        return key, True
    if outcome == "FAILED":
        return key, False
    logger.warning("unrecognized doctest outcome: %r", outcome)
    return None


def _as_fail_result_title(text: str) -> str | None:
    """The key of a line like "---- key stdout ----"."""
    match = _FAIL_TITLE.search(text)
    return match.group(1) if match else None


def is_ignored(
    cmd_line: CommandOutputLine, ignored_lines: Iterable[LinePattern] | None
) -> bool:
    """Whether the raw text of the line matches one of the patterns."""
    if not ignored_lines:
        return False
    raw = cmd_line.content.to_raw()
    if any(pattern.raw_line_is_match(raw) for pattern in ignored_lines):
        logger.debug("ignoring line: %s", raw)
        return True
    return False


def line_analyzer_function(line_analyzer: object) -> LineAnalyzer:
    """Accept either an analyzer object or a plain line analysing function."""
    return getattr(line_analyzer, "analyze_line", line_analyzer)


def build_report(
    cmd_lines: Iterable[CommandOutputLine],
    line_analyzer: Union[LineAnalyzer, object],
    ignored_lines: Iterable[LinePattern] | None = None,
) -> Report:
    """Build a report, errors first, then test failures, then warnings.

    ``line_analyzer`` is either a function analysing one line or an object
    with an ``analyze_line`` method.
    """
    analyze = line_analyzer_function(line_analyzer)
    ignored = list(ignored_lines) if ignored_lines is not None else None
    warnings: list[Line] = []
    errors: list[Line] = []
    fails: list[Line] = []
    failures: dict[str, bool] = {}  # key -> whether a title was seen
    passed_tests = 0
    cur_kind: Kind | None = None
    in_out_fail = False
    suggest_backtrace = False

    def push_by_kind(line: Line, with_fails: bool) -> None:
        if cur_kind is Kind.WARNING:
            warnings.append(line)
        elif cur_kind is Kind.ERROR:
            errors.append(line)
        elif with_fails and cur_kind is Kind.TEST_FAIL:
            fails.append(line)

    for cmd_line in cmd_lines:
        if is_ignored(cmd_line, ignored):
            continue
        analysis = analyze(cmd_line)
        line_type, key = analysis.line_type, analysis.key
        line = Line(0, line_type, TLine(list(cmd_line.content.strings)))
        if line_type == LineType.GARBAGE:
            continue
        if line_type.name == "test_result" and key is not None:
            if line_type.passed:
                passed_tests += 1
            else:
                # the failure section should come later
                failures.setdefault(key, False)
        elif line_type == LineType.title(Kind.TEST_FAIL) and key is not None:
            had_title = failures.get(key, False)
            failures[key] = True
            in_out_fail = True
            cur_kind = Kind.TEST_FAIL
            if had_title:
                # nextest gives a title for stdout and another for stderr
                continue
            line.content = TLine.failed(key)
            fails.append(line)
        elif line_type == LineType.NORMAL and key is None:
            if line.content.is_blank():
                if cur_kind is Kind.TEST_FAIL:
                    if fails and (
                        fails[-1].line_type != LineType.NORMAL
                        or fails[-1].content.is_blank()
                    ):
                        continue
                else:
                    in_out_fail = False
            if in_out_fail:
                fails.append(line)
            else:
                push_by_kind(line, with_fails=False)
        elif key is None and (
            line_type == LineType.title(Kind.SUM) or line_type == LineType.SECTION_END
        ):
            cur_kind = None
            in_out_fail = False
        elif line_type.is_title:
            cur_kind = line_type.kind
            push_by_kind(line, with_fails=False)
        elif line_type == LineType.BACKTRACE_SUGGESTION:
            suggest_backtrace = True
        elif line_type == LineType.LOCATION:
            push_by_kind(line, with_fails=True)

    for key, has_title in failures.items():
        if has_title:
            continue
        fails.append(Line(0, LineType.title(Kind.TEST_FAIL), TLine.failed(key)))
        fails.append(Line(0, LineType.NORMAL, TLine.italic("no output")))

    lines = [*errors, *fails, *warnings]
    item_idx = 0
    for line in lines:
        if line.line_type.is_title:
            item_idx += 1
        line.item_idx = item_idx
    stats = Stats.from_lines(lines)
    stats.passed_tests = passed_tests
    logger.debug("stats: %r", stats)
    return Report(
        lines=lines,
        stats=stats,
        suggest_backtrace=suggest_backtrace,
        failure_keys=list(failures),
    )