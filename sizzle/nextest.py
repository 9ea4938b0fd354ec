"""Line analysis for cargo nextest output."""

from __future__ import annotations

import re
from typing import Iterator, Sequence

from . import standard
from .lines import CommandOutputLine, Kind, LineAnalysis, LineType, TLine, TString

CSI_TITLE = "\x1b[35;1m"
CSI_OK = "\x1b[32;1m"
CSI_ERROR = "\x1b[31;1m"

_STD_STREAM = re.compile(r"^STD(OUT|ERR):\s*$")
_RUNNING_TESTS = re.compile(r"^running \d+ tests?$")


def analyze_line(cmd_line: CommandOutputLine) -> LineAnalysis:
    """Analyse one line of nextest output, falling back on the standard analysis."""
    content = cmd_line.content
    key = title_key(content)
    if key is not None:
        return LineAnalysis.title_key(Kind.TEST_FAIL, key)
    result = as_test_result(content)
    if result is not None:
        return LineAnalysis.test_result(*result)
    if is_canceling(content):
        return LineAnalysis.of_type(LineType.SECTION_END)
    if is_error_test_run_failed(content):
        return LineAnalysis.of_type(LineType.GARBAGE)
    text = content.if_unstyled()
    if text is not None:
        if _RUNNING_TESTS.search(text):
            return LineAnalysis.of_type(LineType.GARBAGE)
        if text == "------------":
            return LineAnalysis.of_type(LineType.SECTION_END)
    # compilation warnings and errors are still the standard ones
    return standard.analyze_line(cmd_line)


def title_key(content: TLine) -> str | None:
    """The key when the line is like "--- STDOUT: crate some::key ---"."""
    strings = content.strings
    if len(strings) < 2:
        return None
    if strings[0].raw != "--- ":
        return None
    if not _STD_STREAM.search(strings[1].raw):
        return None
    return _extract_key_after_crate_name(strings[2:])


def _extract_key_after_crate_name(strings: Sequence[TString]) -> str | None:
    rest: Iterator[TString] = iter(strings[2:])  # skip crate name and blank
    key = ""
    for s in rest:
        if not s.csi:
            continue
        if s.raw == " ---" or s.csi == CSI_TITLE:
            break
        key += s.raw
    if next(rest, None) is not None:
        return None
    return key or None


def is_error_test_run_failed(content: TLine) -> bool:
    """Whether the line is nextest's "error: test run failed"."""
    if len(content.strings) != 2:
        return False
    first, second = content.strings
    return (
        first.csi == CSI_ERROR
        and first.raw.strip() == "error"
        and second.raw.strip() == ": test run failed"
    )


def is_canceling(content: TLine) -> bool:
    """Whether the line announces that nextest is canceling the run."""
    if not content.strings:
        return False
    first = content.strings[0]
    return first.csi == CSI_ERROR and first.raw.strip() == "Canceling"


def as_test_result(content: TLine) -> tuple[str, bool] | None:
    """The key and whether the test passed, for lines like "PASS [ 0.003s] crate key"."""
    strings = content.strings
    if not strings:
        return None
    first = strings[0]
    outcome = (first.csi, first.raw.strip())
    if outcome == (CSI_OK, "PASS"):
        passed = True
    elif outcome == (CSI_ERROR, "FAIL"):
        passed = False
    else:
        return None
    if len(strings) < 2 or strings[1].csi:
        return None
    key = _extract_key_after_crate_name(strings[2:])
    if key is None:
        return None
    return key, passed