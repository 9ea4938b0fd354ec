"""Selection of the analysis used for a job's output."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from . import eslint, nextest, pyunittest, standard
from .lines import CommandOutputLine, LineAnalysis, LinePattern
from .standard import Report


class Analyzer(Enum):
    """A stateless operator building a report from command output lines."""

    STANDARD = "standard"
    NEXTEST = "nextest"
    ESLINT = "eslint"
    PYTHON_UNITTEST = "python_unittest"

    def analyze_line(self, line: CommandOutputLine) -> LineAnalysis:
        if self is Analyzer.ESLINT:
            return eslint.analyze_line(line)
        if self is Analyzer.NEXTEST:
            return nextest.analyze_line(line)
        if self is Analyzer.PYTHON_UNITTEST:
            return pyunittest.analyze_line(line)
        return standard.analyze_line(line)

    def build_report(
        self,
        cmd_lines: Iterable[CommandOutputLine],
        ignored_lines: Iterable[LinePattern] | None = None,
    ) -> Report:
        if self is Analyzer.ESLINT:
            return eslint.build_report(cmd_lines, self, ignored_lines)
        if self is Analyzer.PYTHON_UNITTEST:
            return pyunittest.build_report(cmd_lines, self, ignored_lines)
        # nextest reports are built the standard way
        return standard.build_report(cmd_lines, self, ignored_lines)