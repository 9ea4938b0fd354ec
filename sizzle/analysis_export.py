"""Export of the line by line analysis of a command's output."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from .analyzer import Analyzer
from .lines import CommandOutputLine, LineAnalysis, LineType

_UNIT_LINE_TYPES = {
    "section_end": "SectionEnd",
    "location": "Location",
    "backtrace_suggestion": "BacktraceSuggestion",
    "garbage": "Garbage",
    "normal": "Normal",
}


class CommandResultKind(Enum):
    REPORT = "report"
    FAILURE = "failure"


@dataclass
class LineAnalysisExport:
    """One line of output with its analysis."""

    line: CommandOutputLine
    analysis: LineAnalysis

    def _to_data(self) -> dict[str, Any]:
        return {"line": _output_line_data(self.line), "analysis": _analysis_data(self.analysis)}


@dataclass
class AnalysisExport:
    """The analysis of every output line of a command."""

    analyzer: Analyzer = Analyzer.STANDARD
    result: CommandResultKind = CommandResultKind.REPORT
    lines: list[LineAnalysisExport] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        analyzer: Analyzer,
        result_kind: CommandResultKind | None,
        lines: Iterable[CommandOutputLine],
    ) -> AnalysisExport | None:
        """Analyse the lines; there's nothing to export without a result."""
        if result_kind is None:
            return None
        return cls(
            analyzer=analyzer,
            result=result_kind,
            lines=[LineAnalysisExport(line, analyzer.analyze_line(line)) for line in lines],
        )

    def to_json(self) -> str:
        """Pretty printed JSON of the export."""
        data = {
            "analyzer": self.analyzer.value,
            "result": self.result.value,
            "lines": [line._to_data() for line in self.lines],
        }
        return json.dumps(data, indent=2, ensure_ascii=False)


def _line_type_data(line_type: LineType) -> Any:
    if line_type.is_title:
        return {"Title": line_type.kind.value}
    if line_type.name == "test_result":
        return {"TestResult": line_type.passed}
    return _UNIT_LINE_TYPES[line_type.name]


def _analysis_data(analysis: LineAnalysis) -> dict[str, Any]:
    data: dict[str, Any] = {"line_type": _line_type_data(analysis.line_type)}
    if analysis.key is not None:
        data["key"] = analysis.key
    return data


def _output_line_data(line: CommandOutputLine) -> dict[str, Any]:
    return {
        "content": {"strings": [{"csi": s.csi, "raw": s.raw} for s in line.content.strings]},
        "origin": line.origin.value,
    }