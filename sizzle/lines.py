"""Lines of command output, their analysis and the accumulation of report items."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterable

CSI_RESET = "\x1b[0m"
CSI_BOLD = "\x1b[1m"
CSI_ITALIC = "\x1b[3m"
CSI_RED = "\x1b[31m"
CSI_GREEN = "\x1b[32m"
CSI_BOLD_RED = "\x1b[1m\x1b[38;5;9m"
CSI_BOLD_YELLOW = "\x1b[1m\x1b[33m"
CSI_BOLD_4BIT_YELLOW = "\x1b[1m\x1b[38;5;11m"
CSI_BOLD_BLUE = "\x1b[1m\x1b[38;5;12m"
CSI_BOLD_WHITE = "\x1b[1m\x1b[38;5;15m"
CSI_BOLD_ORANGE = "\x1b[1m\x1b[38;5;208m"
CSI_FAILED_BADGE = "\x1b[1m\x1b[38;5;235m\x1b[48;5;208m"

_CSI_SEQUENCE = re.compile(r"\x1b\[([0-9;?]*)([@-~])")


class Kind(Enum):
    """A kind of report section."""

    WARNING = "Warning"
    ERROR = "Error"
    TEST_FAIL = "TestFail"
    SUM = "Sum"


@dataclass(frozen=True)
class LineType:
    """The type of a line of output, possibly carrying a kind or a test outcome."""

    name: str
    kind: Kind | None = None
    passed: bool | None = None

    SECTION_END: ClassVar[LineType]
    LOCATION: ClassVar[LineType]
    BACKTRACE_SUGGESTION: ClassVar[LineType]
    GARBAGE: ClassVar[LineType]
    NORMAL: ClassVar[LineType]

    @staticmethod
    def title(kind: Kind) -> LineType:
        """The start of a section of the given kind."""
        return LineType("title", kind=kind)

    @staticmethod
    def test_result(passed: bool) -> LineType:
        """A line telling whether a test passed."""
        return LineType("test_result", passed=passed)

    @property
    def is_title(self) -> bool:
        return self.name == "title"

    def cols(self) -> int:
        """Width of the left margin used when drawing a line of this type."""
        return 3 if self.is_title else 0

    def draw(self, item_idx: int) -> str:
        """Return the margin badge for a line of this type."""
        if not self.is_title:
            return ""
        label = f"{item_idx:^3}"
        if self.kind is Kind.ERROR:
            return f"\x1b[1m\x1b[30m\x1b[41m{label}{CSI_RESET}"
        if self.kind is Kind.TEST_FAIL:
            return f"{CSI_FAILED_BADGE}{label}{CSI_RESET}{CSI_RESET}"
        if self.kind is Kind.WARNING:
            return f"\x1b[1m\x1b[30m\x1b[43m{label}{CSI_RESET}"
        return ""


LineType.SECTION_END = LineType("section_end")
LineType.LOCATION = LineType("location")
LineType.BACKTRACE_SUGGESTION = LineType("backtrace_suggestion")
LineType.GARBAGE = LineType("garbage")
LineType.NORMAL = LineType("normal")


@dataclass(frozen=True)
class TString:
    """A run of text sharing one terminal style sequence."""

    csi: str = ""
    raw: str = ""

    def is_blank(self) -> bool:
        return not self.raw.strip()


@dataclass
class TLine:
    """A line of styled terminal text."""

    strings: list[TString] = field(default_factory=list)

    def to_raw(self) -> str:
        """The text of the line without any style."""
        return "".join(s.raw for s in self.strings)

    def is_blank(self) -> bool:
        return all(s.is_blank() for s in self.strings)

    def if_unstyled(self) -> str | None:
        """The raw text when the line is a single unstyled string."""
        if len(self.strings) == 1 and not self.strings[0].csi:
            return self.strings[0].raw
        return None

    @classmethod
    def from_tty(cls, text: str) -> TLine:
        """Parse a line of terminal output containing ANSI style sequences."""
        text = text.rstrip("\r\n").replace("\t", "    ")
        strings: list[TString] = []
        csi = ""
        raw = ""
        pos = 0
        for match in _CSI_SEQUENCE.finditer(text):
            raw += text[pos : match.start()]
            pos = match.end()
            if raw:
                strings.append(TString(csi, raw))
                csi = ""
                raw = ""
            if match.group(2) != "m":
                continue
            if match.group(1) in ("", "0"):
                csi = ""
            else:
                csi += match.group(0)
        raw += text[pos:]
        if raw:
            strings.append(TString(csi, raw))
        return cls(strings)

    @classmethod
    def failed(cls, key: str) -> TLine:
        """A title line for a failed test."""
        return cls(
            [
                TString(CSI_FAILED_BADGE, " FAILED "),
                TString("", " "),
                TString(CSI_BOLD_ORANGE, key),
            ]
        )

    @classmethod
    def italic(cls, text: str) -> TLine:
        return cls([TString(CSI_ITALIC, text)])


class CommandStream(Enum):
    STDOUT = "StdOut"
    STDERR = "StdErr"


@dataclass
class CommandOutputLine:
    """A line produced by a command, with the stream it came from."""

    content: TLine
    origin: CommandStream


@dataclass
class Line:
    """A line of a report, belonging to the numbered item."""

    item_idx: int
    line_type: LineType
    content: TLine


@dataclass(frozen=True)
class LineAnalysis:
    """The result of analysing one line of output."""

    line_type: LineType
    key: str | None = None

    @classmethod
    def of_type(cls, line_type: LineType) -> LineAnalysis:
        return cls(line_type)

    @classmethod
    def normal(cls) -> LineAnalysis:
        return cls(LineType.NORMAL)

    @classmethod
    def garbage(cls) -> LineAnalysis:
        return cls(LineType.GARBAGE)

    @classmethod
    def title_key(cls, kind: Kind, key: str) -> LineAnalysis:
        return cls(LineType.title(kind), key)

    @classmethod
    def fail(cls, key: str) -> LineAnalysis:
        return cls(LineType.title(Kind.TEST_FAIL), str(key))

    @classmethod
    def test_result(cls, key: str, passed: bool) -> LineAnalysis:
        return cls(LineType.test_result(passed), key)


@dataclass(frozen=True)
class LinePattern:
    """A regular expression matched against raw lines."""

    regex: re.Pattern

    @classmethod
    def parse(cls, text: str) -> LinePattern:
        try:
            return cls(re.compile(text))
        except re.error as e:
            raise ValueError(f"invalid regex: {e}") from e

    def raw_line_is_match(self, line: str) -> bool:
        return self.regex.search(line) is not None


@dataclass
class Stats:
    """Number of lines per type in a report."""

    warnings: int = 0
    errors: int = 0
    test_fails: int = 0
    passed_tests: int = 0
    location_lines: int = 0
    normal_lines: int = 0

    @classmethod
    def from_lines(cls, lines: Iterable[Line]) -> Stats:
        stats = cls()
        for line in lines:
            line_type = line.line_type
            if line_type.is_title and line_type.kind is Kind.ERROR:
                stats.errors += 1
            elif line_type.is_title and line_type.kind is Kind.WARNING:
                stats.warnings += 1
            elif line_type.is_title and line_type.kind is Kind.TEST_FAIL:
                stats.test_fails += 1
            elif line_type == LineType.LOCATION:
                stats.location_lines += 1
            else:
                stats.normal_lines += 1
        return stats

    def lines(self, summary: bool) -> int:
        total = self.warnings + self.errors + self.test_fails + self.location_lines
        if not summary:
            total += self.normal_lines
        return total

    def items(self) -> int:
        return self.warnings + self.errors + self.test_fails

    def can_scope_tests(self) -> bool:
        return self.passed_tests > 0 and self.test_fails > 0


class ItemAccumulator:
    """Collects lines into items, then lists them errors first, warnings last."""

    def __init__(self) -> None:
        self._kind: Kind | None = None
        self._errors: list[Line] = []
        self._test_fails: list[Line] = []
        self._warnings: list[Line] = []

    def start_item(self, kind: Kind) -> None:
        self._kind = kind

    def push_line(self, line_type: LineType, content: TLine) -> None:
        line = Line(0, line_type, content)
        if self._kind is Kind.WARNING:
            self._warnings.append(line)
        elif self._kind is Kind.ERROR:
            self._errors.append(line)
        elif self._kind is Kind.TEST_FAIL:
            self._test_fails.append(line)

    def lines(self) -> list[Line]:
        """Return all lines, ordered and numbered by item."""
        lines = [*self._errors, *self._test_fails, *self._warnings]
        item_idx = 0
        for line in lines:
            if line.line_type.is_title:
                item_idx += 1
            line.item_idx = item_idx
        return lines