import pytest

from sizzle import eslint, pyunittest
from sizzle.analyzer import Analyzer
from sizzle.lines import (
    CommandOutputLine,
    CommandStream,
    Kind,
    LineAnalysis,
    LinePattern,
    LineType,
    TLine,
    TString,
)


def unstyled(text, origin=CommandStream.STDOUT):
    return CommandOutputLine(TLine([TString("", text)]), origin)


def eslint_lines():
    return [
        CommandOutputLine(
            TLine([TString(eslint.CSI_LOCATION_PATH, "/home/dev/app.js")]),
            CommandStream.STDOUT,
        ),
        CommandOutputLine(
            TLine([
                TString("", "  "),
                TString(eslint.CSI_LINE_COL, "1:2"),
                TString("", "  "),
                TString(eslint.CSI_ERROR, "error"),
                TString("", "  bad thing"),
            ]),
            CommandStream.STDOUT,
        ),
    ]


def cargo_test_lines():
    return [
        unstyled("test foo::bar ... FAILED"),
        unstyled("test foo::baz ... ok"),
        unstyled("---- foo::bar stdout ----"),
        unstyled("thread 'foo::bar' panicked at src/lib.rs:3:5:"),
        unstyled("assertion failed"),
        unstyled(""),
        unstyled("failures:"),
    ]


@pytest.mark.parametrize(
    "name, member",
    [
        ("standard", Analyzer.STANDARD),
        ("nextest", Analyzer.NEXTEST),
        ("eslint", Analyzer.ESLINT),
        ("python_unittest", Analyzer.PYTHON_UNITTEST),
    ],
)
def test_analyzer_names(name, member):
    assert Analyzer(name) is member


def test_eslint_dispatch():
    line = eslint_lines()[1]
    assert Analyzer.ESLINT.analyze_line(line).line_type == LineType.title(Kind.ERROR)
    assert Analyzer.STANDARD.analyze_line(line) == LineAnalysis.normal()


def test_nextest_dispatch():
    line = unstyled("running 3 tests")
    assert Analyzer.NEXTEST.analyze_line(line) == LineAnalysis.garbage()
    assert Analyzer.STANDARD.analyze_line(line) == LineAnalysis.normal()


def test_nextest_falls_back_on_standard():
    line = unstyled("error: boom", CommandStream.STDERR)
    assert Analyzer.NEXTEST.analyze_line(line) == Analyzer.STANDARD.analyze_line(line)
    assert Analyzer.NEXTEST.analyze_line(line).line_type == LineType.title(Kind.ERROR)


def test_python_dispatch():
    line = unstyled("FAIL: test_x (pkg.T.test_x)")
    assert Analyzer.PYTHON_UNITTEST.analyze_line(line) == LineAnalysis.fail("pkg.T.test_x")


def test_standard_report():
    report = Analyzer.STANDARD.build_report(cargo_test_lines())
    assert report.failure_keys == ["foo::bar"]
    assert report.stats.passed_tests == 1
    assert report.stats.test_fails == 1
    assert report.stats.can_scope_tests()


def test_nextest_report_uses_standard_building():
    standard_report = Analyzer.STANDARD.build_report(cargo_test_lines())
    nextest_report = Analyzer.NEXTEST.build_report(cargo_test_lines())
    assert nextest_report.lines == standard_report.lines
    assert nextest_report.failure_keys == standard_report.failure_keys


def test_eslint_report_matches_module():
    lines = eslint_lines()
    expected = eslint.build_report(lines, eslint.analyze_line)
    assert Analyzer.ESLINT.build_report(lines).lines == expected.lines


def test_python_report_matches_module():
    lines = [unstyled("FAIL: test_x (pkg.T.test_x)"), unstyled("boom")]
    expected = pyunittest.build_report(lines, pyunittest.analyze_line)
    report = Analyzer.PYTHON_UNITTEST.build_report(lines)
    assert report.lines == expected.lines
    assert report.stats.test_fails == 1


def test_ignored_lines_are_passed_on():
    report = Analyzer.STANDARD.build_report(
        cargo_test_lines(), [LinePattern.parse("FAILED"), LinePattern.parse("stdout")]
    )
    assert report.failure_keys == []
    assert report.stats.test_fails == 0