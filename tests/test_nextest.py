from sizzle import nextest
from sizzle.lines import (
    CommandOutputLine,
    CommandStream,
    Kind,
    LineAnalysis,
    LineType,
    TLine,
    TString,
)
from sizzle.standard import build_report


def line_of(*pairs):
    return TLine([TString(c, r) for c, r in pairs])


def out(content, origin=CommandStream.STDOUT):
    return CommandOutputLine(content, origin)


STDOUT_TITLE = line_of(
    ("\x1b[35;1m", "--- "),
    ("\x1b[35;1m", "STDOUT:              "),
    ("\x1b[35;1m", "bacon-test"),
    ("", " "),
    ("\x1b[36m", "tests"),
    ("\x1b[36m", "::"),
    ("\x1b[34;1m", "failing_test3"),
    ("\x1b[35;1m", " ---"),
)

STDERR_TITLE = line_of(
    ("\x1b[31;1m", "--- "),
    ("\x1b[31;1m", "STDERR:              "),
    ("\x1b[35;1m", "bacon"),
    ("", " "),
    ("\x1b[36m", "analysis::nextest_analyzer"),
    ("\x1b[36m", "::"),
    ("\x1b[34;1m", "test_as_test_result"),
    ("\x1b[31;1m", " ---"),
)

CANCELING = line_of(
    ("\x1b[31;1m", "   Canceling"),
    ("", " due to "),
    ("\x1b[31;1m", "test failure"),
    ("", ": "),
    ("\x1b[1m", "1"),
    ("", " test still running"),
)

PASS_LINE = line_of(
    ("\x1b[32;1m", "        PASS"),
    ("", " [   0.003s] "),
    ("\x1b[35;1m", "bacon"),
    ("", " "),
    ("\x1b[36m", "analysis::nextest_analyzer"),
    ("\x1b[36m", "::"),
    ("\x1b[34;1m", "test_canceling"),
)

RUN_FAILED = line_of(("\x1b[31;1m", "error"), ("", ": test run failed"))


def test_title_key():
    assert nextest.title_key(STDOUT_TITLE) == "tests::failing_test3"
    assert (
        nextest.title_key(STDERR_TITLE)
        == "analysis::nextest_analyzer::test_as_test_result"
    )


def test_title_key_rejects_other_lines():
    assert nextest.title_key(line_of(("", "-- "), ("", "STDOUT: "))) is None
    assert nextest.title_key(line_of(("", "--- "), ("", "OTHER: "))) is None
    extra = TLine([*STDOUT_TITLE.strings, TString("", " trailing")])
    assert nextest.title_key(extra) is None


def test_canceling():
    assert nextest.is_canceling(CANCELING) is True
    assert nextest.is_canceling(RUN_FAILED) is False


def test_as_test_result():
    assert nextest.as_test_result(PASS_LINE) == (
        "analysis::nextest_analyzer::test_canceling",
        True,
    )


def test_as_test_result_fail():
    fail = TLine([TString("\x1b[31;1m", "        FAIL"), *PASS_LINE.strings[1:]])
    assert nextest.as_test_result(fail) == (
        "analysis::nextest_analyzer::test_canceling",
        False,
    )
    assert nextest.as_test_result(CANCELING) is None


def test_recognize_test_run_failed():
    assert nextest.is_error_test_run_failed(RUN_FAILED)
    assert not nextest.is_error_test_run_failed(CANCELING)


def test_analyze_line_types():
    assert nextest.analyze_line(out(STDOUT_TITLE)) == LineAnalysis.title_key(
        Kind.TEST_FAIL, "tests::failing_test3"
    )
    assert nextest.analyze_line(out(PASS_LINE)) == LineAnalysis.test_result(
        "analysis::nextest_analyzer::test_canceling", True
    )
    assert nextest.analyze_line(out(CANCELING)).line_type == LineType.SECTION_END
    assert nextest.analyze_line(out(RUN_FAILED)).line_type == LineType.GARBAGE


def test_analyze_unstyled_lines():
    running = out(line_of(("", "running 1 test")))
    assert nextest.analyze_line(running) == LineAnalysis.garbage()
    separator = out(line_of(("", "------------")))
    assert nextest.analyze_line(separator).line_type == LineType.SECTION_END
    failures = out(line_of(("", "failures:")))
    assert nextest.analyze_line(failures).line_type == LineType.title(Kind.SUM)


def test_report_merges_stdout_and_stderr_titles():
    fail_line = TLine([TString("\x1b[31;1m", "        FAIL"), *PASS_LINE.strings[1:4]])
    fail_line.strings.extend(STDOUT_TITLE.strings[4:7])
    stderr_title = TLine(
        [TString("\x1b[31;1m", "--- "), TString("\x1b[31;1m", "STDERR: "), *STDOUT_TITLE.strings[2:]]
    )
    cmd_lines = [
        out(PASS_LINE),
        out(fail_line),
        out(STDOUT_TITLE),
        out(line_of(("", "out text"))),
        out(stderr_title),
        out(line_of(("", "err text"))),
        out(line_of(("", "------------"))),
        out(line_of(("", "after the section"))),
    ]
    report = build_report(cmd_lines, nextest.analyze_line)
    assert [line.content.to_raw() for line in report.lines[1:]] == [
        "out text",
        "err text",
    ]
    assert report.lines[0].content == TLine.failed("tests::failing_test3")
    assert report.failure_keys == ["tests::failing_test3"]
    assert report.stats.passed_tests == 1
    assert report.stats.can_scope_tests()