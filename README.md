# sizzle

sizzle turns the raw, styled output of build and test tools into compact
reports: errors first, then test failures, then warnings, each item numbered
and, where the tool gives one, located.

It understands:

- standard compiler and test-harness output (`sizzle.standard`)
- nextest output (`sizzle.nextest`)
- eslint output (`sizzle.eslint`)
- Python `unittest` output (`sizzle.pyunittest`)

`sizzle.analyzer.Analyzer` picks among them: `STANDARD`, `NEXTEST`,
`ESLINT` and `PYTHON_UNITTEST`.

## Installation

```
pip install sizzle
```

The package has no dependencies outside the standard library.

## Analyzing output

Output lines are held as `TLine` values (in `sizzle.lines`): sequences of
`TString` pieces, each with the terminal style sequence that preceded it.
`TLine.from_tty` splits a raw terminal line into such pieces.

```python
from sizzle.analyzer import Analyzer
from sizzle.lines import CommandOutputLine, CommandStream, TLine

raw = [
    "FAIL: test_add (tests.test_math.MathTest)",
    '  File "tests/test_math.py", line 12, in test_add',
    "AssertionError: 3 != 4",
]
cmd_lines = [
    CommandOutputLine(content=TLine.from_tty(text), origin=CommandStream.STDERR)
    for text in raw
]

report = Analyzer.PYTHON_UNITTEST.build_report(cmd_lines)
print(report.stats.test_fails)
for line in report.lines:
    print(line.item_idx, line.line_type, line.content.to_raw())
```

A `Report` holds the ordered `lines`, their `Stats` (warnings, errors,
test failures, passed tests, location and normal lines),
`suggest_backtrace` and, for the standard and nextest analyses, the
`failure_keys` of failed tests.

The second argument of `build_report` is an optional list of `LinePattern`
values; lines whose raw text matches one of them are skipped:

```python
from sizzle.lines import LinePattern

ignored = [LinePattern.parse(r"^\s*Compiling ")]
report = Analyzer.STANDARD.build_report(cmd_lines, ignored)
```

`LinePattern.parse` raises `ValueError` for an invalid regular expression.

Each line can also be analyzed alone with `Analyzer.analyze_line`, which
returns a `LineAnalysis` holding the `LineType` and, for test lines, the
test key.

## Exporting an analysis

`AnalysisExport.build(analyzer, result_kind, lines)` (in
`sizzle.analysis_export`) records every output line with its analysis; it
returns `None` when `result_kind` is `None`. `to_json` gives the export as
pretty-printed JSON.

`sizzle.exports` keeps the settings of named exports (`ExportsSettings`),
built from configuration mappings with `apply_config`, and gives the
default file names: `default_analysis_path()`, `default_json_report_path()`
and `default_locations_path()`, plus `default_locations_line_format()`.

## Running commands

`CommandBuilder` (in `sizzle.command_builder`) describes a command: its
executable, arguments, working directory and extra environment. Only
stderr is captured unless `with_stdout(True)` is set.

`MissionExecutor` (in `sizzle.executor`) runs it in the background. Each
`start(task)` waits the task's grace `Period` (parsed from strings such as
`"25ms"`, `"2s"` or `"none"`), sets `RUST_BACKTRACE` from the task's
`backtrace` (default `"0"`), then puts events on `line_receiver`: an
`ExecLine` per output line, an `ExecEnd` with the exit status once stderr
closes, or an `ExecError` if the command can't be started.

```python
from sizzle.command_builder import CommandBuilder
from sizzle.executor import ExecEnd, ExecError, ExecLine, MissionExecutor
from sizzle.period import Period, Task

builder = CommandBuilder("cargo").args(["check", "--color=always"])
executor = MissionExecutor(builder)
task_executor = executor.start(Task(grace_period=Period.parse("none")))
while True:
    info = executor.line_receiver.get()
    if isinstance(info, ExecLine):
        print(info.line.content.to_raw())
    elif isinstance(info, (ExecEnd, ExecError)):
        break
task_executor.die()
```

`TaskExecutor.die` kills the command (with the optional kill command given
to `MissionExecutor`, falling back on the platform's kill) and waits for it;
`interrupt` asks for the kill without waiting.

## What the package does not do

sizzle has no command-line program, no terminal screen, no file watching
and no reading of configuration files. Export settings are kept, but
nothing in the package writes the locations or JSON report files they
name; only the JSON text of an analysis export is produced.

## Running the tests

```
pip install -e ".[test]"
pytest
```