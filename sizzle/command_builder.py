"""A reusable description of a command to run."""

from __future__ import annotations

import os
import subprocess
from typing import Any, Iterable, Mapping


class CommandBuilder:
    """Holds the executable, arguments, directory and environment of a command."""

    def __init__(self, exe: str) -> None:
        self._exe = exe
        self._current_dir: str | None = None
        self._args: list[str] = []
        self._with_stdout = False
        self._envs: dict[str, str] = {}

    def __repr__(self) -> str:
        return f"CommandBuilder({self._exe!r}, args={self._args!r})"

    def build(self) -> dict[str, Any]:
        """Return the keyword arguments for starting the command with Popen."""
        env = {**os.environ, **self._envs} if self._envs else None
        return {
            "args": [self._exe, *self._args],
            "cwd": self._current_dir,
            "env": env,
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.PIPE if self._with_stdout else subprocess.DEVNULL,
            "stderr": subprocess.PIPE,
            "text": True,
            "encoding": "utf-8",
            "errors": "replace",
        }

    def spawn(self) -> subprocess.Popen:
        """Start the command."""
        return subprocess.Popen(**self.build())

    def with_stdout(self, enabled: bool) -> CommandBuilder:
        self._with_stdout = enabled
        return self

    def is_with_stdout(self) -> bool:
        return self._with_stdout

    def current_dir(self, directory: str | os.PathLike) -> CommandBuilder:
        self._current_dir = os.fspath(directory)
        return self

    def arg(self, arg: str | os.PathLike) -> CommandBuilder:
        self._args.append(os.fspath(arg))
        return self

    def args(self, args: Iterable[str | os.PathLike]) -> CommandBuilder:
        self._args.extend(os.fspath(a) for a in args)
        return self

    def env(self, key: str, value: str) -> CommandBuilder:
        self._envs[key] = value
        return self

    def envs(
        self, variables: Mapping[str, str] | Iterable[tuple[str, str]]
    ) -> CommandBuilder:
        items = variables.items() if isinstance(variables, Mapping) else variables
        for key, value in items:
            self._envs[key] = value
        return self