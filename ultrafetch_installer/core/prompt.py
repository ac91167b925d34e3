# ultrafetch_installer/core/prompt.py
"""
Yes/no questions asked during an install.

Pipeline code only talks to a ConfirmationProvider, so runs without a
terminal (CI, piped installs, tests) get a predictable answer instead of
blocking on stdin. Ctrl-C at a question is never an answer: it propagates
as KeyboardInterrupt and ends the run as interrupted.
"""

from __future__ import annotations

import sys
from typing import Protocol

from rich.prompt import Confirm

from ultrafetch_installer.core.logger import LoggerProxy

log = LoggerProxy(__name__)


class ConfirmationProvider(Protocol):
    def __call__(self, question: str, default: bool = False) -> bool: ...


class TerminalConfirmer:
    """Ask on the controlling terminal; answer "no" when there is none."""

    def __init__(self, stdin=None):
        self._stdin = stdin

    def _interactive(self) -> bool:
        stream = self._stdin if self._stdin is not None else sys.stdin
        try:
            return bool(stream and stream.isatty())
        except ValueError:  # closed stream
            return False

    def __call__(self, question: str, default: bool = False) -> bool:
        if not self._interactive():
            log.info(f"{question} (no interactive terminal, answering no)")
            return False
        try:
            return Confirm.ask(question, default=default)
        except EOFError:
            log.info(f"{question} (end of input, answering no)")
            return False


class AutoConfirmer:
    """Always give the same answer without asking."""

    def __init__(self, answer: bool):
        self.answer = answer
        self.asked: list[str] = []

    def __call__(self, question: str, default: bool = False) -> bool:
        self.asked.append(question)
        log.info(f"{question} (auto: {'yes' if self.answer else 'no'})")
        return self.answer
