"""
Terminal I/O for the interactive session.

Line input is read on a daemon thread so the event loop keeps serving the
stream while the user types, and so a pending read never blocks shutdown.
"""

from __future__ import annotations

import asyncio
import sys
import threading
from typing import TextIO

from dlclient.config import DEFAULT_PROMPT


_CLEAR_LINE = "\x1b[2K\r"


class Console:
    """Prompted line input plus line output on a pair of text streams."""

    def __init__(
        self,
        prompt: str = DEFAULT_PROMPT,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.prompt = prompt
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

    async def read_line(self) -> str | None:
        """Wait for the next input line. Returns None at end of input."""
        loop = asyncio.get_event_loop()
        future: asyncio.Future[str] = loop.create_future()

        def _deliver(line: str | None, exc: BaseException | None) -> None:
            if future.done():
                return
            if exc is not None:
                future.set_exception(exc)
            else:
                future.set_result(line)

        def _reader() -> None:
            line: str | None = None
            error: BaseException | None = None
            try:
                line = self._stdin.readline()
            except Exception as exc:
                error = exc
            try:
                loop.call_soon_threadsafe(_deliver, line, error)
            except RuntimeError:
                pass  # loop already closed; the session is over

        threading.Thread(target=_reader, name="console-input", daemon=True).start()
        line = await future
        return line or None

    def show_prompt(self) -> None:
        self._write(self.prompt)

    def print_line(self, text: str = "") -> None:
        self._write(text + "\n")

    def clear_line(self) -> None:
        """Erase the current line (prompt and partial input) and return to column 0."""
        if self._is_tty():
            self._write(_CLEAR_LINE)

    def _is_tty(self) -> bool:
        isatty = getattr(self._stdout, "isatty", None)
        return bool(isatty and isatty())

    def _write(self, text: str) -> None:
        self._stdout.write(text)
        self._stdout.flush()
