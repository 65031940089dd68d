"""
Console control for the interactive diagnostic monitor.
"""
import os
import select
import sys
from abc import ABC, abstractmethod
from typing import Optional, TextIO


class TerminalController(ABC):
    """Screen clearing and non-blocking key detection."""

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def key_pressed(self) -> Optional[str]:
        """Return a pending key without blocking, or None."""
        pass

    @property
    def interactive(self) -> bool:
        """Whether key presses can be waited for at all."""
        return True

    def start(self) -> None:
        """Switch the terminal into key-by-key mode."""
        pass

    def restore(self) -> None:
        """Undo :meth:`start`."""
        pass

    def __enter__(self) -> "TerminalController":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()


class PosixTerminal(TerminalController):
    """TerminalController for POSIX ttys using termios."""

    def __init__(self, stream: Optional[TextIO] = None, stdin: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.stdin = stdin or sys.stdin
        self._saved = None

    def clear(self) -> None:
        # ANSI: clear screen, cursor home
        self.stream.write("\033[2J\033[H")
        self.stream.flush()

    @property
    def interactive(self) -> bool:
        return self.stdin.isatty()

    def start(self) -> None:
        if not self.interactive:
            return
        import termios
        import tty

        fd = self.stdin.fileno()
        self._saved = termios.tcgetattr(fd)
        tty.setcbreak(fd)

    def restore(self) -> None:
        if self._saved is None:
            return
        import termios

        termios.tcsetattr(self.stdin.fileno(), termios.TCSANOW, self._saved)
        self._saved = None

    def key_pressed(self) -> Optional[str]:
        if not self.interactive:
            return None
        readable, _, _ = select.select([self.stdin], [], [], 0)
        if not readable:
            return None
        data = os.read(self.stdin.fileno(), 1)
        return data.decode(errors="ignore") or None
