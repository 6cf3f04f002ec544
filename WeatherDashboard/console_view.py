"""View abstraction for the dashboard - allows swapping the terminal with test backends."""
import sys
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, TextIO


class DashboardView(ABC):
    """Abstract output surface that shows one frame of text at a time."""

    @abstractmethod
    def show(self, lines: Sequence[str]) -> None:
        """
        Display a new frame.

        Args:
            lines: Text lines, top to bottom
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Blank the surface."""
        pass


class ConsoleView(DashboardView):
    """View that writes frames to a terminal stream."""

    SEPARATOR = "─" * 40

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream or sys.stdout

    def show(self, lines: Sequence[str]) -> None:
        self._stream.write(self.SEPARATOR + "\n")
        for line in lines:
            self._stream.write(line + "\n")
        self._stream.flush()

    def clear(self) -> None:
        # ANSI: clear screen, cursor home
        self._stream.write("\033[2J\033[H")
        self._stream.flush()


class FakeView(DashboardView):
    """
    Fake view for testing - keeps every frame in memory.

    Useful for unit tests and development without a terminal.
    """

    def __init__(self):
        self.frames: List[List[str]] = []
        self.clear_count = 0

    def show(self, lines: Sequence[str]) -> None:
        self.frames.append(list(lines))

    def clear(self) -> None:
        self.clear_count += 1

    @property
    def last_frame(self) -> List[str]:
        return self.frames[-1] if self.frames else []

    def to_text(self) -> str:
        """Last frame as a single string (for assertions)."""
        return "\n".join(self.last_frame)
