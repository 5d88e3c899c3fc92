"""Line-editing prompt services for confirming the tag to create.

A prompt answers ``ask(label, initial, error)`` with the text the operator
accepted. Cancelling (EOF or Ctrl-C) raises OperationAborted.
"""
from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import Optional

from errors import OperationAborted

logger = logging.getLogger(__name__)

try:
    import readline  # pylint: disable=unused-import
except ImportError:  # pragma: no cover - not available on Windows
    readline = None  # type: ignore


class Prompt(ABC):
    """Synchronous request/response prompt."""

    @abstractmethod
    def ask(self, label: str, initial: str, error: Optional[str] = None) -> str:
        """Return the operator's answer, starting from ``initial``.

        Args:
            label: Question shown to the operator.
            initial: Pre-filled, editable answer.
            error: Problem with the previous answer, shown before asking.

        Raises:
            OperationAborted: If the operator cancels.
        """


class TerminalPrompt(Prompt):
    """Interactive prompt on the controlling terminal.

    Everything shown to the operator goes to ``stream`` (stderr by default),
    keeping stdout for the created tag. When both stdin and stdout are
    terminals and GNU readline is available, the suggested tag is also
    pre-filled and editable; an empty answer always accepts the suggestion.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stderr

    @staticmethod
    def _can_prefill() -> bool:
        # input() only goes through readline when both ends are terminals.
        return readline is not None and sys.stdout.isatty() and sys.stdin.isatty()

    def ask(self, label: str, initial: str, error: Optional[str] = None) -> str:
        if error:
            self.stream.write(f"error: {error}\n")

        prefill = self._can_prefill()
        self.stream.write(f"{label} [{initial}]: ")
        self.stream.flush()
        if prefill:
            readline.set_startup_hook(lambda: readline.insert_text(initial))
        try:
            answer = input("")
        except (EOFError, KeyboardInterrupt) as exc:
            self.stream.write("\n")
            raise OperationAborted("cancelled at the confirmation prompt") from exc
        finally:
            if prefill:
                readline.set_startup_hook(None)

        answer = answer.strip()
        return answer or initial


class AutoAcceptPrompt(Prompt):
    """Non-interactive prompt: accepts the suggestion once.

    Any error from a previous answer (invalid text, name collision) ends the
    run, since nobody is there to pick another version.
    """

    def ask(self, label: str, initial: str, error: Optional[str] = None) -> str:
        if error:
            raise OperationAborted(f"{error} (not retrying in non-interactive mode)")
        logger.info("%s: %s", label, initial)
        return initial
