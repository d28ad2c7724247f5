"""Yes/no confirmation prompts."""
import logging
from typing import Callable

from .interfaces import ConfirmationPrompt

logger = logging.getLogger(__name__)


class ConsolePrompt(ConfirmationPrompt):
    """Asks on the terminal. An empty answer (or EOF) takes the default."""

    def __init__(self, input_func: Callable[[str], str] = input):
        self._input = input_func

    def confirm(self, message: str, default: bool = False) -> bool:
        suffix = "(Y/n)" if default else "(y/N)"
        try:
            response = self._input(f"{message} {suffix}: ").strip().lower()
        except EOFError:
            return default
        if not response:
            return default
        return response in ("y", "yes")


class NonInteractivePrompt(ConfirmationPrompt):
    """Answers every question with a fixed answer. Declines unless told otherwise."""

    def __init__(self, answer: bool = False):
        self.answer = answer

    def confirm(self, message: str, default: bool = False) -> bool:
        logger.warning(
            f"Non-interactive mode: answering {'yes' if self.answer else 'no'} to '{message}'"
        )
        return self.answer
