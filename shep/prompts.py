"""Yes/no confirmation strategies."""

from typing import Optional, Protocol

from rich.console import Console

from shep.logging_config import get_logger

logger = get_logger(__name__)

YES_ANSWERS = {"y", "yes"}


class Confirmer(Protocol):
    """Anything that can answer a yes/no question."""

    def confirm(self, prompt: str, default: bool) -> bool:
        ...


class ConsoleConfirmer:
    """Asks on the terminal. An empty answer (or EOF) selects the default."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def confirm(self, prompt: str, default: bool) -> bool:
        suffix = " [Y/n] " if default else " [y/N] "
        try:
            response = self.console.input(prompt + suffix, markup=False)
        except EOFError:
            self.console.print()
            logger.debug(f"No input for {prompt!r}, using default ({default})")
            return default

        response = response.strip().lower()
        if not response:
            return default
        return response in YES_ANSWERS


class DefaultConfirmer:
    """Non-interactive strategy: every question gets its default answer."""

    def confirm(self, prompt: str, default: bool) -> bool:
        logger.info(f"{prompt} -> {'yes' if default else 'no'} (non-interactive)")
        return default
