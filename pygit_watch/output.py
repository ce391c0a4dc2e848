"""Output handler implementations: console and null."""

from __future__ import annotations

from colorama import Fore, Style
from tqdm import tqdm

from pygit_watch.models import Severity

SECTION_WIDTH = 50

SEVERITY_COLORS = {
    Severity.GREEN: Fore.GREEN,
    Severity.YELLOW: Fore.YELLOW,
    Severity.RED: Fore.RED,
    Severity.GLOBAL_ERROR: Fore.MAGENTA,
}


class ConsoleOutputHandler:
    """Console output with colors."""

    def __init__(self, verbose: bool = False):
        """Create a console handler. Set verbose=True to enable debug output."""
        self.verbose = verbose

    def info(self, message: str, indent: int = 0) -> None:
        """Print an informational message."""
        tqdm.write("  " * indent + message)

    def success(self, message: str, indent: int = 0) -> None:
        """Print a green success message."""
        tqdm.write("  " * indent + f"{Fore.GREEN}{message}{Style.RESET_ALL}")

    def warning(self, message: str, indent: int = 0) -> None:
        """Print a yellow warning message."""
        tqdm.write("  " * indent + f"{Fore.YELLOW}{message}{Style.RESET_ALL}")

    def error(self, message: str, indent: int = 0) -> None:
        """Print a red error message."""
        tqdm.write("  " * indent + f"{Fore.RED}{message}{Style.RESET_ALL}")

    def severity(self, level: Severity, message: str) -> None:
        """Print a message in the color of the given severity."""
        color = SEVERITY_COLORS[level]
        tqdm.write(f"{color}● {level.name}{Style.RESET_ALL} {message}")

    def section(self, title: str) -> None:
        """Print a section header with a divider line."""
        tqdm.write("")
        tqdm.write(title)
        tqdm.write("-" * SECTION_WIDTH)

    def debug(self, message: str) -> None:
        """Print a cyan debug message (only when verbose is enabled)."""
        if self.verbose:
            tqdm.write(f"{Fore.CYAN}[DEBUG] {message}{Style.RESET_ALL}")


class NullOutputHandler:
    """Silent output handler for testing and JSON mode."""

    def info(self, message: str, indent: int = 0) -> None:
        pass

    def success(self, message: str, indent: int = 0) -> None:
        pass

    def warning(self, message: str, indent: int = 0) -> None:
        pass

    def error(self, message: str, indent: int = 0) -> None:
        pass

    def severity(self, level: Severity, message: str) -> None:
        pass

    def section(self, title: str) -> None:
        pass

    def debug(self, message: str) -> None:
        pass
