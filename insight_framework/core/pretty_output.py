"""
Pretty output formatting for CLI.

Provides consistent terminal output for the profile, analyze and label
commands.
"""

import os

from colorama import Fore, Style


class PrettyOutput:
    """
    Pretty output formatter for the insight framework CLI.

    Provides colored headers, key/value metrics and severity-marked findings
    with a unified look across commands.
    """

    # Color scheme
    PRIMARY = Fore.CYAN
    WARNING = Fore.YELLOW
    ERROR = Fore.RED
    INFO = Fore.BLUE
    HEADER = Fore.WHITE + Style.BRIGHT
    DIM = Style.DIM
    RESET = Style.RESET_ALL

    # Symbols
    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    DOT = "•"
    WARN = "⚠"
    INFO_SYMBOL = "ℹ"

    @staticmethod
    def get_terminal_width():
        """Get terminal width, default to 80 if cannot determine."""
        try:
            return os.get_terminal_size().columns
        except OSError:
            return 80

    @staticmethod
    def header(text, width=None):
        """
        Print a major header with box drawing.

        Args:
            text: Header text
            width: Box width (default: terminal width, max 80)
        """
        if width is None:
            width = min(PrettyOutput.get_terminal_width(), 80)

        padding = max((width - len(text) - 2) // 2, 0)
        line = "═" * width

        print(f"\n{PrettyOutput.PRIMARY}╔{line}╗")
        print(f"║{' ' * padding}{text}{' ' * max(width - len(text) - padding, 0)}║")
        print(f"╚{line}╝{PrettyOutput.RESET}\n")

    @staticmethod
    def section(text, width=None):
        """
        Print a section header.

        Args:
            text: Section text
            width: Line width (default: terminal width, max 80)
        """
        if width is None:
            width = min(PrettyOutput.get_terminal_width(), 80)

        line = "─" * width
        print(f"\n{PrettyOutput.HEADER}{line}")
        print(f"{PrettyOutput.ARROW} {text}")
        print(f"{line}{PrettyOutput.RESET}\n")

    @staticmethod
    def error(message, indent=0):
        """Print an error message with cross."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.ERROR}{PrettyOutput.CROSS}{PrettyOutput.RESET} {message}")

    @staticmethod
    def warning(message, indent=0):
        """Print a warning message."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.WARNING}{PrettyOutput.WARN}{PrettyOutput.RESET} {message}")

    @staticmethod
    def info(message, indent=0):
        """Print an info message."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.INFO}{PrettyOutput.INFO_SYMBOL}{PrettyOutput.RESET} {message}")

    @staticmethod
    def item(message, indent=0):
        """Print a list item."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.DIM}{PrettyOutput.DOT}{PrettyOutput.RESET} {message}")

    @staticmethod
    def metric(label, value, color=None, indent=2):
        """
        Print a metric with label and value.

        Args:
            label: Metric label
            value: Metric value
            color: Optional color for value
            indent: Indentation spaces
        """
        spaces = " " * indent
        color = color or PrettyOutput.PRIMARY
        print(f"{spaces}{PrettyOutput.DIM}{label}:{PrettyOutput.RESET} {color}{value}{PrettyOutput.RESET}")

    @staticmethod
    def output_file(label, path, indent=2):
        """Print an output file path."""
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.ARROW} {PrettyOutput.DIM}{label}:{PrettyOutput.RESET} {path}")

    @staticmethod
    def finding(message, severity="info", indent=4):
        """
        Print a finding or insight.

        Args:
            message: Finding text
            severity: One of "critical", "high", "warning", "medium", "low", "info"
            indent: Indentation spaces
        """
        spaces = " " * indent
        icons = {
            "critical": f"{Fore.RED}●{PrettyOutput.RESET}",
            "high": f"{Fore.RED}●{PrettyOutput.RESET}",
            "warning": f"{Fore.YELLOW}●{PrettyOutput.RESET}",
            "medium": f"{Fore.YELLOW}●{PrettyOutput.RESET}",
            "low": f"{Fore.GREEN}●{PrettyOutput.RESET}",
            "info": f"{PrettyOutput.DIM}•{PrettyOutput.RESET}"
        }
        icon = icons.get(severity, icons["info"])
        print(f"{spaces}{icon} {message}")

    @staticmethod
    def quality_indicator(score, width=20):
        """
        Return a visual quality indicator bar.

        Args:
            score: Quality score 0-100
            width: Bar width in characters

        Returns:
            Formatted quality bar string
        """
        filled = int(width * score / 100)
        empty = width - filled

        if score >= 90:
            color = Fore.GREEN
        elif score >= 75:
            color = Fore.YELLOW
        else:
            color = Fore.RED

        bar = f"{color}{'█' * filled}{PrettyOutput.DIM}{'░' * empty}{PrettyOutput.RESET}"
        return f"{bar} {score:.0f}/100"

    @staticmethod
    def profile_summary(rows, cols, quality, duration):
        """
        Print a compact profile summary line.

        Args:
            rows: Number of rows
            cols: Number of columns
            quality: Quality score 0-100
            duration: Processing time in seconds
        """
        quality_bar = PrettyOutput.quality_indicator(quality, width=15)

        parts = [
            f"{PrettyOutput.PRIMARY}{rows:,}{PrettyOutput.RESET} rows",
            f"{PrettyOutput.PRIMARY}{cols}{PrettyOutput.RESET} cols",
            f"Quality: {quality_bar}",
            f"{PrettyOutput.DIM}{duration:.1f}s{PrettyOutput.RESET}"
        ]

        print(f"\n{PrettyOutput.CHECK} {' │ '.join(parts)}")
