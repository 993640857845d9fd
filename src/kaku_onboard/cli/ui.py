"""Reusable UI helpers for onboarding prompts and reports."""

from __future__ import annotations

from typing import Optional, Protocol

import readchar
from rich.console import Console
from rich.markup import escape
from rich.text import Text

from kaku_onboard.features.base import InstallReport

BANNER = r"""
  _  __      _
 | |/ /     | |
 | ' / __ _ | | __ _   _
 |  < / _` || |/ /| | | |
 | . \ (_| ||   < | |_| |
 |_|\_\__,_||_|\_\ \__,_|
"""

TAGLINE = "A fast, out-of-the-box terminal built for AI coding."


class Prompter(Protocol):
    """Asks the user a yes/no question and returns the answer."""

    def confirm(self, question: str, default: bool = True) -> bool: ...

    def pause(self, message: str) -> None: ...


def get_key() -> str:
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()

    if key in (readchar.key.ENTER, readchar.key.CR, readchar.key.LF):
        return "enter"

    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt

    return key


class KeypressPrompter:
    """Single-keypress ``[Y/n]`` prompt on the controlling terminal.

    Enter picks the default; other keys besides y/n are ignored.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def confirm(self, question: str, default: bool = True) -> bool:
        choices = "[Y/n]" if default else "[y/N]"
        self.console.print(f"{question} {choices} ", end="")
        while True:
            key = get_key()
            if key == "enter":
                answer = default
            elif key.lower() == "y":
                answer = True
            elif key.lower() == "n":
                answer = False
            else:
                continue
            self.console.print("y" if answer else "n")
            return answer

    def pause(self, message: str) -> None:
        self.console.print(message, end="")
        get_key()
        self.console.print()


def show_banner(console: Console) -> None:
    """Display the ASCII art banner."""
    console.print(Text(BANNER.strip("\n"), style="bold magenta"))
    console.print("Welcome to Kaku!")
    console.print(Text(TAGLINE, style="italic"))


def print_report(console: Console, report: InstallReport, verbose: bool = False) -> None:
    for line in report.changed:
        console.print(f"  [green]✓[/green] {line}")
    if verbose:
        for line in report.skipped:
            console.print(f"  [dim]- {line}[/dim]")
    elif not report.changed:
        for line in report.skipped:
            console.print(f"  [green]✓[/green] {line}")


def print_warning(console: Console, message: str, retry_hint: Optional[str] = None) -> None:
    console.print(f"[yellow]Warning:[/yellow] {escape(message)}")
    if retry_hint:
        console.print(f"  You can retry manually: [bold]{retry_hint}[/bold]")


__all__ = [
    "KeypressPrompter",
    "Prompter",
    "get_key",
    "print_report",
    "print_warning",
    "show_banner",
]
