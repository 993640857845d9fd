"""CLI helpers exposed for other modules."""

from .ui import KeypressPrompter, Prompter

__all__ = ["KeypressPrompter", "Prompter"]
