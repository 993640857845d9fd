"""CLI command modules for kaku-onboard.

Each module holds one command function; ``kaku_onboard`` registers them on
the Typer app.
"""
