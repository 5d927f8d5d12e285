"""Orchestrate groups of CLI/TUI workers as tmux namespaces and agents."""

__version__ = "0.3.0"
