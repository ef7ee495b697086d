"""Declarative tmux workspace provisioning."""

__version__ = "0.1.0"
