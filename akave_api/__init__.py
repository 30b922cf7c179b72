"""Akave IPC gateway: typed results and transaction correlation for akavecli."""

__version__ = "0.1.0"
