"""timekeep — time and project administration with command-based undo/redo."""

__version__ = "0.4.0"
