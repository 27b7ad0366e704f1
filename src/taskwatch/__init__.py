"""Task Watch: daily Google Tasks overview and new-task alerts."""

__version__ = "0.1.0"
