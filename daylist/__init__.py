"""Daily task lists, weekly learning topics, history and statistics."""

__version__ = "0.1.0"
