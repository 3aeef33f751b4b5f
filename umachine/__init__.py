"""An interpreter for the Universal Machine: memory, operations and run loop."""

__version__ = "0.1.0"
__all__ = ["memory", "ops", "machine"]