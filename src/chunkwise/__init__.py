"""chunkwise - time-boxed learning plans and session tracking."""

__version__ = "0.3.0"
