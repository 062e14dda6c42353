"""termmux: run commands concurrently and show their output side by side."""

__version__ = "0.9.0"
