"""udoc: documentation driver for annotated proof sources."""

__version__ = "0.1.0"
