"""Knowledge Import service: document parsing and test generation."""

__version__ = "0.1.0"
