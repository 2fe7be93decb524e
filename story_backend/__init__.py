"""Local persistence backend for prompt-generated and self-written stories."""

__version__ = "0.1.0"
