"""codenv: hook runtime for agentic coding sessions."""

__version__ = "1.0.0"
