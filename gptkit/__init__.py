"""Tool-file parsing, OpenAPI inspection, chat budgeting, streamed completion assembly and live progress output."""

__version__ = "0.1.0"