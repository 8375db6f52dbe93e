"""Build error types.

I/O failures are not wrapped: ``OSError`` from the filesystem propagates
unchanged to the caller.
"""
from pathlib import Path


class BuildError(Exception):
    """Base class for failures that abort a build."""
    pass


class CompilationError(BuildError):
    """Raised when a script or stylesheet entry point fails to compile."""

    def __init__(self, entry_point: Path, reason: str):
        self.entry_point = entry_point
        self.reason = reason
        super().__init__(f"Failed to compile {entry_point}: {reason}")


class HtmlParseError(BuildError):
    """Raised when an HTML document cannot be parsed for rewriting."""

    def __init__(self, document: str, reason: str):
        self.document = document
        self.reason = reason
        super().__init__(f"Failed to parse HTML document {document}: {reason}")
