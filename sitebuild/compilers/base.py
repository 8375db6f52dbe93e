"""Base compiler interface for entry point compilation."""
from abc import ABC, abstractmethod


class BaseCompiler(ABC):
    """Abstract base class for entry point compilers.

    A compiler turns the text of a single script or stylesheet into its
    distributable form. It never resolves imports or concatenates other
    files: every entry point is processed standalone.
    """

    name: str = "base"

    @abstractmethod
    def compile(self, source: str) -> str:
        """Compile source text.

        Args:
            source: Decoded source file contents

        Returns:
            Compiled output text
        """
        pass
