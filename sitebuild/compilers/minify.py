"""Minifying compilers backed by rcssmin and rjsmin."""
import rcssmin
import rjsmin

from sitebuild.compilers.base import BaseCompiler


class CssCompiler(BaseCompiler):
    """Stylesheet minifier."""

    name = "rcssmin"

    def compile(self, source: str) -> str:
        return rcssmin.cssmin(source)


class JsCompiler(BaseCompiler):
    """Script minifier."""

    name = "rjsmin"

    def compile(self, source: str) -> str:
        return rjsmin.jsmin(source)


class PassthroughCompiler(BaseCompiler):
    """Emits the source unchanged (minification disabled)."""

    name = "passthrough"

    def compile(self, source: str) -> str:
        return source


MINIFIERS: dict[str, type[BaseCompiler]] = {
    ".css": CssCompiler,
    ".js": JsCompiler,
}


def get_compiler(suffix: str, minify: bool = True) -> BaseCompiler:
    """Pick the compiler for a file extension.

    Extensions without a minifier (e.g. ".mjs" added to the bundle
    extensions) are passed through unchanged, as is everything when
    ``minify`` is off.

    Args:
        suffix: File extension including the dot
        minify: Whether minification is enabled

    Returns:
        Compiler instance
    """
    compiler_class = MINIFIERS.get(suffix.lower()) if minify else None
    if compiler_class is None:
        return PassthroughCompiler()
    return compiler_class()
