"""Entry point discovery, compilation and content hashing."""
import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from sitebuild.compilers.minify import get_compiler
from sitebuild.config import BundleConfig
from sitebuild.errors import CompilationError
from sitebuild.filesystem import create_directory, relative_posix, walk_directory

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_EXTENSIONS = (".js", ".css")


@dataclass(frozen=True)
class BundleOutput:
    """Result of compiling one entry point."""

    entry_point: Path
    output_path: Path
    content_hash: str


def compute_hash(content: bytes, length: int = 8) -> str:
    """Compute short hash of content."""
    return hashlib.md5(content).hexdigest()[:length]


def hashed_relative_path(relative_path: str, content_hash: str) -> PurePosixPath:
    """Insert a content hash into a relative file name.

    "js/app.js" with hash "1a2b3c4d" becomes "js/app-1a2b3c4d.js".

    Args:
        relative_path: Forward-slash path relative to the input directory
        content_hash: Hash to embed

    Returns:
        Hashed relative path
    """
    path = PurePosixPath(relative_path)
    return path.with_name(f"{path.stem}-{content_hash}{path.suffix}")


def find_entry_points(
    input_dir: Path, extensions: list[str] | tuple[str, ...] = DEFAULT_ENTRY_EXTENSIONS
) -> list[Path]:
    """Find all files that get content hashes inserted into their names.

    Args:
        input_dir: Source tree root
        extensions: Entry point extensions, lower case with leading dot

    Returns:
        Entry point paths in walk order
    """
    wanted = {ext.lower() for ext in extensions}
    return [path for path in walk_directory(input_dir) if path.suffix.lower() in wanted]


class Bundler:
    """Compiles entry points independently and writes them under hashed names."""

    def __init__(self, config: BundleConfig):
        """Initialize bundler.

        Args:
            config: Bundle configuration
        """
        self.config = config

    def compile_entry_point(self, entry_point: Path) -> bytes:
        """Compile a single entry point.

        Args:
            entry_point: Path to the source file

        Returns:
            Compiled output encoded as UTF-8

        Raises:
            CompilationError: If the file cannot be decoded or compiled
        """
        compiler = get_compiler(entry_point.suffix, self.config.minify)
        try:
            source = entry_point.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise CompilationError(entry_point, f"not valid UTF-8 ({e})") from e

        try:
            compiled = compiler.compile(source)
        except Exception as e:
            raise CompilationError(entry_point, f"{compiler.name}: {e}") from e

        return compiled.encode("utf-8")

    def bundle(
        self, entry_points: list[Path], input_dir: Path, output_dir: Path
    ) -> list[BundleOutput]:
        """Compile every entry point and write it under a hashed name.

        Nothing is written until all entry points compiled successfully, so a
        single failure leaves no hashed output behind.

        Args:
            entry_points: Source files to compile
            input_dir: Source tree root
            output_dir: Output tree root

        Returns:
            One BundleOutput per entry point, in input order

        Raises:
            CompilationError: If any entry point fails to compile
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)

        pending: list[tuple[BundleOutput, bytes]] = []

        for entry_point in entry_points:
            compiled = self.compile_entry_point(entry_point)
            content_hash = compute_hash(compiled, self.config.hash_length)
            relative = hashed_relative_path(
                relative_posix(input_dir, entry_point), content_hash
            )
            output_path = output_dir.joinpath(*relative.parts)

            pending.append((BundleOutput(entry_point, output_path, content_hash), compiled))
            logger.debug(f"Compiled {entry_point} ({len(compiled)} bytes, hash={content_hash})")

        for output, compiled in pending:
            create_directory(output.output_path.parent)
            output.output_path.write_bytes(compiled)

        logger.info(f"Bundled {len(pending)} entry points into {output_dir}")
        return [output for output, _ in pending]
