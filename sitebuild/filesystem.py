"""Filesystem helpers: recursive walk, tree copy and path conversion."""
import hashlib
import logging
import shutil
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

HASH_BLOCK_SIZE = 65536


def to_posix(path: Path) -> str:
    """Convert a host path to forward-slash syntax.

    Args:
        path: Host-specific path

    Returns:
        The same path using "/" separators
    """
    return PurePosixPath(*Path(path).parts).as_posix()


def relative_posix(base: Path, path: Path) -> str:
    """Return ``path`` relative to ``base`` in forward-slash syntax."""
    return to_posix(Path(path).relative_to(base))


def delete_recursively(path: Path) -> None:
    """Delete a file or directory tree. A missing path is not an error."""
    path = Path(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def create_directory(path: Path) -> None:
    """Create a directory including any missing parents."""
    Path(path).mkdir(parents=True, exist_ok=True)


def walk_directory(directory: Path) -> list[Path]:
    """Recursively list every file under a directory.

    Directories are traversed but never returned. The result is sorted by
    relative path so it is stable for a given tree snapshot.

    Args:
        directory: Root directory to walk

    Returns:
        Paths of all files below ``directory``

    Raises:
        FileNotFoundError: If the directory does not exist
        NotADirectoryError: If the path is not a directory
        PermissionError: If a directory cannot be read
    """
    directory = Path(directory)
    files = []
    # iterdir() raises instead of silently skipping unreadable roots
    for item in directory.iterdir():
        if item.is_dir():
            files.extend(walk_directory(item))
        else:
            files.append(item)
    return sorted(files, key=lambda p: relative_posix(directory, p))


def copy_tree(
    source: Path,
    destination: Path,
    excluded_extensions: list[str] | set[str] = (),
) -> list[Path]:
    """Copy a directory tree, skipping files with excluded extensions.

    Args:
        source: Directory containing items to copy
        destination: Directory into which items are copied
        excluded_extensions: Extensions (e.g. ".js") to skip, case-insensitive.
            Files without an extension are never excluded.

    Returns:
        Destination paths of the copied files. Every source directory,
        including empty ones, exists under ``destination`` afterwards.
    """
    source = Path(source)
    destination = Path(destination)
    excluded = {
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in excluded_extensions
    }

    files = walk_directory(source)

    # Directories are recreated even when empty
    for directory in sorted(p for p in source.rglob("*") if p.is_dir()):
        create_directory(destination / directory.relative_to(source))

    copied = []
    for item in files:
        if item.suffix and item.suffix.lower() in excluded:
            continue

        target = destination / item.relative_to(source)
        create_directory(target.parent)
        shutil.copyfile(item, target)
        copied.append(target)
        logger.debug(f"Copied {item} -> {target}")

    return copied


def tree_digest(directory: Path) -> str:
    """Compute an aggregate SHA256 digest of a directory tree.

    Covers every file's relative path and bytes, so any rename, addition,
    removal or content change produces a different digest.

    Args:
        directory: Root directory

    Returns:
        Hex digest string
    """
    directory = Path(directory)
    sha256 = hashlib.sha256()
    for file_path in walk_directory(directory):
        sha256.update(relative_posix(directory, file_path).encode("utf-8"))
        sha256.update(b"\0")
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(HASH_BLOCK_SIZE), b""):
                sha256.update(chunk)
        sha256.update(b"\0")
    return sha256.hexdigest()
