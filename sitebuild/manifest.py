"""Build manifest: source URL to hashed distribution URL."""
import json
from pathlib import Path

from sitebuild.bundler import BundleOutput
from sitebuild.errors import BuildError
from sitebuild.filesystem import relative_posix


def to_root_relative_url(base: Path, path: Path) -> str:
    """Express ``path`` as a root-relative URL under ``base`` ("/js/app.js")."""
    return "/" + relative_posix(base, path)


def create_manifest(
    outputs: list[BundleOutput], input_dir: Path, output_dir: Path
) -> dict[str, str]:
    """Create the manifest mapping source URLs to distribution URLs.

    Args:
        outputs: Bundler results
        input_dir: Source tree root the keys are relative to
        output_dir: Output tree root the values are relative to

    Returns:
        Manifest dict sorted by key

    Raises:
        BuildError: If two outputs share the same source URL
    """
    manifest: dict[str, str] = {}
    for output in outputs:
        source_url = to_root_relative_url(Path(input_dir), output.entry_point)
        dist_url = to_root_relative_url(Path(output_dir), output.output_path)
        if source_url in manifest:
            raise BuildError(f"Duplicate manifest entry: {source_url}")
        manifest[source_url] = dist_url
    return dict(sorted(manifest.items()))


def write_manifest(manifest: dict[str, str], path: Path) -> None:
    """Write the manifest as indented JSON."""
    Path(path).write_text(
        json.dumps(manifest, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )


def load_manifest(path: Path) -> dict[str, str]:
    """Load a previously written manifest.

    Args:
        path: Manifest file path

    Returns:
        Manifest dict

    Raises:
        BuildError: If the file is not a JSON object of strings
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise BuildError(f"Manifest {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        raise BuildError(f"Manifest {path} must be an object of strings")
    return data
