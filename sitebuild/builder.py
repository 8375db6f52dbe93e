"""Build orchestration: clean, bundle, copy, rewrite, persist manifest."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from sitebuild.bundler import Bundler, find_entry_points
from sitebuild.config import Config
from sitebuild.errors import BuildError
from sitebuild.filesystem import copy_tree, create_directory, delete_recursively, tree_digest
from sitebuild.html_rewriter import rewrite_html_documents
from sitebuild.manifest import create_manifest, write_manifest

logger = logging.getLogger(__name__)


class BuildState(str, Enum):
    """Build progress states, in transition order."""

    PENDING = "pending"
    CLEANED = "cleaned"
    PREPARED = "prepared"
    ENTRY_POINTS_FOUND = "entry_points_found"
    BUNDLED = "bundled"
    MANIFEST_BUILT = "manifest_built"
    ASSETS_COPIED = "assets_copied"
    HTML_REWRITTEN = "html_rewritten"
    MANIFEST_WRITTEN = "manifest_written"
    DONE = "done"
    FAILED = "failed"


@dataclass
class BuildResult:
    """Summary of a successful build."""

    output_dir: Path
    manifest: dict[str, str]
    manifest_path: Path
    source_digest: str
    entry_points: list[Path] = field(default_factory=list)
    copied_assets: list[Path] = field(default_factory=list)
    rewritten_documents: list[Path] = field(default_factory=list)


class SiteBuilder:
    """Runs the two-pass build for one configuration.

    The manifest is complete before the first HTML document is rewritten.
    Any failure moves the builder to FAILED and re-raises the original
    exception; the output directory is then not a valid build.
    """

    def __init__(self, config: Config):
        """Initialize builder.

        Args:
            config: Loaded configuration
        """
        self.config = config
        self.bundler = Bundler(config.bundle)
        self.state = BuildState.PENDING
        self.history: list[BuildState] = []

    def _transition(self, state: BuildState) -> None:
        self.state = state
        self.history.append(state)
        logger.info(f"Build state: {state.name}")

    def run(self) -> BuildResult:
        """Run the build.

        Returns:
            BuildResult describing the output tree

        Raises:
            OSError: On filesystem failures
            BuildError: On compilation or HTML parse failures
        """
        self.state = BuildState.PENDING
        self.history = []
        try:
            return self._run()
        except Exception as e:
            last_state = self.state
            self._transition(BuildState.FAILED)
            logger.error(f"Build failed after {last_state.name}: {e}")
            raise

    def _run(self) -> BuildResult:
        paths = self.config.paths
        input_dir = paths.input_dir
        output_dir = paths.output_dir

        if not input_dir.is_dir():
            raise FileNotFoundError(f"Input directory not found: {input_dir}")
        # The build manifest would silently replace a source file of the same name
        if (input_dir / paths.manifest_name).exists():
            raise BuildError(
                f"Source tree contains {paths.manifest_name}, which collides with the "
                f"build manifest; rename it or set paths.manifest_name"
            )
        source_digest = tree_digest(input_dir)
        logger.info(f"Building {input_dir} -> {output_dir} (source digest {source_digest[:12]})")

        delete_recursively(output_dir)
        self._transition(BuildState.CLEANED)

        create_directory(output_dir)
        self._transition(BuildState.PREPARED)

        entry_points = find_entry_points(input_dir, self.config.bundle.extensions)
        self._transition(BuildState.ENTRY_POINTS_FOUND)

        outputs = self.bundler.bundle(entry_points, input_dir, output_dir)
        self._transition(BuildState.BUNDLED)

        manifest = create_manifest(outputs, input_dir, output_dir)
        self._transition(BuildState.MANIFEST_BUILT)

        copied = copy_tree(input_dir, output_dir, self.config.bundle.extensions)
        self._transition(BuildState.ASSETS_COPIED)

        rewritten = rewrite_html_documents(output_dir, manifest, self.config.html.extensions)
        self._transition(BuildState.HTML_REWRITTEN)

        write_manifest(manifest, paths.manifest_path)
        self._transition(BuildState.MANIFEST_WRITTEN)
        logger.info(f"Manifest: {manifest}")

        self._transition(BuildState.DONE)
        return BuildResult(
            output_dir=output_dir,
            manifest=manifest,
            manifest_path=paths.manifest_path,
            source_digest=source_digest,
            entry_points=entry_points,
            copied_assets=copied,
            rewritten_documents=rewritten,
        )


def build_site(config: Config) -> BuildResult:
    """Build the site described by ``config``."""
    return SiteBuilder(config).run()
