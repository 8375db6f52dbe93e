"""Command line interface for the site builder."""
import argparse
import json
import logging
import sys
from pathlib import Path

from sitebuild.builder import build_site
from sitebuild.config import Config, ConfigurationError, load_config
from sitebuild.errors import BuildError
from sitebuild.manifest import load_manifest

logger = logging.getLogger(__name__)

COMMANDS = ("build", "serve", "manifest")


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Global options are accepted before or after the command name.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        "-c",
        default=argparse.SUPPRESS,
        help="Path to YAML config (default: $SITEBUILD_CONFIG or ./sitebuild.yaml)",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable debug logging",
    )

    parser = argparse.ArgumentParser(
        prog="sitebuild",
        description="Build a static site with content-hashed scripts and stylesheets.",
        parents=[common],
    )
    subparsers = parser.add_subparsers(dest="command")

    build = subparsers.add_parser("build", parents=[common], help="Build the site (default)")
    build.add_argument("--input", "-i", help="Source directory")
    build.add_argument("--output", "-o", help="Output directory")
    build.add_argument(
        "--no-minify", action="store_true", help="Hash entry points without minifying"
    )

    serve = subparsers.add_parser(
        "serve", parents=[common], help="Serve the output directory locally"
    )
    serve.add_argument("--host", help="Bind address")
    serve.add_argument("--port", type=int, help="Bind port")
    serve.add_argument(
        "--build", action="store_true", help="Run a build before serving"
    )

    subparsers.add_parser(
        "manifest", parents=[common], help="Print the manifest of the last build"
    )

    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command line overrides to a loaded config and re-validate it.

    Args:
        config: Loaded configuration
        args: Parsed arguments

    Returns:
        The same config object
    """
    if getattr(args, "input", None):
        config.paths.input_dir = Path(args.input)
    if getattr(args, "output", None):
        config.paths.output_dir = Path(args.output)
    if getattr(args, "no_minify", False):
        config.bundle.minify = False
    if getattr(args, "verbose", False):
        config.logging.level = "DEBUG"

    config.validate()
    return config


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format='%(levelname)s:\t%(name)s - %(message)s',
    )


def run_build(config: Config) -> int:
    result = build_site(config)
    print(
        f"Built {len(result.entry_points)} entry points, copied "
        f"{len(result.copied_assets)} assets, rewrote "
        f"{len(result.rewritten_documents)} HTML documents into {result.output_dir}"
    )
    print("Build complete.")
    return 0


def run_serve(config: Config, args: argparse.Namespace) -> int:
    from sitebuild.preview import serve

    if args.build:
        build_site(config)
    serve(config, host=args.host, port=args.port)
    return 0


def run_manifest(config: Config) -> int:
    manifest = load_manifest(config.paths.manifest_path)
    print(json.dumps(manifest, indent=2, sort_keys=True))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Arguments without the program name, defaults to sys.argv[1:]

    Returns:
        Process exit code: 0 on success, 1 on any failure
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    # "build" is the default command
    if not any(arg in COMMANDS or arg in ("-h", "--help") for arg in argv):
        argv.insert(0, "build")

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = apply_overrides(load_config(getattr(args, "config", None)), args)
    except ConfigurationError as e:
        setup_logging("INFO")
        logger.error(f"Configuration error: {e}")
        return 1

    setup_logging(config.logging.level)

    try:
        if args.command == "serve":
            return run_serve(config, args)
        if args.command == "manifest":
            return run_manifest(config)
        return run_build(config)
    except (BuildError, OSError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
