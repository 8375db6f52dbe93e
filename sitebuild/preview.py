"""Local preview server for a built output directory."""
import logging

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from sitebuild.config import Config
from sitebuild.errors import BuildError
from sitebuild.manifest import load_manifest

logger = logging.getLogger(__name__)


def create_app(config: Config) -> FastAPI:
    """Create the preview application.

    Serves the output directory the way the deployment target does:
    content types come from file extensions and every response carries the
    configured Cache-Control header so browsers revalidate.

    Args:
        config: Loaded configuration

    Returns:
        FastAPI application
    """
    output_dir = config.paths.output_dir
    if not output_dir.is_dir():
        raise FileNotFoundError(f"Output directory not found: {output_dir}, run a build first")

    app = FastAPI(
        title="sitebuild preview",
        description="Preview server for the built site",
        version="1.0.0",
    )

    @app.middleware("http")
    async def add_cache_control(request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = config.preview.cache_control
        return response

    @app.get("/health")
    async def health_check():
        """Health check endpoint.

        Returns:
            Status and the number of manifest entries
        """
        manifest_path = config.paths.manifest_path
        entries = None
        if manifest_path.exists():
            try:
                entries = len(load_manifest(manifest_path))
            except BuildError as e:
                logger.warning(f"Unreadable manifest {manifest_path}: {e}")

        return {
            "status": "healthy",
            "output_dir": str(output_dir),
            "manifest_entries": entries,
        }

    # Mounted last so /health takes precedence
    app.mount("/", StaticFiles(directory=str(output_dir), html=True), name="site")

    return app


def serve(config: Config, host: str | None = None, port: int | None = None) -> None:
    """Run the preview server until interrupted."""
    import uvicorn

    if host is None:
        host = config.preview.host
    if port is None:
        port = config.preview.port
    logger.info(f"Serving {config.paths.output_dir} on http://{host}:{port}")

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_level=config.logging.level.lower(),
    )
