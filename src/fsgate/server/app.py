"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Iterable

from fastapi import FastAPI, Request

from fsgate.config.models import ServerConfig
from fsgate.config.settings import ACCESS_CHECK_PATH
from fsgate.security.paths import normalize_path
from fsgate.security.policy import check_loading_access
from fsgate.server.denied import DenialReporter
from fsgate.server.public_files import PublicFilesSnapshot
from fsgate.server.static import (
    serve_public_middleware,
    serve_raw_fs_middleware,
    serve_static_middleware,
)

logger = logging.getLogger(__name__)


def create_app(config: ServerConfig, trusted_paths: Iterable[str] = ()) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        config: Server configuration
        trusted_paths: Paths the server resolved itself and always serves

    Returns:
        Configured FastAPI app
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Handle application lifespan events."""
        # Startup: snapshot the public directory for this server run
        public_dir = app.state.config.public_dir
        if public_dir is not None and app.state.config.public_files_cache:
            files = app.state.public_files.refresh(Path(public_dir))
            logger.info(f"Serving {len(files)} public files from {public_dir}")

        yield

        # Shutdown: drop the snapshot, the next start rebuilds it
        app.state.public_files.publish(None)

    logging.getLogger("fsgate").setLevel(config.log_level.upper())

    app = FastAPI(
        title="fsgate",
        description="Development file server with path-based access control",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    policy = config.to_policy(trusted_paths=trusted_paths)

    # Store config on app state
    app.state.config = config
    app.state.policy = policy
    app.state.reporter = DenialReporter(allow=policy.allow)
    app.state.public_files = PublicFilesSnapshot()

    logger.debug(f"Access policy: {policy}")

    # Starlette runs the last registered middleware first, so register the
    # stages in reverse: requests flow public -> root -> raw fs -> routes
    app.middleware("http")(
        serve_raw_fs_middleware(policy, app.state.reporter, headers=config.headers)
    )
    app.middleware("http")(
        serve_static_middleware(
            config.served_root,
            policy,
            app.state.reporter,
            aliases=config.aliases,
            headers=config.headers,
        )
    )
    if config.served_public_dir is not None:
        app.middleware("http")(
            serve_public_middleware(
                config.served_public_dir, app.state.public_files, headers=config.headers
            )
        )

    # Diagnostics endpoint: report the decision for a filesystem path
    @app.get(ACCESS_CHECK_PATH)
    def access_check(request: Request, path: str) -> dict:
        """Report how the access policy treats ``path``."""
        normalized = normalize_path(path)
        decision = check_loading_access(request.app.state.policy, normalized)
        return {"path": normalized, "decision": decision.value}

    return app
