"""Static file serving stages.

Three ``http`` middlewares sit in front of the application routes, in this
order: public directory, project root, and the ``/@fs/`` escape hatch. Each
one either answers the request or passes it on with ``call_next``.
"""

import logging
import os
import re
import stat
from typing import Awaitable, Callable, Mapping, Sequence

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.responses import FileResponse
from starlette.types import Scope

from fsgate.config.models import AccessPolicy, AliasRule
from fsgate.security.errors import AccessDeniedError
from fsgate.security.paths import normalize_path
from fsgate.security.policy import Decision, check_loading_access
from fsgate.server.denied import DenialReporter
from fsgate.server.public_files import PublicFilesSnapshot
from fsgate.server.resolver import resolve_fs_request, resolve_request_path
from fsgate.server.urls import (
    clean_url,
    decode_uri,
    is_import_request,
    is_internal_request,
    is_url_request,
    raw_request_url,
    replace_request_url,
)

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Request, CallNext], Awaitable[Response]]

# js, jsx, ts, tsx, mjs, cjs, mts, cts: .ts is otherwise guessed as video/mp2t
JS_EXTENSION_PATTERN = re.compile(r"\.(?:[tj]sx?|[cm][tj]s)$")


def access_predicate(policy: AccessPolicy) -> Callable[[str], bool]:
    """Per-file check handed to :class:`GuardedStaticFiles`.

    Raises AccessDeniedError for readable files the policy refuses and
    returns False for paths that should fall through.
    """

    def should_serve(file_path: str) -> bool:
        decision = check_loading_access(policy, file_path)
        if decision is Decision.DENIED:
            raise AccessDeniedError(normalize_path(file_path))
        return decision is Decision.ALLOWED

    return should_serve


class GuardedStaticFiles(StaticFiles):
    """Starlette static files with a per-path serving predicate.

    Symlinks are followed so linked workspaces resolve; the predicate is the
    access boundary.
    """

    def __init__(
        self,
        directory: str,
        *,
        should_serve: Callable[[str], bool] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(directory=directory, check_dir=False, follow_symlink=True)
        self.should_serve = should_serve
        self.extra_headers = dict(headers or {})

    def lookup_path(self, path: str) -> tuple[str, os.stat_result | None]:
        full_path, stat_result = super().lookup_path(path)
        if (
            self.should_serve is None
            or stat_result is None
            or not stat.S_ISREG(stat_result.st_mode)
        ):
            return full_path, stat_result

        if not self.should_serve(full_path):
            return "", None
        return full_path, stat_result

    def file_response(
        self,
        full_path: str,
        stat_result: os.stat_result,
        scope: Scope,
        status_code: int = 200,
    ) -> Response:
        response = super().file_response(full_path, stat_result, scope, status_code)
        if isinstance(response, FileResponse) and JS_EXTENSION_PATTERN.search(str(full_path)):
            response.headers["content-type"] = "text/javascript"
        for name, value in self.extra_headers.items():
            response.headers[name] = value
        return response

    async def serve(self, request: Request, call_next: CallNext) -> Response:
        """Answer with the file, or hand the request on when there is none."""
        try:
            return await self.get_response(self.get_path(request.scope), request.scope)
        except HTTPException as exc:
            if exc.status_code in (404, 405):
                return await call_next(request)
            return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


def serve_public_middleware(
    public_dir: str,
    snapshot: PublicFilesSnapshot,
    headers: Mapping[str, str] | None = None,
) -> Middleware:
    """Serve the public assets directory without policy checks."""
    files = GuardedStaticFiles(public_dir, headers=headers)

    def to_file_path(url: str) -> str:
        return normalize_path(decode_uri(clean_url(url)))

    async def serve_public(request: Request, call_next: CallNext) -> Response:
        url = raw_request_url(request.scope)
        # ?url references are transformed by later stages, not served raw
        if (
            not snapshot.contains(to_file_path(url))
            or is_import_request(url)
            or is_internal_request(url)
            or is_url_request(url)
        ):
            return await call_next(request)
        return await files.serve(request, call_next)

    return serve_public


def serve_static_middleware(
    root: str,
    policy: AccessPolicy,
    reporter: DenialReporter,
    aliases: Sequence[AliasRule] = (),
    headers: Mapping[str, str] | None = None,
) -> Middleware:
    """Serve files under the project root, alias rewrites applied."""
    files = GuardedStaticFiles(root, should_serve=access_predicate(policy), headers=headers)

    async def serve_static(request: Request, call_next: CallNext) -> Response:
        url = raw_request_url(request.scope)
        resolved = resolve_request_path(url, root, aliases)
        if resolved is None:
            return await call_next(request)

        logger.debug(f"Static request {url} -> {resolved.file_path}")
        if resolved.rewritten_url is not None:
            replace_request_url(request.scope, resolved.rewritten_url)

        try:
            return await files.serve(request, call_next)
        except AccessDeniedError as exc:
            return reporter.respond(request, exc.path)

    return serve_static


def serve_raw_fs_middleware(
    policy: AccessPolicy,
    reporter: DenialReporter,
    headers: Mapping[str, str] | None = None,
) -> Middleware:
    """Serve ``/@fs/`` URLs from the filesystem root.

    Linked packages outside the project root reference their assets through
    this prefix.
    """
    files = GuardedStaticFiles("/", should_serve=access_predicate(policy), headers=headers)

    async def serve_raw_fs(request: Request, call_next: CallNext) -> Response:
        url = raw_request_url(request.scope)
        rewritten = resolve_fs_request(url)
        if rewritten is None:
            return await call_next(request)

        logger.debug(f"Escape hatch request {url} -> {rewritten}")
        replace_request_url(request.scope, rewritten)

        try:
            return await files.serve(request, call_next)
        except AccessDeniedError as exc:
            return reporter.respond(request, exc.path)

    return serve_raw_fs
