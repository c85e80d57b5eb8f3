"""403 responses for paths the access policy refuses."""

import logging
from pathlib import Path
from typing import Iterable

from fastapi import Request
from fastapi.responses import Response
from fastapi.templating import Jinja2Templates

from fsgate.config.settings import FS_ALLOW_DOCS_HINT

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


class DenialReporter:
    """Logs policy denials and renders the restricted page."""

    def __init__(self, allow: Iterable[str], templates: Jinja2Templates | None = None) -> None:
        self.allow = tuple(allow)
        # autoescaping is on, so every interpolated line is HTML-escaped
        self.templates = templates or Jinja2Templates(directory=str(TEMPLATES_DIR))
        self._warned: set[str] = set()

    def url_message(self, path: str) -> str:
        return f'The request id "{path}" is outside of the fsgate serving allow list.'

    def hint_message(self) -> str:
        roots = "\n".join(f"- {root}" for root in self.allow)
        return f"\n{roots}\n\n{FS_ALLOW_DOCS_HINT}"

    def build_message(self, path: str) -> str:
        return f"{self.url_message(path)}\n{self.hint_message()}"

    def _warn_once(self, message: str) -> None:
        if message in self._warned:
            return
        self._warned.add(message)
        logger.warning(message)

    def respond(self, request: Request, path: str) -> Response:
        """Build the 403 response for ``path``."""
        logger.error(self.url_message(path))
        self._warn_once(self.hint_message())

        return self.templates.TemplateResponse(
            request=request,
            name="restricted.html",
            context={"lines": self.build_message(path).split("\n")},
            status_code=403,
        )
