"""Template rendering and static assets shared by the UI components."""

import logging
from pathlib import Path
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from jinja2 import StrictUndefined, TemplateError

from .config import Settings
from .template_funcs import register_template_funcs

log = logging.getLogger("ruleui.web")

_PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = _PACKAGE_DIR / "templates"
STATIC_DIR = _PACKAGE_DIR / "static"

# Characters that would let a prefix header inject markup into rendered links.
_UNSAFE_PREFIX_CHARS = set('<>"')


class BaseUI:
    def __init__(self, settings: Settings, menu_template: str) -> None:
        self.settings = settings
        self.menu_template = menu_template
        self.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
        if settings.debug_templates:
            self.templates.env.undefined = StrictUndefined
            self.templates.env.auto_reload = True
        register_template_funcs(self.templates.env, settings.query_url)
        self.static_files = StaticFiles(directory=str(STATIC_DIR))

    def get_web_prefix(self, request: Request) -> str:
        """Path prefix the UI is served under.

        A configured prefix header wins over the external prefix unless its
        value could break out of an attribute.
        """

        prefix = ""
        header = self.settings.web_prefix_header
        if header:
            prefix = request.headers.get(header, "")
            if _UNSAFE_PREFIX_CHARS.intersection(prefix):
                log.warning("Illegal value %r in web prefix header %s, ignoring", prefix, header)
                prefix = ""
        if not prefix:
            prefix = self.settings.web_external_prefix
        return prefix

    def execute_template(self, request: Request, name: str, prefix: str, data: Any) -> HTMLResponse:
        context = {
            "menu_template": self.menu_template,
            "path_prefix": prefix,
            "build_version": self.settings.build_version,
            "data": data,
        }
        try:
            return self.templates.TemplateResponse(request, name, context)
        except (TemplateError, ValueError) as exc:
            log.exception("Failed to render template %s", name)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    async def serve_static_asset(self, request: Request, filepath: str) -> Response:
        try:
            return await self.static_files.get_response(filepath, request.scope)
        except ValueError as exc:
            # e.g. NUL bytes in the path
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found") from exc
