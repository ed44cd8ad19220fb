"""Preview mode entry point."""

import json
import logging

from pydantic import BaseModel
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from .consts import PREVIEW_COOKIE_NAME
from .exceptions import RequestError
from .resolver import ResourceResolver

logger = logging.getLogger("drupal-jsonapi.preview")


class PreviewErrorMessages(BaseModel):
    secret: str = "Invalid preview secret."
    slug: str = "Invalid slug."


class PreviewHandler:
    """Starlette endpoint that turns a preview link into a redirect.

    Query parameters: ``secret``, ``slug``, and optionally ``resourceVersion``,
    ``locale`` and ``defaultLocale``. The shared secret is injected at
    construction. On success the client is redirected (307) to the preview
    URL and a ``preview_data`` cookie carries the ``resourceVersion`` for the
    following page requests.
    """

    def __init__(
        self,
        resolver: ResourceResolver,
        secret: str | None,
        error_messages: PreviewErrorMessages | None = None,
    ):
        self.resolver = resolver
        self.secret = secret
        self.error_messages = error_messages or PreviewErrorMessages()

    async def handle(self, request: Request) -> Response:
        query = request.query_params
        slug = query.get("slug")
        resource_version = query.get("resourceVersion")
        locale = query.get("locale")
        default_locale = query.get("defaultLocale")

        if not self.secret or query.get("secret") != self.secret:
            logger.warning("Preview requested with an invalid secret")
            return JSONResponse({"message": self.error_messages.secret}, status_code=401)

        if not slug:
            return JSONResponse({"message": self.error_messages.slug}, status_code=401)

        try:
            url = await self.resolver.get_resource_preview_url(
                slug,
                locale=locale if locale and default_locale else None,
                default_locale=default_locale if locale and default_locale else None,
                is_versionable=resource_version is not None,
            )
        except RequestError as e:
            if e.status_code != 404:
                raise
            logger.info(f"Preview slug {slug} not found: {e.message}")
            url = None

        if not url:
            return JSONResponse({"message": self.error_messages.slug}, status_code=404)

        logger.info(f"Redirecting preview of {slug} to {url}")
        response = RedirectResponse(url, status_code=307)
        response.set_cookie(
            PREVIEW_COOKIE_NAME,
            json.dumps({"resourceVersion": resource_version}),
            httponly=True,
            samesite="none",
            secure=True,
        )
        return response


def read_preview_data(request: Request) -> dict:
    """Preview state stored by PreviewHandler, or an empty dict."""
    raw = request.cookies.get(PREVIEW_COOKIE_NAME)
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def create_preview_app(
    resolver: ResourceResolver,
    secret: str | None = None,
    error_messages: PreviewErrorMessages | None = None,
    path: str = "/api/preview",
) -> Starlette:
    """Starlette app exposing the preview endpoint at ``path``.

    Args:
        resolver: ResourceResolver used to look up the preview URL.
        secret: Shared secret. Defaults to ``config.preview_secret``.
    """
    handler = PreviewHandler(
        resolver,
        secret if secret is not None else resolver.config.preview_secret,
        error_messages,
    )
    return Starlette(routes=[Route(path, handler.handle, methods=["GET"])])
