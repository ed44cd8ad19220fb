"""MCP server resources describing the configured Drupal backend."""

import logging

from .config import Config
from .consts import SUBREQUESTS_URL_PATH, TRANSLATE_PATH_URL_PATH

logger = logging.getLogger("drupal-jsonapi.resources")


def get_endpoints_resource(config: Config | None = None) -> dict[str, str]:
    """Backend endpoints the client talks to.

    Args:
        config: Config instance. If None, creates new instance.
    """
    if config is None:
        config = Config()

    return {
        "base_url": config.base_url,
        "jsonapi": config.api_url,
        "subrequests": f"{config.base_url}{SUBREQUESTS_URL_PATH}",
        "translate_path": f"{config.base_url}{TRANSLATE_PATH_URL_PATH}",
        "token": config.token_url,
    }


def get_info_resource(config: Config | None = None) -> str:
    """Summary of the client configuration, without secrets."""
    if config is None:
        config = Config()

    auth = "client_credentials" if config.client_credentials else "none"
    entry = "index lookup" if not config.use_default_resource_type_entry else "type--bundle"

    return f"""Drupal JSON:API MCP Server

Site: {config.base_url}
JSON:API: {config.api_url}
Front page: {config.front_page}
Auth: {auth} (default with_auth={config.with_auth})
Collection endpoints: {entry}

Use resolve_path to turn a site path into its content, and
get_static_paths to enumerate every page of a content type."""


def register_resources(mcp, config: Config | None = None) -> None:
    """Register all resources with the MCP server.

    Args:
        mcp: FastMCP instance to register resources with.
        config: Config instance. If None, creates new instance.
    """
    logger.debug("Registering MCP resources")

    @mcp.resource("drupal://endpoints")
    def endpoints_resource() -> dict[str, str]:
        """Backend endpoints the client talks to."""
        return get_endpoints_resource(config)

    @mcp.resource("drupal://info")
    def info_resource() -> str:
        """Summary of the client configuration."""
        return get_info_resource(config)

    logger.info("Registered 2 MCP resources")
