"""Drupal JSON:API client package

Resolves site paths to content on a headless Drupal backend in a single
round trip, fetches resources, collections and menus, lists static paths for
pre-generation, and exposes all of it as an MCP server.
"""

from .auth import AuthManager
from .client import DrupalClient, get_client
from .config import Config, get_config
from .consts import PACKAGE_VERSION
from .deserializer import JsonApiDeserializer
from .exceptions import (
    AuthenticationError,
    ConfigError,
    DrupalJsonApiError,
    JsonApiError,
    MenuTreeError,
    MissingAttributeError,
    RequestError,
    ResourceTypeNotFoundError,
)
from .fetcher import ResourceFetcher, get_fetcher
from .menu import MenuService, build_menu_tree, get_menu_service
from .models import AccessToken, RequestContext, StaticPathEntry, TranslatedPath
from .params import JsonApiParams
from .paths import (
    StaticPathBuilder,
    build_static_paths_from_resources,
    build_static_paths_params_from_paths,
    get_path_from_context,
    get_static_path_builder,
)
from .resolver import ResourceResolver, get_resolver

__version__ = PACKAGE_VERSION

__all__ = [
    "__version__",
    "get_config",
    "get_client",
    "get_resolver",
    "get_fetcher",
    "get_menu_service",
    "get_static_path_builder",
    "Config",
    "DrupalClient",
    "AuthManager",
    "JsonApiDeserializer",
    "JsonApiParams",
    "ResourceResolver",
    "ResourceFetcher",
    "MenuService",
    "StaticPathBuilder",
    "build_menu_tree",
    "build_static_paths_from_resources",
    "build_static_paths_params_from_paths",
    "get_path_from_context",
    "AccessToken",
    "RequestContext",
    "StaticPathEntry",
    "TranslatedPath",
    "DrupalJsonApiError",
    "ConfigError",
    "AuthenticationError",
    "RequestError",
    "JsonApiError",
    "ResourceTypeNotFoundError",
    "MissingAttributeError",
    "MenuTreeError",
]
