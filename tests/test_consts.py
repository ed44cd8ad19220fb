from drupal_jsonapi.consts import (
    DEFAULT_API_PREFIX,
    DEFAULT_AUTH_URL_PATH,
    DEFAULT_HEADERS,
    JSONAPI_MEDIA_TYPE,
    PACKAGE_VERSION,
    SERVER_NAME,
    SUBREQUESTS_URL_PATH,
    TRANSLATE_PATH_URL_PATH,
    USER_AGENT,
)


class TestPackageConstants:
    """Test package constants are properly defined"""

    def test_package_version_defined(self):
        assert isinstance(PACKAGE_VERSION, str)
        assert "." in PACKAGE_VERSION

    def test_user_agent_format(self):
        assert USER_AGENT == f"{SERVER_NAME}/{PACKAGE_VERSION}"

    def test_url_path_constants(self):
        """All backend paths are site-relative"""
        for path in (
            DEFAULT_API_PREFIX,
            DEFAULT_AUTH_URL_PATH,
            SUBREQUESTS_URL_PATH,
            TRANSLATE_PATH_URL_PATH,
        ):
            assert path.startswith("/")
            assert not path.endswith("/")

    def test_default_headers_negotiate_jsonapi(self):
        assert DEFAULT_HEADERS["Accept"] == JSONAPI_MEDIA_TYPE
        assert DEFAULT_HEADERS["Content-Type"] == JSONAPI_MEDIA_TYPE
