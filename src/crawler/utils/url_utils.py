# src/crawler/utils/url_utils.py
import os
import logging
from urllib.parse import urlparse, urljoin, urlunparse

logger = logging.getLogger(__name__)

# Extensive whitelist of page types worth crawling. The "" entry covers URLs without extension.
WHITELISTED_EXTENSIONS = [
    "", ".htm", ".html", ".xhtml", ".shtml", ".shtm", ".stm",
    ".jhtml", ".asp", ".aspx", ".ashx", ".asmx", ".axd", ".mspx",
    ".jsp", ".jspx", ".do", ".action", ".jsf", ".faces",
    ".php", ".php3", ".php4", ".php5", ".phtml",
    ".pl", ".cgi", ".fcgi", ".py", ".rb", ".rhtml", ".dll",
    ".cfm", ".cfml", ".yaws", ".lasso", ".nsf", ".xsp", ".hcsp", ".adp"
]


class UrlUtils:
    """A collection of static methods for URL parsing and manipulation."""

    @staticmethod
    def ensure_scheme(url: str) -> str:
        """Prefixes https:// when the user typed a bare host. Callers normalize, the core does not."""
        url = url.strip()
        if not url.lower().startswith(('http://', 'https://')):
            url = 'https://' + url
        return url

    @staticmethod
    def is_valid_absolute_url(url: str) -> bool:
        """True for a syntactically valid http(s) URL with a host."""
        if not isinstance(url, str) or not url.strip() or any(c.isspace() for c in url.strip()):
            return False
        try:
            parsed = urlparse(url.strip())
            # Accessing .port validates the port number
            parsed.port
        except ValueError:
            return False
        return parsed.scheme.lower() in ('http', 'https') and bool(parsed.hostname)

    @staticmethod
    def normalize_url(base_url: str, url: str) -> str:
        """
        Creates a clean, absolute URL from a base URL and a potentially relative URL:
        fragment removed, scheme and host lower-cased, empty path turned into '/'.
        """
        absolute_url = urljoin(base_url, url)
        parsed_url = urlparse(absolute_url)

        parsed_url = parsed_url._replace(
            scheme=parsed_url.scheme.lower(),
            netloc=parsed_url.netloc.lower(),
            path=parsed_url.path or '/',
            fragment=''
        )
        return urlunparse(parsed_url)

    @staticmethod
    def get_base_url(url: str) -> str | None:
        """
        Extracts and returns the origin (scheme + netloc) of a URL, lower-cased.
        """
        try:
            parsed_url = urlparse(url)
            if not parsed_url.scheme or not parsed_url.netloc:
                logger.debug(f"Invalid URL format: {url}")
                return None
            return f"{parsed_url.scheme.lower()}://{parsed_url.netloc.lower()}"
        except ValueError:
            logger.debug(f"Could not parse invalid URL: {url}")
            return None

    @staticmethod
    def is_allowed_extension(url: str) -> bool:
        """
        Checks if a URL's extension is on the whitelist of crawlable page types.
        URLs without an extension are considered valid.
        """
        try:
            path = urlparse(url).path
        except ValueError:
            return False
        _, extension = os.path.splitext(path)
        return extension.lower() in WHITELISTED_EXTENSIONS

    @staticmethod
    def is_same_origin(url: str, base_url: str) -> bool:
        """Same scheme and same host (and port) as base_url."""
        origin = UrlUtils.get_base_url(url)
        return origin is not None and origin == UrlUtils.get_base_url(base_url)
