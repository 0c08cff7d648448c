"""
Input normalization helpers for shortcut fields
"""

import re
from typing import Optional, Union
from urllib.parse import urlparse


def normalize_url(url: Optional[str]) -> str:
    """
    Normalize a URL to ensure it has a protocol.

    Adds https:// if no protocol is present.

    Examples:
        >>> normalize_url("example.com")
        'https://example.com'
        >>> normalize_url("http://nas.local:5000")
        'http://nas.local:5000'
    """
    if not url or not isinstance(url, str):
        return ''

    url = url.strip()
    if re.match(r'^https?://', url, re.IGNORECASE):
        return url
    return f"https://{url}"


def is_valid_url(url: Optional[str]) -> bool:
    """Check that a URL (after normalization) is http(s) with a host"""
    if not url:
        return False

    try:
        parsed = urlparse(normalize_url(url))
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def clean_description(description: Optional[str]) -> str:
    """Trim whitespace and collapse internal runs of whitespace"""
    if not description or not isinstance(description, str):
        return ''
    return re.sub(r'\s+', ' ', description.strip())


def is_valid_port(port: Union[str, int, None]) -> bool:
    """Port must be an integer between 1 and 65535"""
    if port is None or port == '':
        return False
    try:
        port_num = int(port)
    except (TypeError, ValueError):
        return False
    return 0 < port_num <= 65535
