"""
Masking of sensitive data in log output.

Keeps API keys, bearer tokens and similar secrets out of log records
written by listeners, retry diagnostics and configuration loaders.
"""

import re
from typing import Any, Dict, Set

MASK = "***REDACTED***"

# Case-insensitive, matched exactly or as a substring of the key.
SENSITIVE_KEYS: Set[str] = {
    'password', 'passwd', 'secret', 'token', 'api_key', 'apikey',
    'access_token', 'refresh_token', 'client_secret', 'private_key',
    'authorization', 'auth', 'cookie', 'session', 'credentials',
}

SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1' + MASK),
    (re.compile(r'(Basic\s+)([A-Za-z0-9+/]+=*)', re.IGNORECASE), r'\1' + MASK),
    (re.compile(r'(api[_-]?key[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1' + MASK),
    (re.compile(r'(token[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1' + MASK),
]


def _is_sensitive_key(key: str) -> bool:
    key = key.lower()
    if key in SENSITIVE_KEYS:
        return True
    return any(sensitive in key for sensitive in SENSITIVE_KEYS)


def _mask_string(text: str, mask: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        if mask != MASK:
            replacement = replacement.replace(MASK, mask)
        text = pattern.sub(replacement, text)
    return text


def mask_sensitive_data(data: Any, mask: str = MASK) -> Any:
    """
    Recursively mask secrets in dicts, lists and strings.

    Args:
        data: dict, list, str or any other value
        mask: Replacement string

    Returns:
        Copy of the data with secrets masked

    Examples:
        >>> mask_sensitive_data({"apiKey": "ew0KICAiYWxnIjo", "environmentId": "975bf280"})
        {'apiKey': '***REDACTED***', 'environmentId': '975bf280'}
        >>> mask_sensitive_data("Bearer ew0KICAiYWxnIjo")
        'Bearer ***REDACTED***'
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return _mask_string(data, mask)

    if isinstance(data, dict):
        return {
            key: mask if _is_sensitive_key(str(key)) else mask_sensitive_data(value, mask)
            for key, value in data.items()
        }

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    return data


def mask_headers(headers: Dict[str, str], mask: str = MASK) -> Dict[str, str]:
    """
    Mask sensitive HTTP headers.

    Example:
        >>> mask_headers({"Authorization": "Bearer abc", "X-KC-SDKID": "pypi.org;kontent-ai-core;1.0.0"})
        {'Authorization': '***REDACTED***', 'X-KC-SDKID': 'pypi.org;kontent-ai-core;1.0.0'}
    """
    return {key: mask if _is_sensitive_key(key) else value for key, value in headers.items()}


def mask_url(url: str, mask: str = MASK) -> str:
    """Mask the userinfo password and sensitive query parameters."""
    url = re.sub(r'://([^:/@]+):([^@]+)@', rf'://\1:{mask}@', url)

    for sensitive_key in SENSITIVE_KEYS:
        pattern = re.compile(rf'([?&]{re.escape(sensitive_key)}=)([^&\s]+)', re.IGNORECASE)
        url = pattern.sub(rf'\g<1>{mask}', url)

    return url


def add_sensitive_keys(*keys: str) -> None:
    """Register extra keys to mask (case-insensitive)."""
    for key in keys:
        SENSITIVE_KEYS.add(key.lower())
