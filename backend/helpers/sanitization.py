"""
HTML sanitization for user supplied text.

Forum posts, course titles and contact messages are stored as plain text;
course and lesson descriptions keep a small whitelist of formatting tags.
"""

from typing import Optional

import bleach

# Formatting allowed in course and lesson descriptions
ALLOWED_TAGS = [
    "p",
    "br",
    "strong",
    "b",
    "em",
    "i",
    "u",
    "ul",
    "ol",
    "li",
    "h3",
    "h4",
    "code",
    "pre",
]

ALLOWED_ATTRIBUTES: dict[str, list[str]] = {}


def sanitize_html(content: Optional[str]) -> Optional[str]:
    """
    Keep only whitelisted formatting tags and drop every attribute.

    Args:
        content: Raw HTML content from user input

    Returns:
        Sanitized HTML, or None if input is None

    Examples:
        >>> sanitize_html('<p>Intro to <b>SQL</b></p><script>x()</script>')
        '<p>Intro to <b>SQL</b></p>x()'
    """
    if content is None:
        return None

    return bleach.clean(
        content,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True,
    )


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags.

    Examples:
        >>> sanitize_plain_text('<b>Why</b> does my loop hang?')
        'Why does my loop hang?'
    """
    if content is None:
        return None

    return bleach.clean(content, tags=[], strip=True).strip()


def sanitize_url(url: Optional[str]) -> Optional[str]:
    """
    Reject script URLs in file and image links.

    Absolute http(s) URLs and relative upload paths pass through; anything
    with another scheme becomes an empty string.

    Examples:
        >>> sanitize_url('javascript:alert(1)')
        ''
        >>> sanitize_url('/uploads/lessons/intro.mp4')
        '/uploads/lessons/intro.mp4'
    """
    if url is None:
        return None

    url = url.strip()
    if url.lower().startswith("javascript:"):
        return ""

    if url and not url.startswith(("http://", "https://")):
        if url.startswith("/") or ":" not in url.split("/")[0]:
            return url
        return ""

    return url
