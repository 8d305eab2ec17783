"""GitHub events API constants and identifier validation.

API docs: https://docs.github.com/en/rest/activity/events
Unauthenticated rate limit: 60 req/hour per IP.
"""

from __future__ import annotations

import re

from unicorn_index.errors import ValidationError

GITHUB_API = "https://api.github.com"
PER_PAGE = 100  # API maximum for /events
MAX_PAGES = 3  # events API only serves the latest 300 events

# Usernames and org names: alphanumerics and single hyphens, no leading or
# trailing hyphen, at most 39 characters.
IDENTIFIER_RE = re.compile(r"^[a-z\d](?:[a-z\d]|-(?=[a-z\d])){0,38}$", re.IGNORECASE)


def validate_identifier(name: object, kind: str = "username") -> str:
    """Return ``name`` if it is a valid GitHub login, else raise ``ValidationError``."""
    if not isinstance(name, str) or not name:
        msg = f"{kind.capitalize()} must be a non-empty string"
        raise ValidationError(msg)
    if not IDENTIFIER_RE.fullmatch(name):
        msg = f"Invalid GitHub {kind} format: {name!r}"
        raise ValidationError(msg)
    return name
