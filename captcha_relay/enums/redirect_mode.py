"""Redirect mode enum."""

from enum import StrEnum


class RedirectMode(StrEnum):
    """How the passthrough payload is attached to the redirect URL."""

    FRAGMENT = "fragment"
    PATH = "path"
