"""Enumerations."""

from captcha_relay.enums.redirect_mode import RedirectMode

__all__ = ["RedirectMode"]
