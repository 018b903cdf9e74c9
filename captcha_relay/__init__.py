"""CAPTCHA Relay - reCAPTCHA token verification and redirect service."""

__version__ = "1.0.0"
