"""Identity context for signed-in portal users."""

from .identity import IdentityContext, SessionData, CurrentUser

__all__ = ["IdentityContext", "SessionData", "CurrentUser"]
