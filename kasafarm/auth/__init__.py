"""Authentication state package."""

from kasafarm.auth.session import Identity, IdentityListener, SessionContext

__all__ = ["Identity", "IdentityListener", "SessionContext"]
