"""
Session Context

Holds the currently authenticated identity and tells subscribers when it
changes. The record store takes one of these in its constructor instead of
reaching for a global "current user".

Sign-in UI and credential checks live elsewhere; this module only tracks
who is signed in.
"""

import inspect
from typing import Awaitable, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """An authenticated user."""
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(
        ...,
        min_length=1,
        description="Stable identifier, used as the record owner tag"
    )
    email: Optional[str] = None


IdentityListener = Callable[
    [Optional[Identity]], Union[None, Awaitable[None]]
]


class SessionContext:
    """
    Current identity plus change notifications.

    Every sign_in/sign_out notifies all subscribers, even when the same
    user signs in again; subscribers decide whether anything changed.
    Listeners may be plain functions or coroutine functions; coroutines
    are awaited in subscription order.
    """

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity
        self._listeners: list[IdentityListener] = []

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """
        Register a listener for identity changes.

        Returns a callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, identity: Identity) -> None:
        await self._set_identity(identity)

    async def sign_out(self) -> None:
        await self._set_identity(None)

    async def _set_identity(self, identity: Optional[Identity]) -> None:
        self._identity = identity
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            outcome = listener(identity)
            if inspect.isawaitable(outcome):
                await outcome
