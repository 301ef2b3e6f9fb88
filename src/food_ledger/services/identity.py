"""Current user identity with explicit change subscriptions."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

IdentityListener = Callable[[UUID | None], None]


class Subscription(Protocol):
    """Handle returned by a subscription."""

    def unsubscribe(self) -> None:
        """Stop receiving notifications."""


class IdentitySource(Protocol):
    """Provides the signed-in user and notifies on change."""

    @property
    def current(self) -> UUID | None:
        """Return the signed-in user, if any."""

    def subscribe(self, listener: IdentityListener) -> Subscription:
        """Register a listener for identity changes."""


@dataclass
class _ListenerSubscription:
    source: "StaticIdentitySource"
    listener: IdentityListener

    def unsubscribe(self) -> None:
        if self.listener in self.source.listeners:
            self.source.listeners.remove(self.listener)


@dataclass
class StaticIdentitySource(IdentitySource):
    """Identity source whose user is set explicitly by the host."""

    user_id: UUID | None = None
    listeners: list[IdentityListener] = field(default_factory=list)

    @property
    def current(self) -> UUID | None:
        """Return the signed-in user, if any."""
        return self.user_id

    def subscribe(self, listener: IdentityListener) -> Subscription:
        """Register a listener and return its subscription."""
        self.listeners.append(listener)
        return _ListenerSubscription(self, listener)

    def set_user(self, user_id: UUID | None) -> None:
        """Change the signed-in user and notify listeners."""
        if user_id == self.user_id:
            return
        self.user_id = user_id
        for listener in list(self.listeners):
            listener(user_id)
