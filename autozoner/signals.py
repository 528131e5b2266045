# autozoner/signals.py
"""Subscribe/notify with explicit tokens"""

import itertools
import logging
from typing import Callable, Dict, List, Tuple

log = logging.getLogger(__name__)

_token_ids = itertools.count(1)


class InvalidSubscriptionError(KeyError):
    """Raised when disconnecting a token the signal does not own"""


class SubscriptionToken:
    """Handle returned by Signal.connect; required to disconnect"""

    __slots__ = ('id', 'signal_name')

    def __init__(self, signal_name: str):
        self.id = next(_token_ids)
        self.signal_name = signal_name

    def __repr__(self):
        return f"<SubscriptionToken {self.signal_name}#{self.id}>"


class Signal:
    def __init__(self, name: str):
        self.name = name
        self._handlers: Dict[int, Callable] = {}

    def connect(self, callback: Callable) -> SubscriptionToken:
        token = SubscriptionToken(self.name)
        self._handlers[token.id] = callback
        return token

    def disconnect(self, token: SubscriptionToken) -> None:
        if token is None or self._handlers.pop(token.id, None) is None:
            raise InvalidSubscriptionError(f"{token!r} is not connected to '{self.name}'")

    def is_connected(self, token: SubscriptionToken) -> bool:
        return token is not None and token.id in self._handlers

    def emit(self, *args) -> None:
        """Deliver to every subscriber; one failing handler does not stop the rest"""
        for callback in list(self._handlers.values()):
            try:
                callback(*args)
            except Exception:
                log.exception("[SIGNAL] Handler for '%s' failed", self.name)

    def __len__(self):
        return len(self._handlers)


class SignalTracker:
    """Owns every subscription a component makes so teardown can release them all"""

    def __init__(self):
        self._connections: List[Tuple[Signal, SubscriptionToken]] = []

    def connect(self, signal: Signal, callback: Callable) -> SubscriptionToken:
        token = signal.connect(callback)
        self._connections.append((signal, token))
        return token

    def disconnect_all(self) -> None:
        for signal, token in self._connections:
            try:
                signal.disconnect(token)
            except InvalidSubscriptionError as e:
                log.debug("[SIGNAL] Ignoring stale subscription: %s", e)
        self._connections = []

    def __len__(self):
        return len(self._connections)
