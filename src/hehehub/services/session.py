"""Session store capability for the HeheHub API session (bearer token, cached user).

Callers inject a SessionStore into the services that need one; nothing in
this package keeps session state at module level.
"""

from typing import Any, Protocol

SESSION_TOKEN_KEY = "token"
SESSION_USER_KEY = "user"


class SessionStore(Protocol):
    """Key-value session storage with get/set/clear."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def clear(self) -> None: ...


class InMemorySessionStore:
    """Process-local SessionStore."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def clear(self) -> None:
        self._values.clear()
