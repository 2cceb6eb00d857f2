"""Deduplication gate - In-memory, no I/O.

A DedupGate remembers which alert keys have already fired so that the same
logical event is never announced twice. The gate itself is the same for
every use; only the reset policy differs:

- PersistentPolicy: a key fires once for the lifetime of the process
  (weather warnings, storm buckets).
- DailyPolicy: a key fires once per calendar date (the daily forecast).

State is not persisted across restarts.
"""

import threading
from collections.abc import Callable
from datetime import date


class PersistentPolicy:
    """Reset policy that never forgets a fired key."""

    def scope(self) -> str:
        """Return the scope fired keys are stored under."""
        return "*"


class DailyPolicy:
    """Reset policy that scopes fired keys to the current calendar date.

    Attributes:
        today: Callable returning the current date (injectable for tests)
    """

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self.today = today

    def scope(self) -> str:
        return self.today().isoformat()


class DedupGate:
    """Thread-safe "has this key already fired" store.

    Usage:
        gate = DedupGate()
        if gate.should_fire(key):
            send(...)
    """

    def __init__(self, policy: PersistentPolicy | DailyPolicy | None = None) -> None:
        """Initialize the gate.

        Args:
            policy: Reset policy (PersistentPolicy if not provided)
        """
        self.policy = policy or PersistentPolicy()
        self._lock = threading.Lock()
        self._fired: dict[str, set[str]] = {}

    def should_fire(self, key: str) -> bool:
        """Return True the first time key is seen within the current scope.

        The key is marked as fired by the same call, so concurrent callers
        with the same key get exactly one True.
        """
        scope = self.policy.scope()

        with self._lock:
            if scope not in self._fired:
                # A new scope makes all earlier scopes unreachable
                self._fired = {scope: set()}

            fired = self._fired[scope]
            if key in fired:
                return False

            fired.add(key)
            return True

    def clear(self) -> None:
        """Forget every fired key."""
        with self._lock:
            self._fired = {}

    def __len__(self) -> int:
        with self._lock:
            return sum(len(keys) for keys in self._fired.values())
