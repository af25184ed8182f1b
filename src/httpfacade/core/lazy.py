"""
=============================================================================
LAZY SLOTS
=============================================================================

A LazySlot holds one derived view of a request (query mapping, cookie jar,
uploaded files, ...). It is computed on first read and then frozen for the
lifetime of its owner.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        SLOT STATES                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   EMPTY ──get(factory)──► COMPUTED ──get(...)──► COMPUTED (same)    │
    │                                                                      │
    │   computed=False           computed=True                            │
    │   value=None               value=<whatever factory returned>        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The computed flag is kept apart from the value. An empty dict is a
legitimate result and must not trigger a second computation.

The first computation runs under a lock (double-checked), so two threads
reading the same slot at once still end up sharing one object.
=============================================================================
"""

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class LazySlot(Generic[T]):
    """
    A (computed, value) pair with first-read-wins semantics.

    Example:
        slot = LazySlot("cookies")
        jar = slot.get(lambda: parse_cookie_header(raw))
        jar is slot.get(lambda: {})   # True, factory not called again
    """

    __slots__ = ("name", "_computed", "_value", "_lock")

    def __init__(self, name: str = ""):
        self.name = name
        self._computed = False
        self._value: Optional[T] = None
        self._lock = threading.Lock()

    @property
    def computed(self) -> bool:
        return self._computed

    def get(self, factory: Callable[[], T]) -> T:
        """
        Return the cached value, computing it with `factory` on first use.

        Args:
            factory: Zero-argument callable producing the value.

        Returns:
            The value stored by the first successful call.
        """
        if self._computed:
            return self._value

        with self._lock:
            if not self._computed:
                self._value = factory()
                self._computed = True
        return self._value

    def __repr__(self) -> str:
        state = "computed" if self._computed else "empty"
        return f"<LazySlot {self.name or '?'} [{state}]>"
