"""
Single-writer ledger with atomic transactions.

Every mutating operation of the registry, gateway, trust-root registry and
points ledger runs inside ``Ledger.transaction()``. Mutations are totally
ordered by one re-entrant lock; nested transactions join the outer one.
Writes record undo steps; if the operation raises, the undo steps replay in
reverse and queued events are dropped, so no partial mutation is ever
observed. Reads never take the lock.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from threading import RLock
from typing import Any, Callable, Dict, Iterator, List, MutableMapping, Optional, Set

from .events import Event, EventBus

_MISSING = object()

Clock = Callable[[], float]


class Transaction:
    """Undo journal for one atomic operation."""

    def __init__(self) -> None:
        self._undo: List[Callable[[], None]] = []
        self._events: List[Event] = []

    def put(self, mapping: MutableMapping, key: Any, value: Any) -> None:
        previous = mapping.get(key, _MISSING)
        mapping[key] = value

        def undo() -> None:
            if previous is _MISSING:
                mapping.pop(key, None)
            else:
                mapping[key] = previous

        self._undo.append(undo)

    def pop(self, mapping: MutableMapping, key: Any) -> Any:
        previous = mapping.pop(key)
        self._undo.append(lambda: mapping.__setitem__(key, previous))
        return previous

    def add(self, members: Set, item: Any) -> None:
        if item in members:
            return
        members.add(item)
        self._undo.append(lambda: members.discard(item))

    def discard(self, members: Set, item: Any) -> None:
        if item not in members:
            return
        members.discard(item)
        self._undo.append(lambda: members.add(item))

    def increment(self, counters: Dict[Any, int], key: Any, amount: int = 1) -> int:
        value = counters.get(key, 0) + amount
        self.put(counters, key, value)
        return value

    def setattr(self, obj: Any, name: str, value: Any) -> None:
        previous = getattr(obj, name)
        setattr(obj, name, value)
        self._undo.append(lambda: setattr(obj, name, previous))

    def emit(self, event: Event) -> None:
        self._events.append(event)

    def rollback(self) -> None:
        while self._undo:
            self._undo.pop()()
        self._events.clear()


class Ledger:
    """
    Shared commit point for all credential state.

    Args:
        clock: Returns the current unix time in seconds
        events: Bus that receives events after each commit
    """

    def __init__(self, clock: Optional[Clock] = None, events: Optional[EventBus] = None) -> None:
        self._clock = clock or time.time
        self.events = events or EventBus()
        self._lock = RLock()
        self._active: Optional[Transaction] = None

    def now(self) -> int:
        return int(self._clock())

    @property
    def in_transaction(self) -> bool:
        return self._active is not None

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        with self._lock:
            if self._active is not None:
                yield self._active
                return
            txn = Transaction()
            self._active = txn
            try:
                yield txn
            except BaseException:
                txn.rollback()
                raise
            finally:
                self._active = None
        for event in txn._events:
            self.events.publish(event)
