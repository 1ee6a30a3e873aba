from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from trendstate.domain.model.entities import ModelState
from trendstate.domain.model.errors import NotInitialized


class ModelStore:
    """Owns the committed ModelState.

    Readers and the single writer share one lock; every operation holds it
    from feature sampling to notification via `transaction()`. The state
    object is immutable, so a commit is a single reference swap.
    """

    def __init__(self, state: ModelState | None = None) -> None:
        self._state = state
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["ModelStore"]:
        with self._lock:
            yield self

    @property
    def initialized(self) -> bool:
        return self._state is not None

    def current(self) -> ModelState:
        state = self._state
        if state is None:
            raise NotInitialized()
        return state

    def create(self, state: ModelState) -> None:
        with self._lock:
            if self._state is not None:
                raise RuntimeError("ModelStore already holds a state")
            self._state = state

    def commit(self, expected: ModelState, new: ModelState) -> None:
        with self._lock:
            if self._state is not expected:
                raise RuntimeError("ModelStore changed outside of the writer transaction")
            if new.update_count != expected.update_count + 1:
                raise RuntimeError("update_count must advance by exactly one per commit")
            if new.last_updated < expected.last_updated:
                raise RuntimeError("last_updated must not decrease")
            self._state = new
