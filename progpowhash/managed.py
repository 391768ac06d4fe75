"""Process-wide shared epoch contexts, cached per thread."""

import threading
from functools import partial
from typing import Callable, Optional

from .epoch import EpochContext, create_epoch_context

_Factory = Callable[[int], EpochContext]


class _ContextCache:
    """One shared context built on demand, with a per-thread reference to it."""

    def __init__(self, factory: _Factory):
        self._factory = factory
        self._lock = threading.Lock()
        self._shared: Optional[EpochContext] = None
        self._local = threading.local()

    def get(self, epoch_number: int) -> EpochContext:
        context = getattr(self._local, "context", None)
        if context is None or context.epoch_number != epoch_number:
            context = self._update(epoch_number)
        return context

    def _update(self, epoch_number: int) -> EpochContext:
        self._local.context = None
        with self._lock:
            if self._shared is None or self._shared.epoch_number != epoch_number:
                self._shared = None
                self._shared = self._factory(epoch_number)
            self._local.context = self._shared
            return self._shared


_light_contexts = _ContextCache(partial(create_epoch_context, full=False))
_full_contexts = _ContextCache(partial(create_epoch_context, full=True))


def get_global_epoch_context(epoch_number: int) -> EpochContext:
    """Shared light context of an epoch, rebuilt when another epoch is asked for."""
    return _light_contexts.get(epoch_number)


def get_global_epoch_context_full(epoch_number: int) -> EpochContext:
    """Shared context of an epoch that keeps full dataset items."""
    return _full_contexts.get(epoch_number)