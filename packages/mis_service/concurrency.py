from contextlib import contextmanager
from typing import Callable, Set

from packages.mis_core.errors import MISBaseError


class ConcurrencyManager:
    """
    Guards one-shot operations (e.g. submission) per resource.
    Enforces FAIL-FAST policy: if the resource is held, immediately raise.
    All callers share one event loop, so an in-memory set is sufficient.
    """
    def __init__(self):
        self._held: Set[str] = set()

    def is_locked(self, resource_id: str) -> bool:
        return resource_id in self._held

    @contextmanager
    def acquire_lock(self, resource_id: str, error_factory: Callable[[str], MISBaseError]):
        if resource_id in self._held:
            # FAIL-FAST: Immediately raise error if locked
            raise error_factory(resource_id)

        self._held.add(resource_id)
        try:
            yield
        finally:
            self._held.discard(resource_id)
