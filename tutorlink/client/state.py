# tutorlink/client/state.py
# Local view state for dashboards built on the client services
#
#   LocalCollection        → list of API records keyed by id
#   mutate_then_reconcile  → optimistic patch, API call, merge or roll back
#   LatestRequestGate      → "last request wins" for filter/search refetches
#
# The next full refetch is always authoritative: these helpers only keep the
# screen consistent between a mutation and that refetch.

import asyncio
import copy
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

from tutorlink.core.config import settings

logger = logging.getLogger("tutorlink.client.state")

T = TypeVar("T")


class LocalCollection:
    """Records as returned by the API (dicts with an "id"), in display order."""

    def __init__(self, items: Optional[Iterable[Dict[str, Any]]] = None, key: str = "id"):
        self.key = key
        self._items: List[Dict[str, Any]] = []
        self.replace(items or [])

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    @property
    def items(self) -> List[Dict[str, Any]]:
        return list(self._items)

    def replace(self, items: Iterable[Dict[str, Any]]) -> None:
        """Swap in a full refetch."""
        self._items = [dict(item) for item in items]

    def _index(self, item_id: Any) -> int:
        for i, item in enumerate(self._items):
            if str(item.get(self.key)) == str(item_id):
                return i
        raise KeyError(item_id)

    def get(self, item_id: Any) -> Optional[Dict[str, Any]]:
        try:
            return self._items[self._index(item_id)]
        except KeyError:
            return None

    def upsert(self, item: Dict[str, Any]) -> None:
        try:
            i = self._index(item[self.key])
        except KeyError:
            self._items.append(dict(item))
        else:
            self._items[i] = {**self._items[i], **item}

    def patch(self, item_id: Any, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply `changes` in place and return a snapshot of the previous record."""
        i = self._index(item_id)
        snapshot = copy.deepcopy(self._items[i])
        self._items[i] = {**self._items[i], **changes}
        return snapshot

    def restore(self, snapshot: Dict[str, Any]) -> None:
        i = self._index(snapshot[self.key])
        self._items[i] = snapshot

    def remove(self, item_id: Any) -> Optional[Dict[str, Any]]:
        try:
            return self._items.pop(self._index(item_id))
        except KeyError:
            return None


async def mutate_then_reconcile(
    collection: LocalCollection,
    item_id: Any,
    patch: Dict[str, Any],
    call: Callable[[], Awaitable[Dict[str, Any]]],
) -> Dict[str, Any]:
    """
    Show `patch` immediately, then await `call()`.

    Success: the record returned in the response's "data" (when it is one)
             replaces the optimistic values.
    Failure: the record is put back exactly as it was and the error re-raised.
    """
    snapshot = collection.patch(item_id, patch)
    try:
        result = await call()
    except (Exception, asyncio.CancelledError) as exc:
        collection.restore(snapshot)
        logger.debug("Optimistic update of %s rolled back: %s", item_id, exc)
        raise

    data = result.get("data") if isinstance(result, dict) else None
    if isinstance(data, dict) and str(data.get(collection.key)) == str(item_id):
        collection.upsert(data)
    return result


class LatestRequestGate:
    """
    Serializes refetches per key (e.g. "admin.requests") by sequence number.

    Each run() gets the next sequence number for its key, cancels the
    previous in-flight fetch for that key and waits `debounce` seconds
    before calling the API, so quick re-issues coalesce into one request.
    Only the newest sequence number publishes; superseded runs return None.
    """

    def __init__(self, debounce: Optional[float] = None):
        self.debounce = settings.debounce_seconds if debounce is None else debounce
        self._sequence: Dict[str, int] = {}
        self._tasks: Dict[str, "asyncio.Future[Any]"] = {}
        self._latest: Dict[str, Any] = {}

    def sequence(self, key: str) -> int:
        return self._sequence.get(key, 0)

    def latest(self, key: str) -> Any:
        return self._latest.get(key)

    def is_current(self, key: str, seq: int) -> bool:
        return self._sequence.get(key, 0) == seq

    async def _issue(self, fetch: Callable[[], Awaitable[T]]) -> T:
        if self.debounce > 0:
            await asyncio.sleep(self.debounce)
        return await fetch()

    async def run(
        self,
        key: str,
        fetch: Callable[[], Awaitable[T]],
        on_result: Optional[Callable[[T], None]] = None,
    ) -> Optional[T]:
        seq = self._sequence.get(key, 0) + 1
        self._sequence[key] = seq

        previous = self._tasks.get(key)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(self._issue(fetch))
        self._tasks[key] = task
        try:
            result = await task
        except asyncio.CancelledError:
            if not self.is_current(key, seq):
                logger.debug("%s #%d superseded", key, seq)
                return None
            raise
        except Exception as exc:
            if not self.is_current(key, seq):
                logger.debug("%s #%d failed after being superseded: %s", key, seq, exc)
                return None
            raise
        finally:
            if self._tasks.get(key) is task:
                del self._tasks[key]

        if not self.is_current(key, seq):
            logger.debug("%s #%d arrived after #%d, discarded", key, seq, self.sequence(key))
            return None

        self._latest[key] = result
        if on_result is not None:
            on_result(result)
        return result
