"""
Optimistic Sub-resource Manager.

Keeps a local ordered collection in step with a remote one while edits are
applied immediately:

- fetch_all(): replace the local list from the server (bare array or
  envelope); per-item enrichment failures degrade to placeholders
- create(): append now, merge the server echo (server id wins) on success,
  remove the appended entry on failure
- update(): replace now, merge on success, re-fetch on failure
- delete(): remove now; unsaved items never touch the network; re-fetch on
  failure

Entries live in an identity-keyed map with a separate order list. Index
arguments are resolved to a key once, at call start, so work on one item
can never move another. The key is also the identity used by the Pending
Mutation Tracker: a second mutation of an item already in flight raises
MutationInProgressError instead of queueing.

Every operation returns a MutationResult; only precondition violations
(programming errors the UI should have prevented) raise.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import ValidationError

from tintern.common.config import ClientSettings, get_settings
from tintern.common.envelope import normalize_list, unwrap_item
from tintern.common.errors import (
    AuthenticationError,
    EnvelopeError,
    InvalidItemError,
    MutationInProgressError,
    PreconditionError,
    TinternError,
    TransportError,
)
from tintern.common.logger import ClientLogger, get_logger
from tintern.gateway.client import ApiGateway
from tintern.gateway.results import AuthFailure, Success
from tintern.resources.models import ResourceItem
from tintern.resources.pending import BusyFlag, PendingMutationTracker

T = TypeVar("T", bound=ResourceItem)


@dataclass
class MutationResult:
    """
    Outcome of a manager operation.

    Attributes:
        success: Whether the local state now matches what the caller asked for
        item: The resulting item (merged with the server echo), if any
        error: What went wrong, for display
    """
    success: bool
    item: Optional[ResourceItem] = None
    error: Optional[TinternError] = None

    @property
    def message(self) -> Optional[str]:
        if self.error is None:
            return None
        return getattr(self.error, "message", None) or str(self.error)

    @property
    def auth_failed(self) -> bool:
        return isinstance(self.error, AuthenticationError)


def _new_key() -> str:
    return uuid.uuid4().hex


class OptimisticCollection(Generic[T]):
    """Base manager; subclasses set the model and endpoints."""

    model: Type[T]
    resource_path: str = ""
    # keys that may hold the list in an enveloped list response
    envelope_keys: Tuple[str, ...] = ("data",)
    # keys that may wrap a single item in a create/update response
    item_keys: Tuple[str, ...] = ("data",)
    scope: str = "resource"

    def __init__(self, gateway: ApiGateway, settings: Optional[ClientSettings] = None):
        self.gateway = gateway
        self.settings = settings or get_settings()
        self.pending = PendingMutationTracker()
        self.loading = BusyFlag(self.settings.stall_timeout_seconds, name=f"{self.scope} loading")
        self.last_error: Optional[str] = None
        self._logger = get_logger(__name__, scope=self.scope)
        self._active_fetches = 0
        self._entries: Dict[str, T] = {}
        self._order: List[str] = []

    @property
    def logger(self) -> ClientLogger:
        """Scope logger tagged with the signed-in user."""
        user = self.gateway.session_store.read().user
        return self._logger.for_user(user.id if user else None)

    # ===== Read access =====

    @property
    def items(self) -> List[T]:
        return [self._entries[key] for key in self._order]

    def __len__(self) -> int:
        return len(self._order)

    def __getitem__(self, index: int) -> T:
        return self._entries[self._order[index]]

    def key_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self._order):
            return self._order[index]
        return None

    def is_pending(self, index: int) -> bool:
        """True while the item at `index` has a mutation in flight (disable its controls)."""
        key = self.key_at(index)
        return key is not None and key in self.pending

    # ===== Hooks =====

    def item_path(self, item_id: str) -> str:
        return f"{self.resource_path}/{item_id}"

    def parse(self, raw: Mapping[str, Any]) -> T:
        return self.model.model_validate(raw)

    async def enrich(self, item: T) -> T:
        """Attach display data from other endpoints. Default: none."""
        return item

    def placeholder(self, item: T) -> T:
        """Fallback used when enrich() fails for this item."""
        return item

    def classify_error(self, error: TinternError, method: str) -> TinternError:
        return error

    # ===== Internals =====

    async def _send(self, endpoint: str, method: str = "GET", body: Any = None) -> Tuple[Any, Optional[TinternError]]:
        """Gateway call flattened to (data, error)."""
        try:
            result = await self.gateway.call(endpoint, method=method, body=body)
        except TransportError as e:
            return None, e
        if isinstance(result, Success):
            return result.data, None
        if isinstance(result, AuthFailure):
            return None, AuthenticationError(result.message)
        return None, self.classify_error(result.error, method)

    async def _enrich_one(self, item: T) -> T:
        try:
            return await self.enrich(item)
        except TinternError as e:
            self.logger.warning(f"Enrichment failed for item {item.id}: {e}")
            return self.placeholder(item)

    def _coerce(self, item: Union[T, Mapping[str, Any]], base: Optional[T] = None) -> T:
        """Build a validated model from caller input, optionally overlaying `base`."""
        if isinstance(item, ResourceItem):
            data = item.to_record()
        else:
            data = dict(item)
        if base is not None:
            data = {**base.to_record(), **data}
        try:
            model = self.parse(data)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
            raise InvalidItemError(f"Invalid value for: {fields}") from e
        missing = model.missing_fields()
        if missing:
            raise InvalidItemError(f"Please fill in all required fields: {', '.join(missing)}")
        return model

    def _merge(self, local: T, data: Any) -> T:
        """Server-echoed fields over local ones; a server id always wins."""
        server = dict(unwrap_item(data, self.item_keys))
        if "id" not in server and "_id" in server:
            server["id"] = server["_id"]
        server.pop("_id", None)
        merged = {**local.to_record(), **{k: v for k, v in server.items() if v is not None}}
        try:
            return self.parse(merged)
        except ValidationError as e:
            self.logger.warning(f"Ignoring malformed server echo: {e.error_count()} error(s)")
            return local

    def _insert(self, key: str, item: T, position: Optional[int] = None) -> None:
        self._entries[key] = item
        if position is None or position >= len(self._order):
            self._order.append(key)
        else:
            self._order.insert(position, key)

    def _remove(self, key: str) -> Optional[int]:
        if key not in self._entries:
            return None
        position = self._order.index(key)
        del self._order[position]
        del self._entries[key]
        return position

    def _drop_duplicates(self, key: str, item_id: Optional[str]) -> None:
        """A re-fetch may already hold the server copy of a just-created item."""
        if not item_id:
            return
        for other in [k for k in self._order if k != key and self._entries[k].id == item_id]:
            self._remove(other)

    def _replace_all(self, items: List[T]) -> None:
        known = {entry.id: key for key, entry in self._entries.items() if entry.id}
        entries: Dict[str, T] = {}
        order: List[str] = []
        for item in items:
            key = (known.pop(item.id, None) if item.id else None) or _new_key()
            entries[key] = item
            order.append(key)
        # creates still in flight stay visible after the server items
        for key in self._order:
            entry = self._entries[key]
            if not entry.id and key in self.pending and key not in entries:
                entries[key] = entry
                order.append(key)
        self._entries = entries
        self._order = order

    def _fail(self, operation: str, error: TinternError, detail: str = "") -> MutationResult:
        result = MutationResult(success=False, error=error)
        self.last_error = result.message
        self.logger.warning(f"{operation} failed{detail}: {result.message}")
        return result

    # ===== Operations =====

    async def fetch_all(self) -> MutationResult:
        """Replace the local list with the server's."""
        self._active_fetches += 1
        if self._active_fetches == 1:
            self.loading.start()
        try:
            data, error = await self._send(self.resource_path)
            if error is not None:
                return self._fail("fetch", error)
            try:
                envelope = normalize_list(data, self.envelope_keys)
            except EnvelopeError as e:
                return self._fail("fetch", e)

            parsed: List[T] = []
            for raw in envelope.items:
                try:
                    parsed.append(self.parse(raw))
                except (ValidationError, TypeError) as e:
                    self.logger.warning(f"Skipping unreadable item from {self.resource_path}: {e}")

            enriched = await asyncio.gather(*(self._enrich_one(item) for item in parsed))
            self._replace_all(list(enriched))
            self.last_error = None
            self.logger.debug(f"Fetched {len(self._order)} item(s) ({envelope.shape})")
            return MutationResult(success=True)
        finally:
            self._active_fetches -= 1
            if self._active_fetches == 0:
                self.loading.stop()

    async def create(self, item: Union[T, Mapping[str, Any]]) -> MutationResult:
        """Append `item` immediately and persist it."""
        try:
            model = self._coerce(item)
        except InvalidItemError as e:
            return self._fail("create", e)
        model = model.model_copy(update={"id": None})

        key = _new_key()
        self._insert(key, model)
        try:
            with self.pending.track(key):
                data, error = await self._send(self.resource_path, method="POST", body=model.to_payload())
        except BaseException:
            self._remove(key)
            raise

        if error is not None:
            self._remove(key)
            return self._fail("create", error, " (rolled back)")

        merged = await self._enrich_one(self._merge(model, data))
        if merged.id is None:
            self.logger.warning("Create succeeded but the server returned no id; item stays local-only")
        if key in self._entries:
            self._entries[key] = merged
            self._drop_duplicates(key, merged.id)
        self.last_error = None
        return MutationResult(success=True, item=merged)

    async def update(self, index: int, item: Union[T, Mapping[str, Any]]) -> MutationResult:
        """
        Replace the item at `index` immediately and persist it.

        A mapping is overlaid on the current item, so partial edits work.

        Raises:
            PreconditionError: no item at `index`, or it has no server id
            MutationInProgressError: the item already has a mutation in flight
        """
        key = self.key_at(index)
        if key is None:
            raise PreconditionError(f"No {self.scope} item at index {index}")
        current = self._entries[key]
        if not current.id:
            raise PreconditionError(f"{self.scope} item at index {index} has not been saved yet")
        if key in self.pending:
            raise MutationInProgressError(key)

        try:
            model = self._coerce(item, base=current)
        except InvalidItemError as e:
            return self._fail("update", e)
        model = model.model_copy(update={"id": current.id})

        self._entries[key] = model
        try:
            with self.pending.track(key):
                data, error = await self._send(self.item_path(current.id), method="PUT", body=model.to_payload())
        except BaseException:
            if key in self._entries:
                self._entries[key] = current
            raise

        if error is not None:
            if key in self._entries:
                self._entries[key] = current
            if not isinstance(error, AuthenticationError):
                self.logger.warning(f"update of {current.id} failed, re-fetching to resynchronize")
                await self.fetch_all()
            return self._fail("update", error)

        merged = self._merge(model, data)
        if key in self._entries:
            self._entries[key] = merged
        self.last_error = None
        return MutationResult(success=True, item=merged)

    async def delete(self, index: int) -> MutationResult:
        """
        Remove the item at `index`.

        Unsaved items are removed locally only. An index with nothing at it
        is a no-op.

        Raises:
            MutationInProgressError: the item already has a mutation in flight
        """
        key = self.key_at(index)
        if key is None:
            self.logger.debug(f"delete({index}): nothing at that index")
            return MutationResult(success=True)
        if key in self.pending:
            raise MutationInProgressError(key)

        entry = self._entries[key]
        if not entry.id:
            self._remove(key)
            self.logger.debug("Removed local-only item")
            return MutationResult(success=True, item=entry)

        position = self._remove(key)
        try:
            with self.pending.track(key):
                _, error = await self._send(self.item_path(entry.id), method="DELETE")
        except BaseException:
            self._insert(key, entry, position)
            raise

        if error is not None:
            if isinstance(error, AuthenticationError):
                self._insert(key, entry, position)
            else:
                self.logger.warning(f"delete of {entry.id} failed, re-fetching to resynchronize")
                refetched = await self.fetch_all()
                if not refetched.success and key not in self._entries:
                    # server state unknown; it still had the item when we asked
                    self._insert(key, entry, position)
            return self._fail("delete", error)

        self.last_error = None
        return MutationResult(success=True, item=entry)
