# src/libs/gst-sync-engine/src/gst_sync_engine/form.py
import asyncio
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Coroutine, Dict, Iterable, Mapping, Optional, Set, TypeVar

from .constants import DATE_FIELD_BY_DOCTYPE, FIELD_LABELS
from .models import GstinInfo

if TYPE_CHECKING:
    from .dispatcher import FieldChangeDispatcher

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PendingCallTracker:
    """
    Counts outbound calls that are in flight for one editing session, so that
    work depending on their results can wait until the session is idle.
    """
    def __init__(self):
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def _begin(self) -> None:
        self._in_flight += 1
        self._idle.clear()

    def _end(self) -> None:
        self._in_flight -= 1
        if self._in_flight == 0:
            self._idle.set()

    async def run(self, awaitable: Awaitable[T]) -> T:
        self._begin()
        try:
            return await awaitable
        finally:
            self._end()

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """
        Starts `coro` as a background task on the next loop turn. It counts as
        in flight from this call on, not from when it first runs.
        """
        self._begin()
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        self._end()
        if task.cancelled():
            return

        error = task.exception()
        if error is not None:
            logger.error(f"Background call failed: {error}", exc_info=error)

    async def wait_idle(self) -> None:
        """
        Yields at least once, then waits until no tracked call is in flight.
        """
        await asyncio.sleep(0)
        while self._in_flight:
            await self._idle.wait()


@dataclass
class FormSession:
    """
    State owned by one editing session of a transaction. Discarded together
    with the form; nothing here is shared between records.
    """
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    # a reconciliation cycle is waiting to build its request
    gst_update_pending: bool = False
    # the pending cycle must ask the server to recompute the place of supply
    update_place_of_supply: bool = False
    # a reconciliation result is being written back onto the form
    applying_gst_details: bool = False
    # party details (e.g. for a subcontracting supplier) are being written back
    updating_party_details: bool = False
    gstin_cache: Dict[str, GstinInfo] = field(default_factory=dict)
    calls: PendingCallTracker = field(default_factory=PendingCallTracker)


class TransactionForm:
    """
    In-memory editing session of a single transaction record.

    Mirrors the capabilities of the host form: reading and writing field
    values, firing change events for written fields, and side displays
    (field descriptions, field properties and the dashboard headline).
    """
    def __init__(
        self,
        doctype: str,
        values: Optional[Mapping[str, Any]] = None,
        fields: Optional[Iterable[str]] = None,
        dispatcher: Optional["FieldChangeDispatcher"] = None,
    ):
        self.doctype = doctype
        self.doc: Dict[str, Any] = dict(values or {})
        self.doc["doctype"] = doctype
        self.dispatcher = dispatcher
        self.session = FormSession()

        if fields is None:
            fields = set(self.doc)
            date_field = DATE_FIELD_BY_DOCTYPE.get(doctype)
            if date_field:
                fields.add(date_field)
        self.fields = set(fields)

        self.descriptions: Dict[str, str] = {}
        self.field_properties: Dict[str, Dict[str, Any]] = defaultdict(dict)
        self.headline: Optional[str] = None

    def get(self, fieldname: str, default: Any = None) -> Any:
        return self.doc.get(fieldname, default)

    def has_field(self, fieldname: str) -> bool:
        return fieldname in self.fields

    def get_label(self, fieldname: str) -> str:
        return FIELD_LABELS.get(fieldname) or fieldname.replace("_", " ").title()

    @property
    def date_field(self) -> Optional[str]:
        """The authoritative date field: posting date if the kind has one, else transaction date."""
        if self.has_field("posting_date"):
            return "posting_date"
        if self.has_field("transaction_date"):
            return "transaction_date"
        return None

    async def set_value(self, fieldname, value: Any = None) -> None:
        """
        Writes one field, or a mapping of fields, and fires the change event of
        every field whose value actually changed.

        All values are written before the first change event fires, in write
        order, so a failing handler never leaves a mapping half applied.
        """
        updates = fieldname if isinstance(fieldname, Mapping) else {fieldname: value}

        changed = []
        for name, new_value in updates.items():
            if self.doc.get(name) == new_value:
                continue

            self.doc[name] = new_value
            self.fields.add(name)
            changed.append(name)

        if self.dispatcher is None:
            return

        for name in changed:
            await self.dispatcher.trigger(self, name)

    def set_description(self, fieldname: str, description: Optional[str]) -> None:
        self.descriptions[fieldname] = description or ""

    def set_df_property(self, fieldname: str, prop: str, value: Any) -> None:
        self.field_properties[fieldname][prop] = value

    def set_headline(self, text: str) -> None:
        self.headline = text

    def clear_headline(self) -> None:
        self.headline = None

    async def onload(self) -> None:
        if self.dispatcher is not None:
            await self.dispatcher.trigger(self, "onload")

    async def refresh(self) -> None:
        if self.dispatcher is not None:
            await self.dispatcher.trigger(self, "refresh")
