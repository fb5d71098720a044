# src/libs/gst-sync-engine/src/gst_sync_engine/dispatcher.py
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Tuple

from compliance_common.logging_utils import form_session_id_var

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]


class FieldChangeDispatcher:
    """
    Routes form events (field changes, 'onload', 'refresh') to the handlers
    registered for a doctype. Handlers may be sync or async; they run in
    registration order and their exceptions reach the caller unchanged.
    """
    def __init__(self):
        self._handlers: Dict[Tuple[str, str], List[Handler]] = defaultdict(list)

    def on(self, doctype: str, handlers: Dict[str, Handler]) -> None:
        for event, handler in handlers.items():
            self._handlers[(doctype, event)].append(handler)

    def events_for(self, doctype: str) -> List[str]:
        return sorted(event for (dt, event) in self._handlers if dt == doctype)

    async def trigger(self, form, event: str) -> None:
        handlers = self._handlers.get((form.doctype, event))
        if not handlers:
            return

        token = form_session_id_var.set(form.session.session_id)
        try:
            for handler in list(handlers):
                result = handler(form)
                if inspect.isawaitable(result):
                    await result
        finally:
            form_session_id_var.reset(token)
