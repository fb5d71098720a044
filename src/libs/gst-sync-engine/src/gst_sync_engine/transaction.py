# src/libs/gst-sync-engine/src/gst_sync_engine/transaction.py
"""
Wires the GST handlers onto the form events of every supported transaction
kind. POS Invoice is not covered since it is not created from the form UI.
"""
import logging
from functools import partial
from typing import Optional, Tuple

from .constants import (
    BASE_EVENT_FIELDS,
    ECOMMERCE_DOCTYPES,
    PORT_CODE_DOCTYPES,
    PURCHASE_EVENT_FIELDS,
    SALES_DOCTYPES,
    SALES_EVENT_FIELDS,
    STOCK_ENTRY,
    STOCK_ENTRY_EVENT_FIELDS,
    SUBCONTRACTING_DOCTYPES,
    SUBCONTRACTING_EVENT_FIELDS,
    TRANSACTION_DOCTYPES,
)
from .coordinator import GstDetailsCoordinator
from .dispatcher import FieldChangeDispatcher
from .gstin_status import GstinStatusService, get_gstin_fieldname
from .models import GstSettings
from .party_details import SubcontractingPartyFetcher
from .rules import (
    set_ecommerce_supply_type,
    show_invoice_number_banner,
    validate_gst_transporter_id,
    validate_overseas_gst_category,
)

logger = logging.getLogger(__name__)


def get_gst_details_event_fields(doctype: str) -> Tuple[str, ...]:
    if doctype in SALES_DOCTYPES:
        return BASE_EVENT_FIELDS + SALES_EVENT_FIELDS
    if doctype == STOCK_ENTRY:
        return BASE_EVENT_FIELDS + STOCK_ENTRY_EVENT_FIELDS
    if doctype in SUBCONTRACTING_DOCTYPES:
        return BASE_EVENT_FIELDS + SUBCONTRACTING_EVENT_FIELDS
    return BASE_EVENT_FIELDS + PURCHASE_EVENT_FIELDS


def register_gst_details_events(dispatcher: FieldChangeDispatcher, doctype: str, coordinator: GstDetailsCoordinator):
    events = {
        field: partial(_on_gst_details_field, coordinator, field)
        for field in get_gst_details_event_fields(doctype)
    }
    dispatcher.on(doctype, events)


async def _on_gst_details_field(coordinator: GstDetailsCoordinator, field: str, form) -> None:
    await coordinator.on_field_changed(form, field)


def register_overseas_gst_category(dispatcher: FieldChangeDispatcher, doctype: str, settings: GstSettings):
    dispatcher.on(doctype, {"gst_category": partial(_on_gst_category, settings)})


def _on_gst_category(settings: GstSettings, form) -> None:
    validate_overseas_gst_category(form, settings)


def register_gstin_status_events(dispatcher: FieldChangeDispatcher, doctype: str, status_service: GstinStatusService):
    gstin_fieldname = get_gstin_fieldname(doctype)

    async def refresh(form):
        if form.get(gstin_fieldname):
            await status_service.ensure_status(form, gstin_fieldname)

    async def gstin_changed(form):
        await status_service.set_and_validate(form, gstin_fieldname)

    def transporter_id_changed(form):
        validate_gst_transporter_id(form.get("gst_transporter_id"))

    def date_changed(date_fieldname):
        async def handler(form):
            if form.has_field(date_fieldname):
                await status_service.set_and_validate(form, gstin_fieldname)
        return handler

    dispatcher.on(doctype, {
        "refresh": refresh,
        gstin_fieldname: gstin_changed,
        "gst_transporter_id": transporter_id_changed,
        "posting_date": date_changed("posting_date"),
        "transaction_date": date_changed("transaction_date"),
    })


def register_port_code_directive(dispatcher: FieldChangeDispatcher, doctype: str):
    def onload(form):
        form.set_df_property("port_code", "ignore_validation", 1)

    dispatcher.on(doctype, {"onload": onload})


def register_ecommerce_supply_type(dispatcher: FieldChangeDispatcher, doctype: str, settings: GstSettings):
    handler = partial(set_ecommerce_supply_type, settings=settings)
    dispatcher.on(doctype, {"ecommerce_gstin": handler, "is_reverse_charge": handler})


def register_invoice_number_banner(dispatcher: FieldChangeDispatcher, doctype: str, settings: GstSettings):
    dispatcher.on(doctype, {"refresh": partial(show_invoice_number_banner, settings=settings)})


def register_transaction_events(
    dispatcher: FieldChangeDispatcher,
    coordinator: GstDetailsCoordinator,
    status_service: GstinStatusService,
    party_fetcher: SubcontractingPartyFetcher,
    settings: GstSettings,
) -> FieldChangeDispatcher:
    for doctype in TRANSACTION_DOCTYPES:
        register_gst_details_events(dispatcher, doctype, coordinator)
        register_overseas_gst_category(dispatcher, doctype, settings)
        register_gstin_status_events(dispatcher, doctype, status_service)

    for doctype in SUBCONTRACTING_DOCTYPES:
        dispatcher.on(doctype, {"supplier": party_fetcher.on_supplier_changed})
        register_gst_details_events(dispatcher, doctype, coordinator)

    for doctype in PORT_CODE_DOCTYPES:
        register_port_code_directive(dispatcher, doctype)

    for doctype in ECOMMERCE_DOCTYPES:
        register_ecommerce_supply_type(dispatcher, doctype, settings)

    for doctype in TRANSACTION_DOCTYPES + SUBCONTRACTING_DOCTYPES:
        register_invoice_number_banner(dispatcher, doctype, settings)

    logger.info("Registered GST transaction events.")
    return dispatcher


def build_dispatcher(gateway, settings: Optional[GstSettings] = None) -> FieldChangeDispatcher:
    """Creates a dispatcher with every GST transaction handler registered against `gateway`."""
    settings = settings or GstSettings.from_config()
    return register_transaction_events(
        FieldChangeDispatcher(),
        GstDetailsCoordinator(gateway),
        GstinStatusService(gateway, settings),
        SubcontractingPartyFetcher(gateway),
        settings,
    )
