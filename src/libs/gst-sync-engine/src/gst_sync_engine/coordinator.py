# src/libs/gst-sync-engine/src/gst_sync_engine/coordinator.py
import logging
from typing import Any, Dict, Optional, Tuple

from compliance_common.logging_utils import correlation_id_var, generate_correlation_id
from compliance_common.monitoring import (
    GST_RECONCILIATION_REQUESTS_TOTAL,
    GST_RECONCILIATION_TRIGGERS_COALESCED_TOTAL,
    GST_RECONCILIATION_TRIGGERS_SKIPPED_TOTAL,
)

from .constants import (
    BASE_PARTY_DETAIL_FIELDS,
    MATERIAL_TRANSFER,
    PARTY_TYPE_CUSTOMER,
    PARTY_TYPE_SUPPLIER,
    PLACE_OF_SUPPLY_TRIGGERS,
    PURCHASE_PARTY_DETAIL_FIELDS,
    QUOTATION,
    SALES_DOCTYPES,
    SALES_PARTY_DETAIL_FIELDS,
    SAME_GSTIN_PURPOSES,
    STOCK_ENTRY,
    STOCK_ENTRY_PARTY_DETAIL_FIELDS,
)
from .gateway import ComplianceGateway
from .models import GstDetailsRequest

logger = logging.getLogger(__name__)


def get_party_type(doctype: str) -> str:
    return PARTY_TYPE_CUSTOMER if doctype in SALES_DOCTYPES else PARTY_TYPE_SUPPLIER


def get_party_fieldname(doctype: str) -> str:
    if doctype == QUOTATION:
        return "party_name"
    return get_party_type(doctype).lower()


def is_same_gstin_stock_entry(form) -> bool:
    """Material transfers and issues (other than returns) move stock within the same GSTIN."""
    return (
        form.doctype == STOCK_ENTRY
        and form.get("purpose") in SAME_GSTIN_PURPOSES
        and not form.get("is_return")
    )


def is_inward_stock_entry(form) -> bool:
    return (
        form.doctype == STOCK_ENTRY
        and form.get("purpose") == MATERIAL_TRANSFER
        and bool(form.get("is_return"))
    )


class GstDetailsCoordinator:
    """
    Keeps the GST details of a transaction (tax category, GST category,
    company GSTIN, place of supply, reverse charge, ...) consistent with its
    party and addresses.

    Bursts of field changes are folded into a single server round trip: the
    first change starts a cycle that waits for outstanding calls of the
    session, later changes only mark the cycle dirty. The server's answer is
    written back with a guard raised so that those writes do not start yet
    another cycle.
    """
    def __init__(self, gateway: ComplianceGateway):
        self.gateway = gateway

    def _skip_reason(self, form) -> Optional[str]:
        session = form.session
        if session.updating_party_details:
            return "updating_party_details"
        if session.applying_gst_details:
            return "applying_gst_details"
        if not form.get("company"):
            return "no_company"
        return None

    def _resolve_party(self, form) -> Tuple[str, Any, bool]:
        party_type = get_party_type(form.doctype)
        party = form.get(get_party_fieldname(form.doctype))
        return party_type, party, is_same_gstin_stock_entry(form)

    async def on_field_changed(self, form, trigger_field: str) -> None:
        session = form.session

        reason = self._skip_reason(form)
        if reason:
            logger.debug(f"Skipping GST details update for '{trigger_field}' on {form.doctype}: {reason}.")
            GST_RECONCILIATION_TRIGGERS_SKIPPED_TOTAL.labels(doctype=form.doctype, reason=reason).inc()
            return

        _, party, same_gstin_stock_entry = self._resolve_party(form)
        if not (party or same_gstin_stock_entry):
            GST_RECONCILIATION_TRIGGERS_SKIPPED_TOTAL.labels(doctype=form.doctype, reason="no_party").inc()
            return

        if trigger_field in PLACE_OF_SUPPLY_TRIGGERS:
            session.update_place_of_supply = True

        if session.gst_update_pending:
            GST_RECONCILIATION_TRIGGERS_COALESCED_TOTAL.labels(doctype=form.doctype).inc()
            return

        session.gst_update_pending = True
        token = correlation_id_var.set(generate_correlation_id("GST"))
        try:
            # GSTINs fetched by earlier changes must land before the request is built
            try:
                await session.calls.wait_idle()
            finally:
                session.gst_update_pending = False

            # NOTE: values written between the wait and this point are picked up
            # here; writes made while the request is in flight are not.
            request = self.build_request(form)
            await self.fetch_and_apply(form, request)
        finally:
            correlation_id_var.reset(token)

    def build_request(self, form) -> GstDetailsRequest:
        """
        Builds the request from the current field values and consumes the
        session's place-of-supply flag.
        """
        session = form.session
        doctype = form.doctype
        party_type, party, same_gstin_stock_entry = self._resolve_party(form)

        update_place_of_supply = session.update_place_of_supply
        session.update_place_of_supply = False

        party_details: Dict[str, Any] = {}

        # Quotations may be addressed to a Lead
        if doctype != QUOTATION or (form.get("party_type") or form.get("quotation_to")) == PARTY_TYPE_CUSTOMER:
            party_details[party_type.lower()] = party

        fieldnames = list(BASE_PARTY_DETAIL_FIELDS)
        if doctype in SALES_DOCTYPES:
            fieldnames.extend(SALES_PARTY_DETAIL_FIELDS)
        elif doctype == STOCK_ENTRY:
            fieldnames.extend(STOCK_ENTRY_PARTY_DETAIL_FIELDS)
            party_details["is_outward_stock_entry"] = same_gstin_stock_entry
            party_details["is_inward_stock_entry"] = is_inward_stock_entry(form)
        else:
            fieldnames.extend(PURCHASE_PARTY_DETAIL_FIELDS)

        for fieldname in fieldnames:
            party_details[fieldname] = form.get(fieldname)

        return GstDetailsRequest(
            doctype=doctype,
            company=form.get("company"),
            update_place_of_supply=update_place_of_supply,
            party_details=party_details,
        )

    async def fetch_and_apply(self, form, request: GstDetailsRequest) -> None:
        GST_RECONCILIATION_REQUESTS_TOTAL.labels(doctype=request.doctype).inc()
        logger.info(
            "Fetching GST details.",
            extra={
                "doctype": request.doctype,
                "company": request.company,
                "update_place_of_supply": request.update_place_of_supply,
            },
        )
        result = await form.session.calls.run(self.gateway.get_gst_details(request.to_payload()))
        if not result:
            return

        await self.apply_result(form, result)

    async def apply_result(self, form, values: Dict[str, Any]) -> None:
        session = form.session
        session.applying_gst_details = True
        try:
            await form.set_value(values)
        finally:
            session.applying_gst_details = False
