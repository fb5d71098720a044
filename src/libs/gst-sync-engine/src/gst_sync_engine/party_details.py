# src/libs/gst-sync-engine/src/gst_sync_engine/party_details.py
import json
import logging
from typing import Any, Dict

from .constants import MATERIAL_TRANSFER, STOCK_ENTRY
from .gateway import ComplianceGateway

logger = logging.getLogger(__name__)


class SubcontractingPartyFetcher:
    """
    Fetches supplier-side party details (address, GSTIN, GST category) when
    the supplier of a Stock Entry or Subcontracting document changes.
    """
    def __init__(self, gateway: ComplianceGateway):
        self.gateway = gateway

    def build_args(self, form) -> Dict[str, Any]:
        company_gstin_field = "bill_from_gstin" if form.doctype == STOCK_ENTRY else "company_gstin"
        is_inward_stock_entry = False

        if (
            form.doctype == STOCK_ENTRY
            and form.get("purpose") == MATERIAL_TRANSFER
            and form.get("is_return")
        ):
            company_gstin_field = "bill_to_gstin"
            is_inward_stock_entry = True

        party_details = {
            company_gstin_field: form.get(company_gstin_field),
            "supplier": form.get("supplier"),
            "is_inward_stock_entry": is_inward_stock_entry,
        }
        return {
            "party_details": json.dumps(party_details, default=str),
            "posting_date": form.get("posting_date") or form.get("transaction_date"),
        }

    def on_supplier_changed(self, form) -> None:
        # runs after the remaining handlers of the triggering event; counted as
        # in flight right away so that a GST details cycle waits for it
        form.session.calls.spawn(self._fetch_and_update(form))

    async def _fetch_and_update(self, form) -> None:
        args = self.build_args(form)
        form.set_df_property("supplier_address", "ignore_link_validation", True)
        try:
            logger.info(f"Fetching subcontracting party details for {form.doctype}.")
            details = await self.gateway.get_party_details_for_subcontracting(args)
            if not details:
                return

            form.session.updating_party_details = True
            try:
                await form.set_value(details)
            finally:
                form.session.updating_party_details = False
        finally:
            form.set_df_property("supplier_address", "ignore_link_validation", False)
