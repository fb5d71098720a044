# src/libs/gst-sync-engine/src/gst_sync_engine/gstin_status.py
import logging
from datetime import date, datetime
from typing import Any, Optional

from compliance_common import config
from compliance_common.exceptions import InvalidGstinStatusError, InvalidPartyGstinError
from compliance_common.monitoring import (
    COMPLIANCE_VALIDATION_FAILURES_TOTAL,
    GSTIN_STATUS_CACHE_HITS_TOTAL,
    GSTIN_STATUS_LOOKUPS_TOTAL,
)

from .constants import GSTIN_STATUS_CANCELLED, SALES_DOCTYPES, VALID_GSTIN_STATUSES
from .gateway import ComplianceGateway
from .models import GstinInfo, GstSettings

logger = logging.getLogger(__name__)


def get_gstin_fieldname(doctype: str) -> str:
    return "billing_address_gstin" if doctype in SALES_DOCTYPES else "supplier_gstin"


def getdate(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def format_user_date(value: Any) -> str:
    parsed = getdate(value)
    return parsed.strftime(config.USER_DATE_FORMAT) if parsed else ""


def get_gstin_status_desc(status: Optional[str], last_updated_on: Optional[str]) -> str:
    if not status:
        return ""

    description = f"Status: {status}"
    if last_updated_on:
        description += f" · Last updated on {last_updated_on}"
    return description


class GstinStatusService:
    """
    Looks up registry status for the party GSTIN of a transaction, caching
    results on the form's session, and checks them against the transaction
    date.
    """
    def __init__(self, gateway: ComplianceGateway, settings: GstSettings):
        self.gateway = gateway
        self.settings = settings

    async def ensure_status(self, form, gstin_fieldname: str) -> Optional[GstinInfo]:
        """
        Returns the registry entry for the GSTIN currently in `gstin_fieldname`,
        or None when the field is empty or the registry has no entry.
        """
        gstin = form.get(gstin_fieldname)
        if not gstin:
            return None

        cache = form.session.gstin_cache
        info = cache.get(gstin)
        if info is not None:
            GSTIN_STATUS_CACHE_HITS_TOTAL.inc()
            form.set_description(gstin_fieldname, get_gstin_status_desc(info.status, info.last_updated_on))
            return info

        date_field = form.date_field
        transaction_date = form.get(date_field) if date_field else None

        response = await form.session.calls.run(self.gateway.get_gstin_status(gstin, transaction_date))
        if not response:
            GSTIN_STATUS_LOOKUPS_TOTAL.labels(outcome="not_found").inc()
            form.set_description(gstin_fieldname, "")
            return None

        GSTIN_STATUS_LOOKUPS_TOTAL.labels(outcome="found").inc()
        info = GstinInfo.model_validate(response)
        if info.gstin is None:
            info = info.model_copy(update={"gstin": gstin})

        cache[gstin] = info
        form.set_description(gstin_fieldname, get_gstin_status_desc(info.status, info.last_updated_on))
        return info

    def validate(self, info: GstinInfo, form, gstin_fieldname: str) -> None:
        if not self.settings.validate_gstin_status:
            return

        date_field = form.date_field
        if not date_field:
            logger.debug(f"{form.doctype} has no date field; GSTIN status not validated.")
            return

        # an unset date means the transaction is dated today
        transaction_date = getdate(form.get(date_field)) or date.today()

        gstin_label = form.get_label(gstin_fieldname)
        date_label = form.get_label(date_field)

        if not info.registration_date or transaction_date < info.registration_date:
            registered_on = format_user_date(info.registration_date)
            self._fail(
                InvalidPartyGstinError(
                    f"{gstin_label} is Registered on {registered_on}. "
                    f"Please make sure that the {date_label} is on or after {registered_on}"
                )
            )

        if info.status == GSTIN_STATUS_CANCELLED and (
            info.cancelled_date is None or transaction_date >= info.cancelled_date
        ):
            cancelled_on = format_user_date(info.cancelled_date)
            self._fail(
                InvalidPartyGstinError(
                    f"{gstin_label} is Cancelled from {cancelled_on}. "
                    f"Please make sure that the {date_label} is before {cancelled_on}"
                )
            )

        if info.status not in VALID_GSTIN_STATUSES:
            self._fail(InvalidGstinStatusError(f"Status of {gstin_label} is {info.status}"))

    def _fail(self, error: Exception) -> None:
        COMPLIANCE_VALIDATION_FAILURES_TOTAL.labels(error=type(error).__name__).inc()
        logger.warning(f"GSTIN validation failed: {error}")
        raise error

    async def set_and_validate(self, form, gstin_fieldname: str) -> None:
        info = await self.ensure_status(form, gstin_fieldname)
        if info is None:
            return

        self.validate(info, form, gstin_fieldname)
