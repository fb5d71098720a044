# src/libs/gst-sync-engine/src/gst_sync_engine/rules.py
"""
Rules deriving dependent GST fields from the current values of a form.

Everything here is synchronous and side-effect free apart from the thin
handlers that write a derived value back onto the form.
"""
import logging
import re
from typing import Any, Optional

from compliance_common.exceptions import ConfigurationRequiredError, InvalidTransporterIdError
from compliance_common.monitoring import COMPLIANCE_VALIDATION_FAILURES_TOTAL

from .constants import (
    DELIVERY_NOTE,
    ECOMMERCE_SUPPLY_TYPE_REVERSE_CHARGE,
    ECOMMERCE_SUPPLY_TYPE_TCS,
    GST_CATEGORY_OVERSEAS,
    GST_CATEGORY_SEZ,
    GSTIN_CHECKSUM_CHARSET,
    GSTIN_FORMAT,
    INVOICE_NUMBER_BANNER,
    PLACE_OF_SUPPLY_OTHER_COUNTRIES,
    PURCHASE_INVOICE,
    PURCHASE_RECEIPT,
    SALES_DOCTYPES,
    SALES_INVOICE,
    TRANSPORTER_ID_FORMAT,
)
from .models import GstSettings

logger = logging.getLogger(__name__)

GSTIN_REGEX = re.compile(GSTIN_FORMAT)
TRANSPORTER_ID_REGEX = re.compile(TRANSPORTER_ID_FORMAT)


# --- Overseas / SEZ gate ---

def is_foreign_transaction(gst_category: Optional[str], place_of_supply: Optional[str]) -> bool:
    return gst_category == GST_CATEGORY_OVERSEAS and place_of_supply == PLACE_OF_SUPPLY_OTHER_COUNTRIES


def is_overseas_transaction(doctype: str, gst_category: Optional[str], place_of_supply: Optional[str]) -> bool:
    if gst_category == GST_CATEGORY_SEZ:
        return True

    if doctype in SALES_DOCTYPES:
        return is_foreign_transaction(gst_category, place_of_supply)

    return gst_category == GST_CATEGORY_OVERSEAS


def validate_overseas_gst_category(form, settings: GstSettings) -> None:
    if settings.enable_overseas_transactions:
        return

    if not is_overseas_transaction(form.doctype, form.get("gst_category"), form.get("place_of_supply")):
        return

    COMPLIANCE_VALIDATION_FAILURES_TOTAL.labels(error=ConfigurationRequiredError.__name__).inc()
    raise ConfigurationRequiredError()


# --- E-commerce supply type ---

def get_ecommerce_supply_type(
    ecommerce_gstin: Optional[str], is_reverse_charge: Any, settings: GstSettings
) -> Optional[str]:
    """
    Returns the supply type implied by the e-commerce operator fields, "" to
    clear it, or None when the feature is disabled and the field is left alone.
    """
    if not settings.enable_sales_through_ecommerce_operators:
        return None

    if not ecommerce_gstin:
        return ""

    if is_reverse_charge:
        return ECOMMERCE_SUPPLY_TYPE_REVERSE_CHARGE
    return ECOMMERCE_SUPPLY_TYPE_TCS


async def set_ecommerce_supply_type(form, settings: GstSettings) -> None:
    supply_type = get_ecommerce_supply_type(
        form.get("ecommerce_gstin"), form.get("is_reverse_charge"), settings
    )
    if supply_type is None:
        return

    await form.set_value("ecommerce_supply_type", supply_type)


# --- Invoice number banner ---

def is_invoice_no_validation_required(transaction_type: Optional[str], settings: GstSettings) -> bool:
    return (
        transaction_type == SALES_INVOICE
        or (transaction_type == PURCHASE_INVOICE and settings.enable_e_waybill_from_pi)
        or (transaction_type == DELIVERY_NOTE and settings.enable_e_waybill_from_dn)
        or (transaction_type == PURCHASE_RECEIPT and settings.enable_e_waybill_from_pr)
    )


def show_invoice_number_banner(form, settings: GstSettings) -> None:
    form.clear_headline()
    transaction_type = form.get("transaction_type") or form.get("document_type") or form.doctype
    if not is_invoice_no_validation_required(transaction_type, settings):
        return

    form.set_headline(INVOICE_NUMBER_BANNER)


# --- GST Transporter ID ---

def get_gstin_check_digit(gstin_without_check_digit: str) -> str:
    mod = len(GSTIN_CHECKSUM_CHARSET)
    factor = 1
    total = 0

    for char in gstin_without_check_digit:
        digit = factor * GSTIN_CHECKSUM_CHARSET.index(char)
        total += digit // mod + digit % mod
        factor = 2 if factor == 1 else 1

    return GSTIN_CHECKSUM_CHARSET[(mod - total % mod) % mod]


def validate_gst_transporter_id(transporter_id: Optional[str]) -> Optional[str]:
    """
    Checks a GST Transporter ID, which is either a GSTIN or an '88'-prefixed
    transporter enrolment number. Returns the normalised value.
    """
    if not transporter_id:
        return None

    transporter_id = transporter_id.strip().upper()
    if not transporter_id:
        return None

    if len(transporter_id) != 15:
        _invalid_transporter_id("GST Transporter ID should be 15 characters long.")

    if not (GSTIN_REGEX.match(transporter_id) or TRANSPORTER_ID_REGEX.match(transporter_id)):
        _invalid_transporter_id("The GST Transporter ID you've entered doesn't match the required format.")

    if transporter_id[-1] != get_gstin_check_digit(transporter_id[:-1]):
        _invalid_transporter_id(
            "Invalid GST Transporter ID. The check digit validation has failed. "
            "Please ensure you've typed the GST Transporter ID correctly."
        )

    return transporter_id


def _invalid_transporter_id(message: str) -> None:
    COMPLIANCE_VALIDATION_FAILURES_TOTAL.labels(error=InvalidTransporterIdError.__name__).inc()
    logger.warning(message)
    raise InvalidTransporterIdError(message)
