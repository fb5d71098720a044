# tests/unit/libs/gst-sync-engine/test_rules.py
import pytest

from compliance_common.exceptions import ConfigurationRequiredError, InvalidTransporterIdError
from gst_sync_engine.constants import (
    ECOMMERCE_SUPPLY_TYPE_REVERSE_CHARGE,
    ECOMMERCE_SUPPLY_TYPE_TCS,
    INVOICE_NUMBER_BANNER,
    PURCHASE_INVOICE,
    SALES_INVOICE,
    SALES_ORDER,
)
from gst_sync_engine.form import TransactionForm
from gst_sync_engine.models import GstSettings
from gst_sync_engine.rules import (
    get_ecommerce_supply_type,
    get_gstin_check_digit,
    is_invoice_no_validation_required,
    is_overseas_transaction,
    show_invoice_number_banner,
    validate_gst_transporter_id,
    validate_overseas_gst_category,
)

# --- Overseas gate ---

def test_sez_requires_overseas_transactions_enabled():
    form = TransactionForm(SALES_INVOICE, {"gst_category": "SEZ"})

    with pytest.raises(ConfigurationRequiredError) as exc_info:
        validate_overseas_gst_category(form, GstSettings(enable_overseas_transactions=False))

    assert exc_info.value.message == "Please enable SEZ / Overseas transactions in GST Settings first"


def test_sez_allowed_when_overseas_transactions_enabled():
    form = TransactionForm(SALES_INVOICE, {"gst_category": "SEZ"})

    validate_overseas_gst_category(form, GstSettings(enable_overseas_transactions=True))


@pytest.mark.parametrize(
    "doctype, gst_category, place_of_supply, expected",
    [
        (SALES_INVOICE, "SEZ", "24-Gujarat", True),
        (SALES_INVOICE, "Overseas", "96-Other Countries", True),
        (SALES_INVOICE, "Overseas", "24-Gujarat", False),
        (SALES_INVOICE, "Registered Regular", "96-Other Countries", False),
        (PURCHASE_INVOICE, "Overseas", "24-Gujarat", True),
        (PURCHASE_INVOICE, "Unregistered", None, False),
    ],
)
def test_is_overseas_transaction(doctype, gst_category, place_of_supply, expected):
    assert is_overseas_transaction(doctype, gst_category, place_of_supply) is expected


# --- E-commerce supply type ---

def test_ecommerce_supply_type_reverse_charge():
    settings = GstSettings(enable_sales_through_ecommerce_operators=True)

    assert get_ecommerce_supply_type("X", True, settings) == ECOMMERCE_SUPPLY_TYPE_REVERSE_CHARGE


def test_ecommerce_supply_type_collect_tax():
    settings = GstSettings(enable_sales_through_ecommerce_operators=True)

    assert get_ecommerce_supply_type("X", 0, settings) == ECOMMERCE_SUPPLY_TYPE_TCS


def test_ecommerce_supply_type_cleared_without_operator_gstin():
    settings = GstSettings(enable_sales_through_ecommerce_operators=True)

    assert get_ecommerce_supply_type("", True, settings) == ""


def test_ecommerce_supply_type_left_alone_when_disabled():
    assert get_ecommerce_supply_type("X", True, GstSettings()) is None


# --- Invoice number banner ---

@pytest.mark.parametrize(
    "transaction_type, settings, expected",
    [
        ("Sales Invoice", GstSettings(), True),
        ("Purchase Invoice", GstSettings(), False),
        ("Purchase Invoice", GstSettings(enable_e_waybill_from_pi=True), True),
        ("Delivery Note", GstSettings(enable_e_waybill_from_dn=True), True),
        ("Delivery Note", GstSettings(enable_e_waybill_from_pi=True), False),
        ("Purchase Receipt", GstSettings(enable_e_waybill_from_pr=True), True),
        ("Sales Order", GstSettings(enable_e_waybill_from_pi=True, enable_e_waybill_from_dn=True), False),
    ],
)
def test_is_invoice_no_validation_required(transaction_type, settings, expected):
    assert is_invoice_no_validation_required(transaction_type, settings) is expected


def test_banner_shown_and_cleared():
    form = TransactionForm(SALES_ORDER, {})
    form.set_headline("stale")

    show_invoice_number_banner(form, GstSettings())
    assert form.headline is None

    form = TransactionForm(SALES_INVOICE, {})
    show_invoice_number_banner(form, GstSettings())
    assert form.headline == INVOICE_NUMBER_BANNER


# --- GST Transporter ID ---

def test_check_digit_of_known_gstin():
    assert get_gstin_check_digit("27AAPFU0939F1Z") == "V"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("27AAPFU0939F1ZV", "27AAPFU0939F1ZV"),
        (" 27aapfu0939f1zv ", "27AAPFU0939F1ZV"),
        ("88ABCDE1234F1ZS", "88ABCDE1234F1ZS"),
        ("", None),
        (None, None),
    ],
)
def test_valid_transporter_ids(value, expected):
    assert validate_gst_transporter_id(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        "27AAPFU0939F1Z",  # too short
        "99AAPFU0939F1ZV",  # neither a GSTIN nor a transporter id
        "27AAPFU0939F1ZA",  # bad check digit
    ],
)
def test_invalid_transporter_ids(value):
    with pytest.raises(InvalidTransporterIdError) as exc_info:
        validate_gst_transporter_id(value)

    assert exc_info.value.title == "Invalid GST Transporter ID"
