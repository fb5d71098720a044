# src/libs/gst-sync-engine/src/gst_sync_engine/constants.py

# --- Transaction kinds ---
QUOTATION = "Quotation"
SALES_ORDER = "Sales Order"
DELIVERY_NOTE = "Delivery Note"
SALES_INVOICE = "Sales Invoice"
POS_INVOICE = "POS Invoice"
PURCHASE_ORDER = "Purchase Order"
PURCHASE_RECEIPT = "Purchase Receipt"
PURCHASE_INVOICE = "Purchase Invoice"
STOCK_ENTRY = "Stock Entry"
SUBCONTRACTING_ORDER = "Subcontracting Order"
SUBCONTRACTING_RECEIPT = "Subcontracting Receipt"

# Doctypes whose party is a Customer
SALES_DOCTYPES = (QUOTATION, SALES_ORDER, DELIVERY_NOTE, SALES_INVOICE, POS_INVOICE)

TRANSACTION_DOCTYPES = (
    QUOTATION,
    SALES_ORDER,
    DELIVERY_NOTE,
    SALES_INVOICE,
    PURCHASE_ORDER,
    PURCHASE_RECEIPT,
    PURCHASE_INVOICE,
)
SUBCONTRACTING_DOCTYPES = (STOCK_ENTRY, SUBCONTRACTING_ORDER, SUBCONTRACTING_RECEIPT)

PORT_CODE_DOCTYPES = (SALES_INVOICE, DELIVERY_NOTE)
ECOMMERCE_DOCTYPES = (SALES_INVOICE, SALES_ORDER, DELIVERY_NOTE)

# Authoritative date field of each kind
DATE_FIELD_BY_DOCTYPE = {
    QUOTATION: "transaction_date",
    SALES_ORDER: "transaction_date",
    DELIVERY_NOTE: "posting_date",
    SALES_INVOICE: "posting_date",
    POS_INVOICE: "posting_date",
    PURCHASE_ORDER: "transaction_date",
    PURCHASE_RECEIPT: "posting_date",
    PURCHASE_INVOICE: "posting_date",
    STOCK_ENTRY: "posting_date",
    SUBCONTRACTING_ORDER: "transaction_date",
    SUBCONTRACTING_RECEIPT: "posting_date",
}

# --- Party types ---
PARTY_TYPE_CUSTOMER = "Customer"
PARTY_TYPE_SUPPLIER = "Supplier"

# --- Reconciliation trigger fields ---
BASE_EVENT_FIELDS = ("tax_category", "company_gstin", "place_of_supply", "is_reverse_charge")
SALES_EVENT_FIELDS = ("customer_address", "shipping_address_name", "is_export_with_gst")
STOCK_ENTRY_EVENT_FIELDS = ("bill_from_address", "bill_to_address")
SUBCONTRACTING_EVENT_FIELDS = ("supplier_gstin",)
PURCHASE_EVENT_FIELDS = ("supplier_address",)

# Triggers that require the place of supply to be recomputed
PLACE_OF_SUPPLY_TRIGGERS = frozenset({
    "company_gstin",
    "bill_from_gstin",
    "bill_to_address",
    "customer_address",
    "shipping_address_name",
    "supplier_address",
})

# --- Fields copied into party_details ---
BASE_PARTY_DETAIL_FIELDS = (
    "tax_category",
    "gst_category",
    "company_gstin",
    "place_of_supply",
    "is_reverse_charge",
)
SALES_PARTY_DETAIL_FIELDS = (
    "customer_address",
    "shipping_address_name",
    "billing_address_gstin",
    "is_export_with_gst",
)
STOCK_ENTRY_PARTY_DETAIL_FIELDS = (
    "bill_from_gstin",
    "bill_to_gstin",
    "bill_from_address",
    "bill_to_address",
)
PURCHASE_PARTY_DETAIL_FIELDS = ("supplier_address", "supplier_gstin")

# --- Stock Entry purposes ---
MATERIAL_TRANSFER = "Material Transfer"
MATERIAL_ISSUE = "Material Issue"
SAME_GSTIN_PURPOSES = (MATERIAL_TRANSFER, MATERIAL_ISSUE)

# --- GST categories and places of supply ---
GST_CATEGORY_SEZ = "SEZ"
GST_CATEGORY_OVERSEAS = "Overseas"
PLACE_OF_SUPPLY_OTHER_COUNTRIES = "96-Other Countries"

# --- GSTIN registry statuses ---
GSTIN_STATUS_ACTIVE = "Active"
GSTIN_STATUS_CANCELLED = "Cancelled"
VALID_GSTIN_STATUSES = (GSTIN_STATUS_ACTIVE, GSTIN_STATUS_CANCELLED)

# --- E-commerce supply types ---
ECOMMERCE_SUPPLY_TYPE_REVERSE_CHARGE = "Liable to pay tax u/s 9(5)"
ECOMMERCE_SUPPLY_TYPE_TCS = "Liable to collect tax u/s 52(TCS)"

# --- Transporter ID / GSTIN formats ---
GSTIN_FORMAT = r"^([0-2][0-9]|[3][0-8])[A-Z]{3}[ABCFGHLJPT][A-Z][0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$"
TRANSPORTER_ID_FORMAT = r"^88[0-9A-Z]{13}$"
GSTIN_CHECKSUM_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

INVOICE_NUMBER_BANNER = "Naming Series should not exceed 16 characters for GST."

# --- Remote methods ---
GET_GST_DETAILS_METHOD = "india_compliance.gst_india.overrides.transaction.get_gst_details"
GET_GSTIN_STATUS_METHOD = "india_compliance.gst_india.doctype.gstin.gstin.get_gstin_status"
GET_PARTY_DETAILS_FOR_SUBCONTRACTING_METHOD = (
    "india_compliance.gst_india.overrides.transaction.get_party_details_for_subcontracting"
)

# Field labels used in user-facing messages
FIELD_LABELS = {
    "billing_address_gstin": "Billing Address GSTIN",
    "supplier_gstin": "Supplier GSTIN",
    "posting_date": "Posting Date",
    "transaction_date": "Date",
    "gst_transporter_id": "GST Transporter ID",
}
