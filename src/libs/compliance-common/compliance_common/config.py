# src/libs/compliance-common/compliance_common/config.py
import os
from dotenv import load_dotenv

# Load environment variables from a .env file for local development.
load_dotenv()


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Compliance API (reconciliation, GSTIN registry and party details endpoints)
COMPLIANCE_API_BASE_URL = os.getenv("COMPLIANCE_API_BASE_URL", "http://localhost:8000")
COMPLIANCE_API_TOKEN = os.getenv("COMPLIANCE_API_TOKEN", "")
COMPLIANCE_API_TIMEOUT_SECONDS = float(os.getenv("COMPLIANCE_API_TIMEOUT_SECONDS", "30"))

# Format used when rendering dates inside user-facing messages
USER_DATE_FORMAT = os.getenv("USER_DATE_FORMAT", "%d-%m-%Y")

# GST Settings (read-only for the lifetime of an editing session)
GST_ENABLE_OVERSEAS_TRANSACTIONS = _flag("GST_ENABLE_OVERSEAS_TRANSACTIONS")
GST_VALIDATE_GSTIN_STATUS = _flag("GST_VALIDATE_GSTIN_STATUS", "1")
GST_ENABLE_SALES_THROUGH_ECOMMERCE_OPERATORS = _flag("GST_ENABLE_SALES_THROUGH_ECOMMERCE_OPERATORS")
GST_ENABLE_E_WAYBILL_FROM_PI = _flag("GST_ENABLE_E_WAYBILL_FROM_PI")
GST_ENABLE_E_WAYBILL_FROM_DN = _flag("GST_ENABLE_E_WAYBILL_FROM_DN")
GST_ENABLE_E_WAYBILL_FROM_PR = _flag("GST_ENABLE_E_WAYBILL_FROM_PR")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SERVICE_NAME = os.getenv("SERVICE_NAME", "gst-sync-engine")
ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
