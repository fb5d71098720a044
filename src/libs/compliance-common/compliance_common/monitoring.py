# src/libs/compliance-common/compliance_common/monitoring.py
from prometheus_client import Counter

# --------------------------------------------------------------------------------------
# GST details reconciliation
# --------------------------------------------------------------------------------------
GST_RECONCILIATION_REQUESTS_TOTAL = Counter(
    "gst_reconciliation_requests_total",
    "Number of outbound GST details reconciliation requests",
    labelnames=("doctype",),
)

GST_RECONCILIATION_TRIGGERS_COALESCED_TOTAL = Counter(
    "gst_reconciliation_triggers_coalesced_total",
    "Field change triggers folded into an already pending reconciliation cycle",
    labelnames=("doctype",),
)

GST_RECONCILIATION_TRIGGERS_SKIPPED_TOTAL = Counter(
    "gst_reconciliation_triggers_skipped_total",
    "Field change triggers ignored before a reconciliation cycle started",
    labelnames=("doctype", "reason"),
)

# --------------------------------------------------------------------------------------
# GSTIN registry
# --------------------------------------------------------------------------------------
GSTIN_STATUS_LOOKUPS_TOTAL = Counter(
    "gstin_status_lookups_total",
    "Number of GSTIN registry lookups",
    labelnames=("outcome",),
)

GSTIN_STATUS_CACHE_HITS_TOTAL = Counter(
    "gstin_status_cache_hits_total",
    "GSTIN status requests answered from the per-form cache",
)

COMPLIANCE_VALIDATION_FAILURES_TOTAL = Counter(
    "compliance_validation_failures_total",
    "User-facing validation failures raised by the engine",
    labelnames=("error",),
)
