"""GST identity synchronisation and validation for transaction forms."""

from .coordinator import GstDetailsCoordinator
from .dispatcher import FieldChangeDispatcher
from .form import FormSession, PendingCallTracker, TransactionForm
from .gateway import ComplianceGateway, HttpComplianceGateway
from .gstin_status import GstinStatusService
from .models import GstDetailsRequest, GstinInfo, GstSettings
from .party_details import SubcontractingPartyFetcher
from .transaction import build_dispatcher, register_transaction_events

__all__ = [
    "ComplianceGateway",
    "FieldChangeDispatcher",
    "FormSession",
    "GstDetailsCoordinator",
    "GstDetailsRequest",
    "GstinInfo",
    "GstinStatusService",
    "GstSettings",
    "HttpComplianceGateway",
    "PendingCallTracker",
    "SubcontractingPartyFetcher",
    "TransactionForm",
    "build_dispatcher",
    "register_transaction_events",
]
