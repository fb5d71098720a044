# tests/conftest.py
import pytest
from typing import Callable
from unittest.mock import AsyncMock

from gst_sync_engine.constants import SALES_INVOICE
from gst_sync_engine.coordinator import GstDetailsCoordinator
from gst_sync_engine.dispatcher import FieldChangeDispatcher
from gst_sync_engine.form import TransactionForm
from gst_sync_engine.gstin_status import GstinStatusService
from gst_sync_engine.models import GstSettings
from gst_sync_engine.party_details import SubcontractingPartyFetcher
from gst_sync_engine.transaction import register_transaction_events



@pytest.fixture
def gst_settings() -> GstSettings:
    """GST Settings with status validation on and every optional feature off."""
    return GstSettings(validate_gstin_status=True)


@pytest.fixture
def mock_gateway() -> AsyncMock:
    """
    Provides a mock ComplianceGateway. Every remote method answers with an
    empty response unless a test says otherwise.
    """
    gateway = AsyncMock()
    gateway.get_gst_details.return_value = None
    gateway.get_gstin_status.return_value = None
    gateway.get_party_details_for_subcontracting.return_value = None
    return gateway


@pytest.fixture
def coordinator(mock_gateway: AsyncMock) -> GstDetailsCoordinator:
    return GstDetailsCoordinator(mock_gateway)


@pytest.fixture
def status_service(mock_gateway: AsyncMock, gst_settings: GstSettings) -> GstinStatusService:
    return GstinStatusService(mock_gateway, gst_settings)


@pytest.fixture
def dispatcher(
    mock_gateway: AsyncMock,
    coordinator: GstDetailsCoordinator,
    status_service: GstinStatusService,
    gst_settings: GstSettings,
) -> FieldChangeDispatcher:
    """A dispatcher with the complete set of GST transaction handlers registered."""
    return register_transaction_events(
        FieldChangeDispatcher(),
        coordinator,
        status_service,
        SubcontractingPartyFetcher(mock_gateway),
        gst_settings,
    )


@pytest.fixture
def make_form(dispatcher: FieldChangeDispatcher) -> Callable[..., TransactionForm]:
    """Factory for forms wired to the shared dispatcher."""
    def _make_form(doctype: str = SALES_INVOICE, **values) -> TransactionForm:
        return TransactionForm(doctype, values, dispatcher=dispatcher)
    return _make_form


@pytest.fixture
def sales_invoice_values() -> dict:
    return {
        "company": "Test Company",
        "customer": "CUST-0001",
        "posting_date": "2024-04-01",
        "tax_category": "In-State",
        "gst_category": "Registered Regular",
        "company_gstin": "24AAQCA8719H1ZC",
        "place_of_supply": "24-Gujarat",
        "is_reverse_charge": 0,
        "customer_address": "CUST-0001-Billing",
        "shipping_address_name": None,
        "billing_address_gstin": None,
        "is_export_with_gst": 0,
    }
