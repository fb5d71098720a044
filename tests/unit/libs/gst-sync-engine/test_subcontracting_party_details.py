# tests/unit/libs/gst-sync-engine/test_subcontracting_party_details.py
import asyncio
import json
import logging
import pytest
from unittest.mock import AsyncMock

from gst_sync_engine.constants import STOCK_ENTRY, SUBCONTRACTING_ORDER
from gst_sync_engine.party_details import SubcontractingPartyFetcher

pytestmark = pytest.mark.asyncio


def sent_args(mock_gateway: AsyncMock) -> dict:
    args = mock_gateway.get_party_details_for_subcontracting.await_args.args[0]
    return dict(args, party_details=json.loads(args["party_details"]))


async def test_supplier_change_fetches_and_applies_party_details(make_form, mock_gateway: AsyncMock):
    """
    GIVEN a Subcontracting Order
    WHEN the supplier changes
    THEN party details are fetched with the company GSTIN and applied without
         starting a GST details cycle.
    """
    # Arrange
    mock_gateway.get_party_details_for_subcontracting.return_value = {
        "supplier_address": "SUPP-0001-Billing",
        "supplier_gstin": "27AAPFU0939F1ZV",
        "gst_category": "Registered Regular",
    }
    form = make_form(
        SUBCONTRACTING_ORDER,
        company="Test Company",
        company_gstin="24AAQCA8719H1ZC",
        transaction_date="2024-04-01",
    )

    # Act
    await form.set_value("supplier", "SUPP-0001")
    await form.session.calls.wait_idle()

    # Assert
    assert sent_args(mock_gateway) == {
        "party_details": {
            "company_gstin": "24AAQCA8719H1ZC",
            "supplier": "SUPP-0001",
            "is_inward_stock_entry": False,
        },
        "posting_date": "2024-04-01",
    }
    assert form.get("supplier_gstin") == "27AAPFU0939F1ZV"
    mock_gateway.get_gst_details.assert_not_awaited()
    assert form.session.updating_party_details is False
    assert form.field_properties["supplier_address"]["ignore_link_validation"] is False


async def test_stock_entry_uses_bill_from_gstin(make_form, mock_gateway: AsyncMock):
    form = make_form(
        STOCK_ENTRY,
        purpose="Send to Subcontractor",
        bill_from_gstin="24AAQCA8719H1ZC",
        posting_date="2024-04-01",
    )

    await form.set_value("supplier", "SUPP-0001")
    await form.session.calls.wait_idle()

    assert sent_args(mock_gateway)["party_details"] == {
        "bill_from_gstin": "24AAQCA8719H1ZC",
        "supplier": "SUPP-0001",
        "is_inward_stock_entry": False,
    }


async def test_material_transfer_return_uses_bill_to_gstin(make_form, mock_gateway: AsyncMock):
    form = make_form(
        STOCK_ENTRY,
        purpose="Material Transfer",
        is_return=1,
        bill_to_gstin="24AAQCA8719H1ZC",
        posting_date="2024-04-01",
    )

    await form.set_value("supplier", "SUPP-0001")
    await form.session.calls.wait_idle()

    assert sent_args(mock_gateway)["party_details"] == {
        "bill_to_gstin": "24AAQCA8719H1ZC",
        "supplier": "SUPP-0001",
        "is_inward_stock_entry": True,
    }


async def test_link_validation_restored_on_failure(mock_gateway: AsyncMock, make_form, caplog):
    mock_gateway.get_party_details_for_subcontracting.side_effect = RuntimeError("boom")
    form = make_form(SUBCONTRACTING_ORDER, transaction_date="2024-04-01")

    with caplog.at_level(logging.ERROR):
        SubcontractingPartyFetcher(mock_gateway).on_supplier_changed(form)
        await form.session.calls.wait_idle()

    assert any(record.exc_info and "boom" in record.getMessage() for record in caplog.records)
    assert form.field_properties["supplier_address"]["ignore_link_validation"] is False
    assert form.session.calls.in_flight == 0


async def test_gst_details_cycle_waits_for_party_details(make_form, mock_gateway: AsyncMock):
    """
    GIVEN a supplier change whose party details are still being fetched
    WHEN the company GSTIN changes
    THEN the GST details request is built after the party details are applied.
    """
    # Arrange
    release = asyncio.Event()

    async def slow_party_details(args):
        await release.wait()
        return {"supplier_gstin": "27AAPFU0939F1ZV"}

    mock_gateway.get_party_details_for_subcontracting.side_effect = slow_party_details
    form = make_form(SUBCONTRACTING_ORDER, company="Test Company", transaction_date="2024-04-01")

    # Act
    supplier_task = asyncio.create_task(form.set_value("supplier", "SUPP-0001"))
    for _ in range(3):
        await asyncio.sleep(0)
    gstin_task = asyncio.create_task(form.set_value("company_gstin", "24AAQCA8719H1ZC"))
    for _ in range(3):
        await asyncio.sleep(0)
    mock_gateway.get_gst_details.assert_not_awaited()

    release.set()
    await asyncio.gather(supplier_task, gstin_task)

    # Assert
    mock_gateway.get_gst_details.assert_awaited_once()
    payload = mock_gateway.get_gst_details.await_args.args[0]
    assert json.loads(payload["party_details"])["supplier_gstin"] == "27AAPFU0939F1ZV"
    assert payload["update_place_of_supply"] == 1


async def test_fetch_runs_after_remaining_supplier_handlers(dispatcher, make_form, mock_gateway: AsyncMock):
    """
    GIVEN another handler registered for the supplier field after the fetcher
    WHEN the supplier changes
    THEN that handler runs first and the change returns before the fetch completes.
    """
    # Arrange
    order = []

    async def record_fetch(args):
        order.append("fetch")
        return None

    mock_gateway.get_party_details_for_subcontracting.side_effect = record_fetch
    dispatcher.on(SUBCONTRACTING_ORDER, {"supplier": lambda form: order.append("host_handler")})
    form = make_form(SUBCONTRACTING_ORDER, transaction_date="2024-04-01")

    # Act
    await form.set_value("supplier", "SUPP-0001")

    # Assert
    assert order == ["host_handler"]
    assert form.session.calls.in_flight == 1

    await form.session.calls.wait_idle()
    assert order == ["host_handler", "fetch"]
    assert form.session.calls.in_flight == 0
