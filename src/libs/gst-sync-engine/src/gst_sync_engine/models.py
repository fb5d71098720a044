# src/libs/gst-sync-engine/src/gst_sync_engine/models.py
import json
from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from compliance_common import config


class GstSettings(BaseModel):
    """
    Read-only snapshot of the GST Settings flags consulted while a
    transaction is being edited.
    """
    model_config = ConfigDict(frozen=True)

    enable_overseas_transactions: bool = False
    validate_gstin_status: bool = True
    enable_sales_through_ecommerce_operators: bool = False
    enable_e_waybill_from_pi: bool = False
    enable_e_waybill_from_dn: bool = False
    enable_e_waybill_from_pr: bool = False

    @classmethod
    def from_config(cls) -> "GstSettings":
        return cls(
            enable_overseas_transactions=config.GST_ENABLE_OVERSEAS_TRANSACTIONS,
            validate_gstin_status=config.GST_VALIDATE_GSTIN_STATUS,
            enable_sales_through_ecommerce_operators=config.GST_ENABLE_SALES_THROUGH_ECOMMERCE_OPERATORS,
            enable_e_waybill_from_pi=config.GST_ENABLE_E_WAYBILL_FROM_PI,
            enable_e_waybill_from_dn=config.GST_ENABLE_E_WAYBILL_FROM_DN,
            enable_e_waybill_from_pr=config.GST_ENABLE_E_WAYBILL_FROM_PR,
        )


class GstinInfo(BaseModel):
    """Registry entry for a GSTIN as returned by the status lookup."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    gstin: Optional[str] = None
    status: Optional[str] = None
    registration_date: Optional[date] = None
    cancelled_date: Optional[date] = None
    last_updated_on: Optional[str] = Field(
        default=None, description="Timestamp of the last registry sync, as reported."
    )

    @field_validator("registration_date", "cancelled_date", "last_updated_on", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value == "":
            return None
        return value


class GstDetailsRequest(BaseModel):
    """
    Arguments for one GST details reconciliation call. Built fresh for every
    coordinator cycle and never modified once sent.
    """
    model_config = ConfigDict(frozen=True)

    doctype: str
    company: str
    update_place_of_supply: bool = False
    party_details: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "doctype": self.doctype,
            "company": self.company,
        }
        if self.update_place_of_supply:
            payload["update_place_of_supply"] = 1

        payload["party_details"] = json.dumps(self.party_details, default=str)
        return payload
