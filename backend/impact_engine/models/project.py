"""
Project model definitions.

Projects are owned by the operations API; this service only reads them.
Field aliases follow the upstream camelCase JSON.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from impact_engine.models.schedule import SCHEDULE_FIELD_PAIRS, normalize_schedule_value


class ProjectRecord(BaseModel):
    """A manufacturing project as returned by the operations API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: int
    name: Optional[str] = None
    project_number: Optional[str] = Field(None, alias="projectNumber")
    status: Optional[str] = None
    percent_complete: Optional[float] = Field(None, alias="percentComplete")

    # Current / working dates
    contract_date: Optional[str] = Field(None, alias="contractDate")
    chassis_eta: Optional[str] = Field(None, alias="chassisETA")
    mech_shop: Optional[str] = Field(None, alias="mechShop")
    fabrication_start: Optional[str] = Field(None, alias="fabricationStart")
    paint_start: Optional[str] = Field(None, alias="paintStart")
    production_start: Optional[str] = Field(None, alias="productionStart")
    it_start: Optional[str] = Field(None, alias="itStart")
    wrap_date: Optional[str] = Field(None, alias="wrapDate")
    ntc_testing_date: Optional[str] = Field(None, alias="ntcTestingDate")
    qc_start_date: Optional[str] = Field(None, alias="qcStartDate")
    executive_review_date: Optional[str] = Field(None, alias="executiveReviewDate")
    ship_date: Optional[str] = Field(None, alias="shipDate")
    delivery_date: Optional[str] = Field(None, alias="deliveryDate")

    # Original plan ("OP") dates
    op_contract_date: Optional[str] = Field(None, alias="opContractDate")
    op_chassis_eta: Optional[str] = Field(None, alias="opChassisETA")
    op_mech_shop: Optional[str] = Field(None, alias="opMechShop")
    op_fabrication_start: Optional[str] = Field(None, alias="opFabricationStart")
    op_paint_start: Optional[str] = Field(None, alias="opPaintStart")
    op_production_start: Optional[str] = Field(None, alias="opProductionStart")
    op_it_start: Optional[str] = Field(None, alias="opItStart")
    op_wrap_date: Optional[str] = Field(None, alias="opWrapDate")
    op_ntc_testing_date: Optional[str] = Field(None, alias="opNtcTestingDate")
    op_qc_start_date: Optional[str] = Field(None, alias="opQcStartDate")
    op_executive_review_date: Optional[str] = Field(None, alias="opExecutiveReviewDate")
    op_ship_date: Optional[str] = Field(None, alias="opShipDate")
    op_delivery_date: Optional[str] = Field(None, alias="opDeliveryDate")

    def schedule_value(self, key: str) -> Optional[str]:
        """
        Read a schedule field by its upstream key, normalized.

        Raises:
            KeyError: If the key is not a recognized schedule field
        """
        return normalize_schedule_value(getattr(self, SCHEDULE_ATTRIBUTES[key]))

    def to_summary(self) -> dict:
        """Identity fields sent along with insight requests."""
        return {
            "id": self.id,
            "name": self.name,
            "projectNumber": self.project_number,
            "percentComplete": self.percent_complete,
            "status": self.status,
        }


_SCHEDULE_KEYS = {key for pair in SCHEDULE_FIELD_PAIRS for key in (pair.baseline_key, pair.current_key)}

# Upstream key -> attribute name, for every key named in SCHEDULE_FIELD_PAIRS.
SCHEDULE_ATTRIBUTES: dict[str, str] = {
    info.alias: attr
    for attr, info in ProjectRecord.model_fields.items()
    if info.alias in _SCHEDULE_KEYS
}
