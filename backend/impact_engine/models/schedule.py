"""
Schedule field definitions.

A project carries 13 milestone dates twice: the original plan ("op" fields)
and the current working date. This module enumerates those pairs and owns
the one normalization step that turns placeholder values into "absent".
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

# Placeholder values meaning "date not yet known".
SENTINEL_VALUES: frozenset[str] = frozenset({"N/A", "PENDING", "TBD"})


class ScheduleFieldPair(BaseModel):
    """A tracked milestone: its display label and the two project keys holding its dates."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    baseline_key: str
    current_key: str


# Declaration order is the order variances are reported in.
SCHEDULE_FIELD_PAIRS: tuple[ScheduleFieldPair, ...] = (
    ScheduleFieldPair(name="contractDate", display_name="Contract Date",
                      baseline_key="opContractDate", current_key="contractDate"),
    ScheduleFieldPair(name="chassisETA", display_name="Chassis ETA",
                      baseline_key="opChassisETA", current_key="chassisETA"),
    ScheduleFieldPair(name="mechShop", display_name="MECH Shop",
                      baseline_key="opMechShop", current_key="mechShop"),
    ScheduleFieldPair(name="fabricationStart", display_name="Fabrication Start",
                      baseline_key="opFabricationStart", current_key="fabricationStart"),
    ScheduleFieldPair(name="paintStart", display_name="PAINT Start",
                      baseline_key="opPaintStart", current_key="paintStart"),
    ScheduleFieldPair(name="productionStart", display_name="Production Start",
                      baseline_key="opProductionStart", current_key="productionStart"),
    ScheduleFieldPair(name="itStart", display_name="IT Start",
                      baseline_key="opItStart", current_key="itStart"),
    ScheduleFieldPair(name="wrapDate", display_name="Wrap Date",
                      baseline_key="opWrapDate", current_key="wrapDate"),
    ScheduleFieldPair(name="ntcTestingDate", display_name="NTC Testing",
                      baseline_key="opNtcTestingDate", current_key="ntcTestingDate"),
    ScheduleFieldPair(name="qcStartDate", display_name="QC Start",
                      baseline_key="opQcStartDate", current_key="qcStartDate"),
    ScheduleFieldPair(name="executiveReviewDate", display_name="Executive Review",
                      baseline_key="opExecutiveReviewDate", current_key="executiveReviewDate"),
    ScheduleFieldPair(name="shipDate", display_name="Ship Date",
                      baseline_key="opShipDate", current_key="shipDate"),
    ScheduleFieldPair(name="deliveryDate", display_name="Delivery Date",
                      baseline_key="opDeliveryDate", current_key="deliveryDate"),
)


def normalize_schedule_value(value: Any) -> Optional[str]:
    """
    Normalize a raw schedule value.

    Returns None for missing values, blank strings and sentinels
    (``N/A``, ``PENDING``, ``TBD``, compared case-insensitively);
    otherwise the stripped string.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.upper() in SENTINEL_VALUES:
        return None
    return text
