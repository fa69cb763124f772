"""
Department impact rules.

Each rule names a department, the variances that trigger it, and the fixed
narrative attached when it fires. Rules are evaluated independently and in
table order; every matching rule contributes one impact.
"""

from __future__ import annotations

from typing import Callable, NamedTuple, Optional, Sequence

from impact_engine.models.enums import ImpactLevel
from impact_engine.models.impact import DepartmentImpact
from impact_engine.models.variance import Variance

# Cost ranges are business estimates supplied by operations; keep verbatim.
SALES_COST_CONTRACT_DELAYED = "$10,000 - $50,000"
SALES_COST_DEFAULT = "$2,000 - $10,000"
SUPPLY_CHAIN_COST = "$5,000 - $25,000"
FABRICATION_COST = "$15,000 - $75,000"
PRODUCTION_COST = "$20,000 - $100,000"
FSW_COST = "$25,000 - $150,000"


class ImpactRule(NamedTuple):
    """One row of the rule table."""

    department: str
    triggers: Callable[[Sequence[Variance]], list[Variance]]
    level: Callable[[Sequence[Variance]], ImpactLevel]
    description: str
    specific_impacts: tuple[str, ...]
    mitigation_actions: tuple[str, ...]
    estimated_cost: Callable[[Sequence[Variance]], Optional[str]] = lambda _: None


def _delayed(*fields: str) -> Callable[[Sequence[Variance]], list[Variance]]:
    """Trigger on delays of the named fields, or on any delay when none are named."""

    def select(variances: Sequence[Variance]) -> list[Variance]:
        return [v for v in variances if v.is_delayed and (not fields or v.field in fields)]

    return select


def _any_drift(*fields: str) -> Callable[[Sequence[Variance]], list[Variance]]:
    def select(variances: Sequence[Variance]) -> list[Variance]:
        return [v for v in variances if v.field in fields]

    return select


def _fixed(level: ImpactLevel) -> Callable[[Sequence[Variance]], ImpactLevel]:
    return lambda _: level


def _cost(value: str) -> Callable[[Sequence[Variance]], Optional[str]]:
    return lambda _: value


def _contract_delayed(variances: Sequence[Variance]) -> bool:
    return any(v.field == "contractDate" and v.is_delayed for v in variances)


IMPACT_RULES: tuple[ImpactRule, ...] = (
    ImpactRule(
        department="Sales",
        triggers=_delayed(),
        level=lambda vs: ImpactLevel.HIGH if _contract_delayed(vs) else ImpactLevel.MEDIUM,
        description="Customer communication and expectation management required",
        specific_impacts=(
            "Customer notification of schedule changes required",
            "Potential penalty clauses may be triggered",
            "Revenue recognition timeline affected",
            "Customer satisfaction risk",
        ),
        mitigation_actions=(
            "Schedule immediate customer meeting",
            "Prepare detailed explanation with recovery plan",
            "Review contract for penalty implications",
            "Implement enhanced communication protocol",
        ),
        estimated_cost=lambda vs: (
            SALES_COST_CONTRACT_DELAYED if _contract_delayed(vs) else SALES_COST_DEFAULT
        ),
    ),
    ImpactRule(
        department="Engineering",
        triggers=_delayed("chassisETA", "fabricationStart"),
        level=_fixed(ImpactLevel.MEDIUM),
        description="Design and documentation timeline adjustments needed",
        specific_impacts=(
            "Design review schedules need adjustment",
            "Drawing approval timeline affected",
            "Engineering resource reallocation required",
            "Vendor coordination timing changed",
        ),
        mitigation_actions=(
            "Expedite design review process",
            "Parallel processing where possible",
            "Additional engineering resources if needed",
            "Fast-track vendor approvals",
        ),
    ),
    ImpactRule(
        department="Supply Chain",
        triggers=_any_drift("chassisETA", "mechShop"),
        level=_fixed(ImpactLevel.HIGH),
        description="Material procurement and vendor coordination affected",
        specific_impacts=(
            "Chassis delivery schedule impacted",
            "Component ordering timeline adjusted",
            "Vendor coordination required",
            "Inventory planning affected",
        ),
        mitigation_actions=(
            "Expedite chassis delivery if possible",
            "Review component lead times",
            "Alternative vendor evaluation",
            "Inventory optimization",
        ),
        estimated_cost=_cost(SUPPLY_CHAIN_COST),
    ),
    ImpactRule(
        department="Finance",
        triggers=_delayed(),
        level=_fixed(ImpactLevel.MEDIUM),
        description="Cash flow and billing milestone timing affected",
        specific_impacts=(
            "Billing milestone dates need adjustment",
            "Cash flow projections require update",
            "Revenue recognition timing changed",
            "Budget variance analysis needed",
        ),
        mitigation_actions=(
            "Update financial projections",
            "Adjust billing milestone schedule",
            "Communicate with accounting team",
            "Review payment terms with customer",
        ),
    ),
    ImpactRule(
        department="Fabrication",
        triggers=_delayed("fabricationStart"),
        level=_fixed(ImpactLevel.CRITICAL),
        description="Bay scheduling and resource allocation requires immediate attention",
        specific_impacts=(
            "Manufacturing bay schedule disrupted",
            "Team resource reallocation needed",
            "Overtime requirements potential",
            "Downstream schedule cascading impact",
        ),
        mitigation_actions=(
            "Immediate bay schedule revision",
            "Resource reallocation planning",
            "Overtime authorization if needed",
            "Parallel processing opportunities",
        ),
        estimated_cost=_cost(FABRICATION_COST),
    ),
    ImpactRule(
        department="Paint",
        triggers=_delayed("paintStart"),
        level=_fixed(ImpactLevel.HIGH),
        description="Paint booth scheduling and prep work timing affected",
        specific_impacts=(
            "Paint booth reservation changes required",
            "Surface preparation timeline adjusted",
            "Paint material ordering affected",
            "Quality control schedule impacted",
        ),
        mitigation_actions=(
            "Reschedule paint booth availability",
            "Expedite surface preparation",
            "Ensure paint material availability",
            "Coordinate with QC team",
        ),
    ),
    ImpactRule(
        department="Production",
        triggers=_delayed("productionStart"),
        level=_fixed(ImpactLevel.CRITICAL),
        description="Final assembly and production timeline requires immediate revision",
        specific_impacts=(
            "Assembly line schedule disrupted",
            "Component availability timing affected",
            "Team scheduling changes required",
            "Quality checkpoints need adjustment",
        ),
        mitigation_actions=(
            "Immediate production schedule revision",
            "Component availability verification",
            "Team schedule optimization",
            "Quality checkpoint realignment",
        ),
        estimated_cost=_cost(PRODUCTION_COST),
    ),
    ImpactRule(
        department="IT",
        triggers=_delayed("itStart"),
        level=_fixed(ImpactLevel.MEDIUM),
        description="IT system integration and testing timeline affected",
        specific_impacts=(
            "System integration schedule needs adjustment",
            "Software testing timeline affected",
            "Hardware configuration timing changed",
            "User acceptance testing delayed",
        ),
        mitigation_actions=(
            "Parallel IT system setup where possible",
            "Expedite software configuration",
            "Pre-stage hardware components",
            "Coordinate with testing team",
        ),
    ),
    ImpactRule(
        department="NTC",
        triggers=_delayed("ntcTestingDate"),
        level=_fixed(ImpactLevel.HIGH),
        description="Network testing and certification timeline requires adjustment",
        specific_impacts=(
            "Network testing schedule affected",
            "Certification timeline delayed",
            "Documentation review timing changed",
            "Customer acceptance testing impacted",
        ),
        mitigation_actions=(
            "Expedite network testing preparation",
            "Parallel certification processes",
            "Documentation fast-track review",
            "Customer coordination for testing",
        ),
    ),
    ImpactRule(
        department="QC",
        triggers=_delayed("qcStartDate"),
        level=_fixed(ImpactLevel.HIGH),
        description="Quality control testing and inspection schedule affected",
        specific_impacts=(
            "Quality inspection timeline delayed",
            "Testing protocol schedule affected",
            "Documentation review timing changed",
            "Final approval process impacted",
        ),
        mitigation_actions=(
            "Expedite quality inspection setup",
            "Parallel testing where possible",
            "Fast-track documentation review",
            "Coordinate final approvals",
        ),
    ),
    ImpactRule(
        department="FSW",
        triggers=_delayed("executiveReviewDate", "shipDate", "deliveryDate"),
        level=_fixed(ImpactLevel.CRITICAL),
        description="Field service and delivery coordination significantly impacted",
        specific_impacts=(
            "Customer delivery expectations affected",
            "Field service scheduling disrupted",
            "Installation timeline delayed",
            "Customer training schedule impacted",
        ),
        mitigation_actions=(
            "Immediate customer communication",
            "Field service team notification",
            "Installation schedule revision",
            "Customer training rescheduling",
        ),
        estimated_cost=_cost(FSW_COST),
    ),
)


def derive_impacts(
    variances: Sequence[Variance],
    rules: Sequence[ImpactRule] = IMPACT_RULES,
) -> list[DepartmentImpact]:
    """
    Derive department impacts from a variance set.

    Deterministic: the result depends only on ``variances`` and ``rules``.
    An empty variance set yields no impacts.
    """
    if not variances:
        return []

    impacts: list[DepartmentImpact] = []
    seen: set[str] = set()
    for rule in rules:
        if rule.department in seen:
            continue
        triggering = rule.triggers(variances)
        if not triggering:
            continue
        seen.add(rule.department)
        impacts.append(
            DepartmentImpact(
                department=rule.department,
                impact_level=rule.level(variances),
                description=rule.description,
                specific_impacts=rule.specific_impacts,
                mitigation_actions=rule.mitigation_actions,
                estimated_cost=rule.estimated_cost(variances),
                timeline_impact=f"{max(v.magnitude for v in triggering)} days",
            )
        )
    return impacts
