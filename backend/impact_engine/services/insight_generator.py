"""
Impact assessment insight generation.

Backs ``POST /api/ai/impact-assessment``. The configured LLM is asked for a
JSON narrative; when no provider is configured, or its answer cannot be
validated, a rule-based narrative is built from the request data instead.
"""

from __future__ import annotations

import asyncio
import json
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from impact_engine.core.exceptions import LLMValidationError
from impact_engine.core.logger import logger
from impact_engine.interfaces.llm_provider import ILLMProvider
from impact_engine.models.enums import AnalysisType, ImpactLevel, InsightSeverity
from impact_engine.models.insight import AIInsight, InsightItem, InsightRequest
from impact_engine.services.insight_adapter import fallback_insight
from impact_engine.services.llm_utils import extract_json, generate_text

# Delay thresholds (days) used by the rule-based narrative.
CRITICAL_DELAY_DAYS = 14
MAJOR_DELAY_DAYS = 7
MAX_DELAY_DANGER_DAYS = 30
MAX_DELAY_WARNING_DAYS = 14
MANY_DEPARTMENTS = 3

RULE_BASED_CONFIDENCE = 0.85

INSIGHT_SCHEMA = {
    "type": "object",
    "properties": {
        "insights": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "severity": {"type": "string", "enum": ["danger", "warning", "success", "info"]},
                    "text": {"type": "string"},
                    "detail": {"type": "string"},
                },
                "required": ["severity", "text"],
            },
        },
        "confidence": {"type": "number"},
        "summary": {"type": "string"},
    },
    "required": ["insights", "confidence", "summary"],
}

SYSTEM_INSTRUCTION = (
    "You are a manufacturing project controls analyst. You assess how schedule "
    "variances on a vehicle build project ripple into departments, cost and "
    "delivery. Be specific, concise and actionable."
)


def _impact_prompt(request: InsightRequest) -> str:
    project = request.project
    variance_lines = "\n".join(
        f"- {v.display_name}: planned {v.op_date}, current {v.current_date}, "
        f"{v.days_difference:+d} days ({'delayed' if v.is_delayed else 'advanced'})"
        for v in request.date_variances
    ) or "- none"
    impact_lines = "\n".join(
        f"- {i.department} [{i.impact_level.value}]: {i.description}"
        + (f" (estimated cost {i.estimated_cost})" if i.estimated_cost else "")
        for i in request.department_impacts
    ) or "- none"

    return f"""Assess the impact of schedule changes on this project.

Project: {project.name or 'N/A'} ({project.project_number or 'N/A'})
Status: {project.status or 'N/A'}
Percent complete: {project.percent_complete if project.percent_complete is not None else 'N/A'}

Schedule variances:
{variance_lines}

Affected departments:
{impact_lines}

Return 3 to 5 insights. Use severity "danger" for risks needing executive action,
"warning" for risks needing monitoring, "success" where the impact is contained.
Set confidence between 0 and 1 and give a one-sentence summary."""


def _future_projects_prompt(request: InsightRequest) -> str:
    project = request.project
    teams = ", ".join(request.affected_teams or []) or "none"
    team_sections = []
    for team, projects in (request.team_projects or {}).items():
        lines = "\n".join(
            f"  - {p.project_number or p.id} {p.name or ''}: production start "
            f"{p.production_start or 'N/A'}, ship {p.ship_date or 'N/A'}"
            for p in projects
        ) or "  - none"
        team_sections.append(f"{team}:\n{lines}")
    team_text = "\n".join(team_sections) or "none"
    delays = ", ".join(
        f"{v.display_name} {v.days_difference:+d}d" for v in request.date_variances
    ) or "none"

    return f"""Project {project.project_number or project.id} has schedule changes: {delays}.
It shares production teams with other scheduled projects.

Affected teams: {teams}

Projects scheduled with those teams:
{team_text}

Explain how the changes could affect these other projects and what the teams
should do. Return insights with severity, text and detail, a confidence between
0 and 1 and a one-sentence summary."""


def build_rule_based_insight(request: InsightRequest) -> AIInsight:
    """Narrative derived only from the request's variances and impacts."""
    variances = request.date_variances
    impacts = request.department_impacts

    critical_delays = [v for v in variances if v.is_delayed and v.days_difference > CRITICAL_DELAY_DAYS]
    major_delays = [v for v in variances if v.is_delayed and v.days_difference > MAJOR_DELAY_DAYS]
    critical_departments = [i for i in impacts if i.impact_level == ImpactLevel.CRITICAL]
    max_delay = max((abs(v.days_difference) for v in variances), default=0)

    if critical_delays:
        timeline = InsightItem(
            severity=InsightSeverity.DANGER,
            text=f"Critical timeline risk: {len(critical_delays)} phase(s) delayed by more than 2 weeks",
            detail="Immediate executive intervention required to prevent project failure",
        )
        summary = (
            "Project requires immediate executive attention due to critical timeline delays "
            "and cascading departmental impacts."
        )
    elif major_delays:
        timeline = InsightItem(
            severity=InsightSeverity.WARNING,
            text=f"Moderate timeline risk: {len(major_delays)} phase(s) delayed by more than 1 week",
            detail="Enhanced monitoring and resource reallocation recommended",
        )
        summary = (
            "Project needs enhanced monitoring and resource reallocation to prevent further delays."
        )
    else:
        timeline = InsightItem(
            severity=InsightSeverity.SUCCESS,
            text="Timeline variances are within acceptable range",
            detail="Continue current project management approach",
        )
        summary = (
            "Project impact is manageable with current mitigation strategies "
            "and enhanced communication protocols."
        )

    if critical_departments:
        department_severity = InsightSeverity.DANGER
        department_detail = (
            f"{len(critical_departments)} department(s) facing critical impact "
            "requiring immediate attention"
        )
    elif len(impacts) > MANY_DEPARTMENTS:
        department_severity = InsightSeverity.WARNING
        department_detail = "Multiple departments affected - coordination meeting recommended"
    else:
        department_severity = InsightSeverity.SUCCESS
        department_detail = "Departmental impact is manageable with current resources"

    if max_delay > MAX_DELAY_DANGER_DAYS:
        delay_severity = InsightSeverity.DANGER
        delay_detail = "Significant schedule recovery plan required with additional resources"
    elif max_delay > MAX_DELAY_WARNING_DAYS:
        delay_severity = InsightSeverity.WARNING
        delay_detail = "Schedule compression techniques should be evaluated"
    else:
        delay_severity = InsightSeverity.SUCCESS
        delay_detail = "Schedule variance is within normal project tolerance"

    return AIInsight(
        insights=[
            timeline,
            InsightItem(
                severity=department_severity,
                text=f"Cross-departmental impact assessment: {len(impacts)} department(s) affected",
                detail=department_detail,
            ),
            InsightItem(
                severity=delay_severity,
                text=f"Maximum schedule variance: {max_delay} days",
                detail=delay_detail,
            ),
        ],
        confidence=RULE_BASED_CONFIDENCE,
        summary=summary,
    )


class InsightGenerator:
    """Produces insights for the insight endpoint."""

    def __init__(self, llm_provider: Optional[ILLMProvider] = None):
        self._llm_provider = llm_provider

    async def generate(self, request: InsightRequest) -> AIInsight:
        """
        Generate insights for a request.

        Returns the LLM narrative when one validates, otherwise the rule-based
        narrative (or the fixed team-impact fallback for future-project analysis).
        """
        is_future = request.analysis_type == AnalysisType.FUTURE_PROJECTS

        if self._llm_provider is not None:
            prompt = _future_projects_prompt(request) if is_future else _impact_prompt(request)
            insight = await self._generate_with_llm(prompt)
            if insight is not None:
                return insight

        if is_future:
            return fallback_insight(AnalysisType.FUTURE_PROJECTS)
        return build_rule_based_insight(request)

    async def _generate_with_llm(self, prompt: str) -> Optional[AIInsight]:
        raw_output = await asyncio.to_thread(
            generate_text,
            llm_provider=self._llm_provider,
            prompt=prompt,
            temperature=0.3,
            max_output_tokens=1200,
            response_schema=INSIGHT_SCHEMA,
            response_mime_type="application/json",
            system_instruction=SYSTEM_INSTRUCTION,
        )
        if not raw_output:
            logger.warning("LLM returned no insight output, using rule-based insights")
            return None

        try:
            return AIInsight.model_validate(extract_json(raw_output))
        except (LLMValidationError, PydanticValidationError) as exc:
            logger.warning(f"LLM insight output rejected: {exc}")
            return None


def describe_request(request: InsightRequest) -> str:
    """Compact one-line description for logs."""
    analysis = request.analysis_type or AnalysisType.IMPACT
    return json.dumps(
        {
            "project": request.project.id,
            "variances": len(request.date_variances),
            "departments": len(request.department_impacts),
            "analysis": analysis.value,
        }
    )
