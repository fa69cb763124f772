"""
Impact assessment PDF renderer.

Draws the report directly on a reportlab canvas. Layout is expressed in
millimetres measured from the top-left corner of the page; ``_y`` is the
current write position. Every block, bullet, table row and insight entry
asks ``_ensure_space`` first, so nothing runs past the footer.

Footers carry "Page X of Y", so page drawing is deferred until the total
is known (see ``_NumberedCanvas``).
"""

from __future__ import annotations

import io
from datetime import datetime
from typing import Callable, Optional, Sequence

from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from impact_engine.models.enums import InsightSeverity, TileColor
from impact_engine.models.impact import AssessmentSummary, DepartmentImpact
from impact_engine.models.insight import AIInsight
from impact_engine.models.project import ProjectRecord
from impact_engine.models.report import RGB, ReportConfig, ReportDocument
from impact_engine.models.variance import Variance
from impact_engine.services.assessment_summary import summarize_assessment
from impact_engine.utils.datetime_utils import format_display_date, now_utc

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"

BLACK: RGB = (0, 0, 0)

# Section names, in the order they are drawn.
SECTION_TITLE = "title"
SECTION_PROJECT_DETAILS = "project_details"
SECTION_METRIC_TILES = "metric_tiles"
SECTION_EXECUTIVE_SUMMARY = "executive_summary"
SECTION_VARIANCE_TABLE = "variance_table"
SECTION_DEPARTMENT_IMPACTS = "department_impacts"
SECTION_AI_INSIGHTS = "ai_insights"
SECTION_FUTURE_PROJECTS = "future_projects"
SECTION_FOOTER = "footer"

IMMEDIATE_ACTIONS: tuple[str, ...] = (
    "Customer notification and expectation management",
    "Resource reallocation and schedule optimization",
    "Vendor and supplier coordination",
    "Financial impact assessment and mitigation",
    "Cross-departmental communication protocol",
)

TABLE_HEADERS: tuple[str, ...] = ("Phase", "Original Plan", "Current Date", "Variance", "Status")
TABLE_COLUMN_WIDTHS: tuple[float, ...] = (40, 35, 35, 25, 25)

BANNER_HEIGHT = 40
FOOTER_HEIGHT = 15
LINE_HEIGHT = 5
TILE_HEIGHT = 25
TABLE_ROW_HEIGHT = 12


def report_filename(project_number: Optional[str], generated_at: datetime) -> str:
    """``Impact-Assessment-<projectNumber>-<YYYY-MM-DD>.pdf``"""
    number = (project_number or "").strip() or "UNKNOWN"
    return f"Impact-Assessment-{number}-{generated_at.date().isoformat()}.pdf"


class _NumberedCanvas(canvas.Canvas):
    """Canvas that holds every page back until save so footers know the page count."""

    def __init__(self, *args, footer: Callable[["_NumberedCanvas", int, int], None], **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: list[dict] = []
        self._footer = footer
        self.page_count = 0

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._footer(self, self._pageNumber, page_count)
            canvas.Canvas.showPage(self)
        self.page_count = page_count
        canvas.Canvas.save(self)


class ReportRenderer:
    """Renders one assessment into a PDF document."""

    def __init__(self, config: Optional[ReportConfig] = None):
        self.config = config or ReportConfig()
        self._canvas: Optional[_NumberedCanvas] = None
        self._sections: list[str] = []
        self._y: float = 0.0
        self._generated_at: datetime = now_utc()

    # ===========================================
    # Public API
    # ===========================================

    def render(
        self,
        project: ProjectRecord,
        variances: Sequence[Variance],
        impacts: Sequence[DepartmentImpact],
        ai_insights: Optional[AIInsight] = None,
        generated_at: Optional[datetime] = None,
        summary: Optional[AssessmentSummary] = None,
        future_insights: Optional[AIInsight] = None,
    ) -> ReportDocument:
        """
        Render the report.

        Args:
            project: Project being assessed
            variances: Variances in calculator order
            impacts: Department impacts in rule order
            ai_insights: Narrative insights; the section is omitted when None or empty
            generated_at: Timestamp printed in the report and used for the filename
            summary: Precomputed summary (computed here when omitted)
            future_insights: Optional insights about other projects sharing the bays

        Returns:
            Rendered document with its draw order in ``sections``
        """
        self._generated_at = generated_at or now_utc()
        summary = summary or summarize_assessment(variances, impacts)

        buffer = io.BytesIO()
        self._canvas = _NumberedCanvas(
            buffer,
            pagesize=(self.config.page_width_mm * mm, self.config.page_height_mm * mm),
            footer=self._draw_footer,
        )
        self._canvas.setTitle(f"Impact Assessment - {project.project_number or project.id}")
        self._canvas.setAuthor(self.config.product_name)
        self._sections = []
        self._y = 0.0

        try:
            self._draw_title()
            self._draw_project_details(project)
            self._draw_metric_tiles(summary)
            self._draw_executive_summary(summary)
            if variances:
                self._draw_variance_table(variances)
            if impacts:
                self._draw_department_impacts(impacts)
            if ai_insights is not None and ai_insights.insights:
                self._draw_insights(SECTION_AI_INSIGHTS, "AI-Generated Insights", ai_insights)
            if future_insights is not None and future_insights.insights:
                self._draw_insights(
                    SECTION_FUTURE_PROJECTS, "Future Scheduled Projects Impact", future_insights
                )

            self._canvas.showPage()
            self._canvas.save()
            self._sections.append(SECTION_FOOTER)
            page_count = self._canvas.page_count
        finally:
            self._canvas = None

        return ReportDocument(
            filename=report_filename(project.project_number, self._generated_at),
            content=buffer.getvalue(),
            page_count=page_count,
            sections=list(self._sections),
        )

    # ===========================================
    # Drawing primitives (millimetres, top-left origin)
    # ===========================================

    @property
    def _page_width(self) -> float:
        return self.config.page_width_mm

    @property
    def _page_height(self) -> float:
        return self.config.page_height_mm

    @property
    def _margin(self) -> float:
        return self.config.margin_mm

    @property
    def _content_width(self) -> float:
        return self._page_width - 2 * self._margin

    def _ensure_space(self, required: float) -> bool:
        """Start a new page when ``required`` mm do not fit above the footer."""
        if self._y + required <= self._page_height - self._margin - FOOTER_HEIGHT:
            return False
        self._canvas.showPage()
        self._y = self._margin
        return True

    def _fill(self, color: RGB) -> None:
        self._canvas.setFillColorRGB(color[0] / 255, color[1] / 255, color[2] / 255)

    def _box(self, x: float, y: float, width: float, height: float, color: RGB) -> None:
        self._fill(color)
        self._canvas.rect(
            x * mm, (self._page_height - y - height) * mm, width * mm, height * mm, fill=1, stroke=0
        )

    def _text(
        self,
        text: str,
        x: float,
        y: float,
        font: str = FONT_REGULAR,
        size: float = 10,
        color: RGB = BLACK,
        align: str = "left",
    ) -> None:
        self._canvas.setFont(font, size)
        self._fill(color)
        baseline = (self._page_height - y) * mm
        if align == "center":
            self._canvas.drawCentredString(x * mm, baseline, text)
        elif align == "right":
            self._canvas.drawRightString(x * mm, baseline, text)
        else:
            self._canvas.drawString(x * mm, baseline, text)

    def _wrap(self, text: str, font: str, size: float, width: float) -> list[str]:
        return simpleSplit(text, font, size, width * mm) or [""]

    def _paragraph(
        self,
        text: str,
        x: float,
        width: float,
        font: str = FONT_REGULAR,
        size: float = 10,
        color: RGB = BLACK,
    ) -> None:
        """Write wrapped text line by line, breaking pages between lines."""
        for line in self._wrap(text, font, size, width):
            self._ensure_space(LINE_HEIGHT)
            self._text(line, x, self._y, font, size, color)
            self._y += LINE_HEIGHT

    def _bullets(self, items: Sequence[str], indent: float = 10) -> None:
        for item in items:
            lines = self._wrap(f"• {item}", FONT_REGULAR, 10, self._content_width - indent)
            self._ensure_space(len(lines) * LINE_HEIGHT)
            for line in lines:
                self._text(line, self._margin + indent, self._y)
                self._y += LINE_HEIGHT

    def _heading(self, text: str, size: float = 14, color: Optional[RGB] = None) -> None:
        self._text(text, self._margin, self._y, FONT_BOLD, size, color or self.config.theme.primary)
        self._y += 10

    def _tile_color(self, tile: TileColor) -> RGB:
        theme = self.config.theme
        return {
            TileColor.RED: theme.danger,
            TileColor.AMBER: theme.warning,
            TileColor.GREEN: theme.success,
            TileColor.BLUE: theme.info,
        }[tile]

    def _severity_color(self, severity: InsightSeverity) -> RGB:
        theme = self.config.theme
        return {
            InsightSeverity.DANGER: theme.danger,
            InsightSeverity.WARNING: theme.warning,
            InsightSeverity.SUCCESS: theme.success,
            InsightSeverity.INFO: theme.info,
        }[severity]

    # ===========================================
    # Sections
    # ===========================================

    def _draw_title(self) -> None:
        self._box(0, 0, self._page_width, BANNER_HEIGHT, self.config.theme.primary)
        self._text(
            self.config.title,
            self._page_width / 2,
            25,
            FONT_BOLD,
            24,
            self.config.theme.white,
            align="center",
        )
        self._y = 60
        self._sections.append(SECTION_TITLE)

    def _draw_project_details(self, project: ProjectRecord) -> None:
        x = self._margin + 10
        self._box(self._margin, self._y, self._content_width, 50, self.config.theme.light_gray)
        self._text("PROJECT DETAILS", x, self._y + 15, FONT_BOLD, 16, self.config.theme.primary)
        self._text(f"Project: {project.name or 'N/A'}", x, self._y + 25, size=12)
        self._text(f"Project Number: {project.project_number or 'N/A'}", x, self._y + 35, size=12)
        self._text(
            f"Assessment Date: {format_display_date(self._generated_at.date())}",
            x,
            self._y + 45,
            size=12,
        )
        self._y += 70
        self._sections.append(SECTION_PROJECT_DETAILS)

    def _draw_metric_tiles(self, summary: AssessmentSummary) -> None:
        gap = 10
        width = (self._content_width - 2 * gap) / 3
        white = self.config.theme.white
        tiles = (
            (
                summary.variance_tile,
                f"{summary.variance_count} Schedule Variances",
                f"{summary.delayed_count} Delayed | {summary.advanced_count} Advanced",
            ),
            (
                summary.department_tile,
                f"{summary.department_count} Departments Affected",
                f"{summary.critical_department_count} Critical | "
                f"{summary.high_department_count} High Impact",
            ),
            (
                summary.delay_tile,
                f"{summary.max_delay_days} Max Delay Days",
                "Critical Timeline Impact",
            ),
        )
        self._ensure_space(TILE_HEIGHT)
        for index, (tile, headline, detail) in enumerate(tiles):
            x = self._margin + index * (width + gap)
            self._box(x, self._y, width, TILE_HEIGHT, self._tile_color(tile))
            self._text(headline, x + 3, self._y + 9, FONT_BOLD, 11, white)
            self._text(detail, x + 3, self._y + 18, FONT_REGULAR, 9, white)
        self._y += TILE_HEIGHT + 15
        self._sections.append(SECTION_METRIC_TILES)

    def _draw_executive_summary(self, summary: AssessmentSummary) -> None:
        self._ensure_space(40)
        self._heading("Executive Summary", size=16)
        self._paragraph(
            f"This impact assessment has identified {summary.variance_count} schedule variance(s) "
            f"that will affect {summary.department_count} department(s) across the organization. "
            f"The total cumulative delay impact is {summary.max_delay_days} days based on the most "
            f"critical timeline variance.",
            self._margin,
            self._content_width,
        )
        self._y += LINE_HEIGHT

        self._ensure_space(LINE_HEIGHT * 2)
        self._text("Critical Metrics:", self._margin, self._y, FONT_BOLD)
        self._y += LINE_HEIGHT + 1
        self._bullets(
            [
                f"Total Delayed Phases: {summary.delayed_count}",
                f"Advanced Phases: {summary.advanced_count}",
                f"Critical Departments: {summary.critical_department_count}",
                f"High Impact Departments: {summary.high_department_count}",
            ]
        )
        self._y += LINE_HEIGHT

        self._ensure_space(LINE_HEIGHT * 2)
        self._text("Immediate Actions Required:", self._margin, self._y, FONT_BOLD)
        self._y += LINE_HEIGHT + 1
        self._bullets(IMMEDIATE_ACTIONS)
        self._y += 10
        self._sections.append(SECTION_EXECUTIVE_SUMMARY)

    def _draw_table_header(self) -> None:
        x = self._margin
        for header, width in zip(TABLE_HEADERS, TABLE_COLUMN_WIDTHS):
            self._text(header, x, self._y, FONT_BOLD, 9)
            x += width
        self._y += 6
        self._canvas.setLineWidth(0.5)
        self._canvas.setStrokeColorRGB(0, 0, 0)
        line_y = (self._page_height - self._y) * mm
        self._canvas.line(self._margin * mm, line_y, (self._page_width - self._margin) * mm, line_y)
        self._y += 6

    def _draw_variance_table(self, variances: Sequence[Variance]) -> None:
        theme = self.config.theme
        self._ensure_space(30)
        self._heading("Schedule Variances")
        self._draw_table_header()

        for variance in variances:
            if self._ensure_space(TABLE_ROW_HEIGHT):
                self._draw_table_header()
            status_color = theme.danger if variance.is_delayed else theme.success
            cells = (
                (variance.display_name, BLACK),
                (format_display_date(variance.baseline_date), BLACK),
                (format_display_date(variance.current_date), BLACK),
                (variance.signed_label, status_color),
                (variance.status_label, status_color),
            )
            x = self._margin
            for (value, color), width in zip(cells, TABLE_COLUMN_WIDTHS):
                line = self._wrap(value, FONT_REGULAR, 9, width - 2)[0]
                self._text(line, x, self._y, FONT_REGULAR, 9, color)
                x += width
            self._y += TABLE_ROW_HEIGHT - 4
        self._y += 10
        self._sections.append(SECTION_VARIANCE_TABLE)

    def _draw_department_impacts(self, impacts: Sequence[DepartmentImpact]) -> None:
        self._ensure_space(40)
        self._heading("Department Impact Analysis")
        self._y += 5

        for index, impact in enumerate(impacts, start=1):
            self._ensure_space(30)
            self._text(
                f"{index}. {impact.department} Department",
                self._margin,
                self._y,
                FONT_BOLD,
                12,
                self.config.theme.secondary,
            )
            self._y += 8
            self._text(f"Impact Level: {impact.impact_level.value.upper()}", self._margin, self._y)
            self._y += 6
            self._paragraph(impact.description, self._margin, self._content_width)
            self._y += 3

            self._ensure_space(LINE_HEIGHT * 2)
            self._text("Specific Impacts:", self._margin, self._y, FONT_BOLD)
            self._y += 6
            self._bullets(impact.specific_impacts)
            self._y += 3

            self._ensure_space(LINE_HEIGHT * 2)
            self._text("Mitigation Actions:", self._margin, self._y, FONT_BOLD)
            self._y += 6
            self._bullets(impact.mitigation_actions)

            if impact.estimated_cost:
                self._y += 3
                self._ensure_space(6)
                cost = f"Estimated Cost Impact: {impact.estimated_cost}"
                self._text(cost, self._margin, self._y, FONT_BOLD)
                self._y += 6
            if impact.timeline_impact:
                self._ensure_space(6)
                timeline = f"Timeline Impact: {impact.timeline_impact}"
                self._text(timeline, self._margin, self._y, FONT_BOLD)
                self._y += 6
            self._y += 10
        self._sections.append(SECTION_DEPARTMENT_IMPACTS)

    def _draw_insights(self, section: str, heading: str, insights: AIInsight) -> None:
        self._ensure_space(40)
        self._heading(heading)

        if insights.summary:
            self._paragraph(insights.summary, self._margin, self._content_width, FONT_ITALIC)
            self._y += 5

        indent = 10
        for index, item in enumerate(insights.insights, start=1):
            title_lines = self._wrap(f"{index}. {item.text}", FONT_BOLD, 10, self._content_width - 4)
            detail_lines: list[str] = []
            if item.detail:
                detail_lines = self._wrap(item.detail, FONT_REGULAR, 10, self._content_width - indent)
            height = (len(title_lines) + len(detail_lines)) * LINE_HEIGHT
            self._ensure_space(min(height, 4 * LINE_HEIGHT))

            bar_color = self._severity_color(item.severity)
            for line in title_lines:
                self._ensure_space(LINE_HEIGHT)
                # Severity bar, one segment per title line
                self._box(self._margin, self._y - 4, 1.5, LINE_HEIGHT, bar_color)
                self._text(line, self._margin + 4, self._y, FONT_BOLD)
                self._y += LINE_HEIGHT
            for line in detail_lines:
                self._ensure_space(LINE_HEIGHT)
                self._text(line, self._margin + indent, self._y)
                self._y += LINE_HEIGHT
            self._y += 3

        if section == SECTION_AI_INSIGHTS:
            self._y += 5
            self._ensure_space(LINE_HEIGHT)
            self._text(
                f"AI Confidence Level: {round(insights.confidence * 100)}%",
                self._margin,
                self._y,
                FONT_ITALIC,
            )
            self._y += LINE_HEIGHT
        self._y += 10
        self._sections.append(section)

    def _draw_footer(self, page: _NumberedCanvas, page_number: int, page_count: int) -> None:
        theme = self.config.theme
        top = self._page_height - FOOTER_HEIGHT + 3
        baseline = (self._page_height - top - 6) * mm
        page.saveState()
        page.setStrokeColorRGB(*(c / 255 for c in theme.gray))
        page.setLineWidth(0.5)
        rule_y = (self._page_height - top) * mm
        page.line(self._margin * mm, rule_y, (self._page_width - self._margin) * mm, rule_y)
        page.setFont(FONT_REGULAR, 8)
        page.setFillColorRGB(*(c / 255 for c in theme.gray))
        product = f"{self.config.product_name} - Impact Assessment Report"
        page.drawString(self._margin * mm, baseline, product)
        page.drawCentredString(
            self._page_width / 2 * mm,
            baseline,
            f"Generated: {self._generated_at:%Y-%m-%d %H:%M}",
        )
        page.drawRightString(
            (self._page_width - self._margin) * mm, baseline, f"Page {page_number} of {page_count}"
        )
        page.restoreState()
