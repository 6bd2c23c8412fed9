"""
PDF export of a trainer's performance report.

Uses ReportLab's Platypus engine: we build a list of "flowables"
(paragraphs, tables, spacers) and ReportLab handles pagination.

Sections, in order:
1. Header (trainer name, period, generation date)
2. Summary stats (overall average, assessments, best/worst parameter)
3. Level and XP (when gamification data is available)
4. Category table with On Target / Near Target / Needs Focus status
5. Parameter table (all 21 parameters)
6. Active alerts
7. Badges earned
"""

from datetime import datetime
from io import BytesIO
from typing import Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from trainer_insights.services.gamification import Badge, LevelProgress
from trainer_insights.services.scoring import CategoryAverage, ParameterAverage, TrainerStats
from trainer_insights.services.trends import TrendAlert

# --- Brand Colors ---
BRAND_PRIMARY = colors.HexColor("#1a365d")     # Deep navy: headings
BRAND_SECONDARY = colors.HexColor("#2b6cb0")   # Medium blue: subheadings
BRAND_ACCENT = colors.HexColor("#38a169")      # Green: on target
BRAND_CAUTION = colors.HexColor("#d69e2e")     # Amber: near target / medium
BRAND_DANGER = colors.HexColor("#e53e3e")      # Red: needs focus / high
BRAND_LIGHT_BG = colors.HexColor("#f7fafc")    # Light gray: table backgrounds
BRAND_TEXT = colors.HexColor("#2d3748")        # Dark gray: body text
BRAND_MUTED = colors.HexColor("#718096")       # Medium gray: captions

SEVERITY_COLORS = {
    "high": BRAND_DANGER,
    "medium": BRAND_CAUTION,
    "low": BRAND_ACCENT,
}


def _build_styles() -> dict:
    base = getSampleStyleSheet()

    return {
        "title": ParagraphStyle(
            "ReportTitle",
            parent=base["Title"],
            fontSize=24,
            textColor=BRAND_PRIMARY,
            spaceAfter=6,
            alignment=TA_LEFT,
        ),
        "subtitle": ParagraphStyle(
            "ReportSubtitle",
            parent=base["Normal"],
            fontSize=12,
            textColor=BRAND_MUTED,
            spaceAfter=20,
        ),
        "h2": ParagraphStyle(
            "Heading2",
            parent=base["Heading2"],
            fontSize=16,
            textColor=BRAND_PRIMARY,
            spaceBefore=16,
            spaceAfter=8,
        ),
        "body": ParagraphStyle(
            "BodyText",
            parent=base["Normal"],
            fontSize=10,
            textColor=BRAND_TEXT,
            leading=14,
            spaceAfter=6,
        ),
        "body_italic": ParagraphStyle(
            "BodyItalic",
            parent=base["Normal"],
            fontSize=10,
            textColor=BRAND_MUTED,
            leading=14,
            spaceAfter=6,
            fontName="Helvetica-Oblique",
        ),
        "bullet": ParagraphStyle(
            "BulletPoint",
            parent=base["Normal"],
            fontSize=10,
            textColor=BRAND_TEXT,
            leading=14,
            leftIndent=20,
            spaceAfter=4,
            bulletIndent=8,
        ),
        "footer": ParagraphStyle(
            "Footer",
            parent=base["Normal"],
            fontSize=8,
            textColor=BRAND_MUTED,
            alignment=TA_CENTER,
        ),
    }


def _table_style(row_count: int) -> TableStyle:
    """Shared look for every data table: navy header, zebra rows, light grid."""
    return TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), BRAND_PRIMARY),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 10),
        ("ALIGN", (0, 0), (-1, 0), "CENTER"),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
        ("TOPPADDING", (0, 0), (-1, 0), 8),

        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 1), (-1, -1), 9),
        ("ALIGN", (1, 1), (-1, -1), "CENTER"),
        ("BOTTOMPADDING", (0, 1), (-1, -1), 6),
        ("TOPPADDING", (0, 1), (-1, -1), 6),

        *[("BACKGROUND", (0, i), (-1, i), BRAND_LIGHT_BG)
          for i in range(2, row_count, 2)],

        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#e2e8f0")),
        ("LINEBELOW", (0, 0), (-1, 0), 2, BRAND_PRIMARY),
    ])


class TrainerReportPDF:
    """Renders a trainer performance report to PDF bytes.

    Usage:
        pdf_bytes = TrainerReportPDF().generate(
            trainer_name="Priya Sharma",
            stats=trainer_stats(history),
            overall_average=overall_average(history),
            category_averages=category_averages(history),
            alerts=generate_trend_alerts(trainer_id, history),
        )
    """

    def __init__(self):
        self.styles = _build_styles()

    def generate(
        self,
        trainer_name: str,
        stats: TrainerStats,
        overall_average: float,
        category_averages: Sequence[CategoryAverage],
        parameter_averages: Optional[Sequence[ParameterAverage]] = None,
        alerts: Sequence[TrendAlert] = (),
        level: Optional[LevelProgress] = None,
        badges: Sequence[Badge] = (),
        period_label: str = "All time",
    ) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            topMargin=0.75 * inch,
            bottomMargin=0.75 * inch,
            leftMargin=0.75 * inch,
            rightMargin=0.75 * inch,
            title=f"Performance Report - {trainer_name}",
            author="Trainer Insights",
        )

        story = []
        story.append(Paragraph("Performance Report", self.styles["title"]))
        story.append(Paragraph(self._safe(trainer_name), self.styles["h2"]))
        story.append(Paragraph(
            f"{self._safe(period_label)}  •  Generated {datetime.now().strftime('%B %d, %Y')}",
            self.styles["subtitle"],
        ))
        story.append(HRFlowable(
            width="100%", thickness=2, color=BRAND_PRIMARY,
            spaceAfter=12, spaceBefore=4,
        ))

        self._render_summary(story, stats, overall_average)
        if level is not None:
            self._render_level(story, level)
        self._render_category_table(story, category_averages)
        self._render_parameter_table(story, parameter_averages or stats.parameter_averages)
        self._render_alerts(story, alerts)
        self._render_badges(story, badges)

        story.append(Spacer(1, 0.3 * inch))
        story.append(HRFlowable(
            width="100%", thickness=1, color=BRAND_MUTED,
            spaceAfter=8, spaceBefore=8,
        ))
        story.append(Paragraph(
            "Generated by Trainer Insights  •  21-parameter assessment model",
            self.styles["footer"],
        ))

        doc.build(story, onFirstPage=self._add_page_number,
                  onLaterPages=self._add_page_number)
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # SECTIONS
    # ------------------------------------------------------------------

    def _render_summary(self, story: list, stats: TrainerStats, overall_average: float):
        story.append(Paragraph("Summary", self.styles["h2"]))

        best = stats.best_parameter
        worst = stats.worst_parameter
        rows = [
            ["Overall Average", self._format_score(overall_average)],
            ["This Month", self._format_score(stats.current_month_average)],
            ["Assessments", str(stats.total_assessments)],
            ["Strongest Parameter",
             f"{best.label} ({best.average:.2f})" if best else "—"],
            ["Focus Parameter",
             f"{worst.label} ({worst.average:.2f})" if worst else "—"],
            ["Last Assessed",
             stats.last_assessment_date.strftime("%B %d, %Y")
             if stats.last_assessment_date else "—"],
        ]
        table = Table(rows, colWidths=[2.2 * inch, 4.2 * inch])
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTNAME", (1, 0), (1, -1), "Helvetica"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("TEXTCOLOR", (0, 0), (-1, -1), BRAND_TEXT),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
            ("TOPPADDING", (0, 0), (-1, -1), 5),
            ("LINEBELOW", (0, 0), (-1, -2), 0.5, colors.HexColor("#e2e8f0")),
        ]))
        story.append(table)

    def _render_level(self, story: list, level: LevelProgress):
        story.append(Paragraph("Level & XP", self.styles["h2"]))
        if level.xp_for_next_level:
            progress = (f"{level.level_xp} / {level.xp_for_next_level} XP to next level "
                        f"({level.progress_percent:.0f}%)")
        else:
            progress = "Maximum level reached"
        story.append(Paragraph(
            f"<b>Level {level.level}: {self._safe(level.name)}</b>  •  "
            f"{level.total_xp} XP total  •  {progress}",
            self.styles["body"],
        ))

    def _render_category_table(self, story: list, averages: Sequence[CategoryAverage]):
        story.append(Paragraph("Category Scores", self.styles["h2"]))

        table_data = [["Category", "Average", "Ratings", "Status"]]
        for avg in averages:
            if avg.count:
                table_data.append([
                    avg.name, f"{avg.average:.2f}", str(avg.count),
                    self._get_status_text(avg.average),
                ])
            else:
                table_data.append([avg.name, "—", "0", "—"])

        table = Table(table_data, colWidths=[3.0 * inch, 1.1 * inch, 1.0 * inch, 1.3 * inch])
        table.setStyle(_table_style(len(table_data)))
        story.append(table)
        story.append(Spacer(1, 0.1 * inch))

    def _render_parameter_table(self, story: list, averages: Sequence[ParameterAverage]):
        if not averages:
            return
        story.append(Paragraph("Parameter Scores", self.styles["h2"]))

        table_data = [["Parameter", "Average", "Ratings", "Status"]]
        for avg in averages:
            if avg.count:
                table_data.append([
                    avg.label, f"{avg.average:.2f}", str(avg.count),
                    self._get_status_text(avg.average),
                ])
            else:
                table_data.append([avg.label, "—", "0", "—"])

        table = Table(table_data, colWidths=[3.0 * inch, 1.1 * inch, 1.0 * inch, 1.3 * inch])
        table.setStyle(_table_style(len(table_data)))
        story.append(table)

    def _render_alerts(self, story: list, alerts: Sequence[TrendAlert]):
        story.append(Paragraph("Alerts", self.styles["h2"]))
        if not alerts:
            story.append(Paragraph("No active alerts.", self.styles["body_italic"]))
            return

        for alert in alerts:
            color = SEVERITY_COLORS.get(alert.severity, BRAND_MUTED).hexval()[2:]
            story.append(Paragraph(
                f"<font color='#{color}'><b>{alert.severity.upper()}</b></font>  "
                f"{self._safe(alert.message)}",
                self.styles["bullet"],
                bulletText="•",
            ))

    def _render_badges(self, story: list, badges: Sequence[Badge]):
        story.append(Paragraph("Badges", self.styles["h2"]))
        if not badges:
            story.append(Paragraph("No badges earned yet.", self.styles["body_italic"]))
            return

        for badge in badges:
            story.append(Paragraph(
                f"<b>{self._safe(badge.name)}</b> ({badge.rarity}): "
                f"{self._safe(badge.description)}",
                self.styles["bullet"],
                bulletText="•",
            ))

    # ------------------------------------------------------------------
    # HELPERS
    # ------------------------------------------------------------------

    @staticmethod
    def _get_status_text(average: float) -> str:
        if average >= 4.0:
            return "On Target"
        if average >= 3.0:
            return "Near Target"
        return "Needs Focus"

    @staticmethod
    def _format_score(value: float) -> str:
        return f"{value:.2f} / 5.00" if value else "—"

    @staticmethod
    def _safe(text: str) -> str:
        """Escape text for ReportLab's XML-based paragraph parser."""
        text = text.replace("&", "&amp;")
        text = text.replace("<", "&lt;")
        text = text.replace(">", "&gt;")
        return text

    @staticmethod
    def _add_page_number(canvas, doc):
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(BRAND_MUTED)
        canvas.drawCentredString(
            letter[0] / 2, 0.4 * inch,
            f"Page {canvas.getPageNumber()}",
        )
        canvas.restoreState()
