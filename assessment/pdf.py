from __future__ import annotations  # Styled PDF rendering for assessment results

from typing import Any, List, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .distribution import WordCountDistribution, bell_curve
from .results import ResultView, ScoreRow

DEJAVU_SANS = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"  # System font
DEJAVU_SANS_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
TRACK = (238, 240, 244)  # Empty score bar
BAND_COLORS = {
    "success": (16, 185, 129),
    "warning": (255, 152, 0),
    "danger": (244, 67, 54),
}


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class ReportPDF(FPDF):  # PDF with banner header and paginated footer
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Assessment Results"
        self.font_regular = "Helvetica"
        self.font_bold = "Helvetica"
        self.supports_unicode = False

    def use_unicode_fonts(self) -> None:  # Register DejaVu when the system ships it
        try:
            self.add_font("DejaVu", "", DEJAVU_SANS)
            self.add_font("DejaVu", "B", DEJAVU_SANS_BOLD)
        except (OSError, RuntimeError):
            return
        self.font_regular = "DejaVu"
        self.font_bold = "DejaVu"
        self.supports_unicode = True

    def prepare_text(self, text: Any) -> str:  # Sanitize text for core fonts
        value = "" if text is None else str(text)
        if self.supports_unicode:
            return value
        cleaned = value.replace("•", "-").replace("’", "'").replace("—", "-")
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, 20, style="F")
            self.set_text_color(255, 255, 255)
            self.set_font(self.font_bold, "B", 16)
            self.set_xy(self.l_margin, 6)
            self.cell(usable, 8, self.prepare_text(self.header_title))
            self.set_text_color(*TEXT)
            self.set_y(26)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self.font_bold, "B", 12)
            self.cell(usable, 6, self.prepare_text(self.header_title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self.font_regular, "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.cell(0, 9, pdf.prepare_text(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _paragraph(pdf: ReportPDF, text: str, *, muted: bool = True) -> None:
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.set_text_color(*(MUTED if muted else TEXT))
    pdf.multi_cell(_effective_width(pdf), 5.5, pdf.prepare_text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(*TEXT)


def _meta_rows(pdf: ReportPDF, rows: Sequence[Tuple[str, str]]) -> None:  # Label/value pairs
    width = _effective_width(pdf)
    for label, value in rows:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.cell(width * 0.3, 6, pdf.prepare_text(label))
        pdf.set_text_color(*TEXT)
        pdf.set_font(pdf.font_bold, "B", 11)
        pdf.multi_cell(width * 0.7, 6, pdf.prepare_text(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _score_bar(pdf: ReportPDF, row: ScoreRow) -> None:  # Draw track and filled portion
    width = _effective_width(pdf)
    y = pdf.get_y() + 1
    pdf.set_fill_color(*TRACK)
    pdf.rect(pdf.l_margin, y, width, 3, style="F")
    filled = width * row.bar_width / 100.0
    if filled > 0:
        pdf.set_fill_color(*BAND_COLORS[row.band])
        pdf.rect(pdf.l_margin, y, filled, 3, style="F")
    pdf.set_y(y + 5)


def _score_section(pdf: ReportPDF, row: ScoreRow, *, suffix: str = "%") -> None:
    width = _effective_width(pdf)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 11)
    pdf.set_text_color(*TEXT)
    pdf.cell(width * 0.7, 7, pdf.prepare_text(row.label))
    pdf.set_text_color(*BAND_COLORS[row.band])
    pdf.cell(width * 0.3, 7, f"{row.score}{suffix}", align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(*TEXT)
    _score_bar(pdf, row)
    if row.comment:
        _paragraph(pdf, row.comment)
    pdf.ln(3)


CHART_HEIGHT = 32  # Bell curve plot height in mm


def chart_points(
    points: Sequence[Tuple[float, float]],
    left: float,
    top: float,
    width: float,
    height: float,
) -> List[Tuple[float, float]]:  # Map (value, density) samples into a page box, y grows downward
    if not points:
        return []
    lo = points[0][0]
    span_x = (points[-1][0] - lo) or 1.0
    peak = max(density for _, density in points) or 1.0
    return [
        (left + (x - lo) / span_x * width, top + height - density / peak * height)
        for x, density in points
    ]


def _bell_curve(pdf: ReportPDF, distribution: WordCountDistribution) -> None:
    """Plot the population word-count curve with a marker at this response."""

    samples = bell_curve(distribution.mean, distribution.std_dev)
    if pdf.get_y() + CHART_HEIGHT + 10 > pdf.page_break_trigger:
        pdf.add_page()
    width = _effective_width(pdf)
    top = pdf.get_y() + 2
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    pdf.line(pdf.l_margin, top + CHART_HEIGHT, pdf.l_margin + width, top + CHART_HEIGHT)
    pdf.set_draw_color(*ACCENT)
    pdf.set_line_width(0.5)
    pdf.polyline(chart_points(samples, pdf.l_margin, top, width, CHART_HEIGHT))

    lo, hi = samples[0][0], samples[-1][0]
    clamped = min(hi, max(lo, distribution.word_count))
    marker_x = pdf.l_margin + (clamped - lo) / ((hi - lo) or 1.0) * width
    pdf.set_draw_color(*BAND_COLORS["warning"])
    pdf.set_line_width(0.6)
    pdf.line(marker_x, top, marker_x, top + CHART_HEIGHT)

    pdf.set_y(top + CHART_HEIGHT + 1)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_regular, "", 8)
    pdf.set_text_color(*MUTED)
    pdf.cell(width / 2, 5, f"{lo:.0f} words")
    pdf.cell(width / 2, 5, f"{hi:.0f} words", align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    caption = f"Your response: {distribution.word_count:g} words, mean {distribution.mean:g}"
    if distribution.sample_size:
        caption += f" across {distribution.sample_size} responses"
    _paragraph(pdf, caption)
    pdf.set_text_color(*TEXT)
    pdf.ln(2)


def _bullets(pdf: ReportPDF, items: List[str]) -> None:
    bullet = "•" if pdf.supports_unicode else "-"
    for item in items:
        _paragraph(pdf, f"{bullet} {item}", muted=False)
    pdf.ln(2)


def generate_assessment_pdf(view: ResultView) -> bytes:  # Build PDF payload for an assessment result
    pdf = ReportPDF()
    pdf.alias_nb_pages()
    pdf.use_unicode_fonts()
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Your Response")
    rows: List[Tuple[str, str]] = []
    if view.question:
        rows.append(("Question", view.question))
    rows.append(("Duration", view.duration))
    if view.word_count is not None:
        rows.append(("Word Count", f"{view.word_count} words"))
    if view.distribution is not None:
        rows.append(("Word Count Percentile", f"{view.distribution.percentile:.1f}%"))
    _meta_rows(pdf, rows)
    if view.distribution is not None:
        _bell_curve(pdf, view.distribution)

    if view.transcript:
        _section_title(pdf, "Transcript")
        _paragraph(pdf, view.transcript)
        pdf.ln(2)

    if view.overall is not None:
        _section_title(pdf, "Overall Assessment")
        _score_section(pdf, view.overall, suffix="/100")
        _paragraph(pdf, "This score represents a weighted average based on the assessment criteria.")
        pdf.ln(2)

    _section_title(pdf, "Criteria")
    for row in view.rows:
        _score_section(pdf, row)

    if view.great_parts:
        _section_title(pdf, "What You Did Well")
        _bullets(pdf, view.great_parts)
    if view.improvement_suggestions:
        _section_title(pdf, "Improvement Suggestions")
        _bullets(pdf, view.improvement_suggestions)
    if view.feedback_summary:
        _section_title(pdf, "Feedback")
        _paragraph(pdf, view.feedback_summary)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "chart_points", "generate_assessment_pdf"]
