"""
Fonts, fills, borders and alignments for exported workbooks.
"""
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------
RIP_NAVY = "0F172A"
RIP_BLUE = "1D4ED8"
LIGHT_BLUE = "EFF6FF"
ALTERNATE_ROW = "F8FAFC"
WHITE = "FFFFFF"
BLACK = "000000"
SLATE = "64748B"
POSITIVE = "15803D"
NEGATIVE = "B91C1C"
LIGHT_RED = "FEF2F2"
LIGHT_GREEN = "F0FDF4"

# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------
TITLE_FONT = Font(name="Calibri", size=22, bold=True, color=RIP_NAVY)
SUBTITLE_FONT = Font(name="Calibri", size=11, italic=True, color=SLATE)
SECTION_FONT = Font(name="Calibri", size=13, bold=True, color=RIP_BLUE)
HEADER_FONT = Font(name="Calibri", size=11, bold=True, color=WHITE)
DATA_FONT = Font(name="Calibri", size=10, color=BLACK)
TOTAL_FONT = Font(name="Calibri", size=10, bold=True, color=BLACK)
KPI_VALUE_FONT = Font(name="Calibri", size=24, bold=True, color=RIP_NAVY)
KPI_LABEL_FONT = Font(name="Calibri", size=10, color=SLATE)
POSITIVE_FONT = Font(name="Calibri", size=10, bold=True, color=POSITIVE)
NEGATIVE_FONT = Font(name="Calibri", size=10, bold=True, color=NEGATIVE)

# ---------------------------------------------------------------------------
# Fills
# ---------------------------------------------------------------------------
HEADER_FILL = PatternFill(start_color=RIP_NAVY, end_color=RIP_NAVY, fill_type="solid")
ALTERNATE_FILL = PatternFill(start_color=ALTERNATE_ROW, end_color=ALTERNATE_ROW, fill_type="solid")
TOTAL_FILL = PatternFill(start_color=LIGHT_BLUE, end_color=LIGHT_BLUE, fill_type="solid")
OWES_FILL = PatternFill(start_color=LIGHT_RED, end_color=LIGHT_RED, fill_type="solid")
OWED_FILL = PatternFill(start_color=LIGHT_GREEN, end_color=LIGHT_GREEN, fill_type="solid")

# ---------------------------------------------------------------------------
# Borders / alignment
# ---------------------------------------------------------------------------
THIN_BORDER = Border(
    left=Side(style="thin", color="CBD5E1"),
    right=Side(style="thin", color="CBD5E1"),
    top=Side(style="thin", color="CBD5E1"),
    bottom=Side(style="thin", color="CBD5E1"),
)
TOTAL_BORDER = Border(top=Side(style="medium", color="94A3B8"), bottom=Side(style="medium", color="94A3B8"))

CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")
RIGHT = Alignment(horizontal="right", vertical="center")

# Signed money, no decimals: +1.234 / -1.234 / 0 (separators follow the workbook locale)
MONEY_FORMAT = '+#,##0;-#,##0;0'

HIGHLIGHT_FILLS = {
    "owes": OWES_FILL,
    "owed": OWED_FILL,
}
