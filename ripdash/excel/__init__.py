"""Workbook export for student statements."""
from .writer import ExcelWriter
from .statement_report import build_workbook, generate_excel
