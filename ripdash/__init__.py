"""
RIP Dashboard — read-only analytics core for the class registration sheet.

Loads the published registration log and parameters sheet, normalizes them
into typed records, and computes the derived views the dashboards render:
classification buckets, balance buckets, per-student statements and the
record filter.
"""
__version__ = "1.0.0"
