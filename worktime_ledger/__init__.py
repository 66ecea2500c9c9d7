"""
Worktime Ledger

Estimates daily active working hours from ActivityWatch and keeps a per-day
hours ledger that several devices can feed and merge into one record.
"""

__version__ = "1.0.0"
__author__ = "Worktime Ledger Team"
