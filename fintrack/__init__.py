"""
FinTrack - Source Package

A command-line personal finance ledger: incomes, expenses,
per-category budgets and CSV export.

DESIGN PRINCIPLES:
1. Record lists are always newest first
2. Validate before mutating, never after
3. Edits either fully apply or leave the ledger untouched
4. The core returns data; the console decides how to show it
"""

__version__ = "1.0.0"
__author__ = "FinTrack Team"
