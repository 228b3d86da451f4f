"""
Pocket Ledger - Source Package

A personal income and expense ledger: record transactions, query them by
type, date window, category, counterparty or free text, summarize any
view, and export expenses to a spreadsheet.

DESIGN PRINCIPLES:
1. One durable key holds the whole collection
2. Bad input is rejected, never silently fixed
3. Every query recomputes from the full collection
4. Storage and sharing are swappable collaborators
"""

__version__ = "1.0.0"
__author__ = "Pocket Ledger Team"
