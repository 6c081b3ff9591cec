"""
BizManager (Local Hisab) - Source Package

A small-business bookkeeping assistant for recording credit/debit
transactions across accounts and branch locations.

DESIGN PRINCIPLES:
1. Records are parsed at the storage boundary, never trusted
2. Summaries are derived on every load, never persisted
3. Validation messages are specific to the failure
4. Imports run row by row, in file order
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "BizManager Team"
