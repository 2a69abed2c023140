"""
FinFree - Source Package

A personal finance tracker for a single user: log transactions,
pay down debt, track installments and savings goals, and see the
derived numbers (net worth, savings rate, freedom score, FIRE).

DESIGN PRINCIPLES:
1. All finance math lives in finfree.finance - pure functions only
2. One aggregate state, mutated only through the store
3. Every mutation is committed, and the commit outcome is reported
4. Bad input is reported, never raised
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinFree Team"
