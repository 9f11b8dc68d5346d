"""
Finance CRM - Client Package

Client-side contract of a personal finance dashboard: authenticate,
show income/expense/balance totals, and create, list, filter and delete
movements against a remote HTTP API.

DESIGN PRINCIPLES:
1. The remote API is the system of record
2. Refetch after every mutation, never merge speculatively
3. A failed load never overwrites the last good data
4. Every step is auditable
5. Session storage is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance CRM Team"
