"""
Net Worth - Source Package

Aggregates a user's assets and liabilities from independently owned record
services into one consistent, identity-scoped net worth snapshot.

DESIGN PRINCIPLES:
1. Every visible snapshot is a fully recomputed whole
2. One identity's figures are never shown to another
3. A failing source degrades its own category only
4. Every step is auditable
5. Every external collaborator is swappable
"""

__version__ = "1.0.0"
__author__ = "Net Worth Team"
