"""
PublicDashboard — Back-office administration of ordered dashboard records.

Dashboards are configuration records that reference a pluggable dashboard
component type. The admin console lists them (paginated), creates, edits,
removes and reorders them by swapping stored positions with a neighbour.
"""

__version__ = "1.0.0"
__all__ = ["engine", "db", "dashboards", "admin"]
