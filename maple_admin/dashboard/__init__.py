"""Dashboard module - statistics, report export and text views."""

from .report import export_dashboard_report
from .stats import DashboardStats, collect_dashboard_stats
from .views import ViewRenderer, render_table

__all__ = [
    "DashboardStats",
    "ViewRenderer",
    "collect_dashboard_stats",
    "export_dashboard_report",
    "render_table",
]
