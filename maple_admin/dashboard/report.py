"""
Dashboard report export.

Writes the dashboard numbers and the recent-record lists to an Excel
workbook, one sheet each.
"""

from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from ..utils.logger import get_logger, mask_card_number
from ..utils.timezone import format_display_date
from .stats import DashboardStats

logger = get_logger(__name__)

DEFAULT_REPORT_NAME = "dashboard-report.xlsx"


def _package_rows(stats: DashboardStats) -> List[Dict[str, Any]]:
    return [
        {
            "ID": p.package_id,
            "Title": p.title,
            "Destination": p.destination,
            "Price": str(p.price),
            "Duration": str(p.duration),
            "Active": "Yes" if p.active else "No",
        }
        for p in stats.recent_packages
    ]


def _contact_rows(stats: DashboardStats) -> List[Dict[str, Any]]:
    return [
        {
            "ID": c.contact_id,
            "Name": c.full_name,
            "Email": c.email,
            "Status": c.status,
            "Received": format_display_date(c.created_at),
        }
        for c in stats.recent_contacts
    ]


def _booking_rows(stats: DashboardStats) -> List[Dict[str, Any]]:
    return [
        {
            "ID": b.booking_id,
            "Package": b.package_title or b.package_id,
            "Start Date": format_display_date(b.start_date),
            "Customer": b.customer_name,
            "Card": mask_card_number(b.card_number),
            "Amount": b.total_amount,
            "Booking Status": b.booking_status,
            "Payment Status": b.payment_status,
        }
        for b in stats.recent_bookings
    ]


def export_dashboard_report(
    stats: DashboardStats, path: Union[str, Path] = DEFAULT_REPORT_NAME
) -> Path:
    """
    Write the dashboard report workbook.

    Returns:
        Path of the written file

    Raises:
        OSError: If the file cannot be written
    """
    target = Path(path)
    if target.suffix.lower() != ".xlsx":
        target = target.with_suffix(".xlsx")
    target.parent.mkdir(parents=True, exist_ok=True)

    sheets = {
        "Summary": pd.DataFrame(stats.summary_rows(), columns=["Metric", "Count"]),
        "Recent Packages": pd.DataFrame(_package_rows(stats)),
        "Recent Contacts": pd.DataFrame(_contact_rows(stats)),
        "Recent Bookings": pd.DataFrame(_booking_rows(stats)),
    }

    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        for sheet_name, frame in sheets.items():
            frame.to_excel(writer, sheet_name=sheet_name, index=False)

    logger.info(
        "Dashboard report exported",
        operation="export_dashboard_report",
        context={"path": str(target), "sheets": list(sheets)},
    )
    return target
