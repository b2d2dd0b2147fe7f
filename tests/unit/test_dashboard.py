"""
Unit tests for dashboard statistics, the Excel report and text views.
"""

from unittest.mock import Mock

import openpyxl
import pytest

from maple_admin.api.bookings import BookingsAPI
from maple_admin.api.contacts import ContactsAPI
from maple_admin.api.packages import PackagesAPI
from maple_admin.api.testimonials import TestimonialsAPI
from maple_admin.api.users import UsersAPI
from maple_admin.config.settings import AdminSettings
from maple_admin.dashboard import (
    DashboardStats,
    ViewRenderer,
    collect_dashboard_stats,
    export_dashboard_report,
    render_table,
)
from maple_admin.domain.booking import Booking
from maple_admin.domain.contact import Contact
from maple_admin.domain.package import Package, Price
from maple_admin.domain.testimonial import Testimonial
from maple_admin.domain.user import User
from maple_admin.exceptions import MapleAPIError, MapleAuthenticationError


def _apis(packages=None, users=None, testimonials=None, contacts=None, bookings=None):
    packages_api = Mock(spec=PackagesAPI)
    packages_api.list_packages.return_value = packages or []
    users_api = Mock(spec=UsersAPI)
    users_api.list_users.return_value = users or []
    testimonials_api = Mock(spec=TestimonialsAPI)
    testimonials_api.list_testimonials.return_value = testimonials or []
    contacts_api = Mock(spec=ContactsAPI)
    contacts_api.list_contacts.return_value = contacts or []
    bookings_api = Mock(spec=BookingsAPI)
    bookings_api.list_bookings.return_value = bookings or []
    return packages_api, users_api, testimonials_api, contacts_api, bookings_api


def _booking(booking_id, status, payment="pending", amount=0):
    return Booking.from_dict(
        {
            "_id": booking_id,
            "package": {"_id": "p1", "title": "Goa Beaches"},
            "startDate": "2025-03-05T00:00:00Z",
            "firstName": "Asha",
            "lastName": "Menon",
            "cardNumber": "4111111111111234",
            "bookingStatus": status,
            "paymentStatus": payment,
            "totalAmount": amount,
        }
    )


@pytest.fixture
def populated_stats():
    apis = _apis(
        packages=[
            Package(title=f"Package {i}", destination="Goa", price=Price(amount=1000), active=i != 0, package_id=f"p{i}")
            for i in range(7)
        ],
        users=[User(user_id="u1"), User(user_id="u2")],
        testimonials=[Testimonial(testimonial_id="t1")],
        contacts=[Contact(contact_id="c1", first_name="Ravi", email="ravi@example.com")],
        bookings=[
            _booking("b1", "confirmed", "completed", 20000),
            _booking("b2", "confirmed", "pending", 15000),
            _booking("b3", "pending"),
            _booking("b4", "cancelled", "completed", 9000),
        ],
    )
    return collect_dashboard_stats(*apis)


class TestCollectDashboardStats:
    def test_counts(self, populated_stats):
        stats = populated_stats

        assert stats.error is None
        assert stats.active_packages == 7
        assert stats.total_users == 2
        assert stats.testimonial_count == 1
        assert stats.contact_form_count == 1
        assert stats.total_bookings == 4
        assert stats.pending_bookings == 1
        assert stats.confirmed_bookings == 2
        assert stats.cancelled_bookings == 1
        assert len(stats.recent_packages) == 5

    def test_revenue_only_counts_confirmed_and_paid(self, populated_stats):
        assert populated_stats.total_revenue == 20000

    def test_failure_zeroes_stats(self):
        apis = _apis()
        apis[3].list_contacts.side_effect = MapleAPIError("boom", status_code=500)

        stats = collect_dashboard_stats(*apis)

        assert stats.error == "Failed to load dashboard statistics: boom"
        assert stats.active_packages == 0
        assert stats.total_bookings == 0

    def test_authentication_failure_propagates(self):
        apis = _apis()
        apis[0].list_packages.side_effect = MapleAuthenticationError("expired", status_code=401)

        with pytest.raises(MapleAuthenticationError):
            collect_dashboard_stats(*apis)


class TestExportDashboardReport:
    def test_workbook_sheets(self, populated_stats, tmp_path):
        path = export_dashboard_report(populated_stats, tmp_path / "report")

        assert path == tmp_path / "report.xlsx"
        workbook = openpyxl.load_workbook(path)
        assert workbook.sheetnames == ["Summary", "Recent Packages", "Recent Contacts", "Recent Bookings"]

        summary = list(workbook["Summary"].iter_rows(values_only=True))
        assert summary[0] == ("Metric", "Count")
        assert ("Active Packages", 7) in summary
        assert ("Total Revenue", 20000) in summary

    def test_card_numbers_masked(self, populated_stats, tmp_path):
        path = export_dashboard_report(populated_stats, tmp_path / "report.xlsx")

        rows = list(openpyxl.load_workbook(path)["Recent Bookings"].iter_rows(values_only=True))
        values = [cell for row in rows for cell in row]
        assert "**** **** **** 1234" in values
        assert "4111111111111234" not in values

    def test_empty_stats(self, tmp_path):
        path = export_dashboard_report(DashboardStats(), tmp_path / "empty.xlsx")
        assert path.exists()


class TestRenderTable:
    def test_alignment(self):
        output = render_table(["ID", "Name"], [["1", "Asha"], ["22", None]])

        assert output.splitlines() == [
            "ID  Name",
            "--  ----",
            "1   Asha",
            "22  -",
        ]

    def test_empty_rows(self):
        assert render_table(["ID"], []).splitlines()[-1] == "(none)"

    def test_long_cells_are_cut(self):
        output = render_table(["Text"], [["x" * 100]])
        assert output.splitlines()[-1] == "x" * 37 + "..."


class TestViewRenderer:
    @pytest.fixture
    def views(self):
        return ViewRenderer()

    def test_all_views_present(self, views):
        views.load_templates()
        assert set(views._templates) >= {
            "dashboard",
            "packages",
            "package_detail",
            "bookings",
            "contacts",
            "testimonials",
            "users",
            "availability",
            "settings",
        }

    def test_unknown_view(self, views):
        with pytest.raises(ValueError, match="not found"):
            views.render("reports")

    def test_dashboard(self, views, populated_stats):
        output = views.render("dashboard", stats=populated_stats, currency="₹")

        assert "Active Packages     7" in output
        assert "₹20,000.00" in output
        assert "Mar 05, 2025" in output

    def test_bookings_mask_cards(self, views):
        output = views.render("bookings", bookings=[_booking("b1", "confirmed")])

        assert "**** **** **** 1234" in output
        assert "4111111111111234" not in output

    def test_empty_contacts(self, views):
        assert "No contact form submissions found." in views.render("contacts", contacts=[])

    def test_testimonial_counts(self, views):
        output = views.render(
            "testimonials",
            testimonials=[
                Testimonial(testimonial_id="t1", name="Anu", approved=True, rating=4),
                Testimonial(testimonial_id="t2", name="Dev"),
            ],
        )

        assert "Total: 2  Approved: 1  Pending: 1" in output
        assert "★★★★☆" in output

    def test_settings(self, views):
        output = views.render("settings", settings=AdminSettings(send_booking_confirmations=False))

        assert "(not set)" in output
        assert "off" in output

    def test_availability(self, views):
        output = views.render("availability", dates=["2025-03-05"])
        assert "Mar 05, 2025" in output
