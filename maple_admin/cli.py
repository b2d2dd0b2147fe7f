#!/usr/bin/env python3
"""
Command-line entry point for the Maple Tours admin client.

Usage:
    maple-admin login
    maple-admin dashboard --export report.xlsx
    maple-admin bookings list --status pending
    maple-admin contacts advance <id>

Each command is one API call (or a handful for the dashboard). Results go to
stdout. Failures are printed to stderr and reflected in the exit code.
"""

import argparse
import getpass
import json
import logging
import sys
from typing import Callable, List, Optional, Type, TypeVar

import requests

from .api import (
    AuthAPI,
    AvailabilityAPI,
    BookingsAPI,
    ContactsAPI,
    MapleAPIClient,
    PackagesAPI,
    TestimonialsAPI,
    UsersAPI,
)
from .auth import AdminAuthenticator, TokenStore
from .config.settings import ConfigurationError, Settings, setup_logging_redaction
from .dashboard import ViewRenderer, collect_dashboard_stats, export_dashboard_report
from .domain.booking import BOOKING_STATUSES, PAYMENT_STATUSES
from .domain.contact import CONTACT_STATUSES
from .domain.package import DEFAULT_CURRENCY, Package
from .exceptions import (
    MapleAPIError,
    MapleAuthenticationError,
    NotAuthenticatedError,
    ValidationError,
)
from .utils.logger import configure_level, get_logger

logger = get_logger(__name__)

ClientT = TypeVar("ClientT", bound=MapleAPIClient)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_LOGGED_IN = 2


class AdminContext:
    """Everything a command handler needs, built once per invocation."""

    def __init__(self, settings: Settings, http_session: Optional[requests.Session] = None):
        self.settings = settings
        self.http_session = http_session or requests.Session()
        self.token_store = TokenStore(settings.token_path)
        self.authenticator = AdminAuthenticator(
            settings, self.token_store, auth_api=self.client(AuthAPI)
        )
        self.views = ViewRenderer()
        self.redaction = None

    def client(self, client_cls: Type[ClientT]) -> ClientT:
        return client_cls(
            session=self.http_session,
            base_url=self.settings.api_base_url,
            token_store=self.token_store,
            timeout=self.settings.api_timeout,
        )


def _out(message: str) -> None:
    print(message)


def _err(message: str) -> None:
    print(message, file=sys.stderr)


def _confirm(question: str) -> bool:
    answer = input(f"{question} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


# ------------------------------------------------------------------ #
# Session commands
# ------------------------------------------------------------------ #


def cmd_login(ctx: AdminContext, args: argparse.Namespace) -> int:
    existing = ctx.token_store.get_session()
    if existing and not args.force:
        _out(f"Already logged in as {existing.email or 'admin'}")
        return EXIT_OK

    email = args.email or input("Email: ").strip()
    password = args.password or getpass.getpass("Password: ")
    session = ctx.authenticator.login(email, password, force=True)
    if ctx.redaction is not None:
        ctx.redaction.add_secret(session.token)
    _out(f"Logged in as {session.email}")
    return EXIT_OK


def cmd_logout(ctx: AdminContext, args: argparse.Namespace) -> int:
    if not ctx.authenticator.logout():
        _err("Error: could not remove the stored session")
        return EXIT_ERROR
    _out("Logged out")
    return EXIT_OK


# ------------------------------------------------------------------ #
# Dashboard
# ------------------------------------------------------------------ #


def cmd_dashboard(ctx: AdminContext, args: argparse.Namespace) -> int:
    stats = collect_dashboard_stats(
        ctx.client(PackagesAPI),
        ctx.client(UsersAPI),
        ctx.client(TestimonialsAPI),
        ctx.client(ContactsAPI),
        ctx.client(BookingsAPI),
    )
    _out(ctx.views.render("dashboard", stats=stats, currency=DEFAULT_CURRENCY))

    if stats.error:
        _err(f"Error: {stats.error}")
        if args.export:
            _err("Error: Failed to export report")
        return EXIT_ERROR

    if args.export:
        try:
            path = export_dashboard_report(stats, args.export)
        except OSError as e:
            logger.error("Export error", operation="export_dashboard_report", error=str(e))
            _err(f"Error: Failed to export report: {e}")
            return EXIT_ERROR
        _out(f"Report exported successfully: {path}")
    return EXIT_OK


# ------------------------------------------------------------------ #
# Packages
# ------------------------------------------------------------------ #


def _load_package_file(path: str) -> Package:
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except FileNotFoundError as e:
        raise ValidationError(f"Package file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Package file is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise ValidationError("Package file must contain a JSON object")
    return Package.from_dict(document)


def cmd_packages_list(ctx: AdminContext, args: argparse.Namespace) -> int:
    packages = ctx.client(PackagesAPI).list_packages()
    _out(ctx.views.render("packages", packages=packages))
    return EXIT_OK


def cmd_packages_show(ctx: AdminContext, args: argparse.Namespace) -> int:
    package = ctx.client(PackagesAPI).get_package(args.package_id)
    _out(ctx.views.render("package_detail", package=package))
    return EXIT_OK


def cmd_packages_create(ctx: AdminContext, args: argparse.Namespace) -> int:
    package = _load_package_file(args.file)
    saved = ctx.client(PackagesAPI).create_package(
        package, images=args.image or [], brochure=args.brochure
    )
    _out(f"Package created successfully ({saved.package_id or saved.title})")
    return EXIT_OK


def cmd_packages_update(ctx: AdminContext, args: argparse.Namespace) -> int:
    package = _load_package_file(args.file)
    ctx.client(PackagesAPI).update_package(
        args.package_id, package, images=args.image or [], brochure=args.brochure
    )
    _out("Package updated successfully")
    return EXIT_OK


def cmd_packages_delete(ctx: AdminContext, args: argparse.Namespace) -> int:
    if not args.yes and not _confirm("Are you sure you want to delete this package?"):
        _out("Cancelled")
        return EXIT_OK
    ctx.client(PackagesAPI).delete_package(args.package_id)
    _out("Package deleted successfully")
    return EXIT_OK


# ------------------------------------------------------------------ #
# Bookings
# ------------------------------------------------------------------ #


def cmd_bookings_list(ctx: AdminContext, args: argparse.Namespace) -> int:
    bookings = ctx.client(BookingsAPI).list_bookings(status=args.status)
    _out(ctx.views.render("bookings", bookings=bookings))
    return EXIT_OK


def cmd_bookings_confirm(ctx: AdminContext, args: argparse.Namespace) -> int:
    ctx.client(BookingsAPI).confirm_booking(args.booking_id)
    _out(f"Booking {args.booking_id} confirmed")
    return EXIT_OK


def cmd_bookings_cancel(ctx: AdminContext, args: argparse.Namespace) -> int:
    ctx.client(BookingsAPI).cancel_booking(args.booking_id)
    _out(f"Booking {args.booking_id} cancelled")
    return EXIT_OK


def cmd_bookings_toggle(ctx: AdminContext, args: argparse.Namespace) -> int:
    api = ctx.client(BookingsAPI)
    booking = api.find_booking(args.booking_id)
    status = api.toggle_confirmation(booking)
    _out(f"Booking {args.booking_id} is now {status}")
    return EXIT_OK


def cmd_bookings_payment(ctx: AdminContext, args: argparse.Namespace) -> int:
    ctx.client(BookingsAPI).set_payment_status(args.booking_id, args.status)
    _out(f"Payment status for booking {args.booking_id} set to {args.status}")
    return EXIT_OK


# ------------------------------------------------------------------ #
# Contacts
# ------------------------------------------------------------------ #


def cmd_contacts_list(ctx: AdminContext, args: argparse.Namespace) -> int:
    contacts = ctx.client(ContactsAPI).list_contacts(status=args.status)
    _out(ctx.views.render("contacts", contacts=contacts))
    return EXIT_OK


def cmd_contacts_status(ctx: AdminContext, args: argparse.Namespace) -> int:
    ctx.client(ContactsAPI).update_status(args.contact_id, args.status)
    _out("Status updated successfully")
    return EXIT_OK


def cmd_contacts_advance(ctx: AdminContext, args: argparse.Namespace) -> int:
    api = ctx.client(ContactsAPI)
    contact = api.find_contact(args.contact_id)
    previous = contact.status
    status = api.advance_status(contact)
    _out(f"Status updated successfully ({previous} -> {status})")
    return EXIT_OK


# ------------------------------------------------------------------ #
# Testimonials
# ------------------------------------------------------------------ #


def cmd_testimonials_list(ctx: AdminContext, args: argparse.Namespace) -> int:
    testimonials = ctx.client(TestimonialsAPI).list_testimonials(pending_only=args.pending)
    _out(ctx.views.render("testimonials", testimonials=testimonials))
    return EXIT_OK


def cmd_testimonials_approve(ctx: AdminContext, args: argparse.Namespace) -> int:
    ctx.client(TestimonialsAPI).approve(args.testimonial_id)
    _out("Testimonial approved successfully")
    return EXIT_OK


def cmd_testimonials_reject(ctx: AdminContext, args: argparse.Namespace) -> int:
    ctx.client(TestimonialsAPI).reject(args.testimonial_id)
    _out("Testimonial rejected successfully")
    return EXIT_OK


def cmd_testimonials_delete(ctx: AdminContext, args: argparse.Namespace) -> int:
    if not args.yes and not _confirm("Are you sure you want to delete this testimonial?"):
        _out("Cancelled")
        return EXIT_OK
    ctx.client(TestimonialsAPI).delete_testimonial(args.testimonial_id)
    _out("Testimonial deleted successfully")
    return EXIT_OK


# ------------------------------------------------------------------ #
# Users, availability, settings
# ------------------------------------------------------------------ #


def cmd_users_list(ctx: AdminContext, args: argparse.Namespace) -> int:
    users = ctx.client(UsersAPI).list_users()
    _out(ctx.views.render("users", users=users))
    return EXIT_OK


def cmd_availability_list(ctx: AdminContext, args: argparse.Namespace) -> int:
    dates = ctx.client(AvailabilityAPI).list_available_dates()
    _out(ctx.views.render("availability", dates=dates))
    return EXIT_OK


def cmd_availability_set(ctx: AdminContext, args: argparse.Namespace) -> int:
    message = ctx.client(AvailabilityAPI).set_availability(
        args.date, is_available=not args.unavailable
    )
    _out(message)
    return EXIT_OK


def cmd_settings_show(ctx: AdminContext, args: argparse.Namespace) -> int:
    admin_settings = ctx.settings.load_admin_settings()
    _out(ctx.views.render("settings", settings=admin_settings))
    return EXIT_OK


def cmd_settings_set(ctx: AdminContext, args: argparse.Namespace) -> int:
    admin_settings = ctx.settings.load_admin_settings()
    if args.admin_email is not None:
        admin_settings.admin_email = args.admin_email.strip()
    if args.booking_confirmations is not None:
        admin_settings.send_booking_confirmations = args.booking_confirmations == "on"
    ctx.settings.save_admin_settings(admin_settings)
    _out("Settings updated!")
    return EXIT_OK


# ------------------------------------------------------------------ #
# Parser
# ------------------------------------------------------------------ #


def _command(
    subparsers: "argparse._SubParsersAction",
    name: str,
    handler: Callable[[AdminContext, argparse.Namespace], int],
    help_text: str,
    requires_login: bool = True,
) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, help=help_text)
    parser.set_defaults(handler=handler, requires_login=requires_login)
    return parser


def _attachment_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--file", required=True, help="Package JSON (packageData format)")
    parser.add_argument(
        "--image", action="append", metavar="PATH", help="Image to upload (up to 3)"
    )
    parser.add_argument("--brochure", metavar="PATH", help="PDF brochure to upload")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maple-admin", description="Maple Tours administration client"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Emit debug logs to stderr")
    groups = parser.add_subparsers(dest="group", metavar="COMMAND")
    groups.required = True

    login = _command(groups, "login", cmd_login, "Log in and store the admin token", False)
    login.add_argument("--email")
    login.add_argument("--password", help="Prompted for when omitted")
    login.add_argument("--force", action="store_true", help="Log in again even if logged in")
    _command(groups, "logout", cmd_logout, "Forget the stored admin token", False)

    dashboard = _command(groups, "dashboard", cmd_dashboard, "Show headline statistics")
    dashboard.add_argument("--export", metavar="PATH", help="Also write an .xlsx report")

    packages = groups.add_parser("packages", help="Manage tour packages")
    package_cmds = packages.add_subparsers(dest="action", metavar="ACTION")
    package_cmds.required = True
    _command(package_cmds, "list", cmd_packages_list, "List packages")
    show = _command(package_cmds, "show", cmd_packages_show, "Show one package")
    show.add_argument("package_id")
    create = _command(package_cmds, "create", cmd_packages_create, "Create a package")
    _attachment_args(create)
    update = _command(package_cmds, "update", cmd_packages_update, "Replace a package")
    update.add_argument("package_id")
    _attachment_args(update)
    delete = _command(package_cmds, "delete", cmd_packages_delete, "Delete a package")
    delete.add_argument("package_id")
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    bookings = groups.add_parser("bookings", help="Review bookings")
    booking_cmds = bookings.add_subparsers(dest="action", metavar="ACTION")
    booking_cmds.required = True
    listing = _command(booking_cmds, "list", cmd_bookings_list, "List bookings")
    listing.add_argument("--status", choices=BOOKING_STATUSES)
    for name, handler, help_text in (
        ("confirm", cmd_bookings_confirm, "Confirm a booking"),
        ("cancel", cmd_bookings_cancel, "Cancel a booking"),
        ("toggle", cmd_bookings_toggle, "Confirm, or return a confirmed booking to pending"),
    ):
        _command(booking_cmds, name, handler, help_text).add_argument("booking_id")
    payment = _command(booking_cmds, "payment", cmd_bookings_payment, "Set payment status")
    payment.add_argument("booking_id")
    payment.add_argument("status", choices=PAYMENT_STATUSES)

    contacts = groups.add_parser("contacts", help="Triage contact-form submissions")
    contact_cmds = contacts.add_subparsers(dest="action", metavar="ACTION")
    contact_cmds.required = True
    listing = _command(contact_cmds, "list", cmd_contacts_list, "List submissions")
    listing.add_argument("--status", choices=CONTACT_STATUSES)
    status = _command(contact_cmds, "status", cmd_contacts_status, "Set a submission's status")
    status.add_argument("contact_id")
    status.add_argument("status", choices=CONTACT_STATUSES)
    advance = _command(
        contact_cmds, "advance", cmd_contacts_advance, "Move to the next status (new/read/responded)"
    )
    advance.add_argument("contact_id")

    testimonials = groups.add_parser("testimonials", help="Moderate testimonials")
    testimonial_cmds = testimonials.add_subparsers(dest="action", metavar="ACTION")
    testimonial_cmds.required = True
    listing = _command(testimonial_cmds, "list", cmd_testimonials_list, "List testimonials")
    listing.add_argument("--pending", action="store_true", help="Only unapproved ones")
    for name, handler, help_text in (
        ("approve", cmd_testimonials_approve, "Approve a testimonial"),
        ("reject", cmd_testimonials_reject, "Withdraw approval"),
    ):
        _command(testimonial_cmds, name, handler, help_text).add_argument("testimonial_id")
    delete = _command(testimonial_cmds, "delete", cmd_testimonials_delete, "Delete a testimonial")
    delete.add_argument("testimonial_id")
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    users = groups.add_parser("users", help="List registered users")
    user_cmds = users.add_subparsers(dest="action", metavar="ACTION")
    user_cmds.required = True
    _command(user_cmds, "list", cmd_users_list, "List users")

    availability = groups.add_parser("availability", help="Open or close booking dates")
    availability_cmds = availability.add_subparsers(dest="action", metavar="ACTION")
    availability_cmds.required = True
    _command(availability_cmds, "list", cmd_availability_list, "List available dates", False)
    set_day = _command(availability_cmds, "set", cmd_availability_set, "Set one date", False)
    set_day.add_argument("date", help="YYYY-MM-DD")
    set_day.add_argument("--unavailable", action="store_true", help="Close the date instead")

    settings = groups.add_parser("settings", help="Admin settings")
    settings_cmds = settings.add_subparsers(dest="action", metavar="ACTION")
    settings_cmds.required = True
    _command(settings_cmds, "show", cmd_settings_show, "Show settings", False)
    set_settings = _command(settings_cmds, "set", cmd_settings_set, "Change settings", False)
    set_settings.add_argument("--admin-email")
    set_settings.add_argument("--booking-confirmations", choices=("on", "off"))

    return parser


def main(argv: Optional[List[str]] = None, http_session: Optional[requests.Session] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if args.verbose:
        configure_level(logging.DEBUG)

    try:
        settings = Settings()
    except ConfigurationError as e:
        _err(f"Error: {e}")
        return EXIT_ERROR

    ctx = AdminContext(settings, http_session=http_session)
    ctx.redaction = setup_logging_redaction(settings)
    ctx.redaction.add_secret(ctx.token_store.get_token())

    try:
        if args.requires_login:
            ctx.authenticator.require_session()
        return args.handler(ctx, args)
    except NotAuthenticatedError as e:
        _err(str(e))
        return EXIT_NOT_LOGGED_IN
    except MapleAuthenticationError as e:
        if args.handler is cmd_login:
            _err(f"Error: {e}")
        else:
            ctx.authenticator.invalidate(e)
            _err(f"Error: {e}. Your session has expired; run `maple-admin login` again")
        return EXIT_ERROR
    except (MapleAPIError, ConfigurationError, ValidationError, ValueError, OSError) as e:
        _err(f"Error: {e}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        _err("Aborted")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
