"""Hotel Management System - interactive text menu"""
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Tuple

from application.services import (
    AvailabilityService,
    PaymentService,
    ReportingService,
    ReservationService,
)
from application.store import HotelStore
from domain.entities import Guest, Room
from domain.enums import PaymentMethod
from domain.errors import HotelError
from domain.validation import parse_date, sanitize_input
from infrastructure.backup import BackupManager
from infrastructure.config import Settings, load_settings
from infrastructure.logging_setup import setup_logging
from infrastructure.reports import export_occupancy_report
from infrastructure.repositories.json_file_repositories import json_file_repositories

logger = logging.getLogger(__name__)

RULE = "=" * 50
LINE = "-" * 50

Menu = Dict[str, Tuple[str, Callable[[], None]]]


class QuitRequested(Exception):
    """Input ended (EOF / Ctrl-C) while a prompt was waiting"""


class HotelApplication:
    """Menu-driven front desk over the hotel services"""

    def __init__(
        self,
        store: HotelStore,
        backups: Optional[BackupManager] = None,
        report_dir: str = "reports",
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        self.store = store
        self.availability = AvailabilityService(store)
        self.reservations = ReservationService(store, self.availability)
        self.payments = PaymentService(store)
        self.reporting = ReportingService(store)
        self.backups = backups
        self.report_dir = report_dir
        self._input = input_fn
        self._out = output

    # ==================== MAIN LOOP ====================

    def run(self) -> int:
        self._out("🏨 Hotel Booking Management System 🏨")
        self._out(RULE)
        self.initialize_sample_data()

        main_menu: Menu = {
            "1": ("🏠 Room Management", lambda: self._submenu("🏠 ROOM MANAGEMENT", self._room_menu())),
            "2": ("👥 Guest Management", lambda: self._submenu("👥 GUEST MANAGEMENT", self._guest_menu())),
            "3": ("📅 Reservation Management", lambda: self._submenu("📅 RESERVATION MANAGEMENT", self._reservation_menu())),
            "4": ("💰 Payment Management", lambda: self._submenu("💰 PAYMENT MANAGEMENT", self._payment_menu())),
            "5": ("📊 Reports & Search", lambda: self._submenu("📊 REPORTS & SEARCH", self._report_menu())),
        }

        try:
            while True:
                self._out("\n" + RULE)
                self._out("📋 MAIN MENU")
                self._out(RULE)
                for key, (label, _) in main_menu.items():
                    self._out(f"{key}. {label}")
                self._out("0. 🚪 Exit")
                self._out(RULE)

                choice = self._read("Enter your choice: ").strip()
                if choice == "0":
                    break
                entry = main_menu.get(choice)
                if entry is None:
                    self._out("❌ Invalid choice. Please try again.")
                    continue
                entry[1]()
                self._auto_backup()
        except QuitRequested:
            pass

        self._out("Thank you for using Hotel Management System!")
        return 0

    def initialize_sample_data(self) -> None:
        """Seed a few rooms and guests into an empty store"""
        if not self.store.list_rooms():
            for room in (Room.create("R1", "101", 2), Room.create("R2", "102", 4),
                         Room.create("R3", "201", 1), Room.create("R4", "202", 3)):
                self.store.add_room(room)
            self._out("✅ Initialized with sample rooms")

        if not self.store.list_guests():
            john = Guest.create("G1", "John", "Doe", "john.doe@email.com", "5551234567")
            jane = Guest.create("G2", "Jane", "Smith", "jane.smith@email.com", "5555678901")
            jane.set_vip_status(True)
            self.store.add_guest(john)
            self.store.add_guest(jane)
            self._out("✅ Initialized with sample guests")

    # ==================== MENUS ====================

    def _room_menu(self) -> Menu:
        return {
            "1": ("Add Room", self.add_room),
            "2": ("List All Rooms", self.list_rooms),
            "3": ("Search Rooms by Capacity", self.search_rooms_by_capacity),
            "4": ("Remove Room", self.remove_room),
        }

    def _guest_menu(self) -> Menu:
        return {
            "1": ("Add Guest", self.add_guest),
            "2": ("List All Guests", self.list_guests),
            "3": ("Search Guests by Name", self.search_guests),
            "4": ("List VIP Guests", self.list_vip_guests),
            "5": ("Update Guest VIP Status", self.update_vip_status),
        }

    def _reservation_menu(self) -> Menu:
        return {
            "1": ("Create Reservation", self.create_reservation),
            "2": ("List All Reservations", self.list_reservations),
            "3": ("List Reservations by Room", self.list_reservations_by_room),
            "4": ("List Reservations by Guest", self.list_reservations_by_guest),
            "5": ("Check Room Availability", self.check_availability),
            "6": ("Cancel Reservation", self.cancel_reservation),
        }

    def _payment_menu(self) -> Menu:
        return {
            "1": ("Add Payment", self.add_payment),
            "2": ("List Payments by Reservation", self.list_payments_by_reservation),
            "3": ("List Payments by Guest", self.list_payments_by_guest),
            "4": ("Get Total Payments for Reservation", self.total_payments),
        }

    def _report_menu(self) -> Menu:
        return {
            "1": ("Generate Occupancy Report", self.occupancy_report),
            "2": ("Export Occupancy Report", self.export_report),
            "3": ("Search Available Rooms", self.search_available_rooms),
            "4": ("System Statistics", self.show_statistics),
            "5": ("Create Backup Now", self.create_backup),
        }

    def _submenu(self, title: str, menu: Menu) -> None:
        self._out("\n" + title)
        for key, (label, _) in menu.items():
            self._out(f"{key}. {label}")
        self._out("0. Back to Main Menu")

        choice = self._read("Choice: ").strip()
        if choice == "0":
            self._out("Returning to main menu...")
            return
        entry = menu.get(choice)
        if entry is None:
            self._out("❌ Invalid choice")
            return

        label, action = entry
        failed_saves = self.store.failed_saves
        try:
            action()
        except HotelError as e:
            self._out(f"❌ {label} failed: {e.message}")
        except ValueError as e:
            self._out(f"❌ {label} failed: {e}")
        if self.store.failed_saves > failed_saves:
            self._report_persistence_problem()

    # ==================== ROOMS ====================

    def add_room(self) -> None:
        room_id = self._ask("Room ID: ")
        number = self._ask("Room Number: ")
        capacity = self._ask_int("Capacity: ")
        room = self.store.add_room(Room.create(room_id, number, capacity))
        self._out(f"✅ Room added successfully: {room}")

    def list_rooms(self) -> None:
        self._print_list("📋 ALL ROOMS:", self.store.list_rooms(), "No rooms found.")

    def search_rooms_by_capacity(self) -> None:
        min_capacity = self._ask_int("Minimum capacity: ")
        self._print_list(
            f"📋 ROOMS WITH CAPACITY >= {min_capacity}:",
            self.store.search_rooms_by_capacity(min_capacity),
            f"No rooms found with capacity >= {min_capacity}",
        )

    def remove_room(self) -> None:
        room_id = self._ask("Room ID to remove: ")
        if self.store.remove_room(room_id):
            self._out("✅ Room removed successfully")
        else:
            self._out("❌ Room not found")

    # ==================== GUESTS ====================

    def add_guest(self) -> None:
        guest = Guest.create(
            self._ask("Guest ID: "),
            self._ask("First Name: "),
            self._ask("Last Name: "),
            self._ask("Email: "),
            self._ask("Phone: "),
        )
        self.store.add_guest(guest)
        self._out(f"✅ Guest added successfully: {guest}")

    def list_guests(self) -> None:
        self._print_list("📋 ALL GUESTS:", self.store.list_guests(), "No guests found.")

    def search_guests(self) -> None:
        name = self._read("Search name: ").strip()
        self._print_list("📋 SEARCH RESULTS:", self.store.search_guests_by_name(name), f"No guests found matching: {name}")

    def list_vip_guests(self) -> None:
        self._print_list("⭐ VIP GUESTS:", self.store.list_vip_guests(), "No VIP guests found.")

    def update_vip_status(self) -> None:
        guest = self.store.get_guest(self._ask("Guest ID: "))
        if guest is None:
            self._out("❌ Guest not found")
            return
        answer = self._read("Set VIP status (true/false): ").strip().lower()
        guest.set_vip_status(answer in ("true", "yes", "y", "1"))
        guest = self.store.update_guest(guest)
        self._out(f"✅ VIP status updated: {guest}")

    # ==================== RESERVATIONS ====================

    def create_reservation(self) -> None:
        reservation = self.reservations.create_reservation(
            self._ask("Reservation ID: "),
            self._ask("Room ID: "),
            self._ask("Guest ID: "),
            self._ask_date("Start Date (YYYY-MM-DD): "),
            self._ask_date("End Date (YYYY-MM-DD): "),
            self._ask_int("Party Size: "),
        )
        self._out(f"✅ Reservation created successfully: {reservation}")

    def list_reservations(self) -> None:
        self._print_list("📋 ALL RESERVATIONS:", self.reservations.list_reservations(), "No reservations found.")

    def list_reservations_by_room(self) -> None:
        room_id = self._ask("Room ID: ")
        self._print_list(
            f"📋 RESERVATIONS FOR ROOM {room_id}:",
            self.reservations.list_reservations_for_room(room_id),
            f"No reservations found for room: {room_id}",
        )

    def list_reservations_by_guest(self) -> None:
        guest_id = self._ask("Guest ID: ")
        self._print_list(
            f"📋 RESERVATIONS FOR GUEST {guest_id}:",
            self.reservations.list_reservations_for_guest(guest_id),
            f"No reservations found for guest: {guest_id}",
        )

    def check_availability(self) -> None:
        room_id = self._ask("Room ID (or 'all' for all rooms): ")
        start_date = self._ask_date("Start Date (YYYY-MM-DD): ")
        end_date = self._ask_date("End Date (YYYY-MM-DD): ")

        if room_id.lower() == "all":
            self._print_list(
                "✅ AVAILABLE ROOMS:",
                self.availability.get_available_rooms(start_date, end_date),
                "❌ No rooms available for the specified period",
            )
        elif self.availability.is_room_available(room_id, start_date, end_date):
            self._out("✅ Room is available")
        else:
            self._out("❌ Room is not available")

    def cancel_reservation(self) -> None:
        cancelled = self.reservations.cancel_reservation(self._ask("Reservation ID to cancel: "))
        if cancelled is None:
            self._out("❌ Reservation not found")
        else:
            self._out(f"✅ Reservation cancelled: {cancelled}")

    # ==================== PAYMENTS ====================

    def add_payment(self) -> None:
        payment_id = self._ask("Payment ID: ")
        reservation_id = self._ask("Reservation ID: ")
        guest_id = self._ask("Guest ID: ")
        amount = self._ask_decimal("Amount: ")

        methods = list(PaymentMethod)
        self._out("Payment Methods:")
        self._out("  ".join(f"{i}. {m.value}" for i, m in enumerate(methods, start=1)))
        choice = self._ask_int(f"Choose payment method (1-{len(methods)}): ")
        if not 1 <= choice <= len(methods):
            raise ValueError("Invalid payment method")

        payment = self.payments.record_payment(payment_id, reservation_id, guest_id, amount, methods[choice - 1])
        self._out(f"✅ Payment added successfully: {payment}")

    def list_payments_by_reservation(self) -> None:
        reservation_id = self._ask("Reservation ID: ")
        self._print_list(
            f"📋 PAYMENTS FOR RESERVATION {reservation_id}:",
            self.store.list_payments_for_reservation(reservation_id),
            f"No payments found for reservation: {reservation_id}",
        )

    def list_payments_by_guest(self) -> None:
        guest_id = self._ask("Guest ID: ")
        self._print_list(
            f"📋 PAYMENTS FOR GUEST {guest_id}:",
            self.store.list_payments_for_guest(guest_id),
            f"No payments found for guest: {guest_id}",
        )

    def total_payments(self) -> None:
        reservation_id = self._ask("Reservation ID: ")
        total = self.payments.total_for_reservation(reservation_id)
        self._out(f"💰 Total payments for reservation {reservation_id}: ${total}")

    # ==================== REPORTS ====================

    def occupancy_report(self) -> None:
        report = self.reporting.generate_occupancy_report(
            self._ask_date("Start Date (YYYY-MM-DD): "),
            self._ask_date("End Date (YYYY-MM-DD): "),
        )
        self._out("\n📊 OCCUPANCY REPORT")
        self._out(RULE)
        self._out(f"Report Period: {report.report_period}")
        self._out(f"Total Rooms: {report.total_rooms}")
        self._out(f"Total Reservations: {report.total_reservations}")
        self._out(f"Total Guests: {report.total_guests}")
        self._out(f"Total Payments: {report.total_payments}")
        self._out(f"Occupancy Rate: {report.formatted_rate}")
        self._out(f"Generated At: {report.generated_at}")

    def export_report(self) -> None:
        report = self.reporting.generate_occupancy_report(
            self._ask_date("Start Date (YYYY-MM-DD): "),
            self._ask_date("End Date (YYYY-MM-DD): "),
        )
        path = export_occupancy_report(report, self.report_dir)
        self._out(f"✅ Report exported to {path}")

    def search_available_rooms(self) -> None:
        start_date = self._ask_date("Start Date (YYYY-MM-DD): ")
        end_date = self._ask_date("End Date (YYYY-MM-DD): ")
        self._print_list(
            f"✅ AVAILABLE ROOMS ({start_date} to {end_date}):",
            self.availability.get_available_rooms(start_date, end_date),
            "❌ No rooms available for the specified period",
        )

    def show_statistics(self) -> None:
        stats = self.reporting.system_statistics()
        self._out("\n📈 SYSTEM STATISTICS")
        self._out(RULE)
        self._out(f"Total Rooms: {stats.total_rooms}")
        self._out(f"Total Guests: {stats.total_guests}")
        self._out(f"VIP Guests: {stats.vip_guests}")
        self._out(f"Total Reservations: {stats.total_reservations}")
        self._out(f"Active Reservations: {stats.active_reservations}")
        self._out(f"Total Payments: {stats.total_payments}")
        self._out(f"Completed Revenue: ${stats.completed_revenue}")

    def create_backup(self) -> None:
        if self.backups is None:
            self._out("❌ Backups are not configured")
            return
        path = self.backups.create_backup()
        self._out(f"✅ Backup created in {path}")

    # ==================== INPUT / OUTPUT HELPERS ====================

    def _read(self, prompt: str) -> str:
        try:
            return self._input(prompt)
        except (EOFError, KeyboardInterrupt):
            raise QuitRequested()

    def _ask(self, prompt: str) -> str:
        return sanitize_input(self._read(prompt))

    def _ask_int(self, prompt: str) -> int:
        raw = self._read(prompt).strip()
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"'{raw}' is not a whole number")

    def _ask_decimal(self, prompt: str) -> Decimal:
        raw = self._read(prompt).strip()
        try:
            amount = Decimal(raw)
        except InvalidOperation:
            raise ValueError(f"'{raw}' is not a valid amount")
        if not amount.is_finite():
            raise ValueError(f"'{raw}' is not a valid amount")
        return amount

    def _ask_date(self, prompt: str):
        return parse_date(self._read(prompt))

    def _print_list(self, title: str, items: Iterable, empty_message: str) -> None:
        items = list(items)
        if not items:
            self._out(empty_message)
            return
        self._out("\n" + title)
        self._out(LINE)
        for item in items:
            self._out(str(item))

    def _report_persistence_problem(self) -> None:
        if self.store.last_persistence_error is not None:
            self._out(f"⚠️ Change kept in memory but not saved: {self.store.last_persistence_error.message}")

    def _auto_backup(self) -> None:
        if self.backups is not None:
            self.backups.maybe_backup()


def build_application(settings: Settings, **kwargs) -> HotelApplication:
    """Wire the store, backups and menu from settings, loading persisted data"""
    data_dir = Path(settings.database.data_directory)
    store = HotelStore(json_file_repositories(data_dir))
    store.load()

    backups = BackupManager(
        data_dir,
        settings.database.backup_directory,
        auto_backup=settings.database.auto_backup,
        interval_minutes=settings.database.backup_interval,
    )
    logger.info("Hotel store initialized with data directory: %s", data_dir)
    return HotelApplication(store, backups=backups, report_dir=settings.database.report_directory, **kwargs)


def main() -> int:
    settings = load_settings()
    setup_logging(settings)
    return build_application(settings).run()


if __name__ == "__main__":
    sys.exit(main())
