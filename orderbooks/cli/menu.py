"""
Interactive console menu for the order books system.

Collects numbers and ids from the user, calls the OrderBookManager and
prints the outcome. Input and output are injectable so the menu can be
driven from tests.

Usage:
    python -m orderbooks [--log-level DEBUG] [--no-demo]
"""

import argparse
import sys
from decimal import Decimal
from typing import Callable, List, Optional

from orderbooks.cli import report
from orderbooks.config import get_settings
from orderbooks.engine.order_book_manager import OrderBookManager
from orderbooks.events.models import Execution, limit_order, market_order
from orderbooks.events.results import BookResult
from orderbooks.utils.exceptions import BaseOrderBookException
from orderbooks.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)

MAIN_MENU = """MAIN MENU
1 - Add an order to a book
2 - Add an execution to a book
3 - Open a book
4 - Close a book
5 - Process executions for a book
6 - Print statistics
0 - Exit"""

STATISTICS_MENU = """STATISTICS MENU
1 - Print statistics 1
=> for each book: amount of orders, demand, biggest / smallest / earliest / latest orders, limit break-down
2 - Print statistics 2
=> for each book: amount of valid/invalid orders, valid/invalid demand, particular orders, limit break-down, execution quantity and price
3 - Print statistics 3
=> for a given order id: validity, execution quantity, order's price, execution price
0 - Return to main menu"""


class EndOfInput(Exception):
    """Input stream exhausted; the menu exits."""


class Menu:
    """Main and statistics menus over an OrderBookManager."""

    def __init__(self, manager: OrderBookManager,
                 input_fn: Optional[Callable[[str], str]] = None, out=None):
        self.manager = manager
        self._input = input_fn or input
        self._out = out or sys.stdout

    def say(self, text: str = "") -> None:
        print(text, file=self._out)

    # Readers

    def _ask(self, prompt: str) -> str:
        try:
            return self._input(prompt).strip()
        except EOFError:
            raise EndOfInput()

    def read_int(self, prompt: str, max_value: Optional[int] = None, minimum: int = 0) -> int:
        """Ask until the user types an int in [minimum, max_value]."""
        while True:
            raw = self._ask(prompt)
            try:
                value = int(raw)
            except ValueError:
                self.say("Invalid! You need to type an integer!")
                continue
            if value < minimum or (max_value is not None and value > max_value):
                upper = "" if max_value is None else f" and {max_value}"
                self.say(f"Please enter a value between {minimum}{upper}")
                continue
            return value

    def read_price(self, prompt: str) -> Decimal:
        """Ask until the user types a strictly positive number."""
        while True:
            raw = self._ask(prompt)
            try:
                value = Decimal(raw)
            except ArithmeticError:
                self.say("Invalid! You need to type a number!")
                continue
            if not value.is_finite() or value <= 0:
                self.say("Please enter a positive number")
                continue
            return value

    def read_text(self, prompt: str) -> str:
        while True:
            text = self._ask(prompt)
            if text:
                return text
            self.say("Invalid! Empty string!")

    def choose_book(self, question: str) -> Optional[int]:
        if not len(self.manager):
            self.say("There is no book.")
            return None
        self.display_books()
        return self.read_int(f"{question} ", max_value=len(self.manager) - 1)

    def display_books(self) -> None:
        self.say("LIST OF BOOKS:")
        for index, book in enumerate(self.manager.books):
            state = "open" if book.is_open else "closed"
            if book.are_executions_processed:
                state += ", processed"
            self.say(f"{index} - Order book for financial instrument: {book.instrument.name} ({state})")

    def show_result(self, result: BookResult) -> None:
        self.say(result.message)

    # Actions

    def add_order(self) -> None:
        index = self.choose_book("To which book would you like to add an order?")
        if index is None:
            return
        book = self.manager.get_order_book(index)
        if not book.is_open:
            self.say("It is not possible to add an order to a closed book!")
            return

        self.say("Which type of order would you like to create?")
        self.say("0 - Market Order")
        self.say("1 - Limit Order")
        order_type = self.read_int("Order type: ", max_value=1)
        quantity = self.read_int("Specify quantity: ", minimum=1)
        if order_type == 0:
            order = market_order(quantity)
        else:
            order = limit_order(quantity, self.read_price("Specify limit price: "))
        self.show_result(self.manager.submit_order(index, order))

    def add_execution(self) -> None:
        index = self.choose_book("To which book would you like to add an execution?")
        if index is None:
            return
        book = self.manager.get_order_book(index)
        if book.is_open:
            self.say("It is not possible to add an execution to an open book!")
            return

        # All executions of a book share the first one's price
        if book.executions:
            unit_price = book.get_execution_price()
            self.say(f"Unit price for this book is {report.format_price(unit_price)}")
        else:
            unit_price = self.read_price("Specify the common unit price for all executions on this book: ")
        quantity = self.read_int("Specify quantity: ", minimum=1)
        result = self.manager.submit_execution(index, Execution(quantity, unit_price))
        self.show_result(result)
        if result.processed:
            self.say("The book has been processed.")

    def open_book(self) -> None:
        index = self.choose_book("Which book would you like to open?")
        if index is not None:
            self.show_result(self.manager.open_book(index))

    def close_book(self) -> None:
        index = self.choose_book("Which book would you like to close?")
        if index is not None:
            self.show_result(self.manager.close_book(index))

    def process_book(self) -> None:
        index = self.choose_book("Which book would you like to process?")
        if index is None:
            return
        book = self.manager.get_order_book(index)
        if book.is_open:
            self.say("You cannot process an open book - there are no executions anyway")
        elif book.are_executions_processed:
            self.say("The executions of this book were already processed.")
        elif not book.executions:
            self.say("There is no execution to process in this book.")
        else:
            self.show_result(self.manager.process_book(index))

    def print_order_statistics(self) -> None:
        order_id = self.read_text("Enter the id associated to the order you are looking for: ")
        found = self.manager.find_order(order_id)
        if found is None:
            self.say("The id that you entered is not associated to any order of any book.")
            return
        _, book, order = found
        self.say(report.render_order_details(book, order))
        self.say()

    # Loops

    def statistics_menu(self) -> None:
        while True:
            self.say(STATISTICS_MENU)
            choice = self.read_int("> ", max_value=3)
            if choice == 0:
                return
            if choice == 3:
                self.print_order_statistics()
                continue
            render = report.render_statistics_overview if choice == 1 else report.render_validity_statistics
            for book in self.manager.books:
                self.say(render(book))
                self.say()

    def run(self) -> None:
        self.say("Welcome to the order books management system")
        self.say("To navigate through the menu, type the number on the left of an option")
        self.say()
        actions = {
            1: self.add_order,
            2: self.add_execution,
            3: self.open_book,
            4: self.close_book,
            5: self.process_book,
            6: self.statistics_menu,
        }
        try:
            while True:
                self.say(MAIN_MENU)
                choice = self.read_int("> ", max_value=6)
                if choice == 0:
                    break
                try:
                    actions[choice]()
                except BaseOrderBookException as e:
                    logger.error("Menu action failed: %s %s", e.message, e.details)
                    self.say(f"Error: {e.message}")
        except EndOfInput:
            pass
        self.say("Goodbye")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orderbooks",
        description="Order books management system - interactive console",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (overrides ORDERBOOKS_LOG_LEVEL)"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for the log file"
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines"
    )
    parser.add_argument(
        "--no-demo",
        action="store_true",
        help="Start without the demonstration books"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()

    configure_logging(
        log_level=args.log_level or settings.log_level,
        log_dir=args.log_dir or settings.log_dir,
        use_json=args.json_logs or settings.use_json_logs,
    )

    manager = OrderBookManager()
    if settings.seed_demo_books and not args.no_demo:
        manager.seed_demo_books()

    Menu(manager).run()
    return 0
