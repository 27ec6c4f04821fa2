# boutique/checkout.py
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from .cart import CartEngine
from .catalog import CatalogStore
from .log import get_logger

logger = get_logger(__name__)

# Payment is a manual hand-off; confirming it always succeeds.
PAYMENT_MODE = "simulated"

SUMMARY_INSTRUCTIONS = (
    "Take a screenshot of this summary and send it to our official chat account. "
    "Once we have checked it, we will send you a payment link."
)
PAYMENT_INSTRUCTIONS = (
    "1. Scan the QR code with your payment app.",
    "2. Check the amount and complete the payment.",
    "3. After paying, press \"Payment complete\".",
)


class CheckoutState(str, Enum):
    BROWSING = "browsing"
    ORDER_SUMMARY = "order_summary"
    PAYMENT_SCREEN = "payment_screen"


class InvalidTransition(ValueError):
    def __init__(self, action: str, state: CheckoutState):
        super().__init__(f"cannot {action} from {state.value}")
        self.action = action
        self.state = state


class SummaryLine(BaseModel):
    product_id: str
    name: str
    selected_option: Optional[str] = None
    quantity: int
    unit_price: int
    line_total: int


class OrderSummary(BaseModel):
    state: CheckoutState
    lines: List[SummaryLine]
    total: int
    item_count: int
    instructions: str = SUMMARY_INSTRUCTIONS


class Receipt(BaseModel):
    lines: List[SummaryLine]
    total: int
    payment_mode: str = PAYMENT_MODE


class CheckoutSequencer:
    """Walks one shopper from browsing to a confirmed (simulated) payment.

    Browsing -> OrderSummary -> PaymentScreen -> Browsing, with ``back``
    stepping one screen at a time. The caller must not enter the summary with
    an empty cart; the sequencer does not check.
    """

    def __init__(self, catalog: CatalogStore, cart: CartEngine):
        self.catalog = catalog
        self.cart = cart
        self.state = CheckoutState.BROWSING

    def summary(self) -> OrderSummary:
        return OrderSummary(
            state=self.state,
            lines=self._lines(),
            total=self.cart.total(),
            item_count=self.cart.item_count(),
        )

    def proceed_to_summary(self) -> None:
        self._expect(CheckoutState.BROWSING, "proceed to summary")
        self.state = CheckoutState.ORDER_SUMMARY

    def proceed_to_payment(self) -> None:
        self._expect(CheckoutState.ORDER_SUMMARY, "proceed to payment")
        self.state = CheckoutState.PAYMENT_SCREEN

    def confirm_payment(self) -> Receipt:
        self._expect(CheckoutState.PAYMENT_SCREEN, "confirm payment")
        receipt = Receipt(lines=self._lines(), total=self.cart.total())

        # The only place where the cart touches the catalog.
        for item in self.cart.items:
            self.catalog.decrement_stock(item.product_id, item.quantity)
        self.cart.clear()
        self.state = CheckoutState.BROWSING

        logger.info("payment confirmed", total=receipt.total, lines=len(receipt.lines),
                    payment_mode=receipt.payment_mode)
        return receipt

    def back(self) -> None:
        if self.state is CheckoutState.PAYMENT_SCREEN:
            self.state = CheckoutState.ORDER_SUMMARY
        elif self.state is CheckoutState.ORDER_SUMMARY:
            self.state = CheckoutState.BROWSING

    def _expect(self, state: CheckoutState, action: str) -> None:
        if self.state is not state:
            raise InvalidTransition(action, self.state)

    def _lines(self) -> List[SummaryLine]:
        return [
            SummaryLine(
                product_id=item.product_id,
                name=item.name,
                selected_option=item.selected_option,
                quantity=item.quantity,
                unit_price=item.price,
                line_total=item.line_total,
            )
            for item in self.cart.items
        ]
