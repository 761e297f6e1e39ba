"""Value objects shared by the storefront checks."""

from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LineItem(BaseModel):
    """One rendered cart row."""

    model_config = ConfigDict(frozen=True)

    name: str
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    line_subtotal: float = Field(ge=0)


class CartSnapshot(BaseModel):
    """Point-in-time read of a cart or order summary.

    shipping and tax are 0 when the storefront does not show them yet, which
    cannot be told apart from a genuine zero charge.
    """

    model_config = ConfigDict(frozen=True)

    items: Tuple[LineItem, ...] = ()
    subtotal: float = 0.0
    shipping: float = 0.0
    tax: float = 0.0
    total: float = 0.0

    @classmethod
    def empty(cls) -> "CartSnapshot":
        return cls()

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def items_subtotal(self) -> float:
        """Naive sum of the line subtotals."""
        return sum(item.line_subtotal for item in self.items)

    def find(self, name_fragment: str) -> Optional[LineItem]:
        """First line whose name contains name_fragment (case-insensitive)."""
        needle = name_fragment.lower()
        for item in self.items:
            if needle in item.name.lower():
                return item
        return None


class Address(BaseModel):
    """Billing/shipping address as entered in the checkout form."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = (
        "first_name",
        "last_name",
        "email",
        "country",
        "city",
        "address1",
        "zip",
        "phone",
    )

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    company: Optional[str] = None
    country: str = ""
    state: Optional[str] = None
    city: str = ""
    address1: str = ""
    address2: Optional[str] = None
    zip: str = ""
    phone: str = ""
    fax: Optional[str] = None

    def missing_required_fields(self) -> Tuple[str, ...]:
        return tuple(
            name for name in self.REQUIRED_FIELDS
            if not (getattr(self, name) or "").strip()
        )


class ProductSelection(BaseModel):
    """A product to put in the cart, with optional configured attributes."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    category: str = ""
    url: str = Field(description="Product page path, relative to the storefront root")
    base_price: float = 0.0
    quantity: int = Field(default=1, ge=1)
    options: Dict[str, Any] = Field(default_factory=dict)

    @property
    def identifier(self) -> str:
        return self.url


class CheckoutStep(str, Enum):
    """One-page checkout stages, in wizard order."""
    BILLING_ADDRESS = "billing_address"
    SHIPPING_ADDRESS = "shipping_address"
    SHIPPING_METHOD = "shipping_method"
    PAYMENT_METHOD = "payment_method"
    PAYMENT_INFO = "payment_info"
    CONFIRM_ORDER = "confirm_order"
    TERMINAL = "terminal"


class StepPresence(str, Enum):
    """What happened to a step's continue control."""
    ACTED = "acted"
    SKIPPED = "skipped"
    ERROR = "error"


class StepRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: CheckoutStep
    presence: StepPresence
    detail: str = ""


class OrderOutcome(BaseModel):
    """Result of the final confirmation."""

    model_config = ConfigDict(frozen=True)

    succeeded: bool
    order_number: str = ""


class CheckoutResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: OrderOutcome
    steps: Tuple[StepRecord, ...] = ()
    confirm_snapshot: Optional[CartSnapshot] = None

    def presence_of(self, step: CheckoutStep) -> Optional[StepPresence]:
        for record in self.steps:
            if record.step == step:
                return record.presence
        return None
