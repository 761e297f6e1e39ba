"""
Drive the one-page checkout wizard to an order outcome.

The wizard runs these steps in order, never going back:
1. Billing address (new address form, or a saved address the server reuses)
2. Shipping address (ship-to-same-address is assumed)
3. Shipping method (named preference, else first available)
4. Payment method (named preference, else first available)
5. Payment info (no fields; invoice-style methods only)
6. Confirm order, then wait for the success marker

Which steps show up depends on account state and cart contents, so every
step's continue control gets one bounded wait. A control that never shows up
means the server already satisfied or collapsed the step (SKIPPED). A control
that shows up but cannot be used is a failure (ERROR) and stops the run, as
does a visible billing form that the given address cannot complete.
"""

import inspect
from typing import Awaitable, Callable, List, Optional, Union

from ..core.config import Settings
from ..core.errors import CheckoutError, CheckoutStepError, MissingFieldError, UIAccessError
from ..core.logging import get_logger
from ..core.models import (
    Address,
    CartSnapshot,
    CheckoutResult,
    CheckoutStep,
    OrderOutcome,
    StepPresence,
    StepRecord,
)
from ..core.ui import UIPort, has_text, nth, within
from .cart import read_confirm_snapshot
from .outcome import SUCCESS_MARKER, read_outcome

logger = get_logger(__name__)

CHECKOUT_PATH = "/onepagecheckout"

# Timeout constants (in milliseconds)
STEP_ENTRY_DELAY = 1000  # Delay before looking for a step's options
OPTION_WAIT_TIMEOUT = 5000  # Wait for the first shipping/payment option
SHIPPING_ADDRESS_WAIT_TIMEOUT = 2000  # Shipping address step is usually collapsed
AFTER_CONTINUE_DELAY = 2000  # Delay after clicking a continue control

BILLING_SECTION = "#opc-billing"
ADDRESS_SELECT = "#billing-address-select"
NEW_ADDRESS_LABEL = "New Address"
SHIP_TO_SAME_ADDRESS = "#ShipToSameAddress"

BILLING_INPUTS = {
    "first_name": "#BillingNewAddress_FirstName",
    "last_name": "#BillingNewAddress_LastName",
    "email": "#BillingNewAddress_Email",
    "company": "#BillingNewAddress_Company",
    "country": "#BillingNewAddress_CountryId",
    "state": "#BillingNewAddress_StateProvinceId",
    "city": "#BillingNewAddress_City",
    "address1": "#BillingNewAddress_Address1",
    "address2": "#BillingNewAddress_Address2",
    "zip": "#BillingNewAddress_ZipPostalCode",
    "phone": "#BillingNewAddress_PhoneNumber",
    "fax": "#BillingNewAddress_FaxNumber",
}

CONTINUE_BUTTONS = {
    CheckoutStep.BILLING_ADDRESS: '#billing-buttons-container input[type="button"]',
    CheckoutStep.SHIPPING_ADDRESS: '#shipping-buttons-container input[type="button"]',
    CheckoutStep.SHIPPING_METHOD: '#shipping-method-buttons-container input[type="button"]',
    CheckoutStep.PAYMENT_METHOD: '#payment-method-buttons-container input[type="button"]',
    CheckoutStep.PAYMENT_INFO: '#payment-info-buttons-container input[type="button"]',
    CheckoutStep.CONFIRM_ORDER: '#confirm-order-buttons-container input[type="button"]',
}

SHIPPING_OPTIONS = 'input[name="shippingoption"]'
SHIPPING_OPTIONS_SECTION = "#opc-shipping_method"
PAYMENT_OPTIONS = 'input[name="paymentmethod"]'
PAYMENT_OPTIONS_SECTION = "#opc-payment_method"

CompletionCallback = Callable[[OrderOutcome], Union[None, Awaitable[None]]]


async def open_checkout(port: UIPort) -> None:
    """Navigate straight to the one-page checkout."""
    await port.navigate(CHECKOUT_PATH)


class CheckoutWorkflow:
    """
    One pass through the checkout wizard on one UI session.

    Instances are single-use: run() walks the steps once and leaves the
    machine in TERMINAL (or raises part-way).
    """

    def __init__(
        self,
        port: UIPort,
        settings: Settings,
        on_complete: Optional[CompletionCallback] = None,
    ):
        self.port = port
        self.settings = settings
        self.on_complete = on_complete
        self.state = CheckoutStep.BILLING_ADDRESS
        self.steps: List[StepRecord] = []
        self._started = False
        self._confirm_snapshot: Optional[CartSnapshot] = None

    @property
    def reached_terminal(self) -> bool:
        return self.state == CheckoutStep.TERMINAL

    async def run(
        self,
        address: Address,
        shipping_method: Optional[str] = None,
        payment_method: Optional[str] = None,
        capture_confirm_snapshot: bool = True,
    ) -> CheckoutResult:
        """
        Walk the wizard from billing address to the order outcome.

        Args:
            address: Billing address for the new-address form
            shipping_method: Preferred shipping option label, if any
            payment_method: Preferred payment option label, if any
            capture_confirm_snapshot: Read the confirm step's order summary
                before placing the order

        Returns:
            CheckoutResult with the outcome and what happened at each step

        Raises:
            MissingFieldError: If the billing form is shown and cannot be completed
            CheckoutStepError: If a step's control is present but unusable
        """
        if self._started:
            raise CheckoutError("Checkout workflow already run; create a new one")
        self._started = True

        logger.info(
            "Starting checkout",
            shipping_method=shipping_method,
            payment_method=payment_method,
        )

        sequence = (
            (CheckoutStep.BILLING_ADDRESS, lambda: self._billing_address(address)),
            (CheckoutStep.SHIPPING_ADDRESS, self._shipping_address),
            (CheckoutStep.SHIPPING_METHOD, lambda: self._select_method(
                CheckoutStep.SHIPPING_METHOD, SHIPPING_OPTIONS, SHIPPING_OPTIONS_SECTION, shipping_method)),
            (CheckoutStep.PAYMENT_METHOD, lambda: self._select_method(
                CheckoutStep.PAYMENT_METHOD, PAYMENT_OPTIONS, PAYMENT_OPTIONS_SECTION, payment_method)),
            (CheckoutStep.PAYMENT_INFO, lambda: self._continue(CheckoutStep.PAYMENT_INFO)),
            (CheckoutStep.CONFIRM_ORDER, lambda: self._confirm_order(capture_confirm_snapshot)),
        )

        for step, handler in sequence:
            self.state = step
            logger.info("Checkout step", step=step.value)

            try:
                record = await handler()
            except UIAccessError as e:
                record = StepRecord(step=step, presence=StepPresence.ERROR, detail=str(e))

            self.steps.append(record)
            if record.presence == StepPresence.ERROR:
                logger.error("Checkout step failed", step=step.value, error=record.detail)
                raise CheckoutStepError(f"{step.value}: {record.detail}", step=step)

        self.state = CheckoutStep.TERMINAL
        outcome = await read_outcome(self.port)

        if self.on_complete:
            result = self.on_complete(outcome)
            if inspect.isawaitable(result):
                await result

        logger.info(
            "Checkout finished",
            succeeded=outcome.succeeded,
            order_number=outcome.order_number,
            skipped=[r.step.value for r in self.steps if r.presence == StepPresence.SKIPPED],
        )
        return CheckoutResult(
            outcome=outcome,
            steps=tuple(self.steps),
            confirm_snapshot=self._confirm_snapshot,
        )

    async def read_outcome(self) -> OrderOutcome:
        """
        Re-read the order outcome.

        Raises:
            CheckoutError: If the workflow has not reached TERMINAL
        """
        if not self.reached_terminal:
            raise CheckoutError(f"Checkout has not finished (at {self.state.value})")
        return await read_outcome(self.port)

    async def fill_billing_address(self, address: Address) -> bool:
        """
        Populate the billing form, choosing "New Address" when saved ones exist.

        Returns:
            True if the form was filled, False if the server kept a saved
            address and the form stayed hidden

        Raises:
            MissingFieldError: If the form is visible and a required value or
                a required input is missing
        """
        port = self.port
        budget = self.settings.step_wait_timeout

        # The billing section renders some time after navigation
        if not await port.wait_any_visible((ADDRESS_SELECT, BILLING_INPUTS["first_name"]), budget):
            logger.info("Billing form not shown, leaving address to the server", waited_ms=budget)
            return False

        if await port.is_visible(ADDRESS_SELECT) and await port.count(within(ADDRESS_SELECT, "option")) > 1:
            logger.info("Saved addresses offered, selecting new address")
            await port.select_option(ADDRESS_SELECT, NEW_ADDRESS_LABEL)
            await port.pause(self.settings.settle_delay)

        if not await port.is_visible(BILLING_INPUTS["first_name"]):
            logger.info("Billing form hidden, saved address in use")
            return False

        missing = address.missing_required_fields()
        if missing:
            raise MissingFieldError(
                f"Address is missing required fields: {', '.join(missing)}",
                fields=missing,
            )

        absent = [
            name for name in Address.REQUIRED_FIELDS
            if not await port.is_visible(BILLING_INPUTS[name])
        ]
        if absent:
            raise MissingFieldError(
                f"Billing form does not render required inputs: {', '.join(absent)}",
                fields=absent,
            )

        logger.info("Filling billing address", country=address.country, city=address.city)

        await port.set_value(BILLING_INPUTS["first_name"], address.first_name)
        await port.set_value(BILLING_INPUTS["last_name"], address.last_name)
        await port.set_value(BILLING_INPUTS["email"], address.email)
        if address.company:
            await port.set_value(BILLING_INPUTS["company"], address.company)

        # State options are reloaded after the country changes
        await port.select_option(BILLING_INPUTS["country"], address.country)
        await port.pause(self.settings.settle_delay)
        if address.state and await port.is_visible(BILLING_INPUTS["state"]):
            await port.select_option(BILLING_INPUTS["state"], address.state)

        await port.set_value(BILLING_INPUTS["city"], address.city)
        await port.set_value(BILLING_INPUTS["address1"], address.address1)
        if address.address2:
            await port.set_value(BILLING_INPUTS["address2"], address.address2)
        await port.set_value(BILLING_INPUTS["zip"], address.zip)
        await port.set_value(BILLING_INPUTS["phone"], address.phone)
        if address.fax:
            await port.set_value(BILLING_INPUTS["fax"], address.fax)

        return True

    async def _billing_address(self, address: Address) -> StepRecord:
        filled = await self.fill_billing_address(address)
        record = await self._continue(CheckoutStep.BILLING_ADDRESS)
        source = "new address entered" if filled else "saved address reused"
        return record.model_copy(update={"detail": f"{source}; {record.detail}"})

    async def _shipping_address(self) -> StepRecord:
        if await self.port.is_visible(SHIP_TO_SAME_ADDRESS):
            logger.debug("Ship to same address offered, assuming it is selected")
        budget = min(SHIPPING_ADDRESS_WAIT_TIMEOUT, self.settings.step_wait_timeout)
        return await self._continue(CheckoutStep.SHIPPING_ADDRESS, timeout=budget)

    async def _select_method(
        self,
        step: CheckoutStep,
        options: str,
        section: str,
        preference: Optional[str],
    ) -> StepRecord:
        await self.port.pause(STEP_ENTRY_DELAY)
        chosen = await self._choose_option(options, section, preference)
        record = await self._continue(step)
        return record.model_copy(update={"detail": f"option: {chosen or 'none offered'}; {record.detail}"})

    async def _choose_option(self, options: str, section: str, preference: Optional[str]) -> Optional[str]:
        """
        Pick the preferred option when its label is offered, else the first one.

        Returns:
            Description of what was chosen, None if no options were shown
        """
        port = self.port

        if preference:
            label = within(section, has_text("label", preference))
            if await port.is_visible(label):
                target = await port.get_attribute(label, "for")
                if target:
                    await port.check(f"#{target}")
                    logger.info("Selected preferred option", preference=preference)
                    return preference
            logger.info("Preferred option not offered, using first available", preference=preference)

        first = nth(options, 0)
        if await port.wait_visible(first, OPTION_WAIT_TIMEOUT):
            await port.check(first)
            logger.info("Selected first available option", options=options)
            return "first available"

        logger.info("No options offered", options=options)
        return None

    async def _confirm_order(self, capture_snapshot: bool) -> StepRecord:
        step = CheckoutStep.CONFIRM_ORDER
        budget = self.settings.step_wait_timeout
        shown = await self.port.wait_visible(CONTINUE_BUTTONS[step], budget)

        if shown and capture_snapshot:
            try:
                self._confirm_snapshot = await read_confirm_snapshot(self.port)
            except UIAccessError as e:
                logger.warning("Could not read confirm step totals", error=str(e))

        record = await self._use_continue(step, shown, budget)

        confirmed = await self.port.wait_visible(SUCCESS_MARKER, self.settings.confirm_wait_timeout)
        if not confirmed:
            logger.warning("Order success marker not shown", waited_ms=self.settings.confirm_wait_timeout)
        status = "success marker shown" if confirmed else "success marker not shown"
        return record.model_copy(update={"detail": f"{record.detail}; {status}"})

    async def _continue(self, step: CheckoutStep, timeout: Optional[float] = None) -> StepRecord:
        """
        Click a step's continue control if it shows up within the budget.

        Absence is SKIPPED (server already moved on); a click that fails is
        ERROR. The two are never merged.
        """
        budget = self.settings.step_wait_timeout if timeout is None else timeout
        shown = await self.port.wait_visible(CONTINUE_BUTTONS[step], budget)
        return await self._use_continue(step, shown, budget)

    async def _use_continue(self, step: CheckoutStep, shown: bool, budget: float) -> StepRecord:
        """Record SKIPPED if the control never showed, else click it."""
        locator = CONTINUE_BUTTONS[step]

        if not shown:
            logger.info("Continue control absent, treating step as satisfied", step=step.value, waited_ms=budget)
            return StepRecord(
                step=step,
                presence=StepPresence.SKIPPED,
                detail=f"continue control not visible after {budget} ms",
            )

        try:
            await self.port.click(locator)
        except UIAccessError as e:
            return StepRecord(step=step, presence=StepPresence.ERROR, detail=str(e))

        await self.port.pause(AFTER_CONTINUE_DELAY)
        return StepRecord(step=step, presence=StepPresence.ACTED, detail="continued")


async def complete_checkout(
    port: UIPort,
    settings: Settings,
    address: Address,
    shipping_method: Optional[str] = None,
    payment_method: Optional[str] = None,
    on_complete: Optional[CompletionCallback] = None,
) -> CheckoutResult:
    """Run a fresh CheckoutWorkflow on port (see CheckoutWorkflow.run)."""
    workflow = CheckoutWorkflow(port, settings, on_complete=on_complete)
    return await workflow.run(address, shipping_method=shipping_method, payment_method=payment_method)
