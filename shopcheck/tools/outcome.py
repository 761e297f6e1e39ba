"""Read the order confirmation page."""

from ..core.logging import get_logger
from ..core.models import OrderOutcome
from ..core.ui import UIPort

logger = get_logger(__name__)

SUCCESS_MARKER = ".section.order-completed"
ORDER_NUMBER = ".order-number strong"


async def read_outcome(port: UIPort) -> OrderOutcome:
    """
    Read whether the order went through and its number.

    Pure read; calling it twice gives the same answer for the same page.
    The order number is "" unless the success marker is visible.
    """
    succeeded = await port.is_visible(SUCCESS_MARKER)
    order_number = ""

    if succeeded and await port.is_visible(ORDER_NUMBER):
        order_number = (await port.read_text(ORDER_NUMBER)).strip()

    logger.info("Order outcome", succeeded=succeeded, order_number=order_number)
    return OrderOutcome(succeeded=succeeded, order_number=order_number)
