#!/usr/bin/env python
"""
Manual end-to-end run: log in, fill the cart, reconcile it and place an order.

Use this to watch the checkout against the live demo storefront:
    HEADLESS=false python scripts/run_place_order.py
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopcheck.core.browser import managed_browser
from shopcheck.core.config import load_settings
from shopcheck.core.errors import ShopCheckError
from shopcheck.core.logging import get_logger, setup_logging
from shopcheck.core.test_data import load_test_data
from shopcheck.tools.cart import open_cart, proceed_to_checkout, read_cart
from shopcheck.tools.checkout import complete_checkout
from shopcheck.tools.login import login
from shopcheck.tools.product import add_to_cart
from shopcheck.tools.reconcile import verify_line_invariants, verify_total_invariant

settings = load_settings()
setup_logging(settings)
logger = get_logger(__name__)


async def main():
    """Run the purchase flow once."""
    print("\n" + "=" * 60)
    print("🛒 Manual Place Order Run")
    print("=" * 60)

    data = load_test_data(settings)

    print(f"\nConfiguration:")
    print(f"  Storefront: {settings.base_url}")
    print(f"  Headless: {settings.headless}")
    print(f"  Products: {', '.join(p.name for p in data.products)}")

    if not data.test_user.configured:
        print("\n❌ ERROR: storefront credentials not set in .env.local")
        print("Please add your demo shop account:")
        print("  DEMO_SHOP_EMAIL=your-email")
        print("  DEMO_SHOP_PASSWORD=your-password")
        return 1

    print("\n✅ Configuration looks good!\n")

    async with managed_browser(settings) as browser:
        port = await browser.new_port()
        try:
            await login(port, data.test_user)

            for product in data.products:
                await add_to_cart(port, product)
                print(f"  ➕ {product.name} × {product.quantity}")

            await open_cart(port)
            snapshot = await read_cart(port)

            print("\nLine check:")
            for detail in verify_line_invariants(snapshot).details:
                print(f"  {detail}")
            print("\nTotal check:")
            print(verify_total_invariant(snapshot).details)

            await proceed_to_checkout(port)
            result = await complete_checkout(
                port,
                settings,
                data.shipping_address,
                shipping_method=data.shipping_method("ground"),
                payment_method=data.payment_method("cod"),
            )
        except ShopCheckError as e:
            logger.error("Place order run failed", error=str(e))
            print(f"\n❌ Run failed: {e}")
            return 1
        finally:
            await browser.close_port(port)

    print("\n" + "=" * 60)
    print("Checkout steps:")
    for record in result.steps:
        print(f"  {record.step.value:<18} {record.presence.value:<8} {record.detail}")

    if result.outcome.succeeded:
        print(f"\n✅ Order placed: {result.outcome.order_number}")
        return 0

    print("\n❌ Order was not confirmed")
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
