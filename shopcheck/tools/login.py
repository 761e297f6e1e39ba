"""Log in to the storefront account."""

from ..core.errors import AuthenticationError, CredentialsNotConfigured
from ..core.logging import get_logger
from ..core.test_data import Credentials
from ..core.ui import UIPort

logger = get_logger(__name__)

LOGIN_PATH = "/login"

# Timeout constants (in milliseconds)
PAGE_LOAD_DELAY = 500
LOGIN_RESULT_TIMEOUT = 5000

EMAIL_INPUT = "#Email"
PASSWORD_INPUT = "#Password"
REMEMBER_ME = "#RememberMe"
LOGIN_BUTTON = "input.login-button"
LOGOUT_LINK = "a.ico-logout"
ACCOUNT_LINK = "a.account"
VALIDATION_ERRORS = ".validation-summary-errors"


async def is_logged_in(port: UIPort) -> bool:
    return await port.is_visible(LOGOUT_LINK)


async def login(port: UIPort, credentials: Credentials, remember_me: bool = False) -> dict:
    """
    Log in with the given account.

    Returns:
        dict with status and message

    Raises:
        CredentialsNotConfigured: If the account is unset or a placeholder
        AuthenticationError: If the storefront does not show a logged-in header
    """
    if not credentials.configured:
        raise CredentialsNotConfigured(
            "Test user credentials not configured. "
            "Set DEMO_SHOP_EMAIL and DEMO_SHOP_PASSWORD environment variables."
        )

    logger.info("Starting login process", email=credentials.email)

    await port.navigate(LOGIN_PATH)
    await port.pause(PAGE_LOAD_DELAY)

    if await is_logged_in(port):
        logger.info("Already logged in")
        return {"status": "success", "message": "Already logged in"}

    await port.set_value(EMAIL_INPUT, credentials.email)
    await port.set_value(PASSWORD_INPUT, credentials.password)
    if remember_me:
        await port.check(REMEMBER_ME)

    await port.click(LOGIN_BUTTON)

    if not await port.wait_visible(LOGOUT_LINK, LOGIN_RESULT_TIMEOUT):
        error = ""
        if await port.is_visible(VALIDATION_ERRORS):
            error = (await port.read_text(VALIDATION_ERRORS)).strip()
        logger.error("Login failed", error=error)
        raise AuthenticationError(f"Login failed: {error or 'logout link not shown'}")

    account = (await port.read_text(ACCOUNT_LINK)).strip()
    if account and account.lower() != credentials.email.lower():
        logger.warning("Logged in as a different account than requested")

    logger.info("Login successful")
    return {"status": "success", "message": "Logged in"}
