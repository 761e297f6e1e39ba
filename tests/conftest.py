"""Shared pytest fixtures for all tests."""

import pytest

from shopcheck.core.browser import managed_browser
from shopcheck.core.config import load_settings
from shopcheck.core.logging import setup_logging
from shopcheck.core.models import Address
from shopcheck.core.test_data import load_test_data

from fakes import FakePort


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run tests that drive a real browser against the live storefront",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-integration"):
        return
    skip_live = pytest.mark.skip(reason="Live storefront tests need --run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture(scope="session")
def settings():
    """Process-wide settings, loaded once."""
    return load_settings()


@pytest.fixture(scope="session", autouse=True)
def configure_logging(settings, tmp_path_factory):
    setup_logging(settings, logs_dir=tmp_path_factory.mktemp("logs"))


@pytest.fixture
def unit_settings():
    """Settings isolated from .env.local, with the default wait budgets."""
    return load_settings(_env_file=None)


@pytest.fixture
def port():
    return FakePort()


@pytest.fixture
def address():
    return Address(
        first_name="Test",
        last_name="Buyer",
        email="test.buyer@example.com",
        country="United States",
        state="New York",
        city="New York",
        address1="123 Test Street",
        zip="10001",
        phone="5551234567",
    )


@pytest.fixture
def test_data(settings):
    return load_test_data(settings)


@pytest.fixture
def credentials(test_data):
    """Account credentials; checkout scenarios skip when they are placeholders."""
    if not test_data.test_user.configured:
        pytest.skip(
            "Test user credentials not configured. "
            "Set DEMO_SHOP_EMAIL and DEMO_SHOP_PASSWORD environment variables."
        )
    return test_data.test_user


@pytest.fixture
async def browser(settings):
    """Browser fixture for tests."""
    async with managed_browser(settings) as manager:
        yield manager


@pytest.fixture
async def live_port(browser):
    """A fresh storefront session (own context and page) for each test."""
    session = await browser.new_port()
    yield session
    await browser.close_port(session)
