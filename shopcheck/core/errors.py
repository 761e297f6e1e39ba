"""Custom exceptions for the storefront checkout checks."""


class ShopCheckError(Exception):
    """Base exception for shopcheck errors."""
    pass


class ConfigurationError(ShopCheckError):
    """Configuration error."""
    pass


class CredentialsNotConfigured(ConfigurationError):
    """Account credentials are unset or still hold placeholder values."""
    pass


class UIAccessError(ShopCheckError):
    """The browser could not perform a requested UI action."""
    pass


class AuthenticationError(ShopCheckError):
    """Error during login."""
    pass


class ProductError(ShopCheckError):
    """Error related to a product page."""
    pass


class CartError(ShopCheckError):
    """Error adding to or changing the cart."""
    pass


class CheckoutError(ShopCheckError):
    """Error during checkout."""
    pass


class MissingFieldError(CheckoutError):
    """A visible checkout form cannot be completed with the given input."""

    def __init__(self, message: str, fields: tuple = ()):
        super().__init__(message)
        self.fields = tuple(fields)


class CheckoutStepError(CheckoutError):
    """A checkout step's control was present but acting on it failed."""

    def __init__(self, message: str, step=None):
        super().__init__(message)
        self.step = step
