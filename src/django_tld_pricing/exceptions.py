"""Exceptions for django-tld-pricing."""


class PricingError(Exception):
    """Base exception for pricing engine errors."""
    pass


class CurrencyMismatchError(ValueError):
    """Raised when attempting arithmetic between different currencies."""
    pass


# =============================================================================
# NOT FOUND
# =============================================================================

class NotFoundError(PricingError):
    """No current or matching record exists for a lookup.

    Distinct from a zero-valued result: callers must treat it as
    "not configured", never as a price of zero.
    """

    def __init__(self, message: str = "", context: dict = None):
        self.context = context or {}
        super().__init__(message)


class PricingNotConfiguredError(NotFoundError):
    """No current sales pricing interval for a TLD."""

    def __init__(self, tld, as_of=None):
        self.tld = tld
        self.as_of = as_of
        super().__init__(
            f"No sales pricing configured for .{getattr(tld, 'extension', tld)}"
            + (f" at {as_of.isoformat()}" if as_of else ""),
            context={"tld_id": getattr(tld, "pk", tld), "as_of": as_of},
        )


class CostPricingNotConfiguredError(NotFoundError):
    """No current cost pricing interval for a registrar/TLD relation."""
    pass


class DiscountNotFoundError(NotFoundError):
    """No current discount for a reseller/TLD pair."""
    pass


class RegistrarUnavailableError(NotFoundError):
    """No active registrar offers the TLD."""
    pass


class PreferenceNotFoundError(NotFoundError):
    """No active selection preference for a registrar."""
    pass


class IntervalNotFoundError(NotFoundError):
    """Interval record with the given id does not exist."""
    pass


# =============================================================================
# POLICY VIOLATIONS
# =============================================================================

class PolicyViolationError(PricingError):
    """A write was rejected by pricing policy."""
    pass


class ScheduleDateError(PolicyViolationError):
    """effective_from is in the past or beyond the scheduling horizon."""
    pass


class ImmutableIntervalError(PolicyViolationError):
    """Interval has already taken effect and can no longer change."""
    pass


class InvalidDiscountError(PolicyViolationError):
    """Discount must carry exactly one of percentage or fixed amount."""
    pass


class OverlappingIntervalError(PolicyViolationError):
    """Interval window collides with another interval for the same key."""
    pass


# =============================================================================
# CONCURRENCY / CONVERSION
# =============================================================================

class ConflictRaceError(PricingError):
    """Concurrent write created a second open interval for the same key."""
    retryable = True


class ConversionUnavailableError(PricingError):
    """No exchange rate resolvable for a currency pair."""

    def __init__(self, from_currency: str, to_currency: str, as_of=None):
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.as_of = as_of
        super().__init__(
            f"No exchange rate from {from_currency} to {to_currency}"
            + (f" at {as_of.isoformat()}" if as_of else "")
        )
