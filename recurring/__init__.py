"""Recurring - async client for the Recurly v2 XML API."""

__version__ = "0.1.0"

from .client import Recurring  # noqa: E402
from .codec import Decoded, DecodeResult, RawFallback, decode_types, parse_xml  # noqa: E402
from .config import ClientConfig  # noqa: E402
from .core import (  # noqa: E402
    APIError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    RecurlyError,
    RecurringError,
    UnexpectedStatusError,
    ValidationError,
    XMLDecodeError,
)
from .models import (  # noqa: E402
    Account,
    Addon,
    AddonUsage,
    Adjustment,
    BillingInfo,
    Coupon,
    Invoice,
    Plan,
    Redemption,
    Resource,
    Subscription,
    Transaction,
)
from .runtime import EXHAUSTED, ResourceIterator  # noqa: E402
from .signer import SignedQuery  # noqa: E402

__all__ = [
    "__version__",
    # Client
    "Recurring",
    "ClientConfig",
    "ResourceIterator",
    "EXHAUSTED",
    "SignedQuery",
    # Decoding
    "Decoded",
    "DecodeResult",
    "RawFallback",
    "decode_types",
    "parse_xml",
    # Models
    "Resource",
    "Account",
    "Addon",
    "AddonUsage",
    "Adjustment",
    "BillingInfo",
    "Coupon",
    "Invoice",
    "Plan",
    "Redemption",
    "Subscription",
    "Transaction",
    # Exceptions
    "RecurringError",
    "APIError",
    "RecurlyError",
    "NotFoundError",
    "AuthenticationError",
    "UnexpectedStatusError",
    "RateLimitError",
    "XMLDecodeError",
    "ValidationError",
]
