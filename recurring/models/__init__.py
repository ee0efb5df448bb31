"""API resource models."""

from .account import Account
from .addon import Addon
from .addon_usage import AddonUsage
from .adjustment import Adjustment
from .base import Resource
from .billing_info import BillingInfo
from .coupon import Coupon
from .invoice import Invoice
from .plan import Plan
from .redemption import Redemption
from .subscription import Subscription
from .transaction import Transaction

__all__ = [
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
]
