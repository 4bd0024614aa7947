"""
                Restaurant Ordering Backend

Async backend for a small restaurant shop: product and coupon catalog,
order intake with opening-hours gating and coupon pricing, and an optional
Stripe hosted checkout.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
