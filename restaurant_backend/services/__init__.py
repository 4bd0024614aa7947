"""
                        Services Module

Business logic of the shop, kept free of HTTP concerns.

Services:
    - opening_hours: pure opening-hours evaluation
    - pricing: order total computation and money helpers
    - shop_status: persisted open/closed override
    - catalog: product and coupon store gateway
    - orders: order intake and listing
    - payment: Stripe hosted checkout bridge
"""
