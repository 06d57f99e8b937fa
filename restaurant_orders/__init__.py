"""
                Restaurant Orders

Order placement and payment reconciliation backend for a multi-restaurant
food-ordering platform: server-priced checkout sessions, exactly-once
payment webhooks and owner-only fulfillment updates.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
