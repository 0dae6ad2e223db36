"""
                Serb Burger Ordering System

Online ordering backend for a single restaurant: public storefront
(menu, checkout, order status QR code) and an admin back-office
(order queue, menu management, QR-based fulfillment).

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
