"""
Domain services: catalog, customization, pricing, cart, orders, QR codes,
admin auth and payments.
"""
