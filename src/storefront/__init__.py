"""Storefront backend for custom 3D-printed goods.

Orders, order items, payments, shipments and vouchers, priced from the
catalogue's materials and print volumes.
"""
