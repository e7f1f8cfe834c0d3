"""
                Bistro Boss API

REST backend for the Bistro Boss restaurant ordering app: users, menu,
reviews, carts and payments over a document store, guarded by bearer
tokens and an admin role check.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
