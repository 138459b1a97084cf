"""
                WLogistics Order Tracking

A multi-tenant delivery tracking backend: in-memory orders, a linear
status lifecycle and realtime change notifications per tenant room.

Author: Khalil_Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil_Bannouri"
