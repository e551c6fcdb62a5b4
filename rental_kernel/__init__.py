"""
Rental Kernel

Foundation layer for the rental invoicing engines:
- Immutable value objects (Money, Quantity, Period)
- Injectable clock
- Typed exception hierarchy
- Structured JSON logging
"""

__version__ = "0.1.0"
