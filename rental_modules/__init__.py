"""
Rental modules -- service facades that adapt persistence records to the
pure ``rental_engines``.
"""
