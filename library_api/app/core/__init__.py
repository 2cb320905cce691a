"""
Core infrastructure: configuration, logging, the document store,
the error taxonomy and UI notifications.
"""
