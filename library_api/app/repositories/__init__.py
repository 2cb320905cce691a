"""
Data access layer.

Repositories translate between typed records and documents in the
store.  Services never talk to the store directly.
"""
