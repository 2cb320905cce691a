"""
Pydantic schema definitions for library records.

Each entity (books, members, loans) defines its own request and read
models.  Request models keep every field optional so that missing
values reach the services' validation rules and are reported with a
readable message instead of a generic parsing error.
"""
