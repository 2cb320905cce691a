"""
Service layer abstraction.

Each service encapsulates the business rules for one domain (books,
members, loans) and delegates persistence to ``LibraryRepository``.
``LibraryApp`` coordinates the services for the UI and reports
outcomes through the ``Notifier``.
"""
