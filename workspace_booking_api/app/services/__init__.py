"""
Service layer abstraction.

Each service encapsulates the business logic of one domain (persons,
spaces, reservations, statistics) on top of the SQLite store, so API
handlers stay thin.  ``availability`` and ``admission`` hold the
booking rules that every reservation write passes through.
"""
