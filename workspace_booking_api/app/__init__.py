"""
Application package.

``core`` holds configuration, logging, the SQLite store, security and
error types; ``schemas`` the request/response models; ``services`` the
business logic, including the reservation admission engine; and
``api`` the versioned HTTP routes.
"""
