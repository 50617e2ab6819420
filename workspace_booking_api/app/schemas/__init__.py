"""
Pydantic schema definitions for API payloads.

Each domain (persons, spaces, reservations, statistics) defines its own
request and response models.  Schemas are separated from the database
rows to decouple the wire format (camelCase) from persistence.
"""
