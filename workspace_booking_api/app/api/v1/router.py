"""
Top-level router for version 1 of the API.

This router aggregates the domain routers (persons, spaces,
reservations, statistics) under a unified prefix.  When a new domain is
added, include its router here.
"""

from fastapi import APIRouter

from .endpoints import health, persons, reservations, spaces, statistics

router = APIRouter()

# The health router defines its own "/health" path.
router.include_router(health.router, tags=["health"])
router.include_router(persons.router, prefix="/persons", tags=["persons"])
router.include_router(spaces.router, prefix="/spaces", tags=["spaces"])
router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
router.include_router(statistics.router, prefix="/statistics", tags=["statistics"])
