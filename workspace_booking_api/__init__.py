"""
Top-level package for the Workspace Booking API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``workspace_booking_api.app.main:app``.
"""

__all__ = []
