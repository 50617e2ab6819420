"""Mint a bearer token for local use.

Stands in for the identity provider during development: the token's
subject is a person's email and it is signed with ``SECRET_KEY``.

Usage:
    python create_token.py admin@example.com [lifetime_days]
"""
import sys

from workspace_booking_api.app.core.security import create_access_token

if __name__ == "__main__":
    if len(sys.argv) < 2:
        sys.exit(__doc__)
    days = int(sys.argv[2]) if len(sys.argv) > 2 else 365
    print(create_access_token({"sub": sys.argv[1]}, expires_delta=days * 24 * 60 * 60))
