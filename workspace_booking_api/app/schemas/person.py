"""
Pydantic models for persons.

A person is both a login identity (its email is the token subject) and
the owner of reservations.  Field-level rules such as the email format
are enforced by ``PersonService`` so that they produce the same
structured errors for every caller.
"""

from typing import Literal, Optional

from pydantic import Field

from .common import ApiModel

Role = Literal["admin", "client"]


class PersonCreate(ApiModel):
    email: str = Field(..., examples=["ana@example.com"])
    role: Role = Field("client", examples=["client"])


class PersonUpdate(ApiModel):
    """Partial update; omitted fields keep their stored value."""

    email: Optional[str] = None
    role: Optional[Role] = None


class PersonSummary(ApiModel):
    """Compact form embedded in reservation responses."""

    id: int
    email: str
    role: str


class PersonRead(PersonSummary):
    created_at: str
    updated_at: str


class PersonDeleteResult(ApiModel):
    id: int
    deleted_reservations: int = 0
