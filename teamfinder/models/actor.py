"""The authenticated caller of a workflow operation."""

from sqlmodel import SQLModel

from teamfinder.models.completion import Role


class Actor(SQLModel):
    """Identity supplied by the auth layer and passed into every service call.

    Attributes:
        id: User id of the caller.
        role: Marketplace role of the caller.
    """
    id: str
    role: Role
