"""
Feature fragments: building blocks shared by several document types.

A fragment reads (or partially updates) only the fields it names, so code
that only needs, say, the upvote counter of a package or profile does not
have to decode the whole document.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class _Fragment(BaseModel):
    model_config = ConfigDict(extra="ignore")


class FeatNamed(_Fragment):
    name: str = ""


class FeatUpvotable(_Fragment):
    total_upvotes: int = 0


class DbDeletable(_Fragment):
    deleted: bool = False


class DbUpvotable(_Fragment):
    total_upvotes: int = 0
