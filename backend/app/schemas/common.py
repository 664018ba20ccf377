"""
Store result schemas.

Write endpoints echo the outcome of the underlying store operation.
"""

from pydantic import BaseModel, Field
from typing import Optional, Union


class InsertResult(BaseModel):
    """Outcome of a single insert."""
    acknowledged: bool = True
    inserted_id: str = Field(..., alias="insertedId")

    class Config:
        populate_by_name = True


class UpdateResult(BaseModel):
    """Outcome of a single-row update or upsert."""
    acknowledged: bool = True
    matched_count: int = Field(..., alias="matchedCount")
    modified_count: int = Field(..., alias="modifiedCount")
    upserted_id: Optional[str] = Field(None, alias="upsertedId")

    class Config:
        populate_by_name = True


class DeleteResult(BaseModel):
    """Outcome of a single delete."""
    acknowledged: bool = True
    deleted_count: int = Field(..., alias="deletedCount")

    class Config:
        populate_by_name = True


class SignupResult(BaseModel):
    """Signup outcome: an insert, or a notice that the email exists."""
    acknowledged: Optional[bool] = None
    inserted_id: Union[str, bool] = Field(..., alias="insertedId")
    message: Optional[str] = None

    class Config:
        populate_by_name = True
