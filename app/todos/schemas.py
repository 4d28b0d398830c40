import uuid
from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, Field, field_validator


def _reject_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("title must not be blank")
    return value


Title = Annotated[str, Field(min_length=1, max_length=255), AfterValidator(_reject_blank)]


class TodoCreate(BaseModel):
    title: Title
    completed: bool | None = None


class TodoUpdate(BaseModel):
    """Partial update. Only keys present in the request body are written."""
    title: Title | None = None
    completed: bool | None = None

    @field_validator("title", "completed", mode="before")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # Only runs for keys the client sent, so null here was explicit.
        if value is None:
            raise ValueError("must not be null")
        return value

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class TodoResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    title: str
    completed: bool
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")
    user_id: uuid.UUID = Field(serialization_alias="userId")
