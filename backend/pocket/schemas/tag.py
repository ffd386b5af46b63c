"""Tag schemas."""

from pydantic import BaseModel


class TagRead(BaseModel):
    """Tag as returned by the store."""

    id: int
    name: str

    class Config:
        from_attributes = True
