from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from marketplace.models.base import timestamp_field


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str = Field(index=True)
    contact_number: Optional[str] = None
    role: str = Field(default="user")
    can_login: bool = Field(default=True)
    created_at: datetime = timestamp_field()
