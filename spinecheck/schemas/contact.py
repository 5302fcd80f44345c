from typing import Literal

from pydantic import BaseModel, Field


class ContactRequest(BaseModel):
    name: str = Field(min_length=1)
    age: int = Field(ge=0, le=150)
    gender: Literal["male", "female", "other"] = "male"
    phone: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    message: str = Field(min_length=1)
