from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserOut(_CamelModel):
    id: uuid.UUID
    email: EmailStr
    first_name: str | None
    last_name: str | None


class RegisterIn(_CamelModel):
    email: EmailStr
    password: str
    first_name: str | None = None
    last_name: str | None = None


class LoginIn(BaseModel):
    email: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
