from pydantic import BaseModel

from typing import Optional


# Fields default to "" so an omitted field is reported as 400 by the
# credential store rather than as a 422 schema error.
class UserCreate(BaseModel):
    name: Optional[str] = ""
    email: Optional[str] = ""
    password: Optional[str] = ""


class UserLogin(BaseModel):
    email: Optional[str] = ""
    password: Optional[str] = ""


class Token(BaseModel):
    token: str


class TokenClaims(BaseModel):
    sub: str
    email: str
    iat: int
    exp: int

    @property
    def subject_id(self) -> str:
        return self.sub


class ProtectedResponse(BaseModel):
    message: str
    user: TokenClaims


class HealthResponse(BaseModel):
    status: str
    database: str
