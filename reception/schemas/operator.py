# reception/schemas/operator.py
from pydantic import BaseModel
from typing import Optional


class SignUpRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None
    cpf: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class OperatorOut(BaseModel):
    id: str
    email: str
    name: Optional[str]

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    operator: OperatorOut
    access_token: str
    token_type: str = "bearer"


class IdentityOut(BaseModel):
    actor_id: str
    name: str
    cpf: Optional[str]
    email: Optional[str]

    class Config:
        from_attributes = True
