from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel

class Credentials(BaseModel):
    email: str
    password: str

class UserRead(BaseModel):
    id: str
    email: str

class SessionRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserRead

class AuthMessage(BaseModel):
    message: str
    session: Optional[SessionRead] = None

class GateState(BaseModel):
    view: Literal["dashboard", "auth"]
    authenticated: bool
    user: Optional[UserRead] = None
