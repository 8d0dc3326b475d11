from pydantic import BaseModel, ConfigDict
from typing import Optional


class SessionData(BaseModel):
    userId: str
    email: str = ""
    name: str = ""
    exp: int  # epoch milliseconds


class GoogleUserInfo(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    email: str = ""
    name: str = ""
    picture: Optional[str] = None


class AuthConfigResponse(BaseModel):
    clientId: Optional[str]
    redirectUri: str


class SessionUser(BaseModel):
    id: str
    email: str
    name: str


class WhoAmIResponse(BaseModel):
    authenticated: bool
    user: Optional[SessionUser] = None


class LogoutResponse(BaseModel):
    success: bool
