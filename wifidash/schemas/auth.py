from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: str
    password: str


class UserInfo(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    status: str


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserInfo
