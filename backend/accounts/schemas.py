# ------------------------------ IMPORTS ------------------------------
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime

from core.schemas import BaseOutModel

# ------------------------------ OUTPUT MODELS ------------------------------

class AccountInformationOut(BaseOutModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    additional_info: Optional[str] = None

class AccountOut(BaseOutModel):
    """Account output model; never includes credentials."""
    id: int
    username: str
    email: str
    role_names: List[str] = []
    subscription_id: Optional[int] = None
    account_information: Optional[AccountInformationOut] = None
    created_at: Optional[datetime] = None

# ------------------------------ INPUT MODELS ------------------------------

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str

    class Config:
        json_schema_extra = {
            "example": {
                "username": "kari",
                "email": "kari@example.com",
                "password": "a-long-password",
                "confirm_password": "a-long-password"
            }
        }

class LoginRequest(BaseModel):
    username: str = Field(..., description="Username or email")
    password: str

class ForgotPasswordRequest(BaseModel):
    email: str

class ResetPasswordRequest(BaseModel):
    token: str
    password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str

class ProfileUpdate(BaseModel):
    email: Optional[str] = Field(None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None
    address: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=50)
    additional_info: Optional[str] = None

class DeleteAccountRequest(BaseModel):
    password: str

# ------------------------------ END OF FILE ------------------------------
