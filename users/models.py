from pydantic import BaseModel, Field
from typing import Optional


class CompanyProfile(BaseModel):
    """Template copied into every new invoice. Never linked afterwards."""
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    abn: Optional[str] = None
    amount_enclosed: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    bsb: Optional[str] = None


class CurrentUser(BaseModel):
    """The authenticated account, resolved once per request and passed down."""
    id: int
    email: str
    company_profile: CompanyProfile = Field(default_factory=CompanyProfile)

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    email: str
    password: str
    company_profile: CompanyProfile = Field(default_factory=CompanyProfile)


class UserPasswordUpdate(BaseModel):
    current_password: str
    new_password: str
