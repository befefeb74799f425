"""
Access schemas for GuidedBook.

Defines Pydantic models for:
- Accounts and reader profiles (access flag and contact data)
- Payment webhook payloads
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class Profile(BaseModel):
    id: str
    has_access: bool = False
    full_name: Optional[str] = None
    phone: Optional[str] = None


class Buyer(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
    name: Optional[str] = None


class PurchaseData(BaseModel):
    model_config = ConfigDict(extra="allow")

    buyer: Optional[Buyer] = None


class WebhookPayload(BaseModel):
    """Subset of the payment provider's event body that access granting reads."""
    model_config = ConfigDict(extra="allow")

    event: Optional[str] = None
    data: Optional[PurchaseData] = None

    @property
    def buyer_email(self) -> Optional[str]:
        if self.data and self.data.buyer:
            return self.data.buyer.email
        return None

    @property
    def buyer_name(self) -> Optional[str]:
        if self.data and self.data.buyer:
            return self.data.buyer.name
        return None


class Account(BaseModel):
    """A sign-in identity. Profiles share the account id."""
    id: str
    email: str
    full_name: Optional[str] = None
