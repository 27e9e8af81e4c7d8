from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class WebhookBuyerDTO(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=32)
    email: EmailStr | None = None
    address: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email(cls, v):
        return v or None


class WebhookOrderDTO(BaseModel):
    """
    Corpo do POST /api/webhook/order enviado pela loja externa.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    client_id: int
    order_number: str = Field(min_length=1, max_length=64)
    buyer: WebhookBuyerDTO
    product_name: str = Field(min_length=1, max_length=255)
    quantity: int = Field(gt=0)
    total_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    notes: str | None = None
    shipping_address: str | None = None
    wilaya: str | None = None
    commune: str | None = None
    payment_method: str | None = None
