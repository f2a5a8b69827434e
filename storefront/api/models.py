"""
Pydantic models for storefront API requests and responses.

Field names follow the JSON the shop front already sends (username, itemId,
new_price, ...). Request models reject unknown fields.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    username: Optional[str] = Field(default=None, description="Display name")
    email: str = Field(min_length=1, description="Login email, unique across users")
    password: str = Field(min_length=1)


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    email: str
    password: str


class TokenResponse(BaseModel):
    success: bool = True
    token: str


class CartItemRequest(BaseModel):
    """Body of /addtocart and /removefromcart."""
    model_config = ConfigDict(extra="forbid")
    itemId: int = Field(ge=0, description="Cart slot, i.e. the product id")


class AddProductRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    image: str
    category: str
    new_price: float
    old_price: float


class RemoveProductRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: int
    name: Optional[str] = None


class ProductAck(BaseModel):
    success: bool = True
    name: Optional[str] = None


class ProductOut(BaseModel):
    id: int
    name: str
    image: str
    category: str
    new_price: float
    old_price: float
    date: Optional[str] = None
    available: bool = True


class UploadResponse(BaseModel):
    success: int = 1
    image_url: str


class ErrorResponse(BaseModel):
    success: Optional[bool] = None
    errors: str


ProductList = List[ProductOut]
