"""
Pydantic Schemas for Request/Response Validation

Documents are schema-flexible: request models declare the fields the
frontend usually sends and keep everything else (extra="allow"). Write
results keep the MongoDB driver's camelCase wire shape so existing clients
reading insertedId / deletedCount keep working.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class FlexibleDocument(BaseModel):
    """Base for request bodies stored as-is in the document store."""
    model_config = ConfigDict(extra="allow")


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class UserCreate(FlexibleDocument):
    """User signing in for the first time."""
    email: str = Field(..., examples=["jane@example.com"])
    name: Optional[str] = Field(None, examples=["Jane Doe"])
    userUid: Optional[str] = Field(None, examples=["Zr1xQ0b8fZ..."])


class MenuItemCreate(FlexibleDocument):
    """New menu item (admin only)."""
    name: Optional[str] = Field(None, examples=["Caesar Salad"])
    category: Optional[str] = Field(None, examples=["salad"])
    price: Optional[float] = Field(None, examples=[12.5])
    recipe: Optional[str] = None
    image: Optional[str] = None


class CartItemCreate(FlexibleDocument):
    """Menu item snapshot added to a user's cart."""
    userUid: Optional[str] = None
    menuItemId: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None


class PaymentIntentRequest(BaseModel):
    """Checkout total in major currency units."""
    price: float = Field(..., examples=[42.75])


class PaymentCreate(FlexibleDocument):
    """Completed payment reported by the frontend after Stripe confirmation."""
    price: float = Field(0, examples=[42.75])
    cartItems: List[str] = Field(default_factory=list)
    transactionId: Optional[str] = None
    email: Optional[str] = None


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class MessageResponse(BaseModel):
    """Informational notice."""
    message: str


class AdminStatusResponse(BaseModel):
    """Whether the caller holds the admin role."""
    admin: bool


class InsertResult(BaseModel):
    acknowledged: bool
    insertedId: str


class UpdateResult(BaseModel):
    acknowledged: bool
    matchedCount: int
    modifiedCount: int


class DeleteResult(BaseModel):
    acknowledged: bool
    deletedCount: int


class PaymentIntentResponse(BaseModel):
    """Client secret for Stripe.js."""
    clientSecret: str


class PaymentRecordResponse(BaseModel):
    """Outcome of recording a payment and clearing its cart items."""
    insertResult: InsertResult
    deleteResult: DeleteResult


class AdminStatsResponse(BaseModel):
    """Dashboard counters."""
    users: int
    products: int
    orders: int
    revenue: float


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: bool = True
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    store: str
    payment_service: str
    timestamp: datetime
