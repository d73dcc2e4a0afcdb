from decimal import Decimal
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.domain.user import UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResponseEnvelope(BaseModel):
    status: Literal["Success", "Failure"] = "Failure"
    message: str = ""
    code: int = 400
    payload: Any = None


class UserCreate(CamelModel):
    # Presence is checked by the service so callers get an envelope, not a 422.
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None


class UserUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None


class UserLogin(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    role: UserRole


class PaymentRequest(BaseModel):
    amount: Decimal = Field(..., max_digits=12, decimal_places=2)
    provider: Optional[str] = None


class PaymentResponse(BaseModel):
    provider: str
    amount: Decimal
    status: Literal["approved", "declined"]
    reference: Optional[str] = None
    message: str = ""


class ProvidersResponse(BaseModel):
    default: str
    providers: List[str]
