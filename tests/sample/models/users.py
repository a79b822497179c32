from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Annotated, ClassVar, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel

from typeforge import (
    export_ts_enum, export_ts_interface, TsIgnore, TsType, TsOptional, TsDefaultTypeOutput,
)


T = TypeVar("T")


@export_ts_enum(output_dir="enums")
class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    MODERATOR = "moderator"


class UserStatus(IntEnum):
    ACTIVE = 1
    SUSPENDED = 2
    PENDING = 3


class Address(BaseModel):
    street: str
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str = "US"


@export_ts_interface(output_dir="model")
class Entity(BaseModel):
    id: UUID
    created_at: datetime


@export_ts_interface(output_dir="model/users")
class User(Entity):
    username: str
    email: str
    role: UserRole = UserRole.USER
    status: Annotated[UserStatus, TsDefaultTypeOutput("enums")]
    addresses: List[Address] = []
    updated_at: Optional[datetime] = None
    account_balance: Decimal = Decimal("0.00")
    password_hash: Annotated[str, TsIgnore()]
    avatar: Annotated[Optional[bytes], TsType("Blob | null")]
    nickname: Annotated[str, TsOptional()]
    max_sessions: ClassVar[int] = 5


@export_ts_interface(output_dir="model")
class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int


@export_ts_interface(output_dir="model/users")
class UserPage(Page[User]):
    cursor: Optional[str] = None
