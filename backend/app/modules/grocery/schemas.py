from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class _RecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class UserOut(_RecordOut):
    Id: int
    Name: str
    Email: str
    CreatedAt: datetime


class CoupleOut(_RecordOut):
    Id: int
    User1Id: int
    User2Id: int
    CreatedAt: datetime


class CategoryOut(_RecordOut):
    Id: int
    Name: str
    CreatedAt: datetime


class GroceryListOut(_RecordOut):
    Id: int
    CoupleId: int
    WeekStart: date
    CreatedAt: datetime


class GroceryItemOut(_RecordOut):
    Id: int
    ListId: int
    CategoryId: int
    Name: str
    Quantity: str | None = None
    IsCompleted: bool
    AddedByUserId: int
    CompletedByUserId: int | None = None
    CreatedAt: datetime
    CompletedAt: datetime | None = None


class GroceryItemWithCategoryOut(GroceryItemOut):
    Category: CategoryOut


class CreateUserRequest(BaseModel):
    Name: str = Field(..., min_length=1, max_length=120)
    Email: EmailStr


class CreateCoupleRequest(BaseModel):
    User1Id: int
    User2Id: int


class CreateCategoryRequest(BaseModel):
    Name: str = Field(..., min_length=1, max_length=120)


class CreateGroceryListRequest(BaseModel):
    CoupleId: int
    WeekStart: date


class AddGroceryItemRequest(BaseModel):
    ListId: int | None = None
    CategoryId: int
    Name: str = Field(..., min_length=1, max_length=200)
    Quantity: str | None = Field(default=None, max_length=80)
    AddedByUserId: int


class ToggleItemCompletionRequest(BaseModel):
    ItemId: int
    UserId: int


class RemoveGroceryItemRequest(BaseModel):
    ItemId: int


class RemoveGroceryItemResponse(BaseModel):
    Success: bool


class HealthResponse(BaseModel):
    Status: str
    Timestamp: datetime
