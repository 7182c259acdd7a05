from typing import List

from pydantic import BaseModel, Field


class HomeCoordinates(BaseModel):
    x: float
    y: float
    z: float


class HomeResponse(HomeCoordinates):
    user_id: str
    name: str


class SetHomeResponse(HomeResponse):
    result: str


class DeleteHomeResponse(BaseModel):
    user_id: str
    name: str
    deleted: bool


class HomeListResponse(BaseModel):
    user_id: str
    names: List[str]
    page: int = Field(..., ge=0, description="Zero-based page actually returned after clamping")
    page_count: int = Field(..., ge=1)
    total: int = Field(..., ge=0)


class LimitResponse(BaseModel):
    user_id: str
    home_limit: int
    home_count: int
    unlimited: bool
    can_create_more: bool


class LimitUpdateRequest(BaseModel):
    home_limit: int = Field(..., description="Negative means unlimited")


class LimitAdjustRequest(BaseModel):
    amount: int = Field(..., ge=1, le=1_000_000)


class LimitAdjustResponse(BaseModel):
    user_id: str
    previous_limit: int
    home_limit: int
    home_count: int
    updated: bool
    over_limit: bool


class CompletionResponse(BaseModel):
    suggestions: List[str]


class DeleteUserResponse(BaseModel):
    user_id: str
    deleted: bool
