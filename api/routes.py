from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from adapters.factory import get_adapter
from api.schemas import (
    CompletionResponse,
    DeleteHomeResponse,
    DeleteUserResponse,
    HomeCoordinates,
    HomeListResponse,
    HomeResponse,
    LimitAdjustRequest,
    LimitAdjustResponse,
    LimitResponse,
    LimitUpdateRequest,
    SetHomeResponse,
)
from homes.service import HomeService, SetHomeResult
from schema.tables import is_unlimited

router = APIRouter()

_SET_HOME_ERRORS = {
    SetHomeResult.INVALID_NAME: (400, "Invalid home name. Use 1-32 letters, numbers, underscores, or dashes."),
    SetHomeResult.NAME_IN_USE: (409, "This name is already in use. Use another name or delete it first."),
    SetHomeResult.LIMIT_REACHED: (403, "Home limit reached."),
    SetHomeResult.FAILED: (500, "Failed to save the home. Check server logs for details."),
}


@lru_cache(maxsize=1)
def get_home_service() -> HomeService:
    return HomeService(get_adapter())


def _limit_response(service: HomeService, user_id: str) -> LimitResponse:
    home_limit = service.store.get_limit(user_id)
    home_count = service.store.count(user_id)
    return LimitResponse(
        user_id=user_id,
        home_limit=home_limit,
        home_count=home_count,
        unlimited=is_unlimited(home_limit),
        can_create_more=service.store.can_create_more(user_id),
    )


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/users/{user_id}/homes", response_model=HomeListResponse)
def list_homes(
    user_id: str,
    page: int = Query(default=0, ge=0),
    service: HomeService = Depends(get_home_service),
):
    result = service.list_page(user_id, page)
    return HomeListResponse(
        user_id=user_id,
        names=result.names,
        page=result.page,
        page_count=result.page_count,
        total=result.total,
    )


@router.get("/users/{user_id}/homes/{name}", response_model=HomeResponse)
def get_home(user_id: str, name: str, service: HomeService = Depends(get_home_service)):
    coords = service.teleport_target(user_id, name)
    if coords is None:
        raise HTTPException(status_code=404, detail=f"No such home: '{name}'.")
    return HomeResponse(user_id=user_id, name=name, x=coords.x, y=coords.y, z=coords.z)


@router.put("/users/{user_id}/homes/{name}", response_model=SetHomeResponse, status_code=201)
def set_home(
    user_id: str,
    name: str,
    request: HomeCoordinates,
    service: HomeService = Depends(get_home_service),
):
    result = service.set_home(user_id, name, request.x, request.y, request.z)
    if result in _SET_HOME_ERRORS:
        status_code, detail = _SET_HOME_ERRORS[result]
        raise HTTPException(status_code=status_code, detail=detail)
    return SetHomeResponse(user_id=user_id, name=name, x=request.x, y=request.y, z=request.z, result=result.value)


@router.delete("/users/{user_id}/homes/{name}", response_model=DeleteHomeResponse)
def delete_home(user_id: str, name: str, service: HomeService = Depends(get_home_service)):
    if not service.delete_home(user_id, name):
        raise HTTPException(status_code=404, detail=f"No such home: '{name}'.")
    return DeleteHomeResponse(user_id=user_id, name=name, deleted=True)


@router.get("/users/{user_id}/limit", response_model=LimitResponse)
def get_limit(user_id: str, service: HomeService = Depends(get_home_service)):
    return _limit_response(service, user_id)


@router.put("/users/{user_id}/limit", response_model=LimitResponse)
def set_limit(user_id: str, request: LimitUpdateRequest, service: HomeService = Depends(get_home_service)):
    if not service.store.set_limit(user_id, request.home_limit):
        raise HTTPException(status_code=500, detail="Failed to update home limit. Check server logs for details.")
    return _limit_response(service, user_id)


@router.post("/users/{user_id}/limit/{action}", response_model=LimitAdjustResponse)
def adjust_limit(
    user_id: str,
    action: str,
    request: LimitAdjustRequest,
    service: HomeService = Depends(get_home_service),
):
    try:
        change = service.adjust_limit(user_id, action, request.amount)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return LimitAdjustResponse(
        user_id=user_id,
        previous_limit=change.previous_limit,
        home_limit=change.home_limit,
        home_count=change.home_count,
        updated=change.updated,
        over_limit=change.over_limit,
    )


@router.get("/users/{user_id}/completions", response_model=CompletionResponse)
def completions(
    user_id: str,
    args: List[str] = Query(default=[]),
    service: HomeService = Depends(get_home_service),
):
    return CompletionResponse(suggestions=service.complete(user_id, args))


@router.delete("/users/{user_id}", response_model=DeleteUserResponse)
def delete_user(user_id: str, service: HomeService = Depends(get_home_service)):
    if not service.store.delete_quota(user_id):
        raise HTTPException(status_code=404, detail=f"No quota row for user '{user_id}'.")
    return DeleteUserResponse(user_id=user_id, deleted=True)
