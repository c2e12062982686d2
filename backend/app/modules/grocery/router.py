import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db import GetDb
from app.modules.grocery.schemas import (
    AddGroceryItemRequest,
    CategoryOut,
    CoupleOut,
    CreateCategoryRequest,
    CreateCoupleRequest,
    CreateGroceryListRequest,
    CreateUserRequest,
    GroceryItemOut,
    GroceryItemWithCategoryOut,
    GroceryListOut,
    RemoveGroceryItemRequest,
    RemoveGroceryItemResponse,
    ToggleItemCompletionRequest,
    UserOut,
)
from app.modules.grocery.services import (
    AddGroceryItem,
    CreateCategory,
    CreateCouple,
    CreateGroceryList,
    CreateUser,
    GetCurrentWeekItems,
    InvalidStateError,
    ListCategories,
    ListGroceryLists,
    NotFoundError,
    RemoveGroceryItem,
    ToggleItemCompletion,
    UniqueConstraintViolationError,
)

router = APIRouter(prefix="/api/grocery", tags=["grocery"])
logger = logging.getLogger("grocery")


def _handle_db_error(exc: Exception) -> None:
    logger.exception("grocery database error")
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Grocery storage unavailable. Run alembic upgrade head.",
    ) from exc


def _handle_grocery_error(exc: Exception) -> None:
    detail = str(exc)
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail) from exc
    if isinstance(exc, (InvalidStateError, UniqueConstraintViolationError)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail) from exc


@router.post("/createUser", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def CreateUserProcedure(payload: CreateUserRequest, db: Session = Depends(GetDb)) -> UserOut:
    try:
        record = CreateUser(db, name=payload.Name, email=str(payload.Email))
    except ValueError as exc:
        _handle_grocery_error(exc)
    except SQLAlchemyError as exc:
        _handle_db_error(exc)
    return UserOut.model_validate(record)


@router.post("/createCouple", response_model=CoupleOut, status_code=status.HTTP_201_CREATED)
def CreateCoupleProcedure(payload: CreateCoupleRequest, db: Session = Depends(GetDb)) -> CoupleOut:
    try:
        record = CreateCouple(db, user1_id=payload.User1Id, user2_id=payload.User2Id)
    except ValueError as exc:
        _handle_grocery_error(exc)
    except SQLAlchemyError as exc:
        _handle_db_error(exc)
    return CoupleOut.model_validate(record)


@router.post("/createCategory", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def CreateCategoryProcedure(
    payload: CreateCategoryRequest,
    db: Session = Depends(GetDb),
) -> CategoryOut:
    try:
        record = CreateCategory(db, name=payload.Name)
    except ValueError as exc:
        _handle_grocery_error(exc)
    except SQLAlchemyError as exc:
        _handle_db_error(exc)
    return CategoryOut.model_validate(record)


@router.get("/getCategories", response_model=list[CategoryOut])
def GetCategoriesProcedure(db: Session = Depends(GetDb)) -> list[CategoryOut]:
    try:
        return [CategoryOut.model_validate(entry) for entry in ListCategories(db)]
    except SQLAlchemyError as exc:
        _handle_db_error(exc)


@router.post(
    "/createGroceryList",
    response_model=GroceryListOut,
    status_code=status.HTTP_201_CREATED,
)
def CreateGroceryListProcedure(
    payload: CreateGroceryListRequest,
    db: Session = Depends(GetDb),
) -> GroceryListOut:
    try:
        record = CreateGroceryList(db, couple_id=payload.CoupleId, week_start=payload.WeekStart)
    except ValueError as exc:
        _handle_grocery_error(exc)
    except SQLAlchemyError as exc:
        _handle_db_error(exc)
    return GroceryListOut.model_validate(record)


@router.get("/getGroceryLists", response_model=list[GroceryListOut])
def GetGroceryListsProcedure(
    couple_id: int = Query(..., alias="coupleId"),
    db: Session = Depends(GetDb),
) -> list[GroceryListOut]:
    try:
        return [GroceryListOut.model_validate(entry) for entry in ListGroceryLists(db, couple_id)]
    except SQLAlchemyError as exc:
        _handle_db_error(exc)


@router.post(
    "/addGroceryItem",
    response_model=GroceryItemOut,
    status_code=status.HTTP_201_CREATED,
)
def AddGroceryItemProcedure(
    payload: AddGroceryItemRequest,
    db: Session = Depends(GetDb),
) -> GroceryItemOut:
    try:
        record = AddGroceryItem(
            db,
            category_id=payload.CategoryId,
            name=payload.Name,
            added_by_user_id=payload.AddedByUserId,
            quantity=payload.Quantity,
            list_id=payload.ListId,
        )
    except ValueError as exc:
        _handle_grocery_error(exc)
    except SQLAlchemyError as exc:
        _handle_db_error(exc)
    return GroceryItemOut.model_validate(record)


@router.post("/toggleItemCompletion", response_model=GroceryItemOut)
def ToggleItemCompletionProcedure(
    payload: ToggleItemCompletionRequest,
    db: Session = Depends(GetDb),
) -> GroceryItemOut:
    try:
        record = ToggleItemCompletion(db, item_id=payload.ItemId, user_id=payload.UserId)
    except ValueError as exc:
        _handle_grocery_error(exc)
    except SQLAlchemyError as exc:
        _handle_db_error(exc)
    return GroceryItemOut.model_validate(record)


@router.post("/removeGroceryItem", response_model=RemoveGroceryItemResponse)
def RemoveGroceryItemProcedure(
    payload: RemoveGroceryItemRequest,
    db: Session = Depends(GetDb),
) -> RemoveGroceryItemResponse:
    try:
        return RemoveGroceryItemResponse(Success=RemoveGroceryItem(db, item_id=payload.ItemId))
    except SQLAlchemyError as exc:
        _handle_db_error(exc)


@router.get("/getCurrentWeekList", response_model=list[GroceryItemWithCategoryOut])
def GetCurrentWeekListProcedure(
    couple_id: int = Query(..., alias="coupleId"),
    db: Session = Depends(GetDb),
) -> list[GroceryItemWithCategoryOut]:
    try:
        entries = GetCurrentWeekItems(db, couple_id)
        return [GroceryItemWithCategoryOut.model_validate(entry) for entry in entries]
    except SQLAlchemyError as exc:
        _handle_db_error(exc)
