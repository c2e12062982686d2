import logging
from contextlib import contextmanager
from datetime import date, datetime

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.modules.grocery.models import Category, Couple, GroceryItem, GroceryList, User
from app.services.schedules import CurrentWeekStartDate, LocalNow, NowUtc, WeekRange

logger = logging.getLogger("grocery.services")

MAX_ITEM_LENGTH = 200
MAX_QUANTITY_LENGTH = 80
MAX_NAME_LENGTH = 120


class GroceryError(ValueError):
    pass


class NotFoundError(GroceryError):
    pass


class InvalidStateError(GroceryError):
    pass


class UniqueConstraintViolationError(GroceryError):
    pass


@contextmanager
def _Operation(db: Session, name: str):
    try:
        yield
    except ValueError as exc:
        db.rollback()
        logger.warning("%s rejected: %s", name, exc)
        raise
    except Exception:
        db.rollback()
        logger.exception("%s failed", name)
        raise


def NormalizeLabel(value: str | None) -> str:
    if value is None:
        return ""
    return " ".join(value.strip().split())


def ValidateLabel(value: str | None, field: str, max_length: int) -> str:
    normalized = NormalizeLabel(value)
    if not normalized:
        raise ValueError(f"{field} is required")
    if len(normalized) > max_length:
        raise ValueError(f"{field} is too long")
    return normalized


def NormalizeQuantity(value: str | None) -> str | None:
    normalized = NormalizeLabel(value)
    if not normalized:
        return None
    if len(normalized) > MAX_QUANTITY_LENGTH:
        raise ValueError("Quantity is too long")
    return normalized


def _RequireUser(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.Id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} does not exist")
    return user


def _RequireCouple(db: Session, couple_id: int) -> Couple:
    couple = db.query(Couple).filter(Couple.Id == couple_id).first()
    if not couple:
        raise NotFoundError(f"Couple with id {couple_id} does not exist")
    return couple


def _RequireCategory(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.Id == category_id).first()
    if not category:
        raise NotFoundError(f"Category with id {category_id} does not exist")
    return category


def CreateUser(db: Session, name: str, email: str) -> User:
    with _Operation(db, "create user"):
        normalized_name = ValidateLabel(name, "Name", MAX_NAME_LENGTH)
        normalized_email = (email or "").strip()
        if not normalized_email:
            raise ValueError("Email is required")
        existing = db.query(User).filter(User.Email == normalized_email).first()
        if existing:
            raise UniqueConstraintViolationError(
                f"Email must be unique: {normalized_email} is already registered"
            )
        record = User(Name=normalized_name, Email=normalized_email, CreatedAt=NowUtc())
        db.add(record)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise UniqueConstraintViolationError(
                f"Email must be unique: {normalized_email} is already registered"
            ) from exc
        db.refresh(record)
        return record


def CreateCouple(db: Session, user1_id: int, user2_id: int) -> Couple:
    with _Operation(db, "create couple"):
        _RequireUser(db, user1_id)
        _RequireUser(db, user2_id)
        record = Couple(User1Id=user1_id, User2Id=user2_id, CreatedAt=NowUtc())
        db.add(record)
        db.commit()
        db.refresh(record)
        return record


def CreateCategory(db: Session, name: str) -> Category:
    with _Operation(db, "create category"):
        record = Category(Name=ValidateLabel(name, "Name", MAX_NAME_LENGTH), CreatedAt=NowUtc())
        db.add(record)
        db.commit()
        db.refresh(record)
        return record


def ListCategories(db: Session) -> list[Category]:
    with _Operation(db, "list categories"):
        return db.query(Category).order_by(Category.Id.asc()).all()


def _FindList(db: Session, couple_id: int, week_start: date) -> GroceryList | None:
    return (
        db.query(GroceryList)
        .filter(GroceryList.CoupleId == couple_id, GroceryList.WeekStart == week_start)
        .first()
    )


def _GetOrCreateList(db: Session, couple_id: int, week_start: date) -> GroceryList:
    existing = _FindList(db, couple_id, week_start)
    if existing:
        return existing
    record = GroceryList(CoupleId=couple_id, WeekStart=week_start, CreatedAt=NowUtc())
    try:
        with db.begin_nested():
            db.add(record)
    except IntegrityError:
        # Another request inserted the same (couple, week) list first.
        existing = _FindList(db, couple_id, week_start)
        if not existing:
            raise
        logger.info(
            "reusing grocery list %s created concurrently for couple %s week %s",
            existing.Id,
            couple_id,
            week_start.isoformat(),
        )
        return existing
    return record


def CreateGroceryList(db: Session, couple_id: int, week_start: date) -> GroceryList:
    with _Operation(db, "create grocery list"):
        _RequireCouple(db, couple_id)
        record = _GetOrCreateList(db, couple_id, week_start)
        db.commit()
        db.refresh(record)
        return record


def ListGroceryLists(db: Session, couple_id: int) -> list[GroceryList]:
    with _Operation(db, "list grocery lists"):
        return (
            db.query(GroceryList)
            .filter(GroceryList.CoupleId == couple_id)
            .order_by(GroceryList.WeekStart.desc(), GroceryList.Id.desc())
            .all()
        )


def FindCoupleForUser(db: Session, user_id: int) -> Couple | None:
    couples = (
        db.query(Couple)
        .filter(or_(Couple.User1Id == user_id, Couple.User2Id == user_id))
        .order_by(Couple.Id.asc())
        .all()
    )
    if not couples:
        return None
    if len(couples) > 1:
        logger.warning(
            "user %s belongs to %s couples (%s); using couple %s",
            user_id,
            len(couples),
            ", ".join(str(entry.Id) for entry in couples),
            couples[0].Id,
        )
    return couples[0]


def ResolveCurrentWeekList(
    db: Session,
    couple_id: int,
    week_start: date | None = None,
) -> GroceryList:
    return _GetOrCreateList(db, couple_id, week_start or CurrentWeekStartDate())


def AddGroceryItem(
    db: Session,
    category_id: int,
    name: str,
    added_by_user_id: int,
    quantity: str | None = None,
    list_id: int | None = None,
) -> GroceryItem:
    with _Operation(db, "add grocery item"):
        _RequireUser(db, added_by_user_id)
        _RequireCategory(db, category_id)
        normalized_name = ValidateLabel(name, "Name", MAX_ITEM_LENGTH)
        normalized_quantity = NormalizeQuantity(quantity)

        # Ids start at 1, so a zero list id means "use this week's list".
        if list_id:
            grocery_list = db.query(GroceryList).filter(GroceryList.Id == list_id).first()
            if not grocery_list:
                raise NotFoundError(f"Grocery list with id {list_id} does not exist")
        else:
            couple = FindCoupleForUser(db, added_by_user_id)
            if not couple:
                raise InvalidStateError(
                    f"User with id {added_by_user_id} is not part of any couple"
                )
            grocery_list = ResolveCurrentWeekList(db, couple.Id)

        record = GroceryItem(
            ListId=grocery_list.Id,
            CategoryId=category_id,
            Name=normalized_name,
            Quantity=normalized_quantity,
            IsCompleted=False,
            AddedByUserId=added_by_user_id,
            CompletedByUserId=None,
            CompletedAt=None,
            CreatedAt=NowUtc(),
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        return record


def ToggleItemCompletion(
    db: Session,
    item_id: int,
    user_id: int,
    now: datetime | None = None,
) -> GroceryItem:
    with _Operation(db, "toggle item completion"):
        _RequireUser(db, user_id)
        entry = db.query(GroceryItem).filter(GroceryItem.Id == item_id).first()
        if not entry:
            raise NotFoundError(f"Grocery item with id {item_id} not found")
        if entry.IsCompleted:
            entry.IsCompleted = False
            entry.CompletedByUserId = None
            entry.CompletedAt = None
        else:
            entry.IsCompleted = True
            entry.CompletedByUserId = user_id
            entry.CompletedAt = now or NowUtc()
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry


def RemoveGroceryItem(db: Session, item_id: int) -> bool:
    with _Operation(db, "remove grocery item"):
        count = (
            db.query(GroceryItem)
            .filter(GroceryItem.Id == item_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return bool(count)


def GetCurrentWeekItems(
    db: Session,
    couple_id: int,
    now: datetime | None = None,
) -> list[GroceryItem]:
    with _Operation(db, "get current week list"):
        start, end = WeekRange(now or LocalNow())
        return (
            db.query(GroceryItem)
            .join(GroceryList, GroceryItem.ListId == GroceryList.Id)
            .options(joinedload(GroceryItem.Category))
            .filter(
                GroceryList.CoupleId == couple_id,
                GroceryList.WeekStart >= start.date(),
                GroceryList.WeekStart <= end.date(),
            )
            .order_by(GroceryItem.Id.asc())
            .all()
        )
