import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date

import httpx
from pydantic import ValidationError

from app.modules.grocery.constants import DEFAULT_CATEGORY_NAMES
from app.modules.grocery.schemas import (
    CategoryOut,
    GroceryItemOut,
    GroceryItemWithCategoryOut,
    GroceryListOut,
)
from app.services.schedules import CurrentWeekStartDate, NowUtc

logger = logging.getLogger("grocery.client")

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass
class SessionContext:
    UserId: int
    CoupleId: int


class BackendError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class GroceryBackend(ABC):
    IsOffline = False

    @abstractmethod
    def GetCategories(self) -> list[CategoryOut]:
        raise NotImplementedError

    @abstractmethod
    def EnsureCurrentWeekList(self, couple_id: int) -> GroceryListOut:
        raise NotImplementedError

    @abstractmethod
    def GetCurrentWeekItems(self, couple_id: int) -> list[GroceryItemWithCategoryOut]:
        raise NotImplementedError

    @abstractmethod
    def AddItem(
        self,
        *,
        category_id: int,
        name: str,
        added_by_user_id: int,
        quantity: str | None = None,
        list_id: int | None = None,
    ) -> GroceryItemOut:
        raise NotImplementedError

    @abstractmethod
    def ToggleItem(self, item_id: int, user_id: int) -> GroceryItemOut:
        raise NotImplementedError

    @abstractmethod
    def RemoveItem(self, item_id: int) -> bool:
        raise NotImplementedError


def _ExtractDetail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    detail = payload.get("detail") if isinstance(payload, dict) else None
    if isinstance(detail, str):
        return detail
    if detail:
        return str(detail)
    return f"HTTP {response.status_code}"


class RemoteGroceryBackend(GroceryBackend):
    """Talks to the grocery RPC routes over HTTP."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout_seconds)

    def Close(self) -> None:
        self._client.close()

    def _Request(self, method: str, path: str, **kwargs):
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _ExtractDetail(exc.response)
            logger.warning(
                "grocery request failed: %s %s status=%s detail=%s",
                method,
                path,
                exc.response.status_code,
                detail,
            )
            raise BackendError(detail, status_code=exc.response.status_code) from exc
        except httpx.RequestError as exc:
            logger.warning("grocery backend unreachable: %s %s (%s)", method, path, exc)
            raise BackendError(f"Backend unavailable: {exc}") from exc
        return response.json()

    def _Parse(self, model, payload):
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise BackendError(f"Unexpected response shape: {exc}") from exc

    def Ping(self) -> dict:
        return self._Request("GET", "/api/health")

    def GetCategories(self) -> list[CategoryOut]:
        payload = self._Request("GET", "/api/grocery/getCategories")
        return [self._Parse(CategoryOut, entry) for entry in payload]

    def GetGroceryLists(self, couple_id: int) -> list[GroceryListOut]:
        payload = self._Request("GET", "/api/grocery/getGroceryLists", params={"coupleId": couple_id})
        return [self._Parse(GroceryListOut, entry) for entry in payload]

    def EnsureCurrentWeekList(self, couple_id: int) -> GroceryListOut:
        week_start = CurrentWeekStartDate()
        for entry in self.GetGroceryLists(couple_id):
            if entry.WeekStart == week_start:
                return entry
        payload = self._Request(
            "POST",
            "/api/grocery/createGroceryList",
            json={"CoupleId": couple_id, "WeekStart": week_start.isoformat()},
        )
        return self._Parse(GroceryListOut, payload)

    def GetCurrentWeekItems(self, couple_id: int) -> list[GroceryItemWithCategoryOut]:
        payload = self._Request(
            "GET",
            "/api/grocery/getCurrentWeekList",
            params={"coupleId": couple_id},
        )
        return [self._Parse(GroceryItemWithCategoryOut, entry) for entry in payload]

    def AddItem(
        self,
        *,
        category_id: int,
        name: str,
        added_by_user_id: int,
        quantity: str | None = None,
        list_id: int | None = None,
    ) -> GroceryItemOut:
        payload = self._Request(
            "POST",
            "/api/grocery/addGroceryItem",
            json={
                "ListId": list_id,
                "CategoryId": category_id,
                "Name": name,
                "Quantity": quantity,
                "AddedByUserId": added_by_user_id,
            },
        )
        return self._Parse(GroceryItemOut, payload)

    def ToggleItem(self, item_id: int, user_id: int) -> GroceryItemOut:
        payload = self._Request(
            "POST",
            "/api/grocery/toggleItemCompletion",
            json={"ItemId": item_id, "UserId": user_id},
        )
        return self._Parse(GroceryItemOut, payload)

    def RemoveItem(self, item_id: int) -> bool:
        payload = self._Request("POST", "/api/grocery/removeGroceryItem", json={"ItemId": item_id})
        return bool(payload.get("Success"))


class InMemoryGroceryBackend(GroceryBackend):
    """Local state used when the API cannot be reached; lost on exit."""

    IsOffline = True

    def __init__(self, category_names: list[str] | None = None) -> None:
        created_at = NowUtc()
        self._categories = [
            CategoryOut(Id=index, Name=name, CreatedAt=created_at)
            for index, name in enumerate(category_names or DEFAULT_CATEGORY_NAMES, start=1)
        ]
        self._lists: dict[tuple[int, date], GroceryListOut] = {}
        self._items: dict[int, GroceryItemOut] = {}
        self._next_list_id = 1
        self._next_item_id = 1

    def _Category(self, category_id: int) -> CategoryOut:
        for entry in self._categories:
            if entry.Id == category_id:
                return entry
        raise BackendError(f"Category with id {category_id} does not exist", status_code=404)

    def GetCategories(self) -> list[CategoryOut]:
        return list(self._categories)

    def EnsureCurrentWeekList(self, couple_id: int) -> GroceryListOut:
        key = (couple_id, CurrentWeekStartDate())
        existing = self._lists.get(key)
        if existing:
            return existing
        record = GroceryListOut(
            Id=self._next_list_id,
            CoupleId=couple_id,
            WeekStart=key[1],
            CreatedAt=NowUtc(),
        )
        self._next_list_id += 1
        self._lists[key] = record
        return record

    def GetCurrentWeekItems(self, couple_id: int) -> list[GroceryItemWithCategoryOut]:
        week_list = self._lists.get((couple_id, CurrentWeekStartDate()))
        if not week_list:
            return []
        return [
            GroceryItemWithCategoryOut(
                **entry.model_dump(),
                Category=self._Category(entry.CategoryId),
            )
            for entry in self._items.values()
            if entry.ListId == week_list.Id
        ]

    def AddItem(
        self,
        *,
        category_id: int,
        name: str,
        added_by_user_id: int,
        quantity: str | None = None,
        list_id: int | None = None,
    ) -> GroceryItemOut:
        self._Category(category_id)
        if not list_id:
            raise BackendError("A list id is required when working offline")
        if not any(entry.Id == list_id for entry in self._lists.values()):
            raise BackendError(f"Grocery list with id {list_id} does not exist", status_code=404)
        record = GroceryItemOut(
            Id=self._next_item_id,
            ListId=list_id,
            CategoryId=category_id,
            Name=name.strip(),
            Quantity=(quantity or "").strip() or None,
            IsCompleted=False,
            AddedByUserId=added_by_user_id,
            CompletedByUserId=None,
            CreatedAt=NowUtc(),
            CompletedAt=None,
        )
        self._next_item_id += 1
        self._items[record.Id] = record
        return record

    def ToggleItem(self, item_id: int, user_id: int) -> GroceryItemOut:
        entry = self._items.get(item_id)
        if not entry:
            raise BackendError(f"Grocery item with id {item_id} not found", status_code=404)
        if entry.IsCompleted:
            updated = entry.model_copy(
                update={"IsCompleted": False, "CompletedByUserId": None, "CompletedAt": None}
            )
        else:
            updated = entry.model_copy(
                update={"IsCompleted": True, "CompletedByUserId": user_id, "CompletedAt": NowUtc()}
            )
        self._items[item_id] = updated
        return updated

    def RemoveItem(self, item_id: int) -> bool:
        return self._items.pop(item_id, None) is not None


def SelectBackend(
    base_url: str = DEFAULT_API_URL,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    client: httpx.Client | None = None,
) -> GroceryBackend:
    remote = RemoteGroceryBackend(base_url, timeout_seconds=timeout_seconds, client=client)
    try:
        remote.Ping()
    except BackendError as exc:
        logger.warning("backend unavailable, using offline mode: %s", exc.message)
        remote.Close()
        return InMemoryGroceryBackend()
    return remote
