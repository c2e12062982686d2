import logging
from collections import OrderedDict

from app.client.backends import BackendError, GroceryBackend, SessionContext
from app.modules.grocery.constants import (
    ADD_FAILED_MESSAGE,
    LOAD_FAILED_MESSAGE,
    REMOVE_FAILED_MESSAGE,
    UPDATE_FAILED_MESSAGE,
)
from app.modules.grocery.schemas import (
    CategoryOut,
    GroceryItemOut,
    GroceryItemWithCategoryOut,
    GroceryListOut,
)

logger = logging.getLogger("grocery.client.board")


class GroceryBoard:
    """State behind the weekly list view.

    The backend is chosen once by the caller; the board never switches between
    live and offline data on its own. Failures are surfaced through ``Error``
    instead of being raised, and toggle/remove failures re-sync the items.
    """

    def __init__(self, backend: GroceryBackend, context: SessionContext) -> None:
        self.Backend = backend
        self.Context = context
        self.Categories: list[CategoryOut] = []
        self.CurrentList: GroceryListOut | None = None
        self.Items: list[GroceryItemWithCategoryOut] = []
        self.Error: str | None = None

    @property
    def IsOffline(self) -> bool:
        return self.Backend.IsOffline

    def Load(self) -> bool:
        self.Error = None
        try:
            self.Categories = self.Backend.GetCategories()
            self.CurrentList = self.Backend.EnsureCurrentWeekList(self.Context.CoupleId)
            self.Items = self.Backend.GetCurrentWeekItems(self.Context.CoupleId)
        except BackendError as exc:
            logger.error("failed to load grocery board: %s", exc.message)
            self.Error = LOAD_FAILED_MESSAGE
            return False
        return True

    def Refresh(self) -> None:
        try:
            self.Items = self.Backend.GetCurrentWeekItems(self.Context.CoupleId)
        except BackendError as exc:
            logger.error("failed to re-sync grocery items: %s", exc.message)

    def FindCategory(self, value: str | int) -> CategoryOut | None:
        """Match a category by id or by case-insensitive name."""
        text = str(value).strip()
        for entry in self.Categories:
            if text.isdigit() and entry.Id == int(text):
                return entry
            if entry.Name.lower() == text.lower():
                return entry
        return None

    def AddItem(
        self,
        name: str,
        category_id: int | None,
        quantity: str | None = None,
    ) -> GroceryItemOut | None:
        if not (name or "").strip() or not category_id:
            return None
        self.Error = None
        try:
            if self.CurrentList is None:
                self.CurrentList = self.Backend.EnsureCurrentWeekList(self.Context.CoupleId)
            record = self.Backend.AddItem(
                category_id=category_id,
                name=name.strip(),
                added_by_user_id=self.Context.UserId,
                quantity=(quantity or "").strip() or None,
                list_id=self.CurrentList.Id,
            )
            self.Items = self.Backend.GetCurrentWeekItems(self.Context.CoupleId)
        except BackendError as exc:
            logger.error("failed to add grocery item: %s", exc.message)
            self.Error = ADD_FAILED_MESSAGE
            return None
        return record

    def ToggleItem(self, item_id: int) -> GroceryItemOut | None:
        try:
            record = self.Backend.ToggleItem(item_id, self.Context.UserId)
        except BackendError as exc:
            logger.error("failed to toggle grocery item %s: %s", item_id, exc.message)
            self.Error = UPDATE_FAILED_MESSAGE
            self.Refresh()
            return None
        self.Items = [
            entry.model_copy(
                update={
                    "IsCompleted": record.IsCompleted,
                    "CompletedByUserId": record.CompletedByUserId,
                    "CompletedAt": record.CompletedAt,
                }
            )
            if entry.Id == item_id
            else entry
            for entry in self.Items
        ]
        return record

    def RemoveItem(self, item_id: int) -> bool:
        try:
            removed = self.Backend.RemoveItem(item_id)
        except BackendError as exc:
            logger.error("failed to remove grocery item %s: %s", item_id, exc.message)
            self.Error = REMOVE_FAILED_MESSAGE
            self.Refresh()
            return False
        self.Items = [entry for entry in self.Items if entry.Id != item_id]
        return removed

    def ItemsByCategory(self) -> "OrderedDict[str, list[GroceryItemWithCategoryOut]]":
        grouped: OrderedDict[str, list[GroceryItemWithCategoryOut]] = OrderedDict()
        for entry in self.Items:
            grouped.setdefault(entry.Category.Name, []).append(entry)
        return grouped

    def Summary(self) -> tuple[int, int]:
        completed = sum(1 for entry in self.Items if entry.IsCompleted)
        return completed, len(self.Items)
