DEFAULT_CATEGORY_NAMES = ["Produce", "Dairy", "Meat", "Pantry", "Frozen"]

ADD_FAILED_MESSAGE = "Failed to add item. Please try again."
UPDATE_FAILED_MESSAGE = "Failed to update item. Please try again."
REMOVE_FAILED_MESSAGE = "Failed to remove item. Please try again."
LOAD_FAILED_MESSAGE = "Failed to load groceries. Please try again."
