"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class EmptyQueryError(ValueError):
    """Raised when a natural-language query has no content."""

    def __init__(self):
        super().__init__("Empty query provided")


class MissingEntityError(Exception):
    """Raised when an intent structurally requires an entity the query lacks."""

    def __init__(self, intent: str, entity_type: str, message: str):
        self.intent = intent
        self.entity_type = entity_type
        super().__init__(message)


class TrackerApiError(Exception):
    """Raised when the remote tracker API returns an error response."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")
