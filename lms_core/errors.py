"""Exception types surfaced by the scheduling engine."""


class LmsCoreError(Exception):
    """Base exception for engine errors."""

    pass


class ValidationError(LmsCoreError):
    """Bad input, raised before any persistence attempt."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidTransition(LmsCoreError):
    """A call status transition was attempted from a state that forbids it."""

    def __init__(self, call_id: str, current_status: str, transition: str):
        super().__init__(
            f"Call {call_id} cannot {transition}, current status: {current_status}"
        )
        self.call_id = call_id
        self.current_status = current_status
        self.transition = transition


class NotFound(LmsCoreError):
    """Unknown call or user id."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class DeliveryFailure(LmsCoreError):
    """A notification channel failed for one recipient.

    Never surfaced as an operation failure; the dispatcher records it.
    """

    pass
