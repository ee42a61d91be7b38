"""
Delivery error taxonomy.

ValidationError is raised before anything is persisted. MediaMissing and
GatewayError fail a single delivery. StoreError (and its subclasses)
signal persistence problems.
"""


class DeliveryError(Exception):
    """Base class for scheduled delivery errors."""
    pass


class ValidationError(DeliveryError):
    """A schedule request is missing a required field or carries invalid input."""
    pass


class MediaMissing(DeliveryError):
    """The local video file referenced by a delivery no longer exists."""
    pass


class GatewayError(DeliveryError):
    """The email could not be sent."""
    pass


class StoreError(DeliveryError):
    """A read or write against the delivery store or media store failed."""
    pass


class DeliveryNotFound(StoreError):
    """No scheduled delivery exists with the given id."""

    def __init__(self, delivery_id: str):
        super().__init__(f"Scheduled delivery not found: {delivery_id}")
        self.delivery_id = delivery_id


class InvalidTransition(StoreError):
    """A status change was attempted that leaves a terminal state."""

    def __init__(self, delivery_id: str, current: str, target: str):
        super().__init__(
            f"Cannot move delivery {delivery_id} from {current} to {target}"
        )
        self.delivery_id = delivery_id
        self.current = current
        self.target = target
