"""
Application error taxonomy.

Every failure that crosses an API boundary is one of these. Routers let them
propagate; the handler registered in ``business_hub.main`` renders them as
``{"success": False, "error": {"code": ..., "message": ...}}``.
"""
from fastapi import status


class AppError(Exception):
    """Base class: a stable error code, a human-readable message and an HTTP status."""

    code = "APP_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Request failed"

    def __init__(self, message: str | None = None, **extra):
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.extra}


class InsufficientCredits(AppError):
    code = "INSUFFICIENT_CREDITS"
    status_code = status.HTTP_402_PAYMENT_REQUIRED

    def __init__(self, cost: int, balance: int | None = None):
        super().__init__(
            f"You need {cost} credits to use this feature.",
            cost=cost,
            balance=balance,
        )
        self.cost = cost
        self.balance = balance


class UnknownFeature(AppError):
    code = "UNKNOWN_FEATURE"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, feature_id: str):
        super().__init__(f"Unknown metered feature: {feature_id!r}", feature=feature_id)


class RoomNotFound(AppError):
    code = "ROOM_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    message = "This room does not exist or was deleted by the host."


class RoomFull(AppError):
    code = "ROOM_FULL"
    status_code = status.HTTP_409_CONFLICT
    message = "This room has reached its maximum number of participants."


class NotRoomHost(AppError):
    code = "NOT_ROOM_HOST"
    status_code = status.HTTP_403_FORBIDDEN
    message = "Only the host can do this."


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = 422


class AuthError(AppError):
    code = "AUTH_INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect email or password"


class StoreUnavailable(AppError):
    code = "STORE_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "The data store is unavailable. Please try again."


class GenerationFailure(AppError):
    code = "GENERATION_FAILED"
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "The AI service could not generate a result. Please try again."
