"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Actor
  3xxx: Listing
  4xxx: Order / escrow
  9xxx: System

Every error is a business-rule violation surfaced synchronously to the caller.
None of them are retried by the settlement engine.
"""

from decimal import Decimal

from src.bx_common.money import quantity_to_display


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/Actor ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class ForbiddenError(AppError):
    def __init__(self, action: str) -> None:
        super().__init__(1003, f"Actor is not allowed to {action}", 403)


# --- 3xxx: Listing ---

class NotFoundError(AppError):
    """Referenced listing or order does not exist."""

    def __init__(self, kind: str, entity_id: str, code: int = 3001) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(code, f"{kind.capitalize()} not found: {entity_id}", 404)


class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id: str) -> None:
        super().__init__("listing", listing_id, 3001)


class ListingUnavailableError(AppError):
    def __init__(self, listing_id: str, status: str) -> None:
        super().__init__(
            3002,
            f"Listing {listing_id} is not available for purchase (status={status})",
            422,
        )


class InsufficientQuantityError(AppError):
    def __init__(self, requested: Decimal, available: Decimal, unit: str = "") -> None:
        self.requested = requested
        self.available = available
        unit_label = f" {unit.lower()}" if unit else ""
        super().__init__(
            3003,
            f"Insufficient quantity: requested {quantity_to_display(requested)}, "
            f"only {quantity_to_display(available)}{unit_label} available",
            422,
        )


# --- 4xxx: Order ---

class ValidationError(AppError):
    """Malformed input: non-positive quantity, missing fields, blank reason."""

    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Validation failed: {detail}", 422)


class InvalidActorError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, f"Invalid actor: {detail}", 422)


class InvalidTransitionError(AppError):
    def __init__(self, order_id: str, current: str, target: str) -> None:
        self.order_id = order_id
        self.current = current
        self.target = target
        super().__init__(
            4003,
            f"Order {order_id} cannot move from {current} to {target}",
            409,
        )


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__("order", order_id, 4004)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
