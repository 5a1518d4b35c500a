"""
Exceptions typées du domaine commandes.

Chaque erreur porte un ``code`` stable (lisible machine) et le ``status_code``
HTTP utilisé par les endpoints pour la traduire en HTTPException.

    OrderingError
    +-- ValidationError
    |   +-- InvalidItemError
    +-- NotFoundError
    +-- AccessDeniedError
    +-- AllocationError
    +-- ConflictError
    +-- PersistenceError
"""

from __future__ import annotations


class OrderingError(Exception):
    code: str = "ORDERING_ERROR"
    status_code: int = 500

    def __init__(self, message: str, **details) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(OrderingError):
    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidItemError(ValidationError):
    code = "INVALID_ITEM"

    def __init__(self, message: str, *, index: int | None = None, **details) -> None:
        super().__init__(message, index=index, **details)
        self.index = index


class NotFoundError(OrderingError):
    code = "NOT_FOUND"
    status_code = 404


class AccessDeniedError(OrderingError):
    code = "ACCESS_DENIED"
    status_code = 403


class AllocationError(OrderingError):
    """Verrou non obtenu (timeout, contention). La transaction est annulée ; rejouable."""

    code = "ALLOCATION_FAILED"
    status_code = 409


class ConflictError(OrderingError):
    code = "CONFLICT"
    status_code = 409


class PersistenceError(OrderingError):
    code = "PERSISTENCE_FAILED"
    status_code = 500
