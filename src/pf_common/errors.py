"""Unified error codes and custom exceptions.

Every error carries a machine-readable ``kind`` and ``retryable`` flag plus
structured ``details``; user-facing wording is the caller's concern.

Error code ranges:
  1xxx: Auth
  2xxx: Account
  3xxx: Transaction / Transfer
  4xxx: Adjustment
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    kind: str = "internal"
    retryable: bool = False

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def to_data(self) -> dict[str, Any]:
        """Structured payload placed in the error envelope's ``data`` field."""
        return {"kind": self.kind, "retryable": self.retryable, **self.details}


# --- Families ---

class ValidationError(AppError):
    """Malformed or out-of-range input. Not retryable without a client fix."""

    kind = "validation"

    def __init__(
        self,
        message: str,
        code: int = 9003,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message, 422, details)


class NotFoundError(AppError):
    """Entity absent OR owned by another user — the two are never distinguished."""

    kind = "not_found"

    def __init__(self, code: int, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code, message, 404, details)


class ConflictError(AppError):
    kind = "conflict"

    def __init__(self, code: int, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(code, message, 409, details)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    kind = "unauthorized"

    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


# --- 2xxx: Account ---

class InsufficientFundsError(AppError):
    kind = "insufficient_funds"

    def __init__(self, available: int, requested: int, currency: str) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: requested {requested} cents, available {available} cents",
            422,
            {"available": available, "requested": requested, "currency": currency},
        )
        self.available = available
        self.requested = requested
        self.currency = currency


class AccountNotFoundError(NotFoundError):
    def __init__(self, account_id: str) -> None:
        super().__init__(2002, f"Account not found: {account_id}", {"account_id": account_id})


class AccountHasTransactionsError(ConflictError):
    def __init__(self, account_id: str, transaction_count: int) -> None:
        super().__init__(
            2003,
            "Cannot delete account with existing transactions",
            {"account_id": account_id, "transaction_count": transaction_count},
        )


class InvalidAccountTypeError(ValidationError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Unknown account type: {value}", 2004, {"type": value})


# --- 3xxx: Transaction / Transfer ---

class TransactionNotFoundError(NotFoundError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            3001, f"Transaction not found: {transaction_id}", {"transaction_id": transaction_id}
        )


class SameAccountTransferError(ValidationError):
    def __init__(self, account_id: str) -> None:
        super().__init__(
            "Source and destination accounts cannot be the same",
            3002,
            {"account_id": account_id},
        )


class InvalidAmountError(ValidationError):
    def __init__(self, amount: object) -> None:
        super().__init__(f"Amount must be a positive number of cents, got {amount}", 3003)


class UnsupportedTransactionTypeError(ValidationError):
    def __init__(self, tx_type: str, hint: str) -> None:
        super().__init__(
            f"Transactions of type '{tx_type}' cannot be written directly: {hint}",
            3004,
            {"type": tx_type},
        )


class TransferLegImmutableError(ValidationError):
    def __init__(self, transaction_id: str, fields: list[str]) -> None:
        super().__init__(
            f"Transfer legs cannot change {', '.join(fields)}; delete and recreate the transfer",
            3005,
            {"transaction_id": transaction_id, "fields": fields},
        )


# --- 4xxx: Adjustment ---

class AdjustmentReasonRequiredError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Adjustment reason is required", 4001)


# --- 9xxx: System ---

class RateLimitError(AppError):
    kind = "rate_limited"
    retryable = True

    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransactionAbortedError(AppError):
    """The database aborted the atomic write (serialization failure / deadlock)."""

    kind = "transaction_aborted"
    retryable = True

    def __init__(self, detail: str = "Concurrent update conflict, please retry") -> None:
        super().__init__(9004, detail, 503)
