"""Sign resolver — the single rule mapping a transaction type to its balance impact.

Amounts are stored as positive magnitudes; the direction is derived here and
never persisted.

    income     +1
    refund     +1
    expense    -1
    adjustment +1   (legacy rows only; new corrections use the Adjustment entity)
    transfer    0   (legs are stored as income/expense, never as 'transfer')
"""

from collections.abc import Iterable

from src.pf_common.enums import TransactionType

_SIGNS: dict[TransactionType, int] = {
    TransactionType.INCOME: 1,
    TransactionType.REFUND: 1,
    TransactionType.EXPENSE: -1,
    TransactionType.ADJUSTMENT: 1,
    TransactionType.TRANSFER: 0,
}


def resolve_sign(tx_type: str | TransactionType) -> int:
    """Return +1, -1 or 0 for a transaction type. Unknown types resolve to 0."""
    try:
        return _SIGNS[TransactionType(tx_type)]
    except ValueError:
        return 0


def signed_delta(tx_type: str | TransactionType, amount_cents: int) -> int:
    """Directional balance impact of one transaction, in cents."""
    return resolve_sign(tx_type) * amount_cents


def calculate_balance(
    opening_balance_cents: int, transactions: Iterable[tuple[str, int]]
) -> int:
    """Fold (type, amount_cents) pairs onto an opening balance."""
    return opening_balance_cents + sum(
        signed_delta(tx_type, amount) for tx_type, amount in transactions
    )
