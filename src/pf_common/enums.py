"""Global enums — must match DB CHECK constraints exactly.

Ref: alembic/versions/002_create_accounts.py, 003_create_transactions.py
"""

from enum import Enum

from src.pf_common.errors import InvalidAccountTypeError


class AccountType(str, Enum):
    BANK = "bank"
    WALLET = "wallet"
    CARD = "card"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    CASH = "cash"
    INVESTMENTS = "investments"
    OTHERS = "others"


# Values written by older clients, mapped onto the unified set.
LEGACY_ACCOUNT_TYPE_ALIASES: dict[str, AccountType] = {
    "metro": AccountType.WALLET,  # stored-value transit card
    "credit": AccountType.CREDIT_CARD,
    "debit": AccountType.DEBIT_CARD,
    "investment": AccountType.INVESTMENTS,
    "other": AccountType.OTHERS,
}


def normalize_account_type(value: str | AccountType) -> AccountType:
    """Resolve a raw account type (current or legacy spelling) to AccountType."""
    if isinstance(value, AccountType):
        return value
    key = value.strip().lower()
    if key in LEGACY_ACCOUNT_TYPE_ALIASES:
        return LEGACY_ACCOUNT_TYPE_ALIASES[key]
    try:
        return AccountType(key)
    except ValueError:
        raise InvalidAccountTypeError(value) from None


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    REFUND = "refund"
    ADJUSTMENT = "adjustment"


# Types a client may write directly; the others are produced by dedicated protocols.
WRITABLE_TRANSACTION_TYPES = frozenset(
    {TransactionType.INCOME, TransactionType.EXPENSE, TransactionType.REFUND}
)


class PaymentMode(str, Enum):
    CASH = "cash"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    UPI = "upi"
    NET_BANKING = "net_banking"
    WALLET = "wallet"
    CHEQUE = "cheque"
    OTHER = "other"
