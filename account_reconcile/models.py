"""
Account records used by the matcher.

FinancialAccount mirrors the financial_accounts table the persistence layer
returns for a user. AccountMatch is built by the matcher and handed back to
the caller; it has no identity of its own and is never stored here.

Both types are frozen so nothing in the matching path can modify the records
it was given.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

# Account types understood by the app
ACCOUNT_TYPES = (
    'checking',
    'savings',
    'credit_card',
    'investment',
    'retirement',
    'loan',
    'mortgage',
    'other'
)


@dataclass(frozen=True)
class FinancialAccount:
    """A manual or Plaid-connected account belonging to one user."""
    id: str
    account_type: str = 'other'
    is_manual: bool = True
    institution_name: Optional[str] = None
    account_number_last4: Optional[str] = None
    name: str = ''
    user_id: Optional[str] = None
    current_balance: float = 0.0
    available_balance: Optional[float] = None
    currency: str = 'USD'
    plaid_account_id: Optional[str] = None
    plaid_item_id: Optional[str] = None


@dataclass(frozen=True)
class AccountMatch:
    """A manual account paired with the Plaid account it probably duplicates.

    match_reasons is ordered the way evidence is evaluated: institution,
    then account number, then account type.
    """
    manual_account: FinancialAccount
    plaid_account: FinancialAccount
    match_score: int
    match_reasons: Tuple[str, ...] = ()
