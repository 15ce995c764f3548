"""
Helpers for the manual-to-Plaid account migration workflow.

The caller owns persistence: these functions only decide which accounts are
candidates and what the merged record should look like.
"""

import dataclasses
import logging

from account_reconcile.matcher import DEFAULT_POLICY, filter_matched_accounts, find_account_matches

logger = logging.getLogger(__name__)

# Account fields safe to expose in a match listing
PUBLIC_ACCOUNT_FIELDS = [
    'id',
    'name',
    'institution_name',
    'account_type',
    'account_number_last4',
    'current_balance'
]


def split_accounts(accounts):
    """Split a user's accounts into (manual_accounts, plaid_accounts), keeping order."""
    manual_accounts = [account for account in accounts if account.is_manual]
    plaid_accounts = [account for account in accounts if not account.is_manual]
    return manual_accounts, plaid_accounts


def find_migration_candidates(accounts, exclude_plaid_account_ids=(), policy=DEFAULT_POLICY):
    """
    Find migration candidates among all of a user's accounts.

    Args:
        accounts (list): Manual and Plaid accounts together
        exclude_plaid_account_ids (list): Plaid account IDs already claimed
        policy (MatchPolicy): Weights and minimum score

    Returns:
        list: AccountMatch objects sorted by score, highest first
    """
    manual_accounts, plaid_accounts = split_accounts(accounts)
    logger.info(f"Finding matches for {len(manual_accounts)} manual and {len(plaid_accounts)} Plaid accounts")

    if not manual_accounts or not plaid_accounts:
        return []

    matches = find_account_matches(manual_accounts, plaid_accounts, policy)
    return filter_matched_accounts(matches, exclude_plaid_account_ids)


def plan_account_migration(manual_account, plaid_account):
    """
    Build the record a manual account becomes once linked to a Plaid account.

    Args:
        manual_account (FinancialAccount): Account to keep
        plaid_account (FinancialAccount): Redundant Plaid account whose
            connection details are taken over

    Returns:
        FinancialAccount: Copy of manual_account carrying the Plaid connection

    Raises:
        ValueError: If manual_account is already Plaid-connected or
            plaid_account is not Plaid-connected

    Notes:
        - The manual account's name and balances are kept (user may have customized them)
        - Neither input is modified
    """
    if not manual_account.is_manual:
        raise ValueError(f"Account {manual_account.id} is already Plaid-connected")

    if plaid_account.is_manual:
        raise ValueError(f"Account {plaid_account.id} is not Plaid-connected")

    logger.info(f"Planning migration of {manual_account.id} onto Plaid account {plaid_account.id}")

    return dataclasses.replace(
        manual_account,
        is_manual=False,
        plaid_account_id=plaid_account.plaid_account_id,
        plaid_item_id=plaid_account.plaid_item_id,
        institution_name=plaid_account.institution_name,
        account_number_last4=plaid_account.account_number_last4
    )


def match_to_dict(match):
    """Public view of a match, limited to fields safe to return to the user."""
    return {
        'manualAccount': {field: getattr(match.manual_account, field) for field in PUBLIC_ACCOUNT_FIELDS},
        'plaidAccount': {field: getattr(match.plaid_account, field) for field in PUBLIC_ACCOUNT_FIELDS},
        'matchScore': match.match_score,
        'matchReasons': list(match.match_reasons)
    }
