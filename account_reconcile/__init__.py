"""
Account Reconcile - A tool for matching manually entered accounts to Plaid-connected accounts.

This package provides functionality to:
- Normalize and compare institution names
- Score manual/Plaid account pairs on institution, account number and type
- Rank candidate matches and pick the best match for an account
- Plan the merge of a manual account onto its Plaid counterpart
- Load accounts from CSV/Excel files and write match reports

A pair is reported when its score reaches 50:
- Institution name match: 30 points
- Account number (last 4) match: 50 points
- Account type match: 20 points
"""

from .models import AccountMatch, FinancialAccount
from .matcher import (
    MatchPolicy,
    normalize_institution_name,
    institution_names_match,
    score_account_pair,
    find_account_matches,
    get_best_match_for_account,
    filter_matched_accounts,
    build_score_matrix
)
from .account_types import map_plaid_account_type
from .migration import find_migration_candidates, plan_account_migration

__all__ = [
    'AccountMatch',
    'FinancialAccount',
    'MatchPolicy',
    'normalize_institution_name',
    'institution_names_match',
    'score_account_pair',
    'find_account_matches',
    'get_best_match_for_account',
    'filter_matched_accounts',
    'build_score_matrix',
    'map_plaid_account_type',
    'find_migration_candidates',
    'plan_account_migration'
]
