"""
Account Matcher

Detects manual accounts that probably duplicate an account discovered through
Plaid, so the two records can be merged instead of tracked twice.

Matching Criteria:
- Institution name: 30 points when the normalized names are similar
- Account number: 50 points when both last-4 values are present and equal
- Account type: 20 points when the types are equal

A pair is a match when its score reaches the minimum score (50 by default).
That means matching last-4 digits alone qualify, and so do institution plus
type. Institution alone (30) or type alone (20) never qualify.

Design Principles:
1. Pure: no I/O and no shared state, inputs are never modified
2. Deterministic: equal scores keep cross-product order (manual outer, Plaid inner)
3. Tunable: weights and threshold live in MatchPolicy, not in the algorithm
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from account_reconcile.models import AccountMatch, FinancialAccount

logger = logging.getLogger(__name__)

INSTITUTION_MATCH_POINTS = 30
ACCOUNT_NUMBER_MATCH_POINTS = 50
ACCOUNT_TYPE_MATCH_POINTS = 20
MINIMUM_MATCH_SCORE = 50

# Shorter tokens are ignored by the shared-word check
SIGNIFICANT_WORD_LENGTH = 3

# Words too common in institution names to tell two institutions apart
GENERIC_INSTITUTION_WORDS = (
    'bank',
    'credit union',
    'cu',
    'federal',
    'savings',
    'national',
    'trust',
    'fsb'
)

_PUNCTUATION_RE = re.compile(r'[^0-9a-z_\s]')
_GENERIC_WORDS_RE = re.compile(
    r'\b(?:' + '|'.join(word.replace(' ', r'\s+') for word in GENERIC_INSTITUTION_WORDS) + r')\b'
)
_WHITESPACE_RE = re.compile(r'\s+')


@dataclass(frozen=True)
class MatchPolicy:
    """Weights and acceptance threshold used when scoring account pairs.

    match_empty_names=False turns on the guard for institution names that
    normalize to nothing (e.g. "Bank" or "Federal Savings"). By default such
    names are treated like any other string, which means they match every
    institution through the containment check.
    """
    institution_points: int = INSTITUTION_MATCH_POINTS
    account_number_points: int = ACCOUNT_NUMBER_MATCH_POINTS
    account_type_points: int = ACCOUNT_TYPE_MATCH_POINTS
    minimum_score: int = MINIMUM_MATCH_SCORE
    match_empty_names: bool = True


DEFAULT_POLICY = MatchPolicy()


def normalize_institution_name(name: str) -> str:
    """
    Normalize an institution name for comparison.

    Args:
        name (str): Raw institution name, e.g. "Bank of America, N.A."

    Returns:
        str: Lowercase name without punctuation, generic banking words or
        extra whitespace, e.g. "of america na"

    Notes:
        - Generic words are removed only as whole words ("cu" but not "cuna")
        - Removal repeats until stable so normalizing twice changes nothing
    """
    normalized = _PUNCTUATION_RE.sub('', name.lower())

    while True:
        stripped = _GENERIC_WORDS_RE.sub('', normalized)
        if stripped == normalized:
            break
        normalized = stripped

    return _WHITESPACE_RE.sub(' ', normalized).strip()


def _significant_words(normalized_name):
    return [word for word in normalized_name.split() if len(word) >= SIGNIFICANT_WORD_LENGTH]


def institution_names_match(name1: str, name2: str, match_empty_names: bool = True) -> bool:
    """
    Check whether two institution names refer to the same institution.

    Args:
        name1 (str): First raw institution name
        name2 (str): Second raw institution name
        match_empty_names (bool): When False, a name that normalizes to an
            empty string never matches

    Returns:
        bool: True on exact normalized match, containment, or when enough
        significant words are shared
    """
    normalized1 = normalize_institution_name(name1)
    normalized2 = normalize_institution_name(name2)

    if not match_empty_names and (not normalized1 or not normalized2):
        return False

    # Exact match after normalization
    if normalized1 == normalized2:
        return True

    # One contains the other ("chase" in "jpmorgan chase")
    if normalized1 in normalized2 or normalized2 in normalized1:
        return True

    words1 = _significant_words(normalized1)
    words2 = _significant_words(normalized2)

    shared_words = set(words1) & set(words2)
    return len(shared_words) > 0 and len(shared_words) >= min(len(words1), len(words2)) / 2


def score_account_pair(manual_account: FinancialAccount,
                       plaid_account: FinancialAccount,
                       policy: MatchPolicy = DEFAULT_POLICY) -> Tuple[int, List[str]]:
    """
    Score the evidence that two accounts are the same real-world account.

    Args:
        manual_account (FinancialAccount): Manually entered account
        plaid_account (FinancialAccount): Plaid-connected account
        policy (MatchPolicy): Weights to apply

    Returns:
        tuple: (match_score, match_reasons)

    Notes:
        - Missing institution names or last-4 values skip that check
        - Reasons are appended in evaluation order
    """
    match_reasons = []
    match_score = 0

    if (
        manual_account.institution_name
        and plaid_account.institution_name
        and institution_names_match(
            manual_account.institution_name,
            plaid_account.institution_name,
            match_empty_names=policy.match_empty_names
        )
    ):
        match_reasons.append('Institution name matches')
        match_score += policy.institution_points

    if (
        manual_account.account_number_last4
        and plaid_account.account_number_last4
        and manual_account.account_number_last4 == plaid_account.account_number_last4
    ):
        match_reasons.append(f"Account numbers match (****{manual_account.account_number_last4})")
        match_score += policy.account_number_points

    if manual_account.account_type == plaid_account.account_type:
        match_reasons.append('Account type matches')
        match_score += policy.account_type_points

    return match_score, match_reasons


def _eligible_pairs(manual_accounts, plaid_accounts):
    """Yield (manual, plaid) pairs in cross-product order, skipping misfiled accounts."""
    for manual_account in manual_accounts:
        if not manual_account.is_manual:
            continue
        for plaid_account in plaid_accounts:
            if plaid_account.is_manual:
                continue
            yield manual_account, plaid_account


def find_account_matches(manual_accounts: Sequence[FinancialAccount],
                         plaid_accounts: Sequence[FinancialAccount],
                         policy: MatchPolicy = DEFAULT_POLICY) -> List[AccountMatch]:
    """
    Find likely matches between manual and Plaid accounts.

    Args:
        manual_accounts (list): Manual accounts; Plaid accounts in here are skipped
        plaid_accounts (list): Plaid accounts; manual accounts in here are skipped
        policy (MatchPolicy): Weights and minimum score

    Returns:
        list: AccountMatch objects sorted by match_score, highest first

    Notes:
        - Every eligible pair is scored (full cross product)
        - The sort is stable, so equal scores keep enumeration order
    """
    matches = []
    pairs_scored = 0

    for manual_account, plaid_account in _eligible_pairs(manual_accounts, plaid_accounts):
        pairs_scored += 1
        match_score, match_reasons = score_account_pair(manual_account, plaid_account, policy)

        # "2+ reasons and score >= 50" is implied by the threshold, so it is not checked separately
        if match_score >= policy.minimum_score:
            matches.append(AccountMatch(
                manual_account=manual_account,
                plaid_account=plaid_account,
                match_score=match_score,
                match_reasons=tuple(match_reasons)
            ))

    logger.debug(f"Scored {pairs_scored} account pairs, {len(matches)} at or above {policy.minimum_score}")

    return sorted(matches, key=lambda match: match.match_score, reverse=True)


def get_best_match_for_account(manual_account_id: str,
                               manual_accounts: Sequence[FinancialAccount],
                               plaid_accounts: Sequence[FinancialAccount],
                               policy: MatchPolicy = DEFAULT_POLICY) -> Optional[AccountMatch]:
    """
    Get the best match for one manual account.

    Args:
        manual_account_id (str): ID of the manual account
        manual_accounts (list): Manual accounts to look the ID up in
        plaid_accounts (list): Plaid accounts to match against
        policy (MatchPolicy): Weights and minimum score

    Returns:
        AccountMatch or None: Highest scoring match, or None when the ID is
        unknown or nothing reaches the minimum score
    """
    manual_account = next((account for account in manual_accounts if account.id == manual_account_id), None)

    if manual_account is None:
        logger.debug(f"Manual account not found: {manual_account_id}")
        return None

    matches = find_account_matches([manual_account], plaid_accounts, policy)

    return matches[0] if matches else None


def filter_matched_accounts(matches: Iterable[AccountMatch],
                            exclude_plaid_account_ids: Iterable[str]) -> List[AccountMatch]:
    """
    Drop matches whose Plaid account has already been claimed.

    Args:
        matches (list): AccountMatch objects
        exclude_plaid_account_ids (list): Plaid account IDs to exclude

    Returns:
        list: Remaining matches in their original order
    """
    excluded = set(exclude_plaid_account_ids)
    return [match for match in matches if match.plaid_account.id not in excluded]


def build_score_matrix(manual_accounts: Sequence[FinancialAccount],
                       plaid_accounts: Sequence[FinancialAccount],
                       policy: MatchPolicy = DEFAULT_POLICY) -> pd.DataFrame:
    """
    Score every eligible pair without applying the minimum score.

    Args:
        manual_accounts (list): Manual accounts (rows)
        plaid_accounts (list): Plaid accounts (columns)
        policy (MatchPolicy): Weights to apply

    Returns:
        pd.DataFrame: Integer scores indexed by manual account ID with one
        column per Plaid account ID
    """
    manual = [account for account in manual_accounts if account.is_manual]
    plaid = [account for account in plaid_accounts if not account.is_manual]

    scores = np.zeros((len(manual), len(plaid)), dtype=int)
    for row, manual_account in enumerate(manual):
        for col, plaid_account in enumerate(plaid):
            scores[row, col], _ = score_account_pair(manual_account, plaid_account, policy)

    return pd.DataFrame(
        scores,
        index=pd.Index([account.id for account in manual], name='manual_account_id'),
        columns=pd.Index([account.id for account in plaid], name='plaid_account_id')
    )


def find_unmatched_manual_accounts(manual_accounts: Sequence[FinancialAccount],
                                   plaid_accounts: Sequence[FinancialAccount],
                                   policy: MatchPolicy = DEFAULT_POLICY) -> List[FinancialAccount]:
    """Manual accounts with no Plaid candidate at or above the minimum score, in input order."""
    manual = [account for account in manual_accounts if account.is_manual]
    matrix = build_score_matrix(manual, plaid_accounts, policy)

    # Positional, since manual account IDs are not guaranteed unique
    has_candidate = (matrix.to_numpy() >= policy.minimum_score).any(axis=1)
    return [account for account, matched in zip(manual, has_candidate) if not matched]
