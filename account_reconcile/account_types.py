"""
Map Plaid account types and subtypes onto the app's account types.

Plaid reports accounts as a (type, subtype) pair such as
("depository", "money market") or ("investment", "roth 401k"). The app
tracks a single account_type, so aggregated accounts are mapped before they
are compared against manual ones.
"""

import logging

logger = logging.getLogger(__name__)

PLAID_ACCOUNT_TYPES = {'depository', 'credit', 'investment', 'loan', 'brokerage'}

# Depository subtypes that behave like savings; everything else is checking
SAVINGS_SUBTYPES = {'savings', 'hsa', 'cd', 'money market'}

RETIREMENT_SUBTYPES = {
    # US
    '401k', '403b', '401a', '457b', 'ira', 'roth', 'roth 401k', 'roth ira',
    'sep ira', 'simple ira', 'sarsep', 'pension', 'profit sharing plan',
    'stock plan', 'keogh', 'retirement',
    # Canada
    'rrsp', 'rrif', 'tfsa', 'lira', 'lif', 'lrsp', 'lrif', 'rlif', 'prif',
    'rdsp', 'resp',
    # UK
    'sipp'
}

MORTGAGE_SUBTYPES = {'mortgage', 'home equity'}


def map_plaid_account_type(plaid_type, plaid_subtype=None):
    """
    Map a Plaid account type/subtype to an app account type.

    Args:
        plaid_type (str): Plaid account type (depository, credit, investment, loan, brokerage)
        plaid_subtype (str, optional): Plaid account subtype

    Returns:
        str: One of checking, savings, credit_card, investment, retirement,
        loan, mortgage or other

    Notes:
        - Matching is case-insensitive
        - Unknown subtypes fall back to the default for their type
        - Missing or unknown types map to 'other'
    """
    if not plaid_type:
        return 'other'

    normalized_type = plaid_type.strip().lower()
    normalized_subtype = (plaid_subtype or '').strip().lower()

    if normalized_type == 'depository':
        return 'savings' if normalized_subtype in SAVINGS_SUBTYPES else 'checking'

    if normalized_type == 'credit':
        return 'credit_card'

    if normalized_type == 'investment':
        return 'retirement' if normalized_subtype in RETIREMENT_SUBTYPES else 'investment'

    if normalized_type == 'loan':
        return 'mortgage' if normalized_subtype in MORTGAGE_SUBTYPES else 'loan'

    # Legacy Plaid type
    if normalized_type == 'brokerage':
        return 'investment'

    logger.debug(f"Unknown Plaid account type: {plaid_type}")
    return 'other'
