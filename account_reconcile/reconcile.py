"""
Account Reconciliation Tool

Loads a user's manual accounts and Plaid-connected accounts, finds manual
accounts that duplicate a Plaid account, and writes the candidate matches
plus a summary report. Deciding which matches to merge, and performing the
merge, is left to the caller.

Input Format (CSV or Excel, one account per row):
- id: Account identifier (required)
- account_type: App account type, or a Plaid type with optional account_subtype (required)
- is_manual: true/false (required unless given on the command line)
- institution_name: Free-text institution name (optional)
- account_number_last4: Last four digits of the account number (optional)
- name, user_id, current_balance, available_balance, currency,
  plaid_account_id, plaid_item_id: Carried through, never used for matching

Output:
- account_matches.csv: One row per candidate match, highest score first
- match_report.txt: Counts, score breakdown and unmatched manual accounts
"""

import pandas as pd
import numpy as np
import os
import logging
import pathlib
import csv
import argparse

from account_reconcile.account_types import PLAID_ACCOUNT_TYPES, map_plaid_account_type
from account_reconcile.matcher import (
    DEFAULT_POLICY,
    MINIMUM_MATCH_SCORE,
    MatchPolicy,
    filter_matched_accounts,
    find_account_matches,
    find_unmatched_manual_accounts,
    get_best_match_for_account
)
from account_reconcile.migration import split_accounts
from account_reconcile.models import ACCOUNT_TYPES, FinancialAccount
from account_reconcile.utils import resolve_output_path, setup_logging

logger = logging.getLogger(__name__)

# Required columns for account input files
required_columns = ['id', 'account_type', 'is_manual']

# Columns written for each match
match_columns = [
    'manual_account_id',
    'manual_account_name',
    'manual_institution',
    'manual_last4',
    'plaid_account_id',
    'plaid_account_name',
    'plaid_institution',
    'plaid_last4',
    'match_score',
    'match_reasons'
]

TRUE_VALUES = {'true', 't', 'yes', 'y', '1'}
FALSE_VALUES = {'false', 'f', 'no', 'n', '0'}

def clean_optional(value):
    """Return a stripped string, or None for null/NaN/blank values."""
    if value is None or pd.isna(value):
        return None
    cleaned = str(value).strip()
    return cleaned if cleaned else None

def clean_last4(value):
    """
    Clean an account number suffix.

    Args:
        value (str or None): Raw last-4 value

    Returns:
        str or None: Stripped suffix, or None when missing

    Notes:
        - 'N/A' is stored for Plaid accounts without a mask and counts as missing
        - Leading zeros are preserved (files are read as strings)
    """
    cleaned = clean_optional(value)
    if cleaned is None or cleaned.upper() == 'N/A':
        return None
    if len(cleaned) != 4 or not cleaned.isdigit():
        logger.warning(f"Unexpected account number suffix: {cleaned}")
    return cleaned

def parse_is_manual(value):
    """
    Parse the is_manual flag.

    Args:
        value (str or bool): Raw flag value

    Returns:
        bool: Parsed flag

    Raises:
        ValueError: If value is null or not a recognized boolean
    """
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if value is None or pd.isna(value):
        raise ValueError("is_manual cannot be null")

    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid is_manual value: {value}")

def clean_balance(value):
    """Convert a balance to float, or None when missing.

    Raises:
        ValueError: If the balance cannot be converted to float
    """
    cleaned = clean_optional(value)
    if cleaned is None:
        return None
    try:
        return float(cleaned.replace('$', '').replace(',', ''))
    except ValueError:
        raise ValueError(f"Invalid balance format: {value}")

def standardize_account_type(account_type, account_subtype=None):
    """
    Standardize an account type to one of the app's account types.

    Args:
        account_type (str): App account type or Plaid account type
        account_subtype (str, optional): Plaid account subtype

    Returns:
        str: App account type ('other' when missing)
    """
    cleaned = clean_optional(account_type)
    if cleaned is None:
        return 'other'

    subtype = clean_optional(account_subtype)
    lowered = cleaned.lower().replace(' ', '_')

    # 'investment' and 'loan' are also Plaid types; a subtype means Plaid's meaning
    if lowered in ACCOUNT_TYPES and not (subtype and lowered in PLAID_ACCOUNT_TYPES):
        return lowered

    return map_plaid_account_type(cleaned, subtype)

def accounts_from_dataframe(df, is_manual=None):
    """
    Convert an accounts DataFrame to FinancialAccount records.

    Args:
        df (pd.DataFrame): Raw account data, one account per row
        is_manual (bool, optional): Flag for every row; overrides any is_manual column

    Returns:
        list: FinancialAccount records in row order

    Raises:
        ValueError: If required columns or values are missing
    """
    df = df.copy()
    df.columns = df.columns.astype(str).str.strip()

    needed = [col for col in required_columns if not (col == 'is_manual' and is_manual is not None)]
    missing_columns = [col for col in needed if col not in df.columns]
    if missing_columns:
        raise ValueError(f"Missing required columns: {missing_columns}")

    accounts = []
    for idx, row in df.iterrows():
        account_id = clean_optional(row['id'])
        if account_id is None:
            raise ValueError(f"Missing account id in row {idx}")

        current_balance = clean_balance(row.get('current_balance'))
        accounts.append(FinancialAccount(
            id=account_id,
            account_type=standardize_account_type(row['account_type'], row.get('account_subtype')),
            is_manual=is_manual if is_manual is not None else parse_is_manual(row['is_manual']),
            institution_name=clean_optional(row.get('institution_name')),
            account_number_last4=clean_last4(row.get('account_number_last4')),
            name=clean_optional(row.get('name')) or '',
            user_id=clean_optional(row.get('user_id')),
            current_balance=current_balance if current_balance is not None else 0.0,
            available_balance=clean_balance(row.get('available_balance')),
            currency=clean_optional(row.get('currency')) or 'USD',
            plaid_account_id=clean_optional(row.get('plaid_account_id')),
            plaid_item_id=clean_optional(row.get('plaid_item_id'))
        ))

    logger.debug(f"Loaded {len(accounts)} accounts")
    return accounts

def read_accounts(file_path, is_manual=None):
    """Read accounts from a CSV or Excel file.

    Args:
        file_path (str or pathlib.Path): Path to the accounts file
        is_manual (bool, optional): Flag for every account in the file

    Returns:
        list: FinancialAccount records

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be read or is missing required data
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    if os.path.isdir(file_path):
        raise ValueError("Path is a directory")

    _, ext = os.path.splitext(file_path)
    if ext.lower() not in ['.csv', '.xlsx']:
        raise ValueError("Unsupported file format")

    try:
        logger.debug(f"Reading file: {file_path}")

        if os.path.getsize(file_path) == 0:
            raise ValueError("File is empty")

        df = None
        if ext.lower() == '.xlsx':
            df = pd.read_excel(file_path, dtype=str)
        else:
            # Try different encodings
            encodings = ['utf-8', 'utf-8-sig', 'cp1252']
            for encoding in encodings:
                try:
                    df = pd.read_csv(
                        file_path,
                        header=0,
                        dtype=str,  # Keep leading zeros in account numbers
                        skipinitialspace=True,
                        encoding=encoding
                    )
                    logger.debug(f"Successfully read file with encoding: {encoding}")
                    break
                except UnicodeDecodeError:
                    continue
                except pd.errors.EmptyDataError:
                    raise ValueError("No data")

        if df is None:
            raise ValueError("Could not read CSV file with any supported encoding")

        return accounts_from_dataframe(df, is_manual=is_manual)

    except Exception as e:
        raise ValueError(f"Error processing {file_path}: {str(e)}")

def matches_to_dataframe(matches):
    """Convert matches to a DataFrame with one row per match, in match order."""
    if not matches:
        return pd.DataFrame(columns=match_columns)

    rows = []
    for match in matches:
        rows.append({
            'manual_account_id': match.manual_account.id,
            'manual_account_name': match.manual_account.name,
            'manual_institution': match.manual_account.institution_name,
            'manual_last4': match.manual_account.account_number_last4,
            'plaid_account_id': match.plaid_account.id,
            'plaid_account_name': match.plaid_account.name,
            'plaid_institution': match.plaid_account.institution_name,
            'plaid_last4': match.plaid_account.account_number_last4,
            'match_score': match.match_score,
            'match_reasons': '; '.join(match.match_reasons)
        })
    return pd.DataFrame(rows, columns=match_columns)

def save_match_results(matches, output_path):
    """Save candidate matches to a CSV or Excel file.

    Args:
        matches (list): AccountMatch objects
        output_path (pathlib.Path): Output file or directory

    Returns:
        pathlib.Path: Path of the written file
    """
    result = matches_to_dataframe(matches)
    output_path = resolve_output_path(output_path, "account_matches.csv")

    if output_path.suffix.lower() == '.xlsx':
        with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
            result.to_excel(writer, sheet_name='Account Matches', index=False)
    else:
        result.to_csv(output_path, index=False, quoting=csv.QUOTE_NONNUMERIC)

    logger.info(f"Saved {len(result)} matches to {output_path}")
    return output_path

def format_report_summary(matches, manual_accounts, plaid_accounts, policy=DEFAULT_POLICY):
    """Format a summary of matching results.

    Args:
        matches (list): AccountMatch objects
        manual_accounts (list): Manual accounts that were matched
        plaid_accounts (list): Plaid accounts that were matched against
        policy (MatchPolicy): Policy used for matching

    Returns:
        str: Formatted summary text
    """
    manual = [account for account in manual_accounts if account.is_manual]
    plaid = [account for account in plaid_accounts if not account.is_manual]
    scores = matches_to_dataframe(matches)['match_score']

    summary = [
        f"Manual Accounts: {len(manual)}",
        f"Plaid Accounts: {len(plaid)}",
        f"Minimum Score: {policy.minimum_score}",
        f"Potential Matches: {len(matches)}",
        f"Best Score: {int(scores.max()) if not scores.empty else 'n/a'}"
    ]

    if not scores.empty:
        summary.append("Matches by Score:")
        for score, count in scores.astype(int).value_counts().sort_index(ascending=False).items():
            summary.append(f"  {score}: {count}")

    unmatched = find_unmatched_manual_accounts(manual, plaid, policy)
    summary.append(f"Unmatched Manual Accounts: {len(unmatched)}")
    for account in unmatched:
        summary.append(f"  - {account.id} ({account.institution_name or 'Unknown institution'})")

    return "\n".join(summary)

def generate_match_report(matches, manual_accounts, plaid_accounts, output_path, policy=DEFAULT_POLICY):
    """Generate a matching report.

    Args:
        matches (list): AccountMatch objects
        manual_accounts (list): Manual accounts that were matched
        plaid_accounts (list): Plaid accounts that were matched against
        output_path (pathlib.Path): Output path for the report
        policy (MatchPolicy): Policy used for matching

    Returns:
        pathlib.Path: Path of the written report
    """
    report_lines = [format_report_summary(matches, manual_accounts, plaid_accounts, policy)]

    if not matches:
        report_lines.append("\nNo potential matches found")

    output_path = resolve_output_path(output_path, "match_report.txt")
    logger.debug(f"Writing match report to {output_path}")
    with open(output_path, 'w') as f:
        f.write('\n'.join(report_lines))

    return output_path

def main(argv=None):
    """Main execution function."""
    try:
        # Set up argument parser
        parser = argparse.ArgumentParser(description='Match manual accounts to Plaid-connected accounts')
        parser.add_argument('--manual', type=str,
                          help='Path to manual accounts file')
        parser.add_argument('--plaid', type=str,
                          help='Path to Plaid accounts file')
        parser.add_argument('--accounts', type=str,
                          help='Path to a combined accounts file with an is_manual column')
        parser.add_argument('--output', type=str, default='output',
                          help='Output directory')
        parser.add_argument('--exclude', nargs='*', default=[],
                          help='Plaid account IDs that are already linked')
        parser.add_argument('--account-id', type=str,
                          help='Only report the best match for this manual account')
        parser.add_argument('--min-score', type=int, default=MINIMUM_MATCH_SCORE,
                          help='Minimum score for a match')
        parser.add_argument('--strict-names', action='store_true',
                          help='Never match institution names made only of generic words')
        parser.add_argument('--debug', action='store_true',
                          help='Enable debug logging')
        parser.add_argument('--log-level', type=str, default='info',
                          choices=['debug', 'info', 'warning', 'error'],
                          help='Log level when --debug is not set')
        args = parser.parse_args(argv)

        if not args.accounts and not (args.manual and args.plaid):
            parser.error('provide --accounts, or both --manual and --plaid')

        # Set up logging
        setup_logging(debug=args.debug, log_level=args.log_level)
        logger.info("Starting account matching")

        policy = MatchPolicy(minimum_score=args.min_score, match_empty_names=not args.strict_names)

        if args.accounts:
            manual_accounts, plaid_accounts = split_accounts(read_accounts(args.accounts))
        else:
            manual_accounts = read_accounts(args.manual, is_manual=True)
            plaid_accounts = read_accounts(args.plaid, is_manual=False)

        if args.account_id:
            excluded = set(args.exclude)
            available = [account for account in plaid_accounts if account.id not in excluded]
            best_match = get_best_match_for_account(args.account_id, manual_accounts, available, policy)
            if best_match is None:
                logger.info(f"No match found for account {args.account_id}")
            matches = [best_match] if best_match is not None else []
        else:
            matches = filter_matched_accounts(
                find_account_matches(manual_accounts, plaid_accounts, policy),
                args.exclude
            )

        logger.info(f"Found {len(matches)} potential matches")

        # Create output directory
        output_dir = pathlib.Path(args.output)
        output_dir.mkdir(parents=True, exist_ok=True)

        save_match_results(matches, output_dir)
        generate_match_report(matches, manual_accounts, plaid_accounts, output_dir, policy)

        return matches

    except Exception as e:
        logger.error(f"Error during account matching: {str(e)}")
        raise

if __name__ == '__main__':
    main()
