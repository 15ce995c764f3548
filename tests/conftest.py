import pytest
import pandas as pd

from account_reconcile.models import FinancialAccount

# Sample data for account files
manual_accounts_sample_data = {
    'id': ['manual-1', 'manual-2', 'manual-3'],
    'name': ['Everyday Checking', 'Rainy Day Fund', 'Old Card'],
    'institution_name': ['Chase Bank', 'Wells Fargo Bank', 'Discover'],
    'account_number_last4': ['1234', '', '0042'],
    'account_type': ['checking', 'savings', 'credit_card'],
    'current_balance': ['$1,250.00', '500.00', '']
}

plaid_accounts_sample_data = {
    'id': ['plaid-1', 'plaid-2', 'plaid-3'],
    'name': ['TOTAL CHECKING', 'Way2Save Savings', 'Platinum Card'],
    'institution_name': ['CHASE', 'Wells Fargo', 'American Express'],
    'account_number_last4': ['1234', 'N/A', '9999'],
    'account_type': ['depository', 'depository', 'credit'],
    'account_subtype': ['checking', 'savings', 'credit card'],
    'current_balance': ['1300.10', '480.00', '75.20'],
    'plaid_account_id': ['plaid-acc-1', 'plaid-acc-2', 'plaid-acc-3'],
    'plaid_item_id': ['item-1', 'item-2', 'item-3']
}

@pytest.fixture
def create_account():
    """Helper fixture to build accounts with sensible defaults"""
    def _create_account(**overrides):
        fields = {
            'id': 'test-id',
            'user_id': 'user-123',
            'name': 'Test Account',
            'account_type': 'checking',
            'institution_name': 'Test Bank',
            'account_number_last4': '1234',
            'current_balance': 1000.0,
            'available_balance': 1000.0,
            'currency': 'USD',
            'is_manual': True,
            'plaid_account_id': None,
            'plaid_item_id': None
        }
        fields.update(overrides)
        return FinancialAccount(**fields)
    return _create_account

@pytest.fixture
def sample_manual_accounts():
    """Manual accounts covering a full match, a name+type match and no match."""
    return [
        FinancialAccount(
            id='manual-1',
            name='Everyday Checking',
            institution_name='Chase Bank',
            account_number_last4='1234',
            account_type='checking',
            is_manual=True
        ),
        FinancialAccount(
            id='manual-2',
            name='Rainy Day Fund',
            institution_name='Wells Fargo Bank',
            account_number_last4=None,
            account_type='savings',
            is_manual=True
        ),
        FinancialAccount(
            id='manual-3',
            name='Old Card',
            institution_name='Discover',
            account_number_last4='0042',
            account_type='credit_card',
            is_manual=True
        )
    ]

@pytest.fixture
def sample_plaid_accounts():
    """Plaid accounts matching sample_manual_accounts 1 and 2."""
    return [
        FinancialAccount(
            id='plaid-1',
            name='TOTAL CHECKING',
            institution_name='CHASE',
            account_number_last4='1234',
            account_type='checking',
            is_manual=False,
            plaid_account_id='plaid-acc-1',
            plaid_item_id='item-1'
        ),
        FinancialAccount(
            id='plaid-2',
            name='Way2Save Savings',
            institution_name='Wells Fargo',
            account_number_last4=None,
            account_type='savings',
            is_manual=False,
            plaid_account_id='plaid-acc-2',
            plaid_item_id='item-2'
        ),
        FinancialAccount(
            id='plaid-3',
            name='Platinum Card',
            institution_name='American Express',
            account_number_last4='9999',
            account_type='credit_card',
            is_manual=False,
            plaid_account_id='plaid-acc-3',
            plaid_item_id='item-3'
        )
    ]

@pytest.fixture
def manual_accounts_df():
    """Raw manual accounts file contents."""
    return pd.DataFrame(manual_accounts_sample_data)

@pytest.fixture
def plaid_accounts_df():
    """Raw Plaid accounts file contents, with Plaid type/subtype columns."""
    return pd.DataFrame(plaid_accounts_sample_data)

@pytest.fixture
def write_accounts_csv(tmp_path):
    """Helper fixture to write an accounts DataFrame to a CSV file"""
    def _write(df, name):
        file_path = tmp_path / name
        df.to_csv(file_path, index=False)
        return file_path
    return _write
