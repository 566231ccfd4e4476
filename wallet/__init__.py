"""
Expert Wallet Dashboard

This module provides:
- Monthly earnings series for the revenue chart
- Searchable, date-filtered transaction statement
- Settled vs pending/rejected withdrawal request views
- Status labels for withdrawal request action codes
- Backend client and dashboard orchestration
"""

from .engine import (
    aggregate_monthly,
    filter_ledger,
    partition_withdrawals,
    select_withdrawal,
)
from .models import (
    NO_SUBSCRIPTION,
    DateRange,
    MonthlyBucket,
    TransactionRecord,
    WithdrawalRequestRecord,
    WalletBalance,
)
from .service import DashboardService, WalletSession
from .status import RequestAction, StatusLabel, classify

__all__ = [
    "NO_SUBSCRIPTION",
    "DateRange",
    "MonthlyBucket",
    "TransactionRecord",
    "WithdrawalRequestRecord",
    "WalletBalance",
    "RequestAction",
    "StatusLabel",
    "classify",
    "aggregate_monthly",
    "filter_ledger",
    "partition_withdrawals",
    "select_withdrawal",
    "DashboardService",
    "WalletSession",
]
