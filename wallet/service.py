import logging
from datetime import date
from enum import Enum
from typing import Callable, Optional, TypeVar, Union

from .client import BackendClient, BackendError
from .engine import aggregate_monthly, filter_ledger, partition_withdrawals, select_withdrawal
from .models import (
    DashboardResponse,
    DashboardSnapshot,
    DateRange,
    FetchFailure,
    MonthlyBucket,
    RejectionDetail,
    TransactionPage,
    TransactionRecord,
    WalletBalance,
    WithdrawalRequestRecord,
    WithdrawalsResponse,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DashboardServiceError(Exception):
    pass


class MissingExpertIdError(DashboardServiceError):
    pass


class BalanceUnavailableError(DashboardServiceError):
    pass


class WalletTab(str, Enum):
    STATEMENT = "transaction"
    WITHDRAWALS = "withdrawal"
    REQUESTS = "request"


class DashboardService:
    def __init__(self, client: Optional[BackendClient] = None):
        self.client = client or BackendClient()

    def load_snapshot(self, expert_id: str, bank_id: Optional[str] = None) -> DashboardSnapshot:
        expert_id = self._require_expert_id(expert_id)

        if bank_id:
            withdrawals = self._fetch("withdrawals", self.client.fetch_bank_withdrawals, bank_id)
        else:
            withdrawals = self._fetch("withdrawals", self.client.fetch_withdrawal_requests, expert_id)

        return DashboardSnapshot(
            expert_id=expert_id,
            balance=self._fetch("balance", self.client.fetch_wallet_balance, expert_id),
            transactions=self._fetch("transactions", self.client.fetch_transactions, expert_id),
            withdrawals=withdrawals,
            subscriptions=self._fetch("subscriptions", self.client.fetch_subscriptions, expert_id),
        )

    def build_dashboard(
        self,
        expert_id: str,
        search_term: str = "",
        date_range: Optional[DateRange] = None,
        bank_id: Optional[str] = None,
    ) -> DashboardResponse:
        snapshot = self.load_snapshot(expert_id, bank_id=bank_id)
        balance = snapshot.balance if isinstance(snapshot.balance, WalletBalance) else None

        return DashboardResponse(
            expert_id=snapshot.expert_id,
            balance=balance,
            monthly_earnings=aggregate_monthly(snapshot.subscriptions),
            transactions=filter_ledger(snapshot.transactions, search_term, date_range),
            withdrawals=partition_withdrawals(snapshot.withdrawals),
            errors=snapshot.errors(),
        )

    def get_balance(self, expert_id: str) -> WalletBalance:
        expert_id = self._require_expert_id(expert_id)
        try:
            return self.client.fetch_wallet_balance(expert_id)
        except BackendError as e:
            logger.error(f"Failed to fetch wallet balance for {expert_id}: {e}")
            raise BalanceUnavailableError(str(e)) from e

    def get_monthly_earnings(self, expert_id: str) -> list[MonthlyBucket]:
        expert_id = self._require_expert_id(expert_id)
        return aggregate_monthly(self._fetch("subscriptions", self.client.fetch_subscriptions, expert_id))

    def get_transactions(
        self,
        expert_id: str,
        search_term: str = "",
        date_range: Optional[DateRange] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> TransactionPage:
        expert_id = self._require_expert_id(expert_id)
        records = self._fetch("transactions", self.client.fetch_transactions, expert_id)
        filtered = filter_ledger(records, search_term, date_range)
        end = None if limit is None else offset + limit

        return TransactionPage(
            expert_id=expert_id,
            entries=filtered[offset:end],
            total_count=len(filtered),
        )

    def get_withdrawals(self, expert_id: str, bank_id: Optional[str] = None) -> WithdrawalsResponse:
        expert_id = self._require_expert_id(expert_id)
        if bank_id:
            records = self._fetch("withdrawals", self.client.fetch_bank_withdrawals, bank_id)
        else:
            records = self._fetch("withdrawals", self.client.fetch_withdrawal_requests, expert_id)

        return WithdrawalsResponse(
            expert_id=expert_id,
            withdrawals=partition_withdrawals(records),
            errors={records.resource: records.message} if isinstance(records, FetchFailure) else {},
        )

    def _fetch(self, resource: str, fetch: Callable[[str], T], key: str) -> Union[T, FetchFailure]:
        try:
            return fetch(key)
        except BackendError as e:
            logger.error(f"Failed to fetch {resource} for {key}: {e}")
            return FetchFailure(resource=resource, message=str(e))

    def _require_expert_id(self, expert_id: Optional[str]) -> str:
        if not expert_id or not expert_id.strip():
            raise MissingExpertIdError("An expert id is required")
        return expert_id.strip()


class WalletSession:
    """View state for one expert's wallet screen.

    Every search or date change re-filters the original snapshot, never the
    previously filtered rows.
    """

    def __init__(self, snapshot: DashboardSnapshot):
        self.snapshot = snapshot
        self.search_term = ""
        self.date_range: Optional[DateRange] = None
        self.tab = WalletTab.STATEMENT
        self.rejection_detail: Optional[RejectionDetail] = None

    @property
    def transactions(self) -> list[TransactionRecord]:
        return filter_ledger(self.snapshot.transactions, self.search_term, self.date_range)

    @property
    def monthly_earnings(self) -> list[MonthlyBucket]:
        return aggregate_monthly(self.snapshot.subscriptions)

    @property
    def settled_withdrawals(self) -> list[WithdrawalRequestRecord]:
        return partition_withdrawals(self.snapshot.withdrawals).settled

    @property
    def withdrawal_requests(self) -> list[WithdrawalRequestRecord]:
        return partition_withdrawals(self.snapshot.withdrawals).pending_or_rejected

    def search(self, term: str) -> list[TransactionRecord]:
        self.search_term = term or ""
        return self.transactions

    def select_dates(self, start: Optional[date], end: Optional[date]) -> list[TransactionRecord]:
        self.date_range = DateRange(start=start, end=end)
        return self.transactions

    def switch_tab(self, tab: WalletTab) -> list:
        self.tab = WalletTab(tab)
        if self.tab == WalletTab.WITHDRAWALS:
            return self.settled_withdrawals
        if self.tab == WalletTab.REQUESTS:
            return self.withdrawal_requests
        return self.transactions

    def select_withdrawal(self, record: WithdrawalRequestRecord) -> Optional[RejectionDetail]:
        self.rejection_detail = select_withdrawal(record)
        return self.rejection_detail

    def close_detail(self) -> None:
        self.rejection_detail = None

    def replace_snapshot(self, snapshot: DashboardSnapshot) -> None:
        self.snapshot = snapshot
        self.close_detail()
