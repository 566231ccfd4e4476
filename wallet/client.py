"""HTTP access to the wallet and dashboard backends."""
import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .config import Settings, get_settings
from .models import TransactionRecord, WalletBalance, WithdrawalRequestRecord

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class BackendError(Exception):
    pass


class BackendClient:
    """Fetches the raw collections a dashboard is built from.

    Responses use the backend envelope ``{"isSuccess", "data", "displayMessage"}``;
    only ``data`` is returned. Every failure surfaces as ``BackendError``.
    """

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings or get_settings()
        self.client = httpx.Client(timeout=self.settings.request_timeout, transport=transport)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.client.close()

    def fetch_wallet_balance(self, expert_id: str) -> WalletBalance:
        data = self._get_data(
            f"{self.settings.wallet_api_url}/Wallet/GetWalletWithdrawalBalance/{expert_id}",
            params={"userType": self.settings.user_type},
        )
        if not isinstance(data, dict):
            raise BackendError(f"Unexpected wallet balance payload: {type(data).__name__}")
        try:
            return WalletBalance.model_validate(data)
        except ValidationError as e:
            raise BackendError(f"Invalid wallet balance payload: {e}") from e

    def fetch_transactions(self, expert_id: str) -> list[TransactionRecord]:
        data = self._get_data(
            f"{self.settings.dashboard_api_url}/RADashboard/GetDashboardRAListingData/{expert_id}",
            params={"page": self.settings.page, "pageSize": self.settings.page_size},
        )
        return self._parse_records(TransactionRecord, data, "transactions")

    def fetch_subscriptions(self, expert_id: str) -> list[TransactionRecord]:
        # Unpaged; every subscription the expert sold, dated by createdOn.
        data = self._get_data(f"{self.settings.subscription_api_url}/Subscription/GetByExpertsId/{expert_id}")
        return self._parse_records(TransactionRecord, data, "subscriptions")

    def fetch_withdrawal_requests(self, expert_id: str) -> list[WithdrawalRequestRecord]:
        data = self._get_data(
            f"{self.settings.wallet_api_url}/Withdrawal/GetWithdrawalByUserId/{expert_id}",
            params={
                "userType": self.settings.user_type,
                "page": self.settings.page,
                "pageSize": self.settings.page_size,
            },
        )
        return self._parse_records(WithdrawalRequestRecord, data, "withdrawals")

    def fetch_bank_withdrawals(self, bank_id: str) -> list[WithdrawalRequestRecord]:
        data = self._get_data(f"{self.settings.wallet_api_url}/Withdrawal/GetBankUPIById/{bank_id}")
        # A single account lookup may come back as one object rather than a list.
        if isinstance(data, dict):
            data = [data]
        return self._parse_records(WithdrawalRequestRecord, data, "withdrawals")

    def _get_data(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        try:
            response = self.client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"HTTP error fetching {url}: {e}")
            raise BackendError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            logger.error(f"Non-JSON response from {url}: {e}")
            raise BackendError(f"Invalid JSON from {url}") from e

        if isinstance(payload, dict) and "isSuccess" in payload:
            if not payload["isSuccess"]:
                raise BackendError(payload.get("displayMessage") or f"Backend rejected request to {url}")
            return payload.get("data")
        return payload

    def _parse_records(self, model: Type[RecordT], data: Any, resource: str) -> list[RecordT]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise BackendError(f"Unexpected {resource} payload: {type(data).__name__}")

        records = []
        for index, item in enumerate(data):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed {resource} item {index}: {e}")
        return records
