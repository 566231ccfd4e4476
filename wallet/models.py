from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Optional, Union
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    computed_field,
    field_validator,
)

from .dates import InvalidDateError, format_display
from .status import RequestAction, StatusLabel, classify


# Backend spelling, kept verbatim so comparisons match what the API sends.
NO_SUBSCRIPTION = "No Subscrption"


class PaymentMode(str, Enum):
    BANK = "Bank"
    UPI = "UPI"


class PlanType(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    HALF_YEARLY = "Half-Yearly"
    YEARLY = "Yearly"


class SubscriptionCategory(str, Enum):
    OPTION = "Option"
    COMMODITY = "Commodity"
    EQUITY = "Equity"


class PlanDuration(str, Enum):
    ONE_MONTH = "1 Month"
    THREE_MONTHS = "3 Months"
    SIX_MONTHS = "6 Months"
    TWELVE_MONTHS = "12 Months"


def _lenient_amount(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def _display_date(value: Optional[str]) -> Optional[str]:
    try:
        return format_display(value)
    except InvalidDateError:
        return None


class BackendRecord(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class TransactionRecord(BackendRecord):
    transaction_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("transactionId", "transaction_id"))
    date: Optional[str] = Field(default=None, validation_alias=AliasChoices("date", "createdOn"))
    subscription: Optional[str] = None
    plan_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("planType", "plan_type"))
    user_mobile_no: Optional[str] = Field(default=None, validation_alias=AliasChoices("userMobileNo", "user_mobile_no"))
    amount: Optional[Decimal] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Optional[Decimal]:
        return _lenient_amount(value)

    @computed_field
    @property
    def display_date(self) -> Optional[str]:
        return _display_date(self.date)

    def is_sentinel(self) -> bool:
        return self.subscription is not None and self.subscription.strip() == NO_SUBSCRIPTION


class WithdrawalRequestRecord(BackendRecord):
    transaction_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("transcationId", "transaction_id"))
    withdrawal_request_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("withdrawalRequestDate", "withdrawal_request_date")
    )
    payment_mode: Optional[str] = Field(default=None, validation_alias=AliasChoices("paymentMode", "payment_mode"))
    account_number: Optional[str] = Field(default=None, validation_alias=AliasChoices("accountNumber", "account_number"))
    upi_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("upI_ID", "upi_id"))
    amount: Optional[Decimal] = None
    request_action: Optional[str] = Field(default=None, validation_alias=AliasChoices("requestAction", "request_action"))
    status: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Optional[Decimal]:
        return _lenient_amount(value)

    @computed_field
    @property
    def destination(self) -> Optional[str]:
        if self.payment_mode == PaymentMode.BANK.value:
            return self.account_number
        return self.upi_id

    @computed_field
    @property
    def status_label(self) -> Optional[str]:
        label = classify(self.request_action)
        return label.value if isinstance(label, StatusLabel) else label

    @computed_field
    @property
    def display_date(self) -> Optional[str]:
        return _display_date(self.withdrawal_request_date)

    def is_settled(self) -> bool:
        return self.request_action == RequestAction.APPROVED.value

    def is_rejected(self) -> bool:
        return self.request_action == RequestAction.REJECTED.value


class WalletBalance(BackendRecord):
    withdrawal_balance: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("withdrawalBalance", "withdrawal_balance")
    )

    @field_validator("withdrawal_balance", mode="before")
    @classmethod
    def _coerce_balance(cls, value: Any) -> Optional[Decimal]:
        return _lenient_amount(value)


class MonthlyBucket(BaseModel):
    name: str
    # JSON number for the chart
    earnings: Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")] = Decimal("0")


class DateRange(BaseModel):
    start: Optional[date] = None
    end: Optional[date] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None


class FetchFailure(BaseModel):
    resource: str
    message: str

    model_config = ConfigDict(frozen=True)


class WithdrawalPartition(BaseModel):
    settled: list[WithdrawalRequestRecord] = Field(default_factory=list)
    pending_or_rejected: list[WithdrawalRequestRecord] = Field(default_factory=list)


class RejectionDetail(BaseModel):
    record: WithdrawalRequestRecord
    message: str = "Withdrawal request rejected"


class SubscriptionPlanDraft(BaseModel):
    title: str = Field(..., min_length=1, description="Plan title shown to subscribers")
    category: SubscriptionCategory
    plan_type: PlanType
    duration: PlanDuration
    amount: Decimal = Field(..., gt=0)
    key_points: list[str] = Field(default_factory=list)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "title": "Nifty Weekly Calls",
            "category": "Equity",
            "plan_type": "Monthly",
            "duration": "1 Month",
            "amount": 999.00,
            "key_points": ["Intraday calls", "Stop-loss alerts"]
        }
    })

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("key_points")
    @classmethod
    def _dedupe_key_points(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for point in value:
            point = point.strip()
            if point and point not in seen:
                seen.append(point)
        return seen


class DashboardSnapshot(BaseModel):
    expert_id: str
    balance: Union[WalletBalance, FetchFailure, None] = None
    transactions: Union[list[TransactionRecord], FetchFailure] = Field(default_factory=list)
    withdrawals: Union[list[WithdrawalRequestRecord], FetchFailure] = Field(default_factory=list)
    # Earnings feed, dated by creation time; not paged like the statement listing.
    subscriptions: Union[list[TransactionRecord], FetchFailure] = Field(default_factory=list)

    def errors(self) -> dict[str, str]:
        return {
            failure.resource: failure.message
            for failure in (self.balance, self.transactions, self.withdrawals, self.subscriptions)
            if isinstance(failure, FetchFailure)
        }


class TransactionPage(BaseModel):
    expert_id: str
    entries: list[TransactionRecord]
    total_count: int


class WithdrawalsResponse(BaseModel):
    expert_id: str
    withdrawals: WithdrawalPartition
    errors: dict[str, str] = Field(default_factory=dict)


class DashboardResponse(BaseModel):
    expert_id: str
    balance: Optional[WalletBalance] = None
    monthly_earnings: list[MonthlyBucket]
    transactions: list[TransactionRecord]
    withdrawals: WithdrawalPartition
    errors: dict[str, str] = Field(default_factory=dict)
