import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Type, TypeVar, Union

from pydantic import ValidationError

from .dates import InvalidDateError, in_range, month_index_of, parse_iso
from .models import (
    DateRange,
    FetchFailure,
    MonthlyBucket,
    RejectionDetail,
    TransactionRecord,
    WithdrawalPartition,
    WithdrawalRequestRecord,
)
from .status import classify

logger = logging.getLogger(__name__)

# Only used to derive month names; earnings from every year fold into one series.
REFERENCE_YEAR = 2024

RecordT = TypeVar("RecordT", TransactionRecord, WithdrawalRequestRecord)

TransactionInput = Union[Iterable[Union[TransactionRecord, dict]], FetchFailure, None]
WithdrawalInput = Union[Iterable[Union[WithdrawalRequestRecord, dict]], FetchFailure, None]

__all__ = [
    "REFERENCE_YEAR",
    "aggregate_monthly",
    "classify",
    "filter_ledger",
    "partition_withdrawals",
    "select_withdrawal",
]


def _coerce(model: Type[RecordT], records, resource: str) -> list[RecordT]:
    if records is None or isinstance(records, FetchFailure):
        return []

    coerced = []
    for index, item in enumerate(records):
        if isinstance(item, model):
            coerced.append(item)
            continue
        try:
            coerced.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {resource} record {index}: {e}")
    return coerced


def _transactions(records: TransactionInput) -> list[TransactionRecord]:
    return _coerce(TransactionRecord, records, "transactions")


def _withdrawals(records: WithdrawalInput) -> list[WithdrawalRequestRecord]:
    return _coerce(WithdrawalRequestRecord, records, "withdrawals")


def aggregate_monthly(records: TransactionInput) -> list[MonthlyBucket]:
    totals = [Decimal("0")] * 12

    for record in _transactions(records):
        try:
            index = month_index_of(record.date)
        except InvalidDateError:
            logger.debug("Skipping transaction %s with unparsable date %r", record.transaction_id, record.date)
            continue
        totals[index] += record.amount or Decimal("0")

    return [
        MonthlyBucket(name=date(REFERENCE_YEAR, month, 1).strftime("%B"), earnings=total)
        for month, total in enumerate(totals, start=1)
    ]


def _recency_key(record: TransactionRecord) -> tuple[int, datetime]:
    try:
        moment = parse_iso(record.date)
    except InvalidDateError:
        return (0, datetime.min)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return (1, moment)


def _matches_range(record: TransactionRecord, date_range: Optional[DateRange]) -> bool:
    if date_range is None or not date_range.is_complete:
        return True
    try:
        return in_range(record.date, date_range.start, date_range.end)
    except InvalidDateError:
        return False


def filter_ledger(
    records: TransactionInput,
    search_term: Optional[str] = "",
    date_range: Optional[DateRange] = None,
) -> list[TransactionRecord]:
    """Build the user statement view from the unfiltered transaction snapshot.

    Rows are ordered most recent first (undated rows last), sentinel
    "No Subscrption" rows are dropped, and the optional mobile-number search
    and inclusive date range are applied together.
    """
    ordered = sorted(_transactions(records), key=_recency_key, reverse=True)

    result = []
    for record in ordered:
        if record.is_sentinel():
            continue
        if search_term and search_term not in (record.user_mobile_no or ""):
            continue
        if not _matches_range(record, date_range):
            continue
        result.append(record)
    return result


def partition_withdrawals(records: WithdrawalInput) -> WithdrawalPartition:
    partition = WithdrawalPartition()
    for record in _withdrawals(records):
        if record.is_settled():
            partition.settled.append(record)
        else:
            partition.pending_or_rejected.append(record)
    return partition


def select_withdrawal(record: Union[WithdrawalRequestRecord, dict]) -> Optional[RejectionDetail]:
    if not isinstance(record, WithdrawalRequestRecord):
        record = WithdrawalRequestRecord.model_validate(record)
    if record.is_rejected():
        return RejectionDetail(record=record)
    return None
