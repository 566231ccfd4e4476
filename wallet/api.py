import logging
from datetime import date
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .engine import classify
from .models import (
    DashboardResponse,
    DateRange,
    MonthlyBucket,
    SubscriptionPlanDraft,
    TransactionPage,
    WalletBalance,
    WithdrawalsResponse,
)
from .service import (
    BalanceUnavailableError,
    DashboardService,
    MissingExpertIdError,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Expert Wallet Dashboard API",
    description="Earnings, statement and withdrawal views for revenue-share experts",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

dashboard_service = DashboardService()


def _date_range(start_date: Optional[date], end_date: Optional[date]) -> Optional[DateRange]:
    if start_date is None and end_date is None:
        return None
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date",
        )
    return DateRange(start=start_date, end=end_date)


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "expert-wallet-dashboard"}


@app.get("/experts/{expert_id}/dashboard", response_model=DashboardResponse, tags=["Dashboard"])
def get_dashboard(
    expert_id: str,
    search: str = "",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    bank_id: Optional[str] = None,
) -> DashboardResponse:
    try:
        return dashboard_service.build_dashboard(
            expert_id, search, _date_range(start_date, end_date), bank_id=bank_id
        )
    except MissingExpertIdError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get("/experts/{expert_id}/balance", response_model=WalletBalance, tags=["Wallet"])
def get_balance(expert_id: str) -> WalletBalance:
    try:
        return dashboard_service.get_balance(expert_id)
    except MissingExpertIdError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except BalanceUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@app.get("/experts/{expert_id}/earnings/monthly", response_model=list[MonthlyBucket], tags=["Dashboard"])
def get_monthly_earnings(expert_id: str) -> list[MonthlyBucket]:
    try:
        return dashboard_service.get_monthly_earnings(expert_id)
    except MissingExpertIdError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get("/experts/{expert_id}/transactions", response_model=TransactionPage, tags=["Wallet"])
def get_transactions(
    expert_id: str,
    search: str = "",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
) -> TransactionPage:
    try:
        return dashboard_service.get_transactions(
            expert_id, search, _date_range(start_date, end_date), limit=limit, offset=offset
        )
    except MissingExpertIdError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get("/experts/{expert_id}/withdrawals", response_model=WithdrawalsResponse, tags=["Wallet"])
def get_withdrawals(expert_id: str, bank_id: Optional[str] = None) -> WithdrawalsResponse:
    try:
        return dashboard_service.get_withdrawals(expert_id, bank_id=bank_id)
    except MissingExpertIdError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get("/withdrawals/status/{code}", tags=["Wallet"])
def get_status_label(code: str):
    label = classify(code)
    return {"code": code, "label": getattr(label, "value", label)}


@app.post("/subscriptions/validate", response_model=SubscriptionPlanDraft, tags=["Subscriptions"])
def validate_subscription(draft: SubscriptionPlanDraft) -> SubscriptionPlanDraft:
    return draft


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
