"""Recurring deposit API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, instrument_response_dict, translate_errors
from database import get_db
from schemas.deposit import (
    InstallmentPayment,
    RecurringDepositClose,
    RecurringDepositCreate,
    RecurringDepositResponse,
    RecurringDepositUpdate,
)
from services.instrument_kinds import RECURRING_DEPOSIT
from services.instrument_store import InstrumentStore
from services.lifecycle_service import LifecycleService

router = APIRouter(prefix="/api/recurring-deposits", tags=["recurring-deposits"])


@router.get("", response_model=list[RecurringDepositResponse])
def list_recurring_deposits(
    status: str | None = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """List recurring deposits, soonest due first within each status."""
    with translate_errors():
        deposits = InstrumentStore.list_all(db, owner_id, RECURRING_DEPOSIT, status=status)
    return [instrument_response_dict(RECURRING_DEPOSIT, rd) for rd in deposits]


@router.post("", response_model=RecurringDepositResponse, status_code=201)
def create_recurring_deposit(
    rd_data: RecurringDepositCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        rd = LifecycleService.create_recurring_deposit(db, owner_id, rd_data)
    return instrument_response_dict(RECURRING_DEPOSIT, rd)


@router.get("/{rd_id}", response_model=RecurringDepositResponse)
def get_recurring_deposit(rd_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        rd = InstrumentStore.get(db, owner_id, RECURRING_DEPOSIT, rd_id)
    return instrument_response_dict(RECURRING_DEPOSIT, rd)


@router.put("/{rd_id}", response_model=RecurringDepositResponse)
def update_recurring_deposit(
    rd_id: str,
    rd_data: RecurringDepositUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        rd = LifecycleService.update_recurring_deposit(db, owner_id, rd_id, rd_data)
    return instrument_response_dict(RECURRING_DEPOSIT, rd)


@router.post("/{rd_id}/installments", response_model=RecurringDepositResponse)
def mark_installment_paid(
    rd_id: str,
    payment: InstallmentPayment,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Mark the next installment paid."""
    with translate_errors():
        rd = LifecycleService.mark_installment_paid(db, owner_id, rd_id, payment.paid_date, payment.notes)
    return instrument_response_dict(RECURRING_DEPOSIT, rd)


@router.post("/{rd_id}/close", response_model=RecurringDepositResponse)
def close_recurring_deposit(
    rd_id: str,
    close_data: RecurringDepositClose,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        rd = LifecycleService.close_recurring_deposit(
            db, owner_id, rd_id, close_data.actual_withdrawal, close_data.closed_date, close_data.notes
        )
    return instrument_response_dict(RECURRING_DEPOSIT, rd)


@router.put("/{rd_id}/closed-record", response_model=RecurringDepositResponse)
def update_closed_record(
    rd_id: str,
    close_data: RecurringDepositClose,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        rd = LifecycleService.update_closed_recurring_deposit(
            db, owner_id, rd_id, close_data.actual_withdrawal, close_data.closed_date, close_data.notes
        )
    return instrument_response_dict(RECURRING_DEPOSIT, rd)


@router.delete("/{rd_id}", status_code=204)
def delete_recurring_deposit(rd_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        LifecycleService.delete(db, owner_id, RECURRING_DEPOSIT, rd_id)
    return Response(status_code=204)
