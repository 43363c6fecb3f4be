"""Fixed-term deposit API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, instrument_response_dict, translate_errors
from database import get_db
from schemas.deposit import (
    FixedDepositClose,
    FixedDepositCreate,
    FixedDepositResponse,
    FixedDepositUpdate,
)
from services.instrument_kinds import FIXED_DEPOSIT
from services.instrument_store import InstrumentStore
from services.lifecycle_service import LifecycleService

router = APIRouter(prefix="/api/fixed-deposits", tags=["fixed-deposits"])


@router.get("", response_model=list[FixedDepositResponse])
def list_fixed_deposits(
    status: str | None = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """List fixed deposits, ongoing first and by maturity date."""
    with translate_errors():
        deposits = InstrumentStore.list_all(db, owner_id, FIXED_DEPOSIT, status=status)
    return [instrument_response_dict(FIXED_DEPOSIT, fd) for fd in deposits]


@router.post("", response_model=FixedDepositResponse, status_code=201)
def create_fixed_deposit(
    fd_data: FixedDepositCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        fd = LifecycleService.create_fixed_deposit(db, owner_id, fd_data)
    return instrument_response_dict(FIXED_DEPOSIT, fd)


@router.get("/{fd_id}", response_model=FixedDepositResponse)
def get_fixed_deposit(fd_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        fd = InstrumentStore.get(db, owner_id, FIXED_DEPOSIT, fd_id)
    return instrument_response_dict(FIXED_DEPOSIT, fd)


@router.put("/{fd_id}", response_model=FixedDepositResponse)
def update_fixed_deposit(
    fd_id: str,
    fd_data: FixedDepositUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Edit an ongoing deposit. Closed deposits return 409."""
    with translate_errors():
        fd = LifecycleService.update_fixed_deposit(db, owner_id, fd_id, fd_data)
    return instrument_response_dict(FIXED_DEPOSIT, fd)


@router.post("/{fd_id}/close", response_model=FixedDepositResponse)
def close_fixed_deposit(
    fd_id: str,
    close_data: FixedDepositClose,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Close a deposit at the payout actually received."""
    with translate_errors():
        fd = LifecycleService.close_fixed_deposit(
            db, owner_id, fd_id, close_data.actual_payout, close_data.closed_date, close_data.notes
        )
    return instrument_response_dict(FIXED_DEPOSIT, fd)


@router.put("/{fd_id}/closed-record", response_model=FixedDepositResponse)
def update_closed_record(
    fd_id: str,
    close_data: FixedDepositClose,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Correct the payout or closing date of a closed deposit."""
    with translate_errors():
        fd = LifecycleService.update_closed_fixed_deposit(
            db, owner_id, fd_id, close_data.actual_payout, close_data.closed_date, close_data.notes
        )
    return instrument_response_dict(FIXED_DEPOSIT, fd)


@router.delete("/{fd_id}", status_code=204)
def delete_fixed_deposit(fd_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        LifecycleService.delete(db, owner_id, FIXED_DEPOSIT, fd_id)
    return Response(status_code=204)
