"""Liquid account API endpoints."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, instrument_response_dict, translate_errors
from database import get_db
from schemas.account import LiquidAccountCreate, LiquidAccountResponse, LiquidAccountUpdate
from services.instrument_kinds import LIQUID_ACCOUNT
from services.instrument_store import InstrumentStore
from services.lifecycle_service import LifecycleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("", response_model=list[LiquidAccountResponse])
def list_accounts(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """List all liquid accounts."""
    accounts = InstrumentStore.list_all(db, owner_id, LIQUID_ACCOUNT)
    return [instrument_response_dict(LIQUID_ACCOUNT, a) for a in accounts]


@router.post("", response_model=LiquidAccountResponse, status_code=201)
def create_account(
    account_data: LiquidAccountCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Create an account and record its opening balance."""
    with translate_errors():
        account = LifecycleService.create_account(db, owner_id, account_data)
    return instrument_response_dict(LIQUID_ACCOUNT, account)


@router.get("/{account_id}", response_model=LiquidAccountResponse)
def get_account(account_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Get a single account."""
    with translate_errors():
        account = InstrumentStore.get(db, owner_id, LIQUID_ACCOUNT, account_id)
    return instrument_response_dict(LIQUID_ACCOUNT, account)


@router.put("/{account_id}", response_model=LiquidAccountResponse)
def update_account(
    account_id: str,
    account_data: LiquidAccountUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Update an account; the new balance is snapshotted for today."""
    with translate_errors():
        account = LifecycleService.update_account(db, owner_id, account_id, account_data)
    return instrument_response_dict(LIQUID_ACCOUNT, account)


@router.delete("/{account_id}", status_code=204)
def delete_account(account_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Delete an account and its balance history."""
    with translate_errors():
        LifecycleService.delete(db, owner_id, LIQUID_ACCOUNT, account_id)
    return Response(status_code=204)
