"""Systematic investment plan (SIP) API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, instrument_response_dict, translate_errors
from database import get_db
from schemas.investment import (
    NavUpdate,
    SipCreate,
    SipInstallment,
    SipRedeem,
    SipResponse,
    SipUpdate,
    UnitsUpdate,
)
from services.instrument_kinds import SYSTEMATIC_INVESTMENT
from services.instrument_store import InstrumentStore
from services.lifecycle_service import LifecycleService

router = APIRouter(prefix="/api/sips", tags=["sips"])


@router.get("", response_model=list[SipResponse])
def list_sips(
    status: str | None = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        sips = InstrumentStore.list_all(db, owner_id, SYSTEMATIC_INVESTMENT, status=status)
    return [instrument_response_dict(SYSTEMATIC_INVESTMENT, s) for s in sips]


@router.post("", response_model=SipResponse, status_code=201)
def create_sip(sip_data: SipCreate, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Start a SIP with its first installment or lump sum."""
    with translate_errors():
        sip = LifecycleService.create_sip(db, owner_id, sip_data)
    return instrument_response_dict(SYSTEMATIC_INVESTMENT, sip)


@router.get("/{sip_id}", response_model=SipResponse)
def get_sip(sip_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        sip = InstrumentStore.get(db, owner_id, SYSTEMATIC_INVESTMENT, sip_id)
    return instrument_response_dict(SYSTEMATIC_INVESTMENT, sip)


@router.put("/{sip_id}", response_model=SipResponse)
def update_sip(
    sip_id: str,
    sip_data: SipUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        sip = LifecycleService.update_sip(db, owner_id, sip_id, sip_data)
    return instrument_response_dict(SYSTEMATIC_INVESTMENT, sip)


@router.post("/{sip_id}/installments", response_model=SipResponse)
def add_installment(
    sip_id: str,
    installment: SipInstallment,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Invest more at the given NAV."""
    with translate_errors():
        sip = LifecycleService.add_sip_installment(
            db,
            owner_id,
            sip_id,
            installment.amount,
            installment.nav,
            installment.installment_date,
            installment.investment_type,
            installment.notes,
        )
    return instrument_response_dict(SYSTEMATIC_INVESTMENT, sip)


@router.put("/{sip_id}/nav", response_model=SipResponse)
def update_nav(
    sip_id: str,
    nav_data: NavUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        sip = LifecycleService.update_sip_nav(db, owner_id, sip_id, nav_data.nav, nav_data.nav_date)
    return instrument_response_dict(SYSTEMATIC_INVESTMENT, sip)


@router.put("/{sip_id}/units", response_model=SipResponse)
def update_units(
    sip_id: str,
    units_data: UnitsUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        sip = LifecycleService.update_sip_units(db, owner_id, sip_id, units_data.total_units)
    return instrument_response_dict(SYSTEMATIC_INVESTMENT, sip)


@router.post("/{sip_id}/pause", response_model=SipResponse)
def pause_sip(sip_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        sip = LifecycleService.pause_sip(db, owner_id, sip_id)
    return instrument_response_dict(SYSTEMATIC_INVESTMENT, sip)


@router.post("/{sip_id}/resume", response_model=SipResponse)
def resume_sip(sip_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        sip = LifecycleService.resume_sip(db, owner_id, sip_id)
    return instrument_response_dict(SYSTEMATIC_INVESTMENT, sip)


@router.post("/{sip_id}/redeem", response_model=SipResponse)
def redeem_sip(
    sip_id: str,
    redeem_data: SipRedeem,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        sip = LifecycleService.redeem_sip(
            db, owner_id, sip_id, redeem_data.redeemed_amount, redeem_data.redeemed_date, redeem_data.notes
        )
    return instrument_response_dict(SYSTEMATIC_INVESTMENT, sip)


@router.delete("/{sip_id}", status_code=204)
def delete_sip(sip_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        LifecycleService.delete(db, owner_id, SYSTEMATIC_INVESTMENT, sip_id)
    return Response(status_code=204)
