"""Cover plan API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, instrument_response_dict, translate_errors
from database import get_db
from schemas.account import CoverPlanCreate, CoverPlanResponse, CoverPlanUpdate
from services.instrument_kinds import COVER_PLAN
from services.instrument_store import InstrumentStore
from services.lifecycle_service import LifecycleService

router = APIRouter(prefix="/api/plans", tags=["plans"])


@router.get("", response_model=list[CoverPlanResponse])
def list_plans(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """List all cover plans with their expiry state."""
    plans = InstrumentStore.list_all(db, owner_id, COVER_PLAN)
    return [instrument_response_dict(COVER_PLAN, p) for p in plans]


@router.post("", response_model=CoverPlanResponse, status_code=201)
def create_plan(
    plan_data: CoverPlanCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        plan = LifecycleService.create_plan(db, owner_id, plan_data)
    return instrument_response_dict(COVER_PLAN, plan)


@router.get("/{plan_id}", response_model=CoverPlanResponse)
def get_plan(plan_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        plan = InstrumentStore.get(db, owner_id, COVER_PLAN, plan_id)
    return instrument_response_dict(COVER_PLAN, plan)


@router.put("/{plan_id}", response_model=CoverPlanResponse)
def update_plan(
    plan_id: str,
    plan_data: CoverPlanUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        plan = LifecycleService.update_plan(db, owner_id, plan_id, plan_data)
    return instrument_response_dict(COVER_PLAN, plan)


@router.delete("/{plan_id}", status_code=204)
def delete_plan(plan_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        LifecycleService.delete(db, owner_id, COVER_PLAN, plan_id)
    return Response(status_code=204)
