"""Savings goal API endpoints."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, instrument_response_dict, translate_errors
from database import get_db
from schemas.goal import ContributionRequest, SavingsGoalCreate, SavingsGoalResponse, SavingsGoalUpdate
from services.instrument_kinds import SAVINGS_GOAL
from services.instrument_store import InstrumentStore
from services.lifecycle_service import LifecycleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/goals", tags=["goals"])


@router.get("", response_model=list[SavingsGoalResponse])
def list_goals(
    status: str | None = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """List goals, active first, optionally filtered by status."""
    with translate_errors():
        goals = InstrumentStore.list_all(db, owner_id, SAVINGS_GOAL, status=status)
    return [instrument_response_dict(SAVINGS_GOAL, g) for g in goals]


@router.post("", response_model=SavingsGoalResponse, status_code=201)
def create_goal(
    goal_data: SavingsGoalCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        goal = LifecycleService.create_goal(db, owner_id, goal_data)
    return instrument_response_dict(SAVINGS_GOAL, goal)


@router.get("/{goal_id}", response_model=SavingsGoalResponse)
def get_goal(goal_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        goal = InstrumentStore.get(db, owner_id, SAVINGS_GOAL, goal_id)
    return instrument_response_dict(SAVINGS_GOAL, goal)


@router.put("/{goal_id}", response_model=SavingsGoalResponse)
def update_goal(
    goal_id: str,
    goal_data: SavingsGoalUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    with translate_errors():
        goal = LifecycleService.update_goal(db, owner_id, goal_id, goal_data)
    return instrument_response_dict(SAVINGS_GOAL, goal)


@router.post("/{goal_id}/contributions", response_model=SavingsGoalResponse)
def contribute(
    goal_id: str,
    contribution: ContributionRequest,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Add money to a goal (negative amounts withdraw)."""
    with translate_errors():
        goal = LifecycleService.contribute(
            db, owner_id, goal_id, contribution.amount, contribution.notes, contribution.contribution_date
        )
    return instrument_response_dict(SAVINGS_GOAL, goal)


@router.post("/{goal_id}/contribution-done", response_model=SavingsGoalResponse)
def mark_contribution_done(
    goal_id: str,
    contribution: ContributionRequest,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Record a scheduled contribution and move the next contribution date on."""
    with translate_errors():
        goal = LifecycleService.mark_contribution_done(
            db, owner_id, goal_id, contribution.amount, contribution.notes, contribution.contribution_date
        )
    return instrument_response_dict(SAVINGS_GOAL, goal)


@router.post("/{goal_id}/achieve", response_model=SavingsGoalResponse)
def mark_achieved(goal_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        goal = LifecycleService.mark_goal_achieved(db, owner_id, goal_id)
    return instrument_response_dict(SAVINGS_GOAL, goal)


@router.post("/{goal_id}/reactivate", response_model=SavingsGoalResponse)
def reactivate(goal_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        goal = LifecycleService.reactivate_goal(db, owner_id, goal_id)
    return instrument_response_dict(SAVINGS_GOAL, goal)


@router.post("/{goal_id}/archive", response_model=SavingsGoalResponse)
def archive(goal_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        goal = LifecycleService.archive_goal(db, owner_id, goal_id)
    return instrument_response_dict(SAVINGS_GOAL, goal)


@router.delete("/{goal_id}", status_code=204)
def delete_goal(goal_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        LifecycleService.delete(db, owner_id, SAVINGS_GOAL, goal_id)
    return Response(status_code=204)
