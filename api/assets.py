"""Valued asset API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.helpers import get_owner_id, instrument_response_dict, translate_errors
from database import get_db
from schemas.account import AssetCategory, ValuedAssetCreate, ValuedAssetResponse, ValuedAssetUpdate
from services.instrument_kinds import VALUED_ASSET
from services.instrument_store import InstrumentStore
from services.lifecycle_service import LifecycleService

router = APIRouter(prefix="/api/assets", tags=["assets"])


@router.get("", response_model=list[ValuedAssetResponse])
def list_assets(
    category: AssetCategory | None = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """List assets, optionally only one category."""
    filters = {"category": category.value} if category else {}
    assets = InstrumentStore.list_all(db, owner_id, VALUED_ASSET, **filters)
    return [instrument_response_dict(VALUED_ASSET, a) for a in assets]


@router.post("", response_model=ValuedAssetResponse, status_code=201)
def create_asset(
    asset_data: ValuedAssetCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Create an asset and record its opening value."""
    with translate_errors():
        asset = LifecycleService.create_asset(db, owner_id, asset_data)
    return instrument_response_dict(VALUED_ASSET, asset)


@router.get("/{asset_id}", response_model=ValuedAssetResponse)
def get_asset(asset_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        asset = InstrumentStore.get(db, owner_id, VALUED_ASSET, asset_id)
    return instrument_response_dict(VALUED_ASSET, asset)


@router.put("/{asset_id}", response_model=ValuedAssetResponse)
def update_asset(
    asset_id: str,
    asset_data: ValuedAssetUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id),
):
    """Update an asset; the new value is snapshotted for today."""
    with translate_errors():
        asset = LifecycleService.update_asset(db, owner_id, asset_id, asset_data)
    return instrument_response_dict(VALUED_ASSET, asset)


@router.delete("/{asset_id}", status_code=204)
def delete_asset(asset_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    with translate_errors():
        LifecycleService.delete(db, owner_id, VALUED_ASSET, asset_id)
    return Response(status_code=204)
