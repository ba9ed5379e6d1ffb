# bookingapp/api/routes/providers.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from bookingapp.api.deps import get_provider_or_404, require_provider_permission
from bookingapp.core.permissions import MANAGE_STAFF
from bookingapp.core.security import get_current_user
from bookingapp.db.base import get_db
from bookingapp.db.models.provider import Provider
from bookingapp.db.models.service import Service
from bookingapp.db.models.staff import Staff
from bookingapp.db.models.user import User
from bookingapp.schemas.provider import ProviderCreate, ProviderResponse, StaffCreate, StaffResponse

router = APIRouter(prefix="/providers", tags=["providers"])


# Provider user registers a business

@router.post("", response_model=ProviderResponse)
def create_provider(payload: ProviderCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if current_user.role != "provider":
        raise HTTPException(status_code=403, detail="Only providers can create a business")

    if db.query(Provider).filter(Provider.slug == payload.slug).first():
        raise HTTPException(status_code=400, detail="Slug already taken")

    provider = Provider(owner_id=current_user.id, **payload.model_dump())
    db.add(provider)
    db.flush()

    # the owner is bookable staff too
    db.add(Staff(provider_id=provider.id, user_id=current_user.id, name=current_user.name, role="owner"))
    db.commit()
    db.refresh(provider)
    return provider


@router.get("/{provider_id}", response_model=ProviderResponse)
def get_provider(provider_id: int, db: Session = Depends(get_db)):
    return get_provider_or_404(db, provider_id)


# Staff management

@router.post("/{provider_id}/staff", response_model=StaffResponse)
def add_staff(
    provider_id: int,
    payload: StaffCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_provider_permission(db, provider_id, current_user, MANAGE_STAFF)

    services = []
    if payload.service_ids:
        services = db.query(Service).filter(
            Service.id.in_(payload.service_ids),
            Service.provider_id == provider_id,
        ).all()
        if len(services) != len(set(payload.service_ids)):
            raise HTTPException(status_code=400, detail="Unknown service for this provider")

    staff = Staff(
        provider_id=provider_id,
        user_id=payload.user_id,
        name=payload.name,
        role=payload.role,
        permissions=payload.permissions,
    )
    staff.services = services
    db.add(staff)
    db.commit()
    db.refresh(staff)
    return staff


@router.get("/{provider_id}/staff", response_model=List[StaffResponse])
def list_staff(provider_id: int, db: Session = Depends(get_db)):
    get_provider_or_404(db, provider_id)
    return db.query(Staff).filter(Staff.provider_id == provider_id, Staff.is_active == True).all()
