# bookingapp/api/routes/services.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from bookingapp.api.deps import get_provider_or_404, require_provider_permission
from bookingapp.core.permissions import MANAGE_STAFF
from bookingapp.core.security import get_current_user
from bookingapp.db.base import get_db
from bookingapp.db.models.service import Service
from bookingapp.db.models.user import User
from bookingapp.schemas.service import ServiceCreate, ServiceResponse


router = APIRouter(tags=["services"])

# Provider creates service

@router.post("/services", response_model=ServiceResponse)
def create_service(
    service_data: ServiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    require_provider_permission(db, service_data.provider_id, current_user, MANAGE_STAFF)

    new_service = Service(**service_data.model_dump())

    db.add(new_service)
    db.commit()
    db.refresh(new_service)

    return new_service


# Provider deactivates a service

@router.delete("/services/{service_id}")
def delete_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise HTTPException(404, "Service not found")

    require_provider_permission(db, service.provider_id, current_user, MANAGE_STAFF)

    service.is_active = False

    db.commit()
    return {"message": "Service deactivated successfully"}


# Get services by provider

@router.get("/providers/{provider_id}/services", response_model=list[ServiceResponse])
def get_provider_services(provider_id: int, db: Session = Depends(get_db)):
    get_provider_or_404(db, provider_id)
    services = (
        db.query(Service)
        .filter(Service.provider_id == provider_id, Service.is_active == True)
        .all()
    )
    return services
