# bookingapp/api/routes/schedules.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from bookingapp.api.deps import get_staff_or_404, require_provider_permission
from bookingapp.core.permissions import MANAGE_SCHEDULE, VIEW_SCHEDULE
from bookingapp.core.security import get_current_user
from bookingapp.db.base import get_db
from bookingapp.db.models.availability import ShiftOverride, TimeBlock, WorkHoursRule
from bookingapp.db.models.staff import Staff
from bookingapp.db.models.user import User
from bookingapp.schemas.availability import (
    ShiftOverrideCreate,
    ShiftOverrideResponse,
    TimeBlockCreate,
    TimeBlockResponse,
    WeeklyScheduleUpdate,
    WorkHoursRuleResponse,
)

router = APIRouter(prefix="/staff", tags=["schedules"])


def _staff_for(db: Session, staff_id: int, user: User, permission: str) -> Staff:
    staff = get_staff_or_404(db, staff_id)
    require_provider_permission(db, staff.provider_id, user, permission)
    return staff


# Weekly work hours

@router.get("/{staff_id}/work-hours", response_model=List[WorkHoursRuleResponse])
def list_work_hours(staff_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    _staff_for(db, staff_id, current_user, VIEW_SCHEDULE)
    return (
        db.query(WorkHoursRule)
        .filter(WorkHoursRule.staff_id == staff_id)
        .order_by(WorkHoursRule.weekday, WorkHoursRule.start_time)
        .all()
    )


@router.put("/{staff_id}/work-hours", response_model=List[WorkHoursRuleResponse])
def replace_work_hours(
    staff_id: int,
    payload: WeeklyScheduleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace the whole weekly template; weekdays left out become unscheduled."""
    _staff_for(db, staff_id, current_user, MANAGE_SCHEDULE)

    db.query(WorkHoursRule).filter(WorkHoursRule.staff_id == staff_id).delete()
    rules = [WorkHoursRule(staff_id=staff_id, **rule.model_dump()) for rule in payload.rules]
    db.add_all(rules)
    db.commit()
    for rule in rules:
        db.refresh(rule)
    return rules


# Shift overrides

@router.get("/{staff_id}/shifts", response_model=List[ShiftOverrideResponse])
def list_shifts(staff_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    _staff_for(db, staff_id, current_user, VIEW_SCHEDULE)
    return db.query(ShiftOverride).filter(ShiftOverride.staff_id == staff_id).order_by(ShiftOverride.shift_date).all()


@router.post("/{staff_id}/shifts", response_model=ShiftOverrideResponse)
def add_shift(
    staff_id: int,
    payload: ShiftOverrideCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _staff_for(db, staff_id, current_user, MANAGE_SCHEDULE)

    shift = ShiftOverride(staff_id=staff_id, **payload.model_dump())
    db.add(shift)
    db.commit()
    db.refresh(shift)
    return shift


@router.delete("/{staff_id}/shifts/{shift_id}")
def delete_shift(
    staff_id: int,
    shift_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _staff_for(db, staff_id, current_user, MANAGE_SCHEDULE)

    shift = db.query(ShiftOverride).filter(ShiftOverride.id == shift_id, ShiftOverride.staff_id == staff_id).first()
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")
    db.delete(shift)
    db.commit()
    return {"message": "Shift deleted"}


# Time blocks

@router.get("/{staff_id}/time-blocks", response_model=List[TimeBlockResponse])
def list_time_blocks(staff_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    _staff_for(db, staff_id, current_user, VIEW_SCHEDULE)
    return db.query(TimeBlock).filter(TimeBlock.staff_id == staff_id).order_by(TimeBlock.start_date).all()


@router.post("/{staff_id}/time-blocks", response_model=TimeBlockResponse)
def add_time_block(
    staff_id: int,
    payload: TimeBlockCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _staff_for(db, staff_id, current_user, MANAGE_SCHEDULE)

    block = TimeBlock(staff_id=staff_id, **payload.model_dump())
    db.add(block)
    db.commit()
    db.refresh(block)
    return block


@router.delete("/{staff_id}/time-blocks/{block_id}")
def delete_time_block(
    staff_id: int,
    block_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _staff_for(db, staff_id, current_user, MANAGE_SCHEDULE)

    block = db.query(TimeBlock).filter(TimeBlock.id == block_id, TimeBlock.staff_id == staff_id).first()
    if not block:
        raise HTTPException(status_code=404, detail="Time block not found")
    db.delete(block)
    db.commit()
    return {"message": "Time block deleted"}
