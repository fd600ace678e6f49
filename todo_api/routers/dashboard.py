from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..crud import dashboard as dashboard_crud
from ..database import get_db
from ..models import User
from ..schemas.dashboard import DashboardSummary, RecentTodo
from .auth import get_auth_user

router = APIRouter()


@router.get("/dashboard/summary", response_model=DashboardSummary)
def dashboard_summary(
    user: Optional[User] = Depends(get_auth_user),
    db: Session = Depends(get_db),
):
    """Record counts across all tables. Signed-out callers get zeros."""
    if user is None:
        return DashboardSummary()
    return dashboard_crud.load_summary(db, user.id)


@router.get("/dashboard/recent", response_model=List[RecentTodo])
def dashboard_recent(
    limit: int = Query(5, ge=0, le=100),
    user: Optional[User] = Depends(get_auth_user),
    db: Session = Depends(get_db),
):
    if user is None:
        return []
    return dashboard_crud.load_recent(db, user.id, limit)
