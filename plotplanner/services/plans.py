"""Owner-scoped plan and grid cell lookups."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from plotplanner.core.errors import WeatherRefreshFailed
from plotplanner.db.session import translate_storage_error
from plotplanner.models import GridCell, Plan


class PlanService:
    """Read plans and their cells; storage failures surface as ``WeatherRefreshFailed``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_owned(self, plan_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Plan]:
        stmt = select(Plan).where(Plan.id == plan_id).where(Plan.user_id == user_id)
        try:
            return self.session.exec(stmt).first()
        except SQLAlchemyError as exc:
            raise WeatherRefreshFailed(translate_storage_error(exc, str(plan_id))) from exc

    def get_cell(self, plan_id: uuid.UUID, x: int, y: int) -> Optional[GridCell]:
        stmt = select(GridCell).where(GridCell.plan_id == plan_id).where(GridCell.x == x).where(GridCell.y == y)
        try:
            return self.session.exec(stmt).first()
        except SQLAlchemyError as exc:
            raise WeatherRefreshFailed(translate_storage_error(exc, str(plan_id))) from exc


__all__ = ["PlanService"]
