"""SQLAlchemy-backed goal repository mapping ORM rows to planning models."""
from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.orm import Session

from app.db.models.goal import Goal as GoalRow
from app.db.models.goal_schedule import GoalSchedule
from app.db.models.milestone import Milestone as MilestoneRow
from app.db.types import as_aware
from app.services.planning.models import Goal, GoalCategory, Milestone, Schedule

logger = logging.getLogger(__name__)


class SqlGoalRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_goal(self, goal_id: UUID) -> Optional[Goal]:
        row = self.db.get(GoalRow, goal_id)
        if row is None:
            return None
        return self._to_domain(row)

    def list_goals(self, *, active_only: bool = False) -> List[Goal]:
        query = self.db.query(GoalRow)
        if active_only:
            query = query.filter(GoalRow.is_active.is_(True))
        rows = query.order_by(asc(GoalRow.created_at)).all()
        return [self._to_domain(row) for row in rows]

    def add_goal(self, goal: Goal) -> Goal:
        row = GoalRow(id=goal.id)
        self._apply(row, goal)
        self.db.add(row)
        self.db.flush()
        self._replace_milestones(goal)
        if goal.schedule is not None:
            self._write_schedule(goal.id, goal.schedule)
        self.db.commit()
        return goal

    def update_goal(self, goal: Goal) -> Goal:
        row = self.db.get(GoalRow, goal.id)
        if row is None:
            return self.add_goal(goal)
        try:
            self._apply(row, goal)
            self._replace_milestones(goal)
            if goal.schedule is not None:
                self._write_schedule(goal.id, goal.schedule)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return goal

    def delete_goal(self, goal_id: UUID) -> bool:
        row = self.db.get(GoalRow, goal_id)
        if row is None:
            return False
        try:
            self.db.query(MilestoneRow).filter(MilestoneRow.goal_id == goal_id).delete(synchronize_session=False)
            self.db.query(GoalSchedule).filter(GoalSchedule.goal_id == goal_id).delete(synchronize_session=False)
            self.db.delete(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Deleted goal %s with milestones and schedule", goal_id)
        return True

    def load_schedule(self, goal_id: UUID) -> Optional[Schedule]:
        record = self.db.query(GoalSchedule).filter(GoalSchedule.goal_id == goal_id).one_or_none()
        if record is None:
            return None
        return Schedule.model_validate(record.payload)

    def save_schedule(self, goal_id: UUID, schedule: Schedule) -> None:
        self._write_schedule(goal_id, schedule)
        self.db.commit()

    # ------------------------------------------------------------------

    def _write_schedule(self, goal_id: UUID, schedule: Schedule) -> None:
        payload = schedule.model_dump(mode="json")
        record = self.db.query(GoalSchedule).filter(GoalSchedule.goal_id == goal_id).one_or_none()
        if record is None:
            self.db.add(GoalSchedule(goal_id=goal_id, payload=payload))
        else:
            record.payload = payload
        self.db.flush()

    def _replace_milestones(self, goal: Goal) -> None:
        self.db.query(MilestoneRow).filter(MilestoneRow.goal_id == goal.id).delete(synchronize_session=False)
        for milestone in goal.milestones:
            self.db.add(
                MilestoneRow(
                    id=milestone.id,
                    goal_id=goal.id,
                    title=milestone.title,
                    target_date=milestone.target_date,
                    is_completed=milestone.is_completed,
                    completed_at=milestone.completed_at,
                    is_generated=milestone.is_generated,
                    order_index=milestone.order_index,
                )
            )
        self.db.flush()

    @staticmethod
    def _apply(row: GoalRow, goal: Goal) -> None:
        row.title = goal.title
        row.description = goal.description
        row.target_date = goal.target_date
        row.category = goal.category.value
        row.is_active = goal.is_active
        row.progress_percentage = goal.progress_percentage
        row.last_plan_update_at = goal.last_plan_update_at
        row.created_at = goal.created_at
        row.updated_at = goal.updated_at

    def _to_domain(self, row: GoalRow) -> Goal:
        milestone_rows = (
            self.db.query(MilestoneRow)
            .filter(MilestoneRow.goal_id == row.id)
            .order_by(asc(MilestoneRow.order_index), asc(MilestoneRow.target_date))
            .all()
        )
        return Goal(
            id=row.id,
            title=row.title,
            description=row.description,
            target_date=row.target_date,
            category=GoalCategory(row.category),
            is_active=bool(row.is_active),
            progress_percentage=row.progress_percentage or 0.0,
            schedule=self.load_schedule(row.id),
            milestones=[
                Milestone(
                    id=m.id,
                    title=m.title,
                    target_date=m.target_date,
                    is_completed=bool(m.is_completed),
                    completed_at=as_aware(m.completed_at),
                    is_generated=bool(m.is_generated),
                    order_index=m.order_index,
                )
                for m in milestone_rows
            ],
            created_at=as_aware(row.created_at),
            updated_at=as_aware(row.updated_at),
            last_plan_update_at=as_aware(row.last_plan_update_at),
        )
