"""Persistence layer for saved calculator scenarios.

A scenario is one calculation a user chose to keep: the calculator slug, a
name, the inputs and the JSON result. Scenarios are keyed by the anonymous
user token kept in the browser session. The store defaults to SQLite for
local development but accepts any SQLAlchemy-compatible URL.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///scenario_data.sqlite3"
DEFAULT_MAX_PER_USER = 10

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ScenarioModel(Base):
    __tablename__ = "saved_scenarios"

    id = Column(String(64), primary_key=True)
    user_token = Column(String(64), index=True, nullable=False)
    calculator = Column(String(32), nullable=False)
    name = Column(String(255), nullable=False)
    inputs_json = Column(Text, nullable=False)
    result_json = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class ScenarioStore:
    """Database-backed scenario store.

    Each user keeps at most ``max_per_user`` scenarios; adding one more drops
    the oldest. A non-positive limit disables trimming.
    """

    def __init__(self, url: str, *, max_per_user: int = DEFAULT_MAX_PER_USER) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_per_user = max_per_user

    def list_scenarios(self, user_token: str) -> List[Dict[str, Any]]:
        if not user_token:
            return []
        with self._session_factory() as session:
            return [self._to_dict(row) for row in self._user_rows(session, user_token)]

    @staticmethod
    def _user_rows(session: Session, user_token: str, newest_first: bool = False) -> List[ScenarioModel]:
        order = ScenarioModel.created_at.desc() if newest_first else ScenarioModel.created_at.asc()
        query = select(ScenarioModel).where(ScenarioModel.user_token == user_token).order_by(order)
        return list(session.execute(query).scalars())

    def add_scenario(
        self,
        user_token: str,
        scenario_id: str,
        calculator: str,
        name: str,
        inputs: Dict[str, Any],
        result: Dict[str, Any],
    ) -> None:
        if not user_token:
            return
        row = ScenarioModel(
            id=scenario_id,
            user_token=user_token,
            calculator=calculator,
            name=name,
            inputs_json=json.dumps(inputs),
            result_json=json.dumps(result),
        )
        with self._session_factory() as session:
            session.add(row)
            session.commit()
        self._trim_user(user_token)

    def get_scenario(self, user_token: str, scenario_id: str) -> Optional[Dict[str, Any]]:
        if not user_token:
            return None
        with self._session_factory() as session:
            row = session.get(ScenarioModel, scenario_id)
            if row is None or row.user_token != user_token:
                return None
            return self._to_dict(row)

    def remove_scenario(self, user_token: str, scenario_id: str) -> bool:
        """Delete one scenario; returns False when the user has no such scenario."""
        if not user_token:
            return False
        with self._session_factory() as session:
            row = session.get(ScenarioModel, scenario_id)
            if row is None or row.user_token != user_token:
                return False
            session.delete(row)
            session.commit()
            return True

    def clear_scenarios(self, user_token: str) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            session.execute(ScenarioModel.__table__.delete().where(ScenarioModel.user_token == user_token))
            session.commit()

    def _trim_user(self, user_token: str) -> None:
        if not self._max_per_user or self._max_per_user < 0:
            return
        with self._session_factory() as session:
            stale = self._user_rows(session, user_token, newest_first=True)[self._max_per_user :]
            if not stale:
                return
            for row in stale:
                session.delete(row)
            session.commit()
            logger.debug("Dropped %d old scenarios for %s", len(stale), user_token)

    @staticmethod
    def _to_dict(row: ScenarioModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "calculator": row.calculator,
            "name": row.name,
            "inputs": json.loads(row.inputs_json),
            "result": json.loads(row.result_json),
            "created_at": row.created_at.isoformat(),
        }


def create_store_from_env(url: Optional[str], max_per_user: Optional[Any] = None) -> ScenarioStore:
    limit = int(max_per_user) if max_per_user not in (None, "") else DEFAULT_MAX_PER_USER
    return ScenarioStore(url or DEFAULT_DATABASE_URL, max_per_user=limit)
