# rental/quotes/repository.py

"""Narrow read/write access to the ``quotes`` and ``events`` tables.

Both repositories speak the flattened row format (plain dicts keyed by column
name); mapping to ``Quote`` objects happens in the service.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from rental.errors import NotFoundError, PersistenceError
from rental.models import CalendarEvent, QuoteRecord, as_dict


class _SessionRepository:
    model = None

    def __init__(self, session) -> None:
        self.session = session

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logging.error("%s failed on %s: %s", action, self.model.__tablename__, e)
            raise PersistenceError(f"Could not {action} {self.model.__tablename__}: {e}") from e


class QuoteRepository(_SessionRepository):
    model = QuoteRecord

    def insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        rec = QuoteRecord(**row)
        self.session.add(rec)
        self._commit('insert')
        return as_dict(rec)

    def update(self, quote_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        rec = self._load(quote_id)
        if rec is None:
            raise NotFoundError(f"Quote #{quote_id} not found")
        for col, value in fields.items():
            setattr(rec, col, value)
        self._commit('update')
        return as_dict(rec)

    def get(self, quote_id: str) -> Optional[Dict[str, Any]]:
        rec = self._load(quote_id)
        return as_dict(rec) if rec is not None else None

    def list_all(self) -> List[Dict[str, Any]]:
        return self.query()

    def query(self, **equals) -> List[Dict[str, Any]]:
        try:
            recs = self.session.query(QuoteRecord).filter_by(**equals).order_by(QuoteRecord.created_at).all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read quotes: {e}") from e
        return [as_dict(r) for r in recs]

    def delete(self, quote_id: str) -> None:
        rec = self._load(quote_id)
        if rec is None:
            raise NotFoundError(f"Quote #{quote_id} not found")
        self.session.delete(rec)
        self._commit('delete')

    def _load(self, quote_id: str) -> Optional[QuoteRecord]:
        try:
            return self.session.get(QuoteRecord, str(quote_id))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read quote #{quote_id}: {e}") from e


class CalendarRepository(_SessionRepository):
    model = CalendarEvent

    def insert(self, event: Dict[str, Any]) -> Dict[str, Any]:
        rec = CalendarEvent(**event)
        self.session.add(rec)
        self._commit('insert')
        return as_dict(rec)

    def list_all(self) -> List[Dict[str, Any]]:
        return [as_dict(e) for e in self.session.query(CalendarEvent).order_by(CalendarEvent.id).all()]
