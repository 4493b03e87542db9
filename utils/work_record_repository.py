"""Persistence interface for work records and its SQLAlchemy implementation.

The store depends only on :class:`WorkRecordRepository`; rows cross the
boundary as plain dicts so callers never hold ORM instances bound to a
session.
"""
from __future__ import annotations

import abc
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from extensions import db
from models import ReferredBy, WorkRecord
from utils.db_guard import translate_db_errors
from utils.record_filters import WorkRecordFilters


class WorkRecordRepository(abc.ABC):
    @abc.abstractmethod
    def insert(self, values: dict) -> dict:
        ...

    @abc.abstractmethod
    def insert_referrers(self, record_id: str, referrers: List[dict]) -> List[dict]:
        ...

    @abc.abstractmethod
    def find_all(self, filters: WorkRecordFilters) -> List[dict]:
        """Matching records, newest first, each with nested ``referred_by``."""

    @abc.abstractmethod
    def find_by_id(self, record_id: str) -> Optional[dict]:
        ...

    @abc.abstractmethod
    def update(self, record_id: str, values: dict) -> Optional[dict]:
        ...

    @abc.abstractmethod
    def delete(self, record_id: str) -> bool:
        ...

    @abc.abstractmethod
    def count(self, filters: WorkRecordFilters) -> int:
        ...


def apply_filters(query, filters: WorkRecordFilters):
    """Translate a filter value object into SQLAlchemy predicates."""
    if filters.search:
        term = f"%{filters.search}%"
        query = query.filter(or_(WorkRecord.full_name.ilike(term), WorkRecord.phone_number.ilike(term)))
    if filters.date_from:
        query = query.filter(WorkRecord.date_of_entry >= filters.date_from)
    if filters.date_to:
        query = query.filter(WorkRecord.date_of_entry <= filters.date_to)
    if filters.constituency_origin:
        query = query.filter(WorkRecord.constituency_origin.ilike(f"%{filters.constituency_origin}%"))
    if filters.constituency_work:
        query = query.filter(WorkRecord.constituency_work.ilike(f"%{filters.constituency_work}%"))
    if filters.nature_of_work:
        query = query.filter(WorkRecord.nature_of_work == filters.nature_of_work)
    if filters.status:
        query = query.filter(WorkRecord.status == filters.status)
    return query


class SqlAlchemyWorkRecordRepository(WorkRecordRepository):
    def insert(self, values: dict) -> dict:
        with translate_db_errors("create work record"):
            record = WorkRecord(**values)
            db.session.add(record)
            db.session.commit()
            return record.to_dict()

    def insert_referrers(self, record_id: str, referrers: List[dict]) -> List[dict]:
        with translate_db_errors("save referrers"):
            rows = [ReferredBy(work_record_id=record_id, **ref) for ref in referrers]
            db.session.add_all(rows)
            db.session.commit()
            return [row.to_dict() for row in rows]

    def find_all(self, filters: WorkRecordFilters) -> List[dict]:
        with translate_db_errors("fetch work records"):
            query = WorkRecord.query.options(selectinload(WorkRecord.referrers))
            query = apply_filters(query, filters)
            records = query.order_by(WorkRecord.created_at.desc(), WorkRecord.id).all()
            return [record.to_dict(include_referrers=True) for record in records]

    def find_by_id(self, record_id: str) -> Optional[dict]:
        with translate_db_errors("fetch work record"):
            record = (
                WorkRecord.query.options(selectinload(WorkRecord.referrers))
                .filter(WorkRecord.id == record_id)
                .first()
            )
            return record.to_dict(include_referrers=True) if record else None

    def update(self, record_id: str, values: dict) -> Optional[dict]:
        with translate_db_errors("update work record"):
            record = db.session.get(WorkRecord, record_id)
            if record is None:
                return None
            for key, value in values.items():
                setattr(record, key, value)
            db.session.commit()
            return record.to_dict()

    def delete(self, record_id: str) -> bool:
        with translate_db_errors("delete work record"):
            record = db.session.get(WorkRecord, record_id)
            if record is None:
                return False
            db.session.delete(record)
            db.session.commit()
            return True

    def count(self, filters: WorkRecordFilters) -> int:
        with translate_db_errors("count work records"):
            return apply_filters(WorkRecord.query, filters).count()
