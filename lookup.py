"""
Project: Restaurant POS Admin Backend
Date: October 2026

Description:
Record lookup services answering "is this code already stored?" for the
code generator. SqlRecordLookup reads the Flask-SQLAlchemy models;
MemoryRecordLookup keeps codes in memory for tests and scripts.
"""

from sqlalchemy import func, select

from codegen import Category


class SqlRecordLookup:
    def __init__(self, session, models):
        # models: {Category: model class}
        self.session = session
        self.models = models

    def _column(self, category, field_name):
        model = self.models[Category(category)]
        return model.__table__.c[field_name]

    def exists(self, category, field_name, candidate):
        col = self._column(category, field_name)
        stmt = select(col).where(col == candidate).limit(1)
        return self.session.execute(stmt).first() is not None

    def latest(self, category, field_name, prefix):
        col = self._column(category, field_name)
        stmt = (
            select(col)
            .where(col.like(f"{prefix}%"))
            .order_by(func.length(col).desc(), col.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar()


class MemoryRecordLookup:
    """In-memory lookup. Set `error` to make every call raise it."""

    def __init__(self, existing=None):
        self.codes = {}
        self.calls = []
        self.error = None
        for (category, field_name), codes in (existing or {}).items():
            self.codes.setdefault((Category(category), field_name), set()).update(codes)

    def add(self, category, field_name, code):
        self.codes.setdefault((Category(category), field_name), set()).add(code)

    def exists(self, category, field_name, candidate):
        self.calls.append((category, field_name, candidate))
        if self.error is not None:
            raise self.error
        return candidate in self.codes.get((Category(category), field_name), ())

    def latest(self, category, field_name, prefix):
        if self.error is not None:
            raise self.error
        stored = self.codes.get((Category(category), field_name), ())
        matching = [c for c in stored if c.startswith(prefix)]
        if not matching:
            return None
        return max(matching, key=lambda c: (len(c), c))
