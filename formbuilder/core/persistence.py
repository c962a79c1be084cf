from __future__ import annotations

import logging

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class SessionPersistence:
    """
    insert()/update() for mapped records on a SQLAlchemy session.

    Both commit and refresh, like the request handlers do, and return the
    persistent instance. Errors from the session are not caught here.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert(self, record):
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def update(self, record):
        state = sa_inspect(record)
        if state.transient or state.detached:
            # built from posted values (or loaded elsewhere): attach by primary key
            record = self.db.merge(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def discard(self, record, names: list[str]) -> None:
        """Drop unsaved changes to `names` on a record the session already holds."""
        state = sa_inspect(record)
        if not state.persistent or not names:
            return
        state.session.expire(record, names)
        logger.debug("Discarded pending changes to %s on %s", names, type(record).__name__)
