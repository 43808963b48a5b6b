"""Generic repository base for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Whitelisted equality filters and update assignment (no mass-assignment).
- Flushing through a single choke point that converts driver
  ``IntegrityError`` on unique constraints into :class:`UniqueViolation`.
- No business logic, no commit/rollback. Services own transactions.

Design decisions
----------------
* Repositories MUST remain thin and persistence-focused.
* Unique violations carry the constraint or index *name* so services can
  branch on ``uq_users_username`` vs ``uq_users_single_admin`` without ever
  reading driver error text.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Index, Select, Table, UniqueConstraint, and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session

from fits.core.extensions import db
from fits.services._shared.errors import UniqueViolation

E = TypeVar("E")  # SQLAlchemy mapped entity type

_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<cols>[\w.,\s]+)")


# --------------------------- Unique violation parsing -------------------------


def _unique_sets(table: Table) -> list[tuple[str, frozenset[str]]]:
    """Return ``(name, columns)`` for every unique constraint and unique index."""
    found: list[tuple[str, frozenset[str]]] = []
    for constraint in table.constraints:
        if isinstance(constraint, UniqueConstraint) and constraint.name:
            found.append((str(constraint.name), frozenset(c.name for c in constraint.columns)))
    for index in table.indexes:
        if isinstance(index, Index) and index.unique and index.name:
            found.append((str(index.name), frozenset(c.name for c in index.columns)))
    return found


def unique_constraint_name(exc: IntegrityError) -> str | None:
    """Resolve the unique constraint/index name behind an ``IntegrityError``.

    PostgreSQL drivers expose ``diag.constraint_name``. SQLite only reports
    ``table.column`` pairs, which are matched against the mapped metadata.

    :param exc: Error raised by flush or a Core statement.
    :returns: Constraint/index name, or ``None`` if not a unique violation or
        unresolvable.
    """
    orig = exc.orig
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return str(name)

    match = _SQLITE_UNIQUE.search(str(orig))
    if not match:
        return None
    pairs = [p.strip() for p in match.group("cols").split(",") if "." in p]
    if not pairs:
        return None
    table_name = pairs[0].split(".", 1)[0]
    columns = frozenset(p.split(".", 1)[1] for p in pairs)
    table = db.metadata.tables.get(table_name)
    if table is None:
        return None
    for constraint_name, constraint_columns in _unique_sets(table):
        if constraint_columns == columns:
            return constraint_name
    return None


def translate_integrity_error(exc: IntegrityError) -> Exception:
    """Map a unique violation to :class:`UniqueViolation`; return others unchanged."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    name = unique_constraint_name(exc)
    if name is not None or sqlstate == "23505":
        return UniqueViolation(name)
    return exc


# ------------------------------ Base repository ------------------------------


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define:

    * ``model``: the SQLAlchemy mapped class.

    Subclasses MAY override:

    * ``_filterable_fields`` to enable filter whitelisting.
    * ``_updatable_fields`` to whitelist keys allowed for updates.

    This class NEVER opens, commits or rolls back transactions.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        :param session: Session shared across the Unit of Work scope; falls
            back to the Flask-scoped ``db.session``.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist of equality-filterable fields. Unknown keys are ignored.

        :returns: Public key -> ORM attribute mapping.
        """
        return {}

    def _updatable_fields(self) -> set[str]:
        """Whitelist of keys that can be assigned on update.

        :returns: Set of allowed public keys for update operations.
        """
        return set()

    # ------------------------------ Internals --------------------------------

    def _apply_equality_filters(
        self, stmt: Select[Any], filters: Mapping[str, Any] | None
    ) -> Select[Any]:
        if not filters:
            return stmt
        allowed = self._filterable_fields()
        clauses = [allowed[k] == v for k, v in filters.items() if k in allowed]
        return stmt.where(and_(*clauses)) if clauses else stmt

    def _sanitize_update_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Return only whitelisted update keys.

        :raises ValueError: On unknown keys or when nothing is updatable.
        """
        allowed = self._updatable_fields()
        unknown = [k for k in fields if k not in allowed]
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return dict(fields)

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush so constraint violations surface now.

        :param instance: New entity instance.
        :returns: The same instance after ``flush()``.
        :raises UniqueViolation: If a unique constraint or index rejects it.
        """
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key.

        :param entity_id: Primary-key value.
        :returns: Entity or ``None``.
        """
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        result = self.session.execute(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, result.scalars().first())

    def get_for_update(self, entity_id: Any) -> E | None:
        """Retrieve an entity by PK with a ``FOR UPDATE`` lock (when supported).

        :param entity_id: Primary-key value.
        :returns: Locked entity or ``None``.
        """
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get_for_update requires a detectable PK.")
        stmt = select(self.model).where(pk_attr == entity_id).with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def find_one(self, **filters: Any) -> E | None:
        """Find a single entity by whitelisted equality filters."""
        stmt = self._apply_equality_filters(select(self.model), filters)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def exists(self, **filters: Any) -> bool:
        """Check existence for whitelisted equality filters."""
        stmt: Select[Any] = select(func.count()).select_from(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        return bool(self.session.execute(stmt).scalar_one())

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        """Flush pending changes, translating unique violations.

        The session is rolled back by the owning Unit of Work on the way out,
        so the failed flush never leaks partial state.
        """
        try:
            self.session.flush()
        except IntegrityError as exc:
            translated = translate_integrity_error(exc)
            if translated is exc:
                raise
            raise translated from exc

    def execute_write(self, stmt: Any) -> int:
        """Execute a Core DML statement and return its rowcount.

        Used for compare-and-swap style updates/deletes whose ``WHERE`` clause
        encodes the guard.
        """
        try:
            result = self.session.execute(stmt)
        except IntegrityError as exc:
            translated = translate_integrity_error(exc)
            if translated is exc:
                raise
            raise translated from exc
        return int(getattr(result, "rowcount", 0) or 0)

    # ----------------------------- Safe updates -------------------------------

    def assign_updates(self, instance: E, fields: Mapping[str, Any], *, flush: bool = True) -> E:
        """Assign only whitelisted keys to ``instance`` and optionally flush.

        The assignment uses ``setattr`` to trigger SQLAlchemy ``@validates``
        decorators defined on the mapped class.

        :param instance: Entity to mutate.
        :param fields: Public mapping of fields to assign.
        :param flush: Call ``session.flush()`` after assignment.
        :returns: The mutated instance.
        :raises ValueError: If unknown keys are present.
        """
        for k, v in self._sanitize_update_fields(fields).items():
            setattr(instance, k, v)
        if flush:
            self.flush()
        return instance
