from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from sqlalchemy.exc import IntegrityError, OperationalError

from extensions import db
from models import (
    College,
    CollegeAdminRequest,
    Department,
    DepartmentAdmin,
    DepartmentCode,
    DepartmentRoom,
    PendingDepartmentJoin,
    Profile,
)
from services.errors import (
    ConflictError,
    ConsistencyError,
    NotFoundError,
    TransientServiceError,
    ValidationError,
)
from services.row_policies import check_write


logger = logging.getLogger(__name__)

ENTITIES = {
    "profiles": Profile,
    "colleges": College,
    "departments": Department,
    "department_rooms": DepartmentRoom,
    "department_codes": DepartmentCode,
    "department_admins": DepartmentAdmin,
    "pending_department_joins": PendingDepartmentJoin,
    "college_admin_requests": CollegeAdminRequest,
}

WRITE_ACTIONS = ("insert", "update", "upsert")

_PROCEDURES: dict[str, Callable[..., Any]] = {}


def procedure(name: str):
    """
    Registra una función como procedimiento atómico del lado servidor.
    La función recibe un ProcedureContext y los argumentos por nombre.
    """

    def decorator(fn):
        _PROCEDURES[name] = fn
        return fn

    return decorator


def registered_procedures() -> list[str]:
    return sorted(_PROCEDURES)


@dataclass
class ProcedureContext:
    account_id: int | None
    caller: Profile | None

    def require_caller(self) -> Profile:
        if self.caller is None:
            raise PermissionError("Authentication required.")
        return self.caller


class DataService:
    """
    Contrato de acceso a datos que consume el núcleo del flujo:
      - read(entity, filters, order)
      - write(entity, insert|update|upsert, payload, filters)
      - call(procedure, **args)

    Está ligado a la cuenta autenticada. Las escrituras directas pasan por
    las políticas de fila; los procedimientos corren en una única
    transacción y hacen sus propios chequeos de permisos.
    """

    def __init__(self, *, account_id: int | None = None, caller: Profile | None = None):
        self.account_id = account_id if account_id is not None else getattr(caller, "id", None)
        self.caller = caller

    def bind(self, profile: Profile | None) -> None:
        self.caller = profile

    # -----------------
    # Lectura
    # -----------------

    def read(
        self,
        entity: str,
        filters: Mapping[str, Any] | None = None,
        order: Iterable[str] | str | None = None,
    ) -> list:
        model = self._model(entity)
        try:
            query = self._apply_filters(model, model.query, filters)
            query = self._apply_order(model, query, order)
            return query.all()
        except OperationalError as exc:
            db.session.rollback()
            logger.warning("Read on %s failed: %s", entity, exc)
            raise TransientServiceError() from exc

    def read_one(self, entity: str, **filters):
        rows = self.read(entity, filters)
        return rows[0] if rows else None

    # -----------------
    # Escritura
    # -----------------

    def write(
        self,
        entity: str,
        action: str,
        payload: Mapping[str, Any],
        filters: Mapping[str, Any] | None = None,
    ) -> list:
        if action not in WRITE_ACTIONS:
            raise ValidationError(f"Unsupported write action: {action}")

        model = self._model(entity)
        changes = dict(payload or {})
        self._check_columns(model, changes)

        try:
            if action == "insert":
                rows = [self._insert(entity, model, changes)]
            elif action == "update":
                if not filters:
                    raise ValidationError("Updates require a filter.")
                rows = self._apply_filters(model, model.query, filters).all()
                for row in rows:
                    self._update(entity, row, changes)
            else:
                rows = [self._upsert(entity, model, changes)]

            db.session.commit()
            return rows
        except IntegrityError as exc:
            db.session.rollback()
            logger.info("Write on %s rejected by a constraint: %s", entity, exc.orig)
            raise ConflictError() from exc
        except OperationalError as exc:
            db.session.rollback()
            logger.warning("Write on %s failed: %s", entity, exc)
            raise TransientServiceError() from exc
        except Exception:
            db.session.rollback()
            raise

    # -----------------
    # Procedimientos
    # -----------------

    def call(self, name: str, **args):
        fn = _PROCEDURES.get(name)
        if fn is None:
            raise NotFoundError(f"Unknown procedure: {name}")

        ctx = ProcedureContext(account_id=self.account_id, caller=self.caller)
        try:
            result = fn(ctx, **args)
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            logger.error("Procedure %s violated a constraint: %s", name, exc.orig)
            raise ConsistencyError() from exc
        except OperationalError as exc:
            db.session.rollback()
            logger.warning("Procedure %s failed: %s", name, exc)
            raise TransientServiceError() from exc
        except Exception:
            db.session.rollback()
            raise

        logger.debug("Procedure %s completed for account %s", name, self.account_id)
        return result

    # -----------------
    # Helpers internos
    # -----------------

    @staticmethod
    def _model(entity: str):
        model = ENTITIES.get(entity)
        if model is None:
            raise ValidationError(f"Unknown entity: {entity}")
        return model

    @staticmethod
    def _check_columns(model, changes: Mapping[str, Any]) -> None:
        columns = set(model.__table__.columns.keys())
        unknown = sorted(set(changes) - columns)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(unknown)}")

    @staticmethod
    def _apply_filters(model, query, filters: Mapping[str, Any] | None):
        for column_name, value in (filters or {}).items():
            column = getattr(model, column_name, None)
            if column is None:
                raise ValidationError(f"Unknown filter: {column_name}")
            if isinstance(value, (list, tuple, set)):
                query = query.filter(column.in_(list(value)))
            elif value is None:
                query = query.filter(column.is_(None))
            else:
                query = query.filter(column == value)
        return query

    @staticmethod
    def _apply_order(model, query, order: Iterable[str] | str | None):
        if not order:
            return query
        if isinstance(order, str):
            order = [order]
        for item in order:
            descending = item.startswith("-")
            column = getattr(model, item.lstrip("-"), None)
            if column is None:
                raise ValidationError(f"Unknown order column: {item}")
            query = query.order_by(column.desc() if descending else column.asc())
        return query

    def _insert(self, entity: str, model, changes: dict):
        row = model(**changes)
        check_write(self.caller, self.account_id, entity, "insert", row, changes)
        db.session.add(row)
        db.session.flush()
        return row

    def _update(self, entity: str, row, changes: dict) -> None:
        check_write(self.caller, self.account_id, entity, "update", row, changes)
        for key, value in changes.items():
            setattr(row, key, value)

    def _upsert(self, entity: str, model, changes: dict):
        pk = changes.get("id")
        existing = db.session.get(model, pk) if pk is not None else None
        if existing is None:
            return self._insert(entity, model, changes)
        # Sólo las columnas que cambian pasan por la política de fila.
        update = {
            k: v for k, v in changes.items() if k != "id" and getattr(existing, k) != v
        }
        if update:
            self._update(entity, existing, update)
        return existing
