"""Mini README: Durable keyed collection of shipment records.

Structure:
    * ShipmentScan - restartable snapshot of a filtered, ordered query, fetched per iteration.
    * RecordStore - insert/update/modify/get/scan/delete over the ``shipments`` table.

The store does not enforce business rules; it only persists what the ledger
service hands it. Writes are serialised by a re-entrant lock (single writer)
and each one runs in its own transaction, so a failed write leaves the prior
record untouched. Reads take no lock and see committed data. Every scan
iteration snapshots the matching rows inside one short session and then
yields detached ``Shipment`` copies, so slow consumers never hold the writer.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import ColumnElement, Select, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import NotFound, StorageFailure
from ..domain import Product, Shipment, ShipmentStatus
from ..logging_utils import get_logger
from .models import ShipmentRow

LOGGER = get_logger(__name__)

_ORDERABLE_COLUMNS = {
    "created_at": ShipmentRow.created_at,
    "completed_at": ShipmentRow.completed_at,
    "shipment_id": ShipmentRow.shipment_id,
    "quantity": ShipmentRow.quantity,
}

_UPDATABLE_FIELDS = {
    "product",
    "quantity",
    "destination",
    "unit_price",
    "status",
    "returned_quantity",
    "completed_at",
}


def _row_to_shipment(row: ShipmentRow) -> Shipment:
    return Shipment(
        shipment_id=row.shipment_id,
        product=Product(row.product),
        quantity=row.quantity,
        destination=row.destination,
        created_at=row.created_at,
        unit_price=row.unit_price,
        status=ShipmentStatus(row.status),
        returned_quantity=row.returned_quantity,
        completed_at=row.completed_at,
    )


def _coerce_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Validate update payloads and convert enums to their stored names."""

    coerced: Dict[str, Any] = {}
    for key, value in changes.items():
        if key in {"shipment_id", "created_at"}:
            raise ValueError(f"Field '{key}' cannot be changed after creation.")
        if key not in _UPDATABLE_FIELDS:
            raise ValueError(f"Update of field '{key}' is not supported.")
        if key == "product":
            value = Product(value).value
        elif key == "status":
            value = ShipmentStatus(value).value
        coerced[key] = value
    return coerced


class ShipmentScan:
    """Restartable snapshot of matching shipments.

    The query is deferred until iteration; each ``iter()`` re-runs it and
    loads the full result into memory before yielding.
    """

    def __init__(self, store: "RecordStore", statement: Select) -> None:
        self._store = store
        self._statement = statement

    def __iter__(self) -> Iterator[Shipment]:
        return iter(self._store._fetch(self._statement))

    def to_list(self) -> List[Shipment]:
        return list(self)


class RecordStore:
    """Persist shipments in SQL and expose predicate based scans."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._write_lock = threading.RLock()

    @contextmanager
    def _write_session(self, action: str) -> Iterator[Session]:
        with self._write_lock:
            session = self._session_factory()
            try:
                yield session
                session.commit()
            except SQLAlchemyError as error:
                session.rollback()
                LOGGER.error("Storage failure while trying to %s: %s", action, error)
                raise StorageFailure(f"Failed to {action}: {error}") from error
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    @contextmanager
    def _read_session(self, action: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as error:
            LOGGER.error("Storage failure while trying to %s: %s", action, error)
            raise StorageFailure(f"Failed to {action}: {error}") from error
        finally:
            session.close()

    def insert(self, shipment: Shipment) -> int:
        """Store a new shipment and return the id assigned to it."""

        with self._write_session("insert shipment") as session:
            row = ShipmentRow(
                product=shipment.product.value,
                quantity=shipment.quantity,
                destination=shipment.destination,
                created_at=shipment.created_at,
                unit_price=shipment.unit_price,
                status=shipment.status.value,
                returned_quantity=shipment.returned_quantity,
                completed_at=shipment.completed_at,
            )
            session.add(row)
            session.flush()
            shipment_id = row.shipment_id
        LOGGER.debug("Inserted shipment %s", shipment_id)
        return shipment_id

    def update(self, shipment_id: int, /, **changes: Any) -> Shipment:
        """Replace the mutable fields of a stored shipment.

        Raises:
            NotFound: when no record carries ``shipment_id``.
            ValueError: when ``changes`` names an immutable or unknown field.
        """

        _, updated = self.modify(shipment_id, lambda current: changes)
        return updated

    def modify(
        self, shipment_id: int, /, compute: Callable[[Shipment], Dict[str, Any]]
    ) -> Tuple[Shipment, Shipment]:
        """Read, decide and write one shipment inside a single write transaction.

        ``compute`` receives the stored shipment and returns the field changes.
        It runs while the writer lock is held, so no other write to the
        record can land between the read and the write. Returns the shipment
        as it was and as it is now.

        Raises:
            NotFound: when no record carries ``shipment_id``.
            ValueError: when the changes name an immutable or unknown field.
        """

        with self._write_session(f"update shipment {shipment_id}") as session:
            row = session.get(ShipmentRow, shipment_id)
            if row is None:
                raise NotFound(shipment_id)
            previous = _row_to_shipment(row)
            coerced = _coerce_changes(compute(previous))
            for key, value in coerced.items():
                setattr(row, key, value)
            session.flush()
            updated = _row_to_shipment(row)
        LOGGER.debug("Updated shipment %s fields=%s", shipment_id, sorted(coerced))
        return previous, updated

    def get(self, shipment_id: int) -> Optional[Shipment]:
        with self._read_session(f"load shipment {shipment_id}") as session:
            row = session.get(ShipmentRow, shipment_id)
            return _row_to_shipment(row) if row is not None else None

    def scan(
        self,
        where: Optional[ColumnElement[bool]] = None,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> ShipmentScan:
        """Return the records matching ``where`` ordered by ``order_by``.

        Ties are broken by id in the same direction so results are stable.
        """

        if order_by not in _ORDERABLE_COLUMNS:
            raise ValueError(
                f"Cannot order shipments by '{order_by}'; choose one of {sorted(_ORDERABLE_COLUMNS)}"
            )
        column = _ORDERABLE_COLUMNS[order_by]
        statement = select(ShipmentRow)
        if where is not None:
            statement = statement.where(where)
        if descending:
            statement = statement.order_by(column.desc(), ShipmentRow.shipment_id.desc())
        else:
            statement = statement.order_by(column.asc(), ShipmentRow.shipment_id.asc())
        return ShipmentScan(self, statement)

    def _fetch(self, statement: Select) -> List[Shipment]:
        with self._read_session("scan shipments") as session:
            rows = session.execute(statement).scalars().all()
            return [_row_to_shipment(row) for row in rows]

    def count(self, where: Optional[ColumnElement[bool]] = None) -> int:
        statement = select(func.count()).select_from(ShipmentRow)
        if where is not None:
            statement = statement.where(where)
        with self._read_session("count shipments") as session:
            return int(session.execute(statement).scalar_one())

    def delete(self, shipment_id: int) -> bool:
        """Remove a shipment; unknown ids are ignored. Returns whether a row went away."""

        with self._write_session(f"delete shipment {shipment_id}") as session:
            result = session.execute(delete(ShipmentRow).where(ShipmentRow.shipment_id == shipment_id))
        if result.rowcount:
            LOGGER.debug("Deleted shipment %s", shipment_id)
        else:
            LOGGER.debug("Delete ignored; shipment %s not present", shipment_id)
        return bool(result.rowcount)
