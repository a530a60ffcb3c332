"""Database-backed lock table for the reservation lock manager."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional

from django.db import DatabaseError, IntegrityError, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.value_objects import DateRange

from apps.bookings.domain.errors import PersistenceError, PropertyNotFoundError
from apps.bookings.domain.locks import AbstractLockStore, LockHandle
from apps.bookings.models import ReservationLock
from apps.properties.models import Property

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _to_handle(lock: ReservationLock) -> LockHandle:
    return LockHandle(
        property_id=lock.property_id,
        dates=DateRange(lock.check_in, lock.check_out),
        token=lock.token,
        expires_at=lock.expires_at,
        holder_id=lock.holder_id,
    )


class DjangoLockStore(AbstractLockStore):
    """
    Lock rows in ``bookings_reservationlock``.

    Insertion runs in one transaction that first locks the property row, so
    two acquirers for the same property are serialized by the database
    (SELECT ... FOR UPDATE on PostgreSQL, the database-wide write lock on
    SQLite). On PostgreSQL an exclusion constraint backs this up.
    """

    def try_insert(self, handle: LockHandle, now: datetime) -> Optional[LockHandle]:
        try:
            with transaction.atomic():
                if _lock_queryset_if_possible(Property.objects.filter(pk=handle.property_id)).first() is None:
                    raise PropertyNotFoundError(handle.property_id)

                overlapping = ReservationLock.objects.overlapping(
                    handle.property_id, handle.dates.start_date, handle.dates.end_date
                )
                purged, _ = overlapping.expired(now).delete()
                if purged:
                    logger.debug(f"Purged {purged} expired lock(s) on property {handle.property_id}")

                blocking = overlapping.active(now).order_by("-expires_at").first()
                if blocking is not None:
                    return _to_handle(blocking)

                ReservationLock.objects.create(
                    property_id=handle.property_id,
                    check_in=handle.dates.start_date,
                    check_out=handle.dates.end_date,
                    token=handle.token,
                    expires_at=handle.expires_at,
                    holder_id=handle.holder_id,
                )
                return None
        except IntegrityError:
            # Lost the race against the overlap constraint.
            blocking = (
                ReservationLock.objects.overlapping(
                    handle.property_id, handle.dates.start_date, handle.dates.end_date
                )
                .active(now)
                .order_by("-expires_at")
                .first()
            )
            return _to_handle(blocking) if blocking is not None else handle
        except DatabaseError as exc:
            logger.error(f"Lock store failure on property {handle.property_id}: {exc}", exc_info=True)
            raise PersistenceError("Reservation lock store unavailable") from exc

    def delete(self, property_id: Any, dates: DateRange, token: str) -> bool:
        try:
            deleted, _ = ReservationLock.objects.filter(
                property_id=property_id,
                check_in=dates.start_date,
                check_out=dates.end_date,
                token=token,
            ).delete()
        except DatabaseError as exc:
            raise PersistenceError("Reservation lock store unavailable") from exc
        return deleted > 0

    def delete_expired(self, now: datetime) -> int:
        try:
            deleted, _ = ReservationLock.objects.expired(now).delete()
        except DatabaseError as exc:
            raise PersistenceError("Reservation lock store unavailable") from exc
        return deleted

    def active_locks(self, property_id: Any, now: datetime) -> List[LockHandle]:
        locks = ReservationLock.objects.filter(property_id=property_id).active(now).order_by("check_in")
        return [_to_handle(lock) for lock in locks]
