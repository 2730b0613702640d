"""Transaction aggregate: reservation / purchase lifecycle.

Every transaction follows a one-way lifecycle:

    RESERVED -> [PURCHASED | CANCELLED]
    PURCHASED -> CANCELLED
    CANCELLED (terminal)

Invalid transitions raise InvalidTransitionError.

References to the item and the user are identifiers only.  Either may be
``None`` after the referenced record was deleted ("orphan" transactions);
such records can still be reconstituted and cancelled, but not confirmed.

Identity XOR: a fresh transaction has exactly one of ``user_id`` or
``guest_session_id``.  Guests can purchase but not reserve.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from wishin.core.enums import TransactionStatus, ValidationMode
from wishin.core.errors import InvalidAttributeError, InvalidTransitionError
from wishin.core.ids import is_valid_identity, is_valid_uuid, new_id, utc_now
from wishin.core.validators import (
    coerce_datetime,
    coerce_enum,
    is_optional_str,
    require_positive_int,
)

logger = logging.getLogger(__name__)


TERMINAL_STATUSES: frozenset[TransactionStatus] = frozenset({
    TransactionStatus.CANCELLED,
})

# Valid transitions: from -> set of valid targets
TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.RESERVED: frozenset({
        TransactionStatus.PURCHASED, TransactionStatus.CANCELLED,
    }),
    TransactionStatus.PURCHASED: frozenset({TransactionStatus.CANCELLED}),
    TransactionStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class Transaction:
    """A reservation or purchase of ``quantity`` units of one item."""

    id: str
    item_id: str | None
    status: TransactionStatus
    quantity: int
    created_at: datetime
    updated_at: datetime
    user_id: str | None = None
    guest_session_id: str | None = None

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create_reservation(
        cls,
        *,
        item_id: str,
        user_id: str,
        quantity: int,
        transaction_id: str | None = None,
    ) -> Transaction:
        """New RESERVED transaction.  Registered users only.  STRICT."""
        return cls._create(
            transaction_id=transaction_id,
            item_id=item_id,
            user_id=user_id,
            guest_session_id=None,
            status=TransactionStatus.RESERVED,
            quantity=quantity,
        )

    @classmethod
    def create_purchase(
        cls,
        *,
        item_id: str,
        quantity: int,
        user_id: str | None = None,
        guest_session_id: str | None = None,
        transaction_id: str | None = None,
    ) -> Transaction:
        """New PURCHASED transaction for a user *or* a guest session.  STRICT."""
        return cls._create(
            transaction_id=transaction_id,
            item_id=item_id,
            user_id=user_id,
            guest_session_id=guest_session_id,
            status=TransactionStatus.PURCHASED,
            quantity=quantity,
        )

    @classmethod
    def reconstitute(cls, props: Mapping[str, Any]) -> Transaction:
        """Rebuild from persistence.  STRUCTURAL only (null FKs allowed)."""
        try:
            transaction = cls(
                id=props["id"],
                item_id=props.get("item_id"),
                user_id=props.get("user_id"),
                guest_session_id=props.get("guest_session_id"),
                status=coerce_enum(TransactionStatus, props["status"]),
                quantity=props["quantity"],
                created_at=coerce_datetime(props["created_at"], "created_at"),
                updated_at=coerce_datetime(props["updated_at"], "updated_at"),
            )
        except KeyError as exc:
            field = exc.args[0]
            raise InvalidAttributeError(f"Missing {field}", field=field) from exc
        transaction._validate(ValidationMode.STRUCTURAL)
        return transaction

    @classmethod
    def _create(
        cls,
        *,
        transaction_id: str | None,
        item_id: str,
        user_id: str | None,
        guest_session_id: str | None,
        status: TransactionStatus,
        quantity: int,
    ) -> Transaction:
        now = utc_now()
        transaction = cls(
            id=transaction_id or new_id(),
            item_id=item_id,
            user_id=user_id,
            guest_session_id=guest_session_id,
            status=status,
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        transaction._validate(ValidationMode.STRICT)
        return transaction

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.status not in TERMINAL_STATUSES

    @property
    def is_guest(self) -> bool:
        return not self.user_id and self.guest_session_id is not None

    def has_same_identity(self, other: object) -> bool:
        return isinstance(other, Transaction) and other.id == self.id

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def confirm_purchase(self) -> Transaction:
        """RESERVED -> PURCHASED.

        Re-validated STRICT, so orphaned reservations (null item or user)
        cannot be confirmed.
        """
        if self.status != TransactionStatus.RESERVED:
            raise InvalidTransitionError(
                f"Cannot confirm purchase from {self.status.value} status"
            )
        return self._transition(TransactionStatus.PURCHASED, ValidationMode.STRICT)

    def cancel(self) -> Transaction:
        """RESERVED | PURCHASED -> CANCELLED.

        Allowed for guest-held purchases and for orphaned records; who may
        cancel is decided by the caller.
        """
        if self.status == TransactionStatus.CANCELLED:
            raise InvalidTransitionError("Transaction is already cancelled")
        return self._transition(TransactionStatus.CANCELLED, ValidationMode.STRUCTURAL)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_props(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, target: TransactionStatus, mode: ValidationMode) -> Transaction:
        valid = TRANSITIONS.get(self.status, frozenset())
        if target not in valid:
            raise InvalidTransitionError(
                f"Invalid transition: {self.status.value} -> {target.value}"
            )
        transaction = dataclasses.replace(self, status=target, updated_at=utc_now())
        transaction._validate(mode)
        logger.debug(
            "Transaction %s: %s -> %s", self.id, self.status.value, target.value,
        )
        return transaction

    def _validate(self, mode: ValidationMode) -> None:
        # --- STRUCTURAL (always) ---
        if not is_valid_uuid(self.id):
            raise InvalidAttributeError("Invalid id: Must be valid UUID v4", field="id")
        if self.item_id is not None and not is_valid_uuid(self.item_id):
            raise InvalidAttributeError(
                "Invalid item_id: Must be valid UUID v4", field="item_id"
            )
        require_positive_int(self.quantity, "quantity")
        # Any format: legacy anonymous ids predate the identity rules.
        if not is_optional_str(self.user_id):
            raise InvalidAttributeError("Invalid user_id: Must be a string", field="user_id")
        if self.guest_session_id is not None and (
            not isinstance(self.guest_session_id, str) or not self.guest_session_id.strip()
        ):
            raise InvalidAttributeError(
                "Invalid guest_session_id: Must be a non-empty string",
                field="guest_session_id",
            )
        if not isinstance(self.status, TransactionStatus):
            raise InvalidAttributeError("Invalid status", field="status")
        for stamp in ("created_at", "updated_at"):
            if not isinstance(getattr(self, stamp), datetime):
                raise InvalidAttributeError(
                    f"Invalid {stamp}: Must be a valid datetime", field=stamp
                )

        # --- STRICT ---
        if mode != ValidationMode.STRICT:
            return

        has_user = bool(self.user_id)
        has_guest = self.guest_session_id is not None

        if has_user and has_guest:
            raise InvalidAttributeError(
                "Identity XOR: Cannot have both user_id and guest_session_id"
            )
        if not has_user and not has_guest:
            raise InvalidAttributeError(
                "Identity XOR: Must have either user_id or guest_session_id"
            )
        if has_user and not is_valid_identity(self.user_id):
            raise InvalidAttributeError(
                "Invalid user_id: Must be a valid identity", field="user_id"
            )
        if self.item_id is None:
            raise InvalidAttributeError(
                "Invalid item_id: Must be defined for new transactions", field="item_id"
            )
        if self.status == TransactionStatus.RESERVED and not has_user:
            raise InvalidAttributeError(
                "Invalid state: Reserved transactions require a user_id", field="user_id"
            )
