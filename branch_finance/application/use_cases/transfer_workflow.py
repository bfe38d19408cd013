"""Use case driving the inter-branch transfer approval workflow.

Transfers move PENDING -> APPROVED | REJECTED and APPROVED -> COMPLETED.
Every transition runs inside one unit of work: the status write is a
compare-and-set on the status read at the start, and approval records the
ledger pair in the same transaction.
"""

import asyncio
import random
import string
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from branch_finance.application.ports.directories import (
    BranchDirectoryPort,
    TimeSourcePort,
)
from branch_finance.application.ports.unit_of_work import UnitOfWorkFactory
from branch_finance.application.use_cases.authorization import (
    AuthorizationResolver,
)
from branch_finance.application.use_cases.ledger_journal import LedgerJournal
from branch_finance.domain.constants import DEFAULT_CURRENCY
from branch_finance.domain.errors import (
    AuthorizationError,
    InvalidStateTransition,
    NotFoundError,
    ValidationError,
)
from branch_finance.domain.models import (
    Actor,
    BranchTransfer,
    TransferAction,
    TransferStatus,
)
from branch_finance.domain.services import (
    ensure_transition,
    target_status,
    validate_transfer_request,
)
from branch_finance.infrastructure.logging.logger import get_app_logger

TransitionMutator = Callable[[BranchTransfer, datetime], BranchTransfer]


def generate_reference_id(now: datetime) -> str:
    """Return a unique human-readable transfer reference."""
    suffix = "".join(
        random.choices(string.ascii_uppercase + string.digits, k=9)
    )
    return f"TRF-{int(now.timestamp() * 1000)}-{suffix}"


class TransferStateMachine:
    """Enforce legal transfer transitions and their side effects."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        authorization: AuthorizationResolver,
        journal: LedgerJournal,
        branch_directory: BranchDirectoryPort,
        time_source: TimeSourcePort,
        default_currency: str = DEFAULT_CURRENCY,
        logger=None,
        id_factory: Callable[[], str] | None = None,
        reference_factory: Callable[[datetime], str] = generate_reference_id,
    ) -> None:
        """Initialize the state machine.

        Args:
            uow_factory: Callable opening a new unit of work.
            authorization: Resolver for branch-scoped capabilities.
            journal: Ledger journal invoked on approval.
            branch_directory: Port resolving branch references.
            time_source: Port providing the current time.
            default_currency: Currency used when a request omits one.
            logger: Optional logger compatible with logging.Logger-like API.
            id_factory: Callable producing transfer ids.
            reference_factory: Callable producing transfer references.
        """
        self._uow_factory = uow_factory
        self._authorization = authorization
        self._journal = journal
        self._branch_directory = branch_directory
        self._time_source = time_source
        self._default_currency = default_currency
        self._logger = logger or get_app_logger()
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._reference_factory = reference_factory

    async def request_transfer(
        self,
        from_branch_id: str,
        to_branch_id: str,
        amount,
        requester: Actor,
        currency: str | None = None,
        description: str | None = None,
    ) -> BranchTransfer:
        """Create a PENDING transfer.

        Raises:
            ValidationError: If the amount is not positive, the branches are
                equal, or either branch is unknown.
            AuthorizationError: If the requester may not move money out of
                the source branch.
        """
        amount_value = validate_transfer_request(
            from_branch_id,
            to_branch_id,
            amount,
        )
        from_branch, to_branch = await asyncio.gather(
            self._branch_directory.get_branch(from_branch_id),
            self._branch_directory.get_branch(to_branch_id),
        )
        if from_branch is None:
            raise ValidationError(f"Source branch not found: {from_branch_id}")
        if to_branch is None:
            raise ValidationError(
                f"Destination branch not found: {to_branch_id}"
            )
        if not await self._authorization.can_request_from(
            requester,
            from_branch_id,
        ):
            raise AuthorizationError(
                "Not allowed to transfer from this branch"
            )

        now = self._time_source.now()
        transfer = BranchTransfer(
            id=self._id_factory(),
            reference_id=self._reference_factory(now),
            from_branch_id=from_branch_id,
            to_branch_id=to_branch_id,
            amount=amount_value,
            currency=currency or self._default_currency,
            status=TransferStatus.PENDING,
            requested_by=requester.id,
            created_at=now,
            description=description,
        )
        async with self._uow_factory() as uow:
            await uow.transfers.add(transfer)
        self._logger.info(
            f"Transfer {transfer.reference_id} requested by {requester.id}: "
            f"{from_branch_id} -> {to_branch_id} "
            f"{transfer.amount} {transfer.currency}"
        )
        return transfer

    async def get(self, transfer_id: str) -> BranchTransfer:
        """Return a transfer or raise NotFoundError."""
        async with self._uow_factory() as uow:
            transfer = await uow.transfers.get(transfer_id)
        if transfer is None:
            raise NotFoundError(f"Transfer not found: {transfer_id}")
        return transfer

    async def approve(
        self,
        transfer_id: str,
        actor: Actor,
        comments: str | None = None,
        batch: bool = False,
    ) -> BranchTransfer:
        """Approve a PENDING transfer and record its ledger pair."""

        def mutate(transfer: BranchTransfer, now: datetime) -> BranchTransfer:
            return replace(
                transfer,
                status=TransferStatus.APPROVED,
                approved_by=actor.id,
                approved_at=now,
                metadata=replace(
                    transfer.metadata,
                    approval_comments=comments,
                    batch_approval=batch,
                ),
            )

        return await self._transition(
            transfer_id,
            actor,
            TransferAction.APPROVE,
            mutate,
            batch=batch,
        )

    async def reject(
        self,
        transfer_id: str,
        actor: Actor,
        reason: str | None = None,
        comments: str | None = None,
        batch: bool = False,
    ) -> BranchTransfer:
        """Reject a PENDING transfer. The deciding actor is recorded."""

        def mutate(transfer: BranchTransfer, now: datetime) -> BranchTransfer:
            return replace(
                transfer,
                status=TransferStatus.REJECTED,
                approved_by=actor.id,
                approved_at=now,
                rejected_at=now,
                rejection_reason=reason,
                metadata=replace(
                    transfer.metadata,
                    rejection_comments=comments,
                    batch_approval=batch,
                ),
            )

        return await self._transition(
            transfer_id,
            actor,
            TransferAction.REJECT,
            mutate,
            batch=batch,
        )

    async def complete(
        self,
        transfer_id: str,
        actor: Actor,
        comments: str | None = None,
        batch: bool = False,
    ) -> BranchTransfer:
        """Mark an APPROVED transfer COMPLETED. No ledger effect."""

        def mutate(transfer: BranchTransfer, now: datetime) -> BranchTransfer:
            return replace(
                transfer,
                status=TransferStatus.COMPLETED,
                completed_at=now,
                metadata=replace(
                    transfer.metadata,
                    completion_comments=comments,
                ),
            )

        return await self._transition(
            transfer_id,
            actor,
            TransferAction.COMPLETE,
            mutate,
            batch=batch,
        )

    async def apply(
        self,
        action: TransferAction,
        transfer_id: str,
        actor: Actor,
        comments: str | None = None,
        rejection_reason: str | None = None,
        batch: bool = False,
    ) -> BranchTransfer:
        """Dispatch ``action`` to the matching transition."""
        if action is TransferAction.APPROVE:
            return await self.approve(transfer_id, actor, comments, batch)
        if action is TransferAction.REJECT:
            return await self.reject(
                transfer_id,
                actor,
                rejection_reason,
                comments,
                batch,
            )
        return await self.complete(transfer_id, actor, comments, batch)

    async def delete_pending(self, transfer_id: str, actor: Actor) -> None:
        """Delete a PENDING transfer. Only global admins may do this."""
        if not self._authorization.is_admin(actor):
            raise AuthorizationError("Only administrators can delete transfers")
        async with self._uow_factory() as uow:
            transfer = await uow.transfers.get(transfer_id)
            if transfer is None:
                raise NotFoundError(f"Transfer not found: {transfer_id}")
            if transfer.status is not TransferStatus.PENDING:
                raise InvalidStateTransition(
                    "Cannot delete a transfer that was already processed"
                )
            deleted = await uow.transfers.delete_if_status(
                transfer_id,
                TransferStatus.PENDING,
            )
            if not deleted:
                raise InvalidStateTransition(
                    f"Transfer {transfer_id} changed concurrently"
                )
        self._logger.info(f"Transfer {transfer_id} deleted by {actor.id}")

    async def _transition(
        self,
        transfer_id: str,
        actor: Actor,
        action: TransferAction,
        mutate: TransitionMutator,
        batch: bool = False,
    ) -> BranchTransfer:
        target = target_status(action)
        async with self._uow_factory() as uow:
            transfer = await uow.transfers.get(transfer_id)
            if transfer is None:
                raise NotFoundError(f"Transfer not found: {transfer_id}")
            ensure_transition(transfer.status, target)
            await self._authorization.require(actor, action, transfer)

            now = self._time_source.now()
            updated = mutate(transfer, now)
            written = await uow.transfers.update_if_status(
                updated,
                transfer.status,
            )
            if not written:
                raise InvalidStateTransition(
                    f"Transfer {transfer_id} is no longer {transfer.status.value}"
                )
            if action is TransferAction.APPROVE:
                await self._journal.record_transfer_pair(
                    uow.ledger,
                    updated,
                    now,
                    batch=batch,
                )
        self._logger.info(
            f"Transfer {transfer.reference_id} {transfer.status.value} -> "
            f"{target.value} by {actor.id}"
        )
        return updated


__all__ = ["TransferStateMachine", "generate_reference_id"]
