"""Use case applying one transfer action to many transfers."""

from collections.abc import Sequence

from branch_finance.application.use_cases.bulk_batch import BulkBatchProcessor
from branch_finance.application.use_cases.transfer_workflow import (
    TransferStateMachine,
)
from branch_finance.domain.errors import ValidationError
from branch_finance.domain.models import Actor, BatchOutcome
from branch_finance.domain.services import parse_transfer_action


class BatchProcessTransfersUseCase:
    """Approve, reject or complete many transfers independently."""

    def __init__(
        self,
        state_machine: TransferStateMachine,
        processor: BulkBatchProcessor,
    ) -> None:
        self._state_machine = state_machine
        self._processor = processor

    async def execute(
        self,
        actor: Actor,
        action: str,
        transfer_ids: Sequence[str],
        rejection_reason: str | None = None,
        comments: str | None = None,
    ) -> BatchOutcome:
        """Run ``action`` for every id.

        Raises:
            ValidationError: If the action or the id list is malformed.
                Nothing is applied in that case.
        """
        parsed_action = parse_transfer_action(action)
        if isinstance(transfer_ids, str) or not all(
            isinstance(item, str) and item for item in transfer_ids
        ):
            raise ValidationError("transfer_ids must be a list of ids")

        async def handle(transfer_id: str):
            return await self._state_machine.apply(
                parsed_action,
                transfer_id,
                actor,
                comments=comments,
                rejection_reason=rejection_reason,
                batch=True,
            )

        return await self._processor.run(
            list(transfer_ids),
            handle,
            label=f"batch {parsed_action.value}",
        )


__all__ = ["BatchProcessTransfersUseCase"]
