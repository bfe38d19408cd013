"""Request-level facade mapping use case results to response envelopes.

Every method takes the calling actor and returns an :class:`ApiResponse`.
Domain errors map to their ``status_code``; anything else becomes a 500
and is logged with its traceback.
"""

import dataclasses
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from branch_finance.application.use_cases import AlertRuleRequest
from branch_finance.domain.constants import (
    DEFAULT_CRITICAL_THRESHOLD,
    DEFAULT_WARNING_THRESHOLD,
)
from branch_finance.domain.errors import (
    AuthenticationError,
    BranchFinanceError,
    ValidationError,
)
from branch_finance.domain.models import (
    Actor,
    BatchOutcome,
    BranchBudget,
    BranchTransfer,
    BudgetView,
    TransferView,
)
from branch_finance.domain.services import parse_transfer_action
from branch_finance.infrastructure.container import ServiceContainer
from branch_finance.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


@dataclass(frozen=True)
class ApiResponse:
    """HTTP-style status code and JSON-ready body."""

    status_code: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums, decimals and datetimes to JSON types."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: to_jsonable(getattr(value, item.name))
            for item in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, frozenset, set)):
        return [to_jsonable(item) for item in value]
    return value


def _transfer_body(transfer: BranchTransfer) -> dict[str, Any]:
    body = to_jsonable(transfer)
    body["metadata"] = transfer.metadata.to_dict()
    return body


def _view_body(view: TransferView) -> dict[str, Any]:
    body = _transfer_body(view.transfer)
    body["from_branch"] = to_jsonable(view.from_branch)
    body["to_branch"] = to_jsonable(view.to_branch)
    return body


def _budget_body(budget: BranchBudget) -> dict[str, Any]:
    body = to_jsonable(budget)
    body["metadata"] = budget.metadata.to_dict()
    return body


def _budget_view_body(view: BudgetView) -> dict[str, Any]:
    body = _budget_body(view.budget)
    body["branch"] = to_jsonable(view.branch)
    return body


def _entity_body(entity: Any) -> Any:
    if isinstance(entity, BranchTransfer):
        return _transfer_body(entity)
    if isinstance(entity, BranchBudget):
        return _budget_body(entity)
    return to_jsonable(entity)


def _batch_body(outcome: BatchOutcome) -> dict[str, Any]:
    return {
        "results": [
            {
                "id": result.id,
                "status": result.status,
                "entity": _entity_body(result.entity),
            }
            for result in outcome.results
        ],
        "errors": to_jsonable(outcome.errors),
        "summary": to_jsonable(outcome.summary),
    }


class BranchFinanceApi:
    """Entry points for the approvals and budget screens."""

    def __init__(self, container: ServiceContainer, logger=None) -> None:
        self._container = container
        self._logger = logger or get_app_logger()
        self._usage = get_usage_logger()

    async def list_transfers(
        self,
        actor: Actor | None,
        listing_type: str | None = None,
        branch_id: str | None = None,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            listing = await self._container.list_transfers().execute(
                actor,
                listing_type=listing_type,
                branch_id=branch_id,
            )
            return {
                "transfers": [_view_body(view) for view in listing.transfers],
                "stats": to_jsonable(listing.stats),
            }

        return await self._handle("list_transfers", actor, call)

    async def batch_process_transfers(
        self,
        actor: Actor | None,
        action: str,
        transfer_ids: Sequence[str],
        rejection_reason: str | None = None,
        comments: str | None = None,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            outcome = await self._container.batch_transfers().execute(
                actor,
                action,
                transfer_ids,
                rejection_reason=rejection_reason,
                comments=comments,
            )
            return _batch_body(outcome)

        return await self._handle("batch_process_transfers", actor, call)

    async def list_budget_alerts(
        self,
        actor: Actor | None,
        branch_id: str | None = None,
        warning_threshold=DEFAULT_WARNING_THRESHOLD,
        critical_threshold=DEFAULT_CRITICAL_THRESHOLD,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            report = await self._container.list_budget_alerts().execute(
                branch_id=branch_id,
                warning_threshold=warning_threshold,
                critical_threshold=critical_threshold,
            )
            body = to_jsonable(report)
            for trend, point in zip(body["trends"], report.trends):
                trend["variance"] = str(point.variance)
            return body

        return await self._handle("list_budget_alerts", actor, call)

    async def recompute_budgets(
        self,
        actor: Actor | None,
        budget_ids: Sequence[str],
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            if isinstance(budget_ids, str) or not all(
                isinstance(item, str) and item for item in budget_ids
            ):
                raise ValidationError("budget_ids must be a list of ids")
            outcome = await self._container.aggregator.recompute_many(
                budget_ids,
                actor,
            )
            return _batch_body(outcome)

        return await self._handle("recompute_budgets", actor, call)

    async def set_alert_rules(
        self,
        actor: Actor | None,
        rules: Sequence[dict[str, Any]],
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            requests = [self._parse_rule(rule) for rule in rules]
            written = await self._container.set_alert_rules().execute(
                actor,
                requests,
            )
            return {"success": True, "rules_created": written}

        return await self._handle("set_alert_rules", actor, call)

    async def request_transfer(
        self,
        actor: Actor | None,
        from_branch_id: str,
        to_branch_id: str,
        amount,
        currency: str | None = None,
        description: str | None = None,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            transfer = await self._container.state_machine.request_transfer(
                from_branch_id,
                to_branch_id,
                amount,
                actor,
                currency=currency,
                description=description,
            )
            return {"transfer": _transfer_body(transfer)}

        return await self._handle(
            "request_transfer",
            actor,
            call,
            success_code=201,
        )

    async def get_transfer(
        self,
        actor: Actor | None,
        transfer_id: str,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            transfer = await self._container.state_machine.get(transfer_id)
            return {"transfer": _transfer_body(transfer)}

        return await self._handle("get_transfer", actor, call)

    async def update_transfer(
        self,
        actor: Actor | None,
        transfer_id: str,
        action: str,
        comments: str | None = None,
        rejection_reason: str | None = None,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            transfer = await self._container.state_machine.apply(
                parse_transfer_action(action),
                transfer_id,
                actor,
                comments=comments,
                rejection_reason=rejection_reason,
            )
            return {"transfer": _transfer_body(transfer)}

        return await self._handle("update_transfer", actor, call)

    async def delete_transfer(
        self,
        actor: Actor | None,
        transfer_id: str,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            await self._container.state_machine.delete_pending(
                transfer_id,
                actor,
            )
            return {"success": True}

        return await self._handle("delete_transfer", actor, call)

    async def create_budget(
        self,
        actor: Actor | None,
        branch_id: str,
        year: int,
        category: str,
        allocated,
        quarter: int | None = None,
        month: int | None = None,
        description: str | None = None,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            budget = await self._container.create_budget().execute(
                actor,
                branch_id,
                year,
                category,
                allocated,
                quarter=quarter,
                month=month,
                description=description,
            )
            return {"budget": _budget_body(budget)}

        return await self._handle(
            "create_budget",
            actor,
            call,
            success_code=201,
        )

    async def list_budgets(
        self,
        actor: Actor | None,
        year: int | None = None,
        branch_id: str | None = None,
        quarter: int | None = None,
        month: int | None = None,
        category: str | None = None,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            views = await self._container.list_budgets().execute(
                actor,
                year=year,
                branch_id=branch_id,
                quarter=quarter,
                month=month,
                category=category,
            )
            return {"budgets": [_budget_view_body(view) for view in views]}

        return await self._handle("list_budgets", actor, call)

    async def get_budget(
        self,
        actor: Actor | None,
        budget_id: str,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            view = await self._container.get_budget().execute(budget_id)
            return {"budget": _budget_view_body(view)}

        return await self._handle("get_budget", actor, call)

    async def update_budget(
        self,
        actor: Actor | None,
        budget_id: str,
        allocated=None,
        description: str | None = None,
        status: str | None = None,
        action: str | None = None,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            if action not in (None, "approve"):
                raise ValidationError(f"Unknown budget action: {action}")
            budget = await self._container.update_budget().execute(
                actor,
                budget_id,
                allocated=allocated,
                description=description,
                status=status,
                approve=action == "approve",
            )
            return {"budget": _budget_body(budget)}

        return await self._handle("update_budget", actor, call)

    async def delete_budget(
        self,
        actor: Actor | None,
        budget_id: str,
    ) -> ApiResponse:
        async def call() -> dict[str, Any]:
            await self._container.delete_budget().execute(actor, budget_id)
            return {"success": True}

        return await self._handle("delete_budget", actor, call)

    @staticmethod
    def _parse_rule(raw: dict[str, Any]) -> AlertRuleRequest:
        budget_id = raw.get("budget_id") if isinstance(raw, dict) else None
        if not budget_id:
            raise ValidationError("Each alert rule needs a budget_id")
        return AlertRuleRequest(
            budget_id=budget_id,
            warning_threshold=raw.get("warning_threshold"),
            critical_threshold=raw.get("critical_threshold"),
            notifications=tuple(raw.get("notifications") or ()),
            enabled=raw.get("enabled", True) is not False,
        )

    async def _handle(
        self,
        operation: str,
        actor: Actor | None,
        call: Callable[[], Awaitable[dict[str, Any]]],
        success_code: int = 200,
    ) -> ApiResponse:
        try:
            if actor is None:
                raise AuthenticationError("Authentication required")
            body = await call()
        except BranchFinanceError as exc:
            self._usage.info(
                f"{operation} actor={actor.id if actor else '-'} "
                f"status={exc.status_code}"
            )
            return ApiResponse(exc.status_code, {"error": exc.message})
        except Exception:
            self._logger.exception(f"Unexpected error in {operation}")
            self._usage.info(
                f"{operation} actor={actor.id if actor else '-'} status=500"
            )
            return ApiResponse(500, {"error": "Internal server error"})
        self._usage.info(
            f"{operation} actor={actor.id} status={success_code}"
        )
        return ApiResponse(success_code, body)


__all__ = ["ApiResponse", "BranchFinanceApi", "to_jsonable"]
