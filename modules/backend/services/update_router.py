"""
Update Router.

Dispatches one UpdateRequest envelope to the per-kind handlers and merges
their partial results into a single UpdateResponse.

Two strategies exist for envelopes that carry both a message and a callback
query, selected by routing.strategy in application.yaml:

    fan_out      Both branches run, independently of each other. A failing
                 branch is reported in the merged error; it never stops
                 its sibling. Branches may run concurrently (join, not race).
    first_match  The message branch runs if present, otherwise the callback
                 branch.

An envelope with neither branch is rejected with InvalidArgumentError under
both strategies.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from modules.backend.core.exceptions import InvalidArgumentError
from modules.backend.core.logging import get_logger
from modules.backend.schemas.bot import OutgoingMessage, UpdateRequest, UpdateResponse
from modules.backend.services.update_handler import UpdateHandler

logger = get_logger(__name__)


class RoutingStrategy(str, Enum):
    FAN_OUT = "fan_out"
    FIRST_MATCH = "first_match"


def aggregate_responses(
    partials: Sequence[UpdateResponse],
    errors: Sequence[BaseException | str],
) -> UpdateResponse:
    """
    Merge partial handler results into one response.

    success is false if any partial failed or any error was raised. Messages
    are concatenated in partial order. Errors, including those carried by
    failed partials, are stringified into one status line in order.

    Raises:
        ValueError: If there is nothing to aggregate
    """
    if not partials and not errors:
        raise ValueError("aggregate called without partial responses or errors")

    success = not errors
    messages: list[OutgoingMessage] = []
    rendered = [str(error) for error in errors]

    for partial in partials:
        if not partial.success:
            success = False
            if partial.error:
                rendered.append(partial.error)
        messages.extend(partial.messages)

    return UpdateResponse(
        success=success,
        error=f"errors: [{'; '.join(rendered)}]" if rendered else None,
        messages=messages,
    )


@dataclass
class _BranchOutcome:
    branch: str
    response: UpdateResponse | None = None
    error: Exception | None = None


Branch = tuple[str, Callable[[], Awaitable[UpdateResponse]]]


class UpdateRouter:
    """
    Routes envelopes to UpdateHandler under the configured strategy.

    Holds no per-request state; one instance may serve concurrent requests.
    """

    def __init__(
        self,
        handler: UpdateHandler,
        strategy: RoutingStrategy = RoutingStrategy.FAN_OUT,
        concurrent_branches: bool = True,
    ) -> None:
        self.handler = handler
        self.strategy = RoutingStrategy(strategy)
        self.concurrent_branches = concurrent_branches

    async def route(self, request: UpdateRequest | None) -> UpdateResponse:
        """
        Process one envelope.

        Raises:
            InvalidArgumentError: If the envelope carries nothing routable
        """
        if request is None:
            raise InvalidArgumentError("request must not be empty")
        if request.message is None and request.callback_query is None:
            raise InvalidArgumentError("no message or callback provided")

        branches = self._select_branches(request)
        outcomes = await self._run_branches(branches)

        response = aggregate_responses(
            [o.response for o in outcomes if o.response is not None],
            [o.error for o in outcomes if o.error is not None],
        )

        logger.info(
            "Update routed",
            extra={
                "update_id": request.update_id,
                "strategy": self.strategy.value,
                "branches": [o.branch for o in outcomes],
                "success": response.success,
                "outgoing": len(response.messages),
            },
        )
        return response

    def _select_branches(self, request: UpdateRequest) -> list[Branch]:
        branches: list[Branch] = []
        message = request.message
        callback = request.callback_query

        if message is not None:
            branches.append(("message", lambda: self.handler.process_message(message)))
        if callback is not None:
            branches.append(("callback", lambda: self.handler.process_callback(callback)))

        if self.strategy is RoutingStrategy.FIRST_MATCH:
            return branches[:1]
        return branches

    async def _run_branches(self, branches: list[Branch]) -> list[_BranchOutcome]:
        if self.concurrent_branches and len(branches) > 1:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(self._run_branch(name, call)) for name, call in branches]
            return [task.result() for task in tasks]
        return [await self._run_branch(name, call) for name, call in branches]

    async def _run_branch(
        self,
        name: str,
        call: Callable[[], Awaitable[UpdateResponse]],
    ) -> _BranchOutcome:
        try:
            return _BranchOutcome(branch=name, response=await call())
        except Exception as e:
            logger.warning(
                "Update branch failed",
                extra={"branch": name, "error": str(e), "error_type": type(e).__name__},
            )
            return _BranchOutcome(branch=name, error=e)
