"""
Negotiation pipeline: a strictly linear chain of steps for one
contract-request exchange.

    send_request -> extract_agreement -> validate_agreement -> publish_agreement
                                                              [-> confirm_agreement]

Each step is an ``async (NegotiationContext) -> NegotiationContext``
function. The context is frozen; a step returns a new context via
``dataclasses.replace`` and never mutates the one it was given. Any step
raising aborts the run. There is no retry inside a run; callers retry by
running the whole pipeline again.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional, Sequence

from dsconnector.core.errors import MalformedAgreement
from dsconnector.core.models import Response

from .manager import ContractManager
from .models import ContractAgreement, ContractRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NegotiationContext:
    """Everything one negotiation run knows, threaded from step to step."""
    recipient: str
    request: ContractRequest
    response: Optional[Response] = None
    agreement_body: Optional[str] = None
    agreement: Optional[ContractAgreement] = None
    published: bool = False
    confirmed: bool = False


Step = Callable[[NegotiationContext], Awaitable[NegotiationContext]]


# ============ Steps ============

def send_request(request_service) -> Step:
    """Step 1: send the contract request and keep the validated reply."""

    async def _send_request(ctx: NegotiationContext) -> NegotiationContext:
        response = await request_service.send_message(ctx.recipient, ctx.request)
        return replace(ctx, response=response)

    return _send_request


async def extract_agreement(ctx: NegotiationContext) -> NegotiationContext:
    """Step 2: pull the agreement body out of the reply payload."""
    if ctx.response is None:
        raise MalformedAgreement("No contract response to extract an agreement from")
    try:
        body = ctx.response.payload_text()
    except UnicodeDecodeError as e:
        raise MalformedAgreement(f"Agreement payload is not text: {e}") from e
    return replace(ctx, agreement_body=body)


def validate_agreement(manager: ContractManager) -> Step:
    """Step 3: compare the returned agreement to the original request."""

    async def _validate_agreement(ctx: NegotiationContext) -> NegotiationContext:
        agreement = manager.validate_contract_agreement(ctx.agreement_body, ctx.request)
        return replace(ctx, agreement=agreement)

    return _validate_agreement


async def publish_agreement(ctx: NegotiationContext) -> NegotiationContext:
    """Step 4: mark the validated agreement as available to the persistence stage."""
    if ctx.agreement is None:
        raise MalformedAgreement("No validated agreement to publish")
    return replace(ctx, published=True)


def confirm_agreement(agreement_service) -> Step:
    """Optional step 5: send the accepted agreement back to the provider."""

    async def _confirm_agreement(ctx: NegotiationContext) -> NegotiationContext:
        await agreement_service.send_message(ctx.recipient, ctx.agreement)
        return replace(ctx, confirmed=True)

    return _confirm_agreement


# ============ Pipeline ============

class NegotiationPipeline:
    """Runs a fixed sequence of steps over a NegotiationContext."""

    def __init__(self, steps: Sequence[Step]):
        self._steps = tuple(steps)

    @classmethod
    def default(
        cls,
        request_service,
        manager: ContractManager,
        agreement_service=None,
    ) -> NegotiationPipeline:
        """
        The standard contract negotiation.

        Passing ``agreement_service`` (a ContractAgreementService) appends
        the confirmation step.
        """
        steps: list[Step] = [
            send_request(request_service),
            extract_agreement,
            validate_agreement(manager),
            publish_agreement,
        ]
        if agreement_service is not None:
            steps.append(confirm_agreement(agreement_service))
        return cls(steps)

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._steps

    async def run(self, recipient: str, request: ContractRequest) -> NegotiationContext:
        ctx = NegotiationContext(recipient=recipient, request=request)
        t0 = time.monotonic()
        for step in self._steps:
            name = getattr(step, "__name__", repr(step)).lstrip("_")
            try:
                ctx = await step(ctx)
            except Exception as e:
                logger.warning("Negotiation %s with %s aborted at %s: %s",
                               request.id, recipient, name, e)
                raise
            logger.debug("Negotiation %s: step %s done", request.id, name)

        elapsed_ms = (time.monotonic() - t0) * 1000
        logger.info("Negotiation %s with %s completed in %.0fms (agreement=%s)",
                    request.id, recipient, elapsed_ms,
                    ctx.agreement.id if ctx.agreement else None)
        return ctx
