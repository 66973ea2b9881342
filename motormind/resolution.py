"""MotorMind request resolution state machine.

Role:
    Turns one free-text customer message into exactly one terminal outcome:

    - conversational: nothing recognizable was extracted; the oracle writes a short reply.
    - allocated: the requested model is in stock; the oracle picks one unit among the
      exact matches and that unit's stock is decremented.
    - recommended: the requested model is not in stock; the fuzzy matcher ranks similar
      in-stock models, the oracle picks one and that unit's stock is decremented.

Step contracts (run in order by PipelineRunner):
    extract_request:
        Oracle instruction "extract_request" -> normalize_request -> context.request.
    conversational_reply:
        Only when every request field is a sentinel. Sets context.result.
    exact_search:
        InventoryStore.search_in_stock(request.model) -> context.exact_matches.
    allocate_exact:
        Only with exact matches. Oracle instruction "allocate_exact" -> offer -> ledger.
    recommend_alternative:
        Only without exact matches. find_similar over the full catalog -> oracle
        instruction "recommend_alternative" -> offer -> ledger.
    finalize:
        Logs the outcome.

Every oracle reply goes through the response normalizer; an empty reply raises
OracleEmptyResponse and ends the run without retry.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from .errors import MotorMindError, OracleEmptyResponse
from .fuzzy_matcher import find_similar
from .inventory_store import InventoryItem, InventoryStore
from .pipeline_runtime import PipelineRunner, PipelineStep
from .prompt_loader import render_prompt
from .response_normalizer import UNKNOWN, AllocationOffer, CustomerRequest, normalize_offer, normalize_request
from .stock_ledger import StockLedger

logger = logging.getLogger("motormind.resolution")

KIND_ALLOCATED = "allocated"
KIND_RECOMMENDED = "recommended"
KIND_CONVERSATIONAL = "conversational"


class Oracle(Protocol):
    """Generative text collaborator: instruction + message in, untrusted text out."""

    def complete(self, system_instruction: str, message: str) -> str:
        ...


@dataclass(frozen=True)
class ResolutionResult:
    """Terminal outcome of one resolution; payload is an offer or reply text."""
    kind: str
    payload: Union[AllocationOffer, str]

    def to_dict(self) -> Dict[str, Any]:
        payload = self.payload.to_dict() if isinstance(self.payload, AllocationOffer) else self.payload
        return {"kind": self.kind, "payload": payload}


@dataclass
class ResolutionContext:
    """Mutable state passed through the resolution steps."""
    message: str
    request: CustomerRequest = field(default_factory=CustomerRequest)
    exact_matches: List[InventoryItem] = field(default_factory=list)
    similar_items: List[InventoryItem] = field(default_factory=list)
    offer: Optional[AllocationOffer] = None
    allocated_item: Optional[InventoryItem] = None
    result: Optional[ResolutionResult] = None

    @property
    def is_resolved(self) -> bool:
        return self.result is not None


class ResolutionOrchestrator:
    def __init__(self, oracle: Oracle, store: InventoryStore, prompts_dir: Path) -> None:
        """Purpose: Wire the oracle, inventory, and ledger into the step runner.
        Inputs/Outputs: Inputs are an Oracle, an InventoryStore and the prompt
            directory; no return value.
        Side Effects / State: Builds a StockLedger over the store and a PipelineRunner.
        Dependencies: PipelineRunner/PipelineStep and the step methods below.
        Failure Modes: None at init; missing prompt files fail at resolve time.
        If Removed: POST /api/agent has nothing to call.
        Testing Notes: Inject a scripted oracle and an in-memory store.
        """
        self._oracle = oracle
        self._store = store
        self._ledger = StockLedger(store)
        self._prompts_dir = prompts_dir
        self._runner = PipelineRunner(
            steps=[
                PipelineStep("extract_request", self._step_extract_request),
                PipelineStep(
                    "conversational_reply",
                    self._step_conversational_reply,
                    skip_if=lambda ctx: not ctx.request.is_unrecognized,
                ),
                PipelineStep("exact_search", self._step_exact_search, skip_if=_resolved),
                PipelineStep(
                    "allocate_exact",
                    self._step_allocate_exact,
                    skip_if=lambda ctx: ctx.is_resolved or not ctx.exact_matches,
                ),
                PipelineStep("recommend_alternative", self._step_recommend_alternative, skip_if=_resolved),
                PipelineStep("finalize", self._step_finalize, always_run=True),
            ]
        )

    def resolve(self, message: str) -> ResolutionResult:
        """Purpose: Resolve one inbound customer message to a terminal outcome.
        Inputs/Outputs: Input is the raw message; output is a ResolutionResult.
        Side Effects / State: Oracle calls; may decrement one unit's stock.
        Dependencies: PipelineRunner.run over a fresh ResolutionContext.
        Failure Modes: OracleEmptyResponse, UnitNotFound and OutOfStock propagate
            unchanged; a decrement already applied is not rolled back.
        If Removed: Free-text requests cannot be fulfilled.
        Testing Notes: Cover each terminal kind with a scripted oracle.
        """
        context = ResolutionContext(message=message)
        logger.info("resolve message=%s steps=%s", message, self._runner.step_names)
        self._runner.run(context)
        if context.result is None:
            raise MotorMindError("Resolution finished without a result")
        return context.result

    def _step_extract_request(self, context: ResolutionContext) -> None:
        raw = self._ask("extract_request", render_prompt(self._prompts_dir, "extract_request"), context.message)
        context.request = normalize_request(raw)
        logger.info("extracted request=%s", json.dumps(context.request.to_dict(), ensure_ascii=True))
        if not context.request.is_unrecognized and UNKNOWN in (context.request.model, context.request.location):
            logger.warning("partial extraction model=%s location=%s", context.request.model, context.request.location)

    def _step_conversational_reply(self, context: ResolutionContext) -> None:
        reply = self._ask(
            "conversational_reply",
            render_prompt(self._prompts_dir, "conversational_reply"),
            context.message,
        )
        context.result = ResolutionResult(kind=KIND_CONVERSATIONAL, payload=reply)
        logger.info("route=conversational")

    def _step_exact_search(self, context: ResolutionContext) -> None:
        context.exact_matches = self._store.search_in_stock(context.request.model)
        logger.info("exact_search model=%s matches=%s", context.request.model, len(context.exact_matches))

    def _step_allocate_exact(self, context: ResolutionContext) -> None:
        offer = self._choose_unit("allocate_exact", context.request, context.exact_matches)
        context.offer = offer
        context.allocated_item = self._apply_offer(offer)
        context.result = ResolutionResult(kind=KIND_ALLOCATED, payload=offer)
        logger.info("route=allocated uuid=%s", offer.uuid or "-")

    def _step_recommend_alternative(self, context: ResolutionContext) -> None:
        # The fuzzy search always runs over the whole catalog, not the exact hits.
        context.similar_items = find_similar(context.request.model, self._store.list_all())
        logger.info(
            "similar_search model=%s candidates=%s",
            context.request.model,
            [item.model for item in context.similar_items],
        )
        offer = self._choose_unit("recommend_alternative", context.request, context.similar_items)
        context.offer = offer
        context.allocated_item = self._apply_offer(offer)
        context.result = ResolutionResult(kind=KIND_RECOMMENDED, payload=offer)
        logger.info("route=recommended uuid=%s", offer.uuid or "-")

    def _step_finalize(self, context: ResolutionContext) -> None:
        if context.result is None:
            return
        logger.info(
            "resolved kind=%s stock_after=%s",
            context.result.kind,
            context.allocated_item.stock if context.allocated_item else "-",
        )

    def _choose_unit(self, prompt_name: str, request: CustomerRequest, candidates: List[InventoryItem]) -> AllocationOffer:
        candidates_json = json.dumps([item.to_dict() for item in candidates], ensure_ascii=False)
        instruction = render_prompt(self._prompts_dir, prompt_name, candidates_json=candidates_json)
        raw = self._ask(prompt_name, instruction, json.dumps(request.to_dict(), ensure_ascii=False))
        return normalize_offer(raw)

    def _apply_offer(self, offer: AllocationOffer) -> Optional[InventoryItem]:
        # An offer without a unit id reserves nothing.
        if not offer.uuid:
            return None
        return self._ledger.decrement(offer.uuid)

    def _ask(self, step: str, system_instruction: str, message: str) -> str:
        raw = self._oracle.complete(system_instruction, message)
        if not raw or not raw.strip():
            logger.error("oracle returned empty content step=%s", step)
            raise OracleEmptyResponse(step)
        logger.debug("oracle step=%s raw=%s", step, raw)
        return raw


def _resolved(context: ResolutionContext) -> bool:
    return context.is_resolved
