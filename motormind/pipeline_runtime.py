from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger("motormind.pipeline")


@dataclass
class PipelineStep:
    """One named step of a deterministic, sequential pipeline."""
    name: str
    fn: Callable[[object], None]
    skip_if: Optional[Callable[[object], bool]] = None
    always_run: bool = False


class PipelineRunner:
    """Runs steps in order over a shared mutable context."""

    def __init__(self, steps: List[PipelineStep]) -> None:
        self._steps = steps

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self._steps]

    def run(self, context: object) -> None:
        """Purpose: Run each step once, in declaration order, against one context.
        Inputs/Outputs: Input is the shared context (e.g. ResolutionContext); no return.
        Side Effects / State: Steps mutate the context; timings go to the debug log.
        Dependencies: PipelineStep.skip_if is consulted unless always_run is set.
        Failure Modes: A raising step ends the run; later always_run steps are not
            reached.
        If Removed: The resolution state machine cannot run.
        Testing Notes: A skipped step leaves no trace; an always_run step runs even
            when its skip_if is true.
        """
        # always_run overrides skip_if.
        for step in self._steps:
            if not step.always_run and step.skip_if and step.skip_if(context):
                logger.debug("step=%s status=skipped", step.name)
                continue
            started = time.perf_counter()
            step.fn(context)
            logger.debug(
                "step=%s status=done elapsed_ms=%.1f",
                step.name,
                (time.perf_counter() - started) * 1000,
            )
