from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from idl_pilot.logging import get_logger

logger = get_logger("pipeline")


class PipelineState(str, Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    PATCHING = "patching"
    PATCHED = "patched"
    GENERATING = "generating"
    FORMATTING = "formatting"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: Dict[PipelineState, FrozenSet[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.EXTRACTING, PipelineState.PATCHING, PipelineState.GENERATING}),
    PipelineState.EXTRACTING: frozenset({PipelineState.PATCHING, PipelineState.FAILED}),
    PipelineState.PATCHING: frozenset({PipelineState.PATCHED, PipelineState.FAILED}),
    PipelineState.PATCHED: frozenset({PipelineState.GENERATING}),
    PipelineState.GENERATING: frozenset({PipelineState.FORMATTING, PipelineState.DONE, PipelineState.FAILED}),
    PipelineState.FORMATTING: frozenset({PipelineState.DONE}),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
}


class PipelineRun:
    """Tracks one end-to-end run. There is no resume: a failed run stays failed."""

    def __init__(self) -> None:
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]
        self.error: Optional[BaseException] = None

    def advance(self, target: PipelineState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"illegal pipeline transition {self.state.value} -> {target.value}")
        logger.debug("pipeline %s -> %s", self.state.value, target.value)
        self.state = target
        self.history.append(target)

    def fail(self, error: BaseException) -> None:
        self.error = error
        self.advance(PipelineState.FAILED)

