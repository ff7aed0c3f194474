"""Activity state machine for side-channel progress.

Phases run ``idle -> searching -> reading -> done``, with ``error`` reachable
from anywhere. Each transition appends its stage label unless that label is
already the last one, so consecutive repeats collapse but a producer that
cycles (search, read, search again) keeps every entry.

All functions are pure: they take the current state (``None`` when the turn
has no activity yet) and return a new one.
"""

from .models import ActivityPhase, ActivityState, Stage


def _append_stage(stages: tuple[Stage, ...], stage: Stage) -> tuple[Stage, ...]:
    if stages and stages[-1] == stage:
        return stages
    return stages + (stage,)


def start_search(state: ActivityState | None, query: str) -> ActivityState:
    """Enter ``searching`` and record the query."""
    current = state or ActivityState()
    return current.model_copy(update={
        "phase": ActivityPhase.SEARCHING,
        "stages": _append_stage(current.stages, Stage.SEARCHING),
        "query": query,
    })


def receive_results(state: ActivityState | None, urls: list[str]) -> ActivityState:
    """Enter ``reading`` and replace the result list."""
    current = state or ActivityState()
    return current.model_copy(update={
        "phase": ActivityPhase.READING,
        "stages": _append_stage(current.stages, Stage.READING),
        "results": tuple(urls),
    })


def report_error(state: ActivityState | None, message: str) -> ActivityState:
    """Enter ``error``. Results gathered so far are kept."""
    current = state or ActivityState()
    return current.model_copy(update={
        "phase": ActivityPhase.ERROR,
        "stages": _append_stage(current.stages, Stage.ERROR),
        "error": message,
    })


def finish(state: ActivityState | None) -> ActivityState | None:
    """Apply the turn-terminal transition.

    Content-only turns have no state and stay that way; a state already in
    ``error`` is left as it is.
    """
    if state is None or state.phase is ActivityPhase.ERROR:
        return state
    return state.model_copy(update={
        "phase": ActivityPhase.DONE,
        "stages": _append_stage(state.stages, Stage.WRITING),
    })


def failed_activity() -> ActivityState:
    """State shown on a message whose turn could not produce any output."""
    return ActivityState(phase=ActivityPhase.ERROR, stages=(Stage.ERROR,))
