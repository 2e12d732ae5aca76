"""
Confirmation state machine for quotation form steps.

Each step of a quote draft (parts, rates, board specs, ...) moves through:

    empty -> spec_entered -> confirmed -> edited -> confirmed ...

Outputs that depend on a step are only computed once it is confirmed.
Entering or editing a step demotes every later confirmed step to edited,
so nothing downstream is priced from a stale confirmation.
"""

import logging

logger = logging.getLogger(__name__)

EMPTY = "empty"
SPEC_ENTERED = "spec_entered"
CONFIRMED = "confirmed"
EDITED = "edited"

STEP_STATES = [EMPTY, SPEC_ENTERED, CONFIRMED, EDITED]

# (state, event) -> next state. "reset" is allowed from every state.
TRANSITIONS = {
    (EMPTY, "enter"): SPEC_ENTERED,
    (SPEC_ENTERED, "enter"): SPEC_ENTERED,
    (CONFIRMED, "enter"): EDITED,
    (EDITED, "enter"): EDITED,
    (SPEC_ENTERED, "confirm"): CONFIRMED,
    (EDITED, "confirm"): CONFIRMED,
    (CONFIRMED, "edit"): EDITED,
}


class InvalidTransition(ValueError):
    """Raised when an event isn't allowed from a step's current state."""

    def __init__(self, step: str, state: str, event: str):
        self.step = step
        self.state = state
        self.event = event
        super().__init__(f"Cannot {event} step '{step}' while it is {state}")


def next_state(step: str, state: str, event: str) -> str:
    if event == "reset":
        return EMPTY
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransition(step, state, event)


def initial_steps(steps: list) -> dict:
    """Fresh state for an ordered list of step names."""
    return {step: EMPTY for step in steps}


def apply_event(steps: dict, order: list, step: str, event: str) -> dict:
    """
    Apply `event` to `step` and return the new step states.

    The input dict is not modified. Raises InvalidTransition, or ValueError
    for a step that isn't part of the draft.
    """
    if step not in steps:
        raise ValueError(f"Unknown step: {step}. Available: {order}")

    updated = dict(steps)
    updated[step] = next_state(step, steps[step], event)

    if event in ("enter", "edit", "reset"):
        for later in order[order.index(step) + 1:]:
            if updated.get(later) == CONFIRMED:
                updated[later] = EDITED
                logger.debug("Step %s demoted after %s on %s", later, event, step)
    return updated


def confirmed_steps(steps: dict) -> set:
    return {name for name, state in steps.items() if state == CONFIRMED}


def is_ready_to_save(steps: dict, required: list) -> bool:
    """All required steps confirmed; optional steps must not be mid-edit."""
    for name, state in steps.items():
        if name in required and state != CONFIRMED:
            return False
        if name not in required and state in (SPEC_ENTERED, EDITED):
            return False
    return True


def pending_steps(steps: dict, required: list) -> list:
    """Steps still blocking a save, in draft order."""
    return [
        name for name, state in steps.items()
        if (name in required and state != CONFIRMED)
        or (name not in required and state in (SPEC_ENTERED, EDITED))
    ]
