"""
Edit session states for the order line-item editor.
"""

from enum import Enum


class EditSessionState(str, Enum):
    """Editing surface state for one order."""
    CLEAN = "CLEAN"
    DIRTY = "DIRTY"
    SAVING = "SAVING"


# Allowed moves: first edit dirties, save starts from dirty,
# save ends clean (success) or dirty (failure, edits kept)
VALID_TRANSITIONS = {
    EditSessionState.CLEAN: {EditSessionState.DIRTY},
    EditSessionState.DIRTY: {EditSessionState.SAVING},
    EditSessionState.SAVING: {EditSessionState.CLEAN, EditSessionState.DIRTY},
}


def is_valid_session_transition(current: EditSessionState, new: EditSessionState) -> bool:
    """
    Check if an edit session transition is valid.

    Rules:
    - CLEAN → DIRTY on first edit
    - DIRTY → SAVING when reconcile is invoked
    - SAVING → CLEAN on success, SAVING → DIRTY on failure
    - Staying in the same state is not a transition
    """
    return new in VALID_TRANSITIONS[current]
