"""
Movement form widget state.

After a successful save the entry fields start empty again, while the
chosen tipo stays selected for the next entry. After a failure nothing
is touched, so the user can correct and resubmit.
"""

from typing import Any, MutableMapping


MOVEMENT_FORM_KEYS = (
    "movement_descricao",
    "movement_valor",
    "movement_categoria",
    "movement_data",
)
MOVEMENT_TIPO_KEY = "movement_tipo"

_SAVED_FLAG = "movement_form_saved"


def mark_movement_saved(state: MutableMapping[str, Any]) -> None:
    """Flag the form to be cleared on the next render."""
    state[_SAVED_FLAG] = True


def reset_movement_form(state: MutableMapping[str, Any]) -> bool:
    """
    Clear the entry fields if the last submit was saved.

    Must run before the form's widgets are created in the render pass.

    Returns:
        True if the fields were cleared
    """
    if not state.pop(_SAVED_FLAG, False):
        return False
    for key in MOVEMENT_FORM_KEYS:
        state.pop(key, None)
    return True
