"""Sticker create/remove operations and the selection tools.

Only drop_token / remove_token / remove_selected / clear_canvas change the
membership of the collection. Every removal renumbers the step indices of
the survivors so they stay a contiguous 0..N-1; z-orders are left alone.
"""

from ..state import Token
from .canvas import drop_to_placement

SCALE_STEP = 10
SCALE_MIN = 30
SCALE_MAX = 300
ROTATE_STEP = 15


def drop_token(state, descriptor, x, y):
    """Append a new sticker with its top-left at (x, y).

    Returns the updated token list.
    """
    max_z = max([0] + [t.z_order for t in state.tokens])
    size = state.sticker_size
    token = Token(
        id=f'{descriptor.id}-{state.new_id()}',
        descriptor_id=descriptor.id,
        x=float(x), y=float(y),
        width=size, height=size,
        z_order=max_z + 1,
        step_index=len(state.tokens),
        color=descriptor.color,
    )
    state.tokens.append(token)
    state.notify('drop')
    return state.tokens


def drop_at(state, descriptor, drop_point):
    """Drop a sticker centred on a canvas-local point. Returns the new token."""
    x, y = drop_to_placement(drop_point, state.sticker_size)
    drop_token(state, descriptor, x, y)
    return state.tokens[-1]


def remove_token(state, token_id):
    """Remove a sticker and renumber step indices. Returns True if removed."""
    before = len(state.tokens)
    state.tokens = [t for t in state.tokens if t.id != token_id]
    if len(state.tokens) == before:
        return False
    state.renumber_steps()
    state.selected = [sid for sid in state.selected if sid != token_id]
    state.notify('remove')
    return True


def clear_canvas(state):
    state.tokens = []
    state.selected = []
    state.notify('clear')


def set_token_volume(state, token_id, volume):
    t = state.find_token(token_id)
    if not t:
        return
    t.volume = max(0.0, min(1.0, float(volume)))
    state.notify('volume')


def set_global_volume(state, volume):
    state.global_volume = max(0.0, min(1.0, float(volume)))
    state.notify('global_volume')


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def select(state, token_id, selected=True):
    """Single-select a sticker, or drop it from the selection."""
    if selected:
        if state.find_token(token_id):
            state.selected = [token_id]
    else:
        state.selected = [sid for sid in state.selected if sid != token_id]
    state.notify('select')


def clear_selection(state):
    if state.selected:
        state.selected = []
        state.notify('select')


def select_all(state):
    """Select every sticker, or clear the selection if all are selected."""
    if not state.tokens:
        return
    if len(state.selected) == len(state.tokens):
        state.selected = []
    else:
        state.selected = [t.id for t in state.tokens]
    state.notify('select')


def selected_tokens(state):
    return [t for t in state.tokens if t.id in state.selected]


def group_move(state, dx, dy):
    """Translate every selected sticker."""
    for t in selected_tokens(state):
        t.x += dx
        t.y += dy
    if state.selected:
        state.notify('group_move')


def scale_selected(state, delta=SCALE_STEP):
    """Grow (delta > 0) or shrink selected stickers, clamped to [30, 300]."""
    for t in selected_tokens(state):
        t.width = max(SCALE_MIN, min(SCALE_MAX, t.width + delta))
        t.height = max(SCALE_MIN, min(SCALE_MAX, t.height + delta))
    state.notify('scale')


def rotate_selected(state, delta=ROTATE_STEP):
    for t in selected_tokens(state):
        t.rotation += delta
    state.notify('rotate')


def toggle_mirror_selected(state):
    for t in selected_tokens(state):
        t.mirrored = not t.mirrored
    state.notify('mirror')


def remove_selected(state):
    """Remove every selected sticker. Returns the removed ids."""
    doomed = set(state.selected)
    state.tokens = [t for t in state.tokens if t.id not in doomed]
    state.renumber_steps()
    state.selected = []
    state.notify('remove')
    return doomed
