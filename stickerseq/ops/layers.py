"""Layer (z-order) operations.

A layer move is a nearest-neighbour swap: at most two stickers change per
call, and z-orders stay pairwise distinct. Removal never renumbers z-order.
"""

from ..core.diagnostics import Diagnostics, Fault

UP = 'up'
DOWN = 'down'


def move_layer(state, token_id, direction, diagnostics=None):
    """Move a sticker one layer up or down. Returns True if anything changed."""
    diagnostics = diagnostics or Diagnostics()
    token = state.find_token(token_id)
    if token is None:
        diagnostics.report(Fault.LAYER, "move_layer on unknown id %r", token_id)
        return False
    if direction not in (UP, DOWN):
        diagnostics.report(Fault.LAYER, "unknown layer direction %r", direction)
        return False

    others = [t for t in state.tokens if t is not token]
    z = token.z_order
    if direction == UP:
        above = [t for t in others if t.z_order > z]
        neighbour = min(above, key=lambda t: t.z_order) if above else None
    else:
        below = [t for t in others if t.z_order < z]
        neighbour = max(below, key=lambda t: t.z_order) if below else None

    if neighbour is not None:
        token.z_order, neighbour.z_order = neighbour.z_order, z
    elif direction == UP:
        token.z_order = max(t.z_order for t in state.tokens) + 1
    else:
        lowest = min(t.z_order for t in state.tokens)
        token.z_order = max(0, lowest - 1)

    state.notify('layer')
    return True


def move_layer_selected(state, direction, diagnostics=None):
    """Apply move_layer to every selected sticker, in selection order."""
    for token_id in list(state.selected):
        move_layer(state, token_id, direction, diagnostics)
