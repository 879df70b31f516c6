"""
Tests for the gesture controller: drag, resize, rotate, pinch and the
session state machine.
"""
import math

import pytest

from stickerseq.core.diagnostics import Fault
from stickerseq.ops.canvas import Rect
from stickerseq.ops.stickers import drop_token
from stickerseq.ops.transform import TransformController, Mode, Outcome, MIN_SIZE

# Canvas placed at (50, 20) in pointer space to catch origin mix-ups
CANVAS = Rect(50, 20, 400, 300)


@pytest.fixture
def controller(three_tokens, diagnostics):
    return TransformController(three_tokens, CANVAS, diagnostics)


@pytest.fixture
def token(three_tokens):
    """Sticker at canvas-local (100, 0), 80x80."""
    return three_tokens.tokens[1]


def _screen(t, lx, ly):
    """Pointer position for a point (lx, ly) inside the sticker's local box."""
    return (CANVAS.left + t.x + lx, CANVAS.top + t.y + ly)


class TestClassification:

    def test_bottom_right_is_resize(self, controller, token):
        assert controller.begin(token.id, [_screen(token, 75, 75)]) == Mode.RESIZING

    def test_top_right_is_rotate(self, controller, token):
        assert controller.begin(token.id, [_screen(token, 70, 5)]) == Mode.ROTATING

    def test_elsewhere_is_drag(self, controller, token):
        assert controller.begin(token.id, [_screen(token, 10, 70)]) == Mode.DRAGGING

    def test_resize_wins_when_zones_overlap(self, three_tokens, controller, token):
        token.height = 30
        assert controller.begin(token.id, [_screen(token, 75, 15)]) == Mode.RESIZING

    def test_idle_without_session(self, controller, token):
        assert controller.mode(token.id) == Mode.IDLE

    def test_mode_is_fixed_for_session(self, controller, token):
        controller.begin(token.id, [_screen(token, 10, 10)])
        controller.move(token.id, [_screen(token, 75, 75)])
        assert controller.mode(token.id) == Mode.DRAGGING


class TestDrag:

    def test_offset_is_kept(self, controller, token):
        start = _screen(token, 30, 30)
        controller.begin(token.id, [start])
        controller.move(token.id, [(start[0] + 25, start[1] + 40)])
        assert (token.x, token.y) == (125, 40)

    def test_commit_inside(self, three_tokens, controller, token):
        start = _screen(token, 30, 30)
        controller.begin(token.id, [start])
        controller.move(token.id, [(start[0] + 10, start[1])])
        assert controller.end(token.id) == Outcome.COMMITTED
        assert token in three_tokens.tokens
        assert controller.mode(token.id) == Mode.IDLE

    def test_drag_to_trash(self, three_tokens, controller, token):
        start = _screen(token, 30, 30)
        controller.begin(token.id, [start])
        controller.move(token.id, [(start[0], start[1] - 200)])
        assert controller.session(token.id).pending_removal
        assert controller.end(token.id) == Outcome.REMOVED
        assert token.id not in [t.id for t in three_tokens.tokens]
        assert [t.step_index for t in three_tokens.tokens] == [0, 1]

    def test_drag_back_inside_cancels_removal(self, three_tokens, controller, token):
        start = _screen(token, 30, 30)
        controller.begin(token.id, [start])
        controller.move(token.id, [(start[0], start[1] - 200)])
        controller.move(token.id, [(start[0], start[1] + 20)])
        assert controller.end(token.id) == Outcome.COMMITTED
        assert len(three_tokens) == 3

    def test_trash_hint(self, controller, token):
        start = _screen(token, 30, 30)
        controller.begin(token.id, [start])
        controller.move(token.id, [(start[0], start[1] - 50)])
        assert controller.trash_ids() == {token.id}
        controller.move(token.id, [start])
        assert controller.trash_ids() == set()

    def test_degenerate_canvas_never_removes(self, three_tokens, diagnostics, token):
        controller = TransformController(three_tokens, Rect(0, 0, 0, 0), diagnostics)
        controller.begin(token.id, [(10, 10)])
        controller.move(token.id, [(-5000, -5000)])
        assert controller.end(token.id) == Outcome.COMMITTED
        assert len(three_tokens) == 3
        assert diagnostics.counts[Fault.BOUNDS] >= 1


class TestResize:

    def test_anchored_at_top_left(self, controller, token):
        controller.begin(token.id, [_screen(token, 78, 78)])
        controller.move(token.id, [_screen(token, 150, 120)])
        assert (token.width, token.height) == (150, 120)
        assert (token.x, token.y) == (100, 0)

    def test_minimum(self, controller, token):
        controller.begin(token.id, [_screen(token, 78, 78)])
        controller.move(token.id, [_screen(token, 5, -40)])
        assert (token.width, token.height) == (MIN_SIZE, MIN_SIZE)


class TestRotate:

    def test_delta_from_start_angle(self, controller, token):
        token.rotation = 10
        # centre is at local (40, 40); start pointer is up-right of it
        controller.begin(token.id, [_screen(token, 80, 0)])
        controller.move(token.id, [_screen(token, 80, 80)])
        assert token.rotation == pytest.approx(100)

    def test_no_drift_over_many_moves(self, controller, token):
        controller.begin(token.id, [_screen(token, 79, 1)])
        for i in range(1000):
            a = math.radians(i)
            controller.move(token.id, [_screen(token, 40 + 50 * math.cos(a),
                                               40 + 50 * math.sin(a))])
        controller.move(token.id, [_screen(token, 79, 1)])
        assert token.rotation == pytest.approx(0, abs=1e-9)


class TestPinch:

    def test_reconstruction(self, state, descriptor, diagnostics):
        drop_token(state, descriptor, 10, 10)
        t = state.tokens[0]
        controller = TransformController(state, Rect(0, 0, 400, 300), diagnostics)
        # distance 100, angle 0, midpoint (50, 50)
        assert controller.begin(t.id, [(0, 50), (100, 50)]) == Mode.PINCHING
        # distance 200, angle 90, midpoint (60, 70)
        controller.move(t.id, [(60, -30), (60, 170)])
        assert t.width == pytest.approx(160)
        assert t.height == pytest.approx(160)
        assert t.rotation == pytest.approx(90)
        assert t.x == pytest.approx(20)
        assert t.y == pytest.approx(30)

    def test_pure_pinch_does_not_translate(self, controller, token):
        controller.begin(token.id, [(100, 100), (200, 100)])
        controller.move(token.id, [(50, 100), (250, 100)])
        assert (token.x, token.y) == (100, 0)
        assert token.width == pytest.approx(160)

    def test_floor_but_no_ceiling(self, controller, token):
        controller.begin(token.id, [(100, 100), (200, 100)])
        controller.move(token.id, [(149, 100), (151, 100)])
        assert token.width == MIN_SIZE
        controller.move(token.id, [(0, 100), (1000, 100)])
        assert token.width == pytest.approx(800)

    def test_coincident_pointers_ignored(self, controller, token, diagnostics):
        assert controller.begin(token.id, [(10, 10), (10, 10)]) == Mode.IDLE
        assert diagnostics.counts[Fault.GESTURE] == 1

    def test_pinch_end_commits(self, three_tokens, controller, token):
        controller.begin(token.id, [(100, 100), (200, 100)])
        controller.move(token.id, [(-900, 100), (-800, 100)])
        assert controller.end(token.id) == Outcome.COMMITTED
        assert len(three_tokens) == 3


class TestSessionRules:

    def test_second_pointer_cancels_drag(self, three_tokens, controller, token):
        start = _screen(token, 30, 30)
        controller.begin(token.id, [start])
        controller.move(token.id, [(start[0], start[1] - 200)])
        x_after_drag = token.x
        assert controller.begin(token.id, [(100, 100), (200, 100)]) == Mode.PINCHING
        assert token.x == x_after_drag
        # pending removal from the drag is gone
        assert controller.end(token.id) == Outcome.COMMITTED
        assert len(three_tokens) == 3

    def test_coincident_second_pointer_keeps_drag(self, three_tokens, controller, token,
                                                  diagnostics):
        start = _screen(token, 30, 30)
        controller.begin(token.id, [start])
        controller.move(token.id, [(start[0], start[1] - 200)])
        assert controller.begin(token.id, [(50, 50), (50, 50)]) == Mode.IDLE
        assert diagnostics.counts[Fault.GESTURE] == 1
        assert controller.mode(token.id) == Mode.DRAGGING
        assert controller.session(token.id).pending_removal
        assert controller.end(token.id) == Outcome.REMOVED
        assert len(three_tokens) == 2

    def test_pinch_not_downgraded(self, controller, token, diagnostics):
        controller.begin(token.id, [(100, 100), (200, 100)])
        assert controller.begin(token.id, [(100, 100)]) == Mode.IDLE
        assert controller.mode(token.id) == Mode.PINCHING

    def test_wrong_pointer_count_on_move(self, controller, token, diagnostics):
        controller.begin(token.id, [_screen(token, 30, 30)])
        before = (token.x, token.y)
        assert not controller.move(token.id, [(0, 0), (5, 5)])
        assert (token.x, token.y) == before
        assert diagnostics.counts[Fault.GESTURE] == 1

    @pytest.mark.parametrize('points', [
        None, [], [(1, 2), (3, 4), (5, 6)], [(math.nan, 1)], [(None, 1)], [(1,)],
    ])
    def test_malformed_begin(self, controller, token, diagnostics, points):
        assert controller.begin(token.id, points) == Mode.IDLE
        assert controller.mode(token.id) == Mode.IDLE
        assert diagnostics.counts[Fault.GESTURE] == 1

    def test_malformed_move_keeps_geometry(self, controller, token):
        controller.begin(token.id, [_screen(token, 30, 30)])
        assert not controller.move(token.id, [(math.nan, 10)])
        assert (token.x, token.y) == (100, 0)

    def test_move_without_session(self, controller, token):
        assert not controller.move(token.id, [(0, 0)])

    def test_end_without_session(self, controller, token):
        assert controller.end(token.id) == Outcome.IGNORED

    def test_unknown_token(self, controller, diagnostics):
        assert controller.begin('ghost', [(0, 0)]) == Mode.IDLE

    def test_cancel_keeps_geometry(self, controller, token):
        start = _screen(token, 30, 30)
        controller.begin(token.id, [start])
        controller.move(token.id, [(start[0] + 10, start[1])])
        assert controller.cancel(token.id) == Outcome.CANCELLED
        assert token.x == 110
        assert controller.mode(token.id) == Mode.IDLE

    def test_sessions_are_per_token(self, three_tokens, controller):
        a, b = three_tokens.tokens[0], three_tokens.tokens[2]
        sa, sb = _screen(a, 10, 10), _screen(b, 10, 10)
        controller.begin(a.id, [sa])
        controller.begin(b.id, [sb])
        controller.move(a.id, [(sa[0] + 5, sa[1])])
        controller.move(b.id, [(sb[0], sb[1] + 7)])
        assert (a.x, a.y) == (5, 0)
        assert (b.x, b.y) == (200, 7)

    def test_token_removed_mid_session(self, three_tokens, controller, token):
        from stickerseq.ops.stickers import remove_token
        controller.begin(token.id, [_screen(token, 30, 30)])
        remove_token(three_tokens, token.id)
        assert not controller.move(token.id, [(0, 0)])
        assert controller.mode(token.id) == Mode.IDLE
