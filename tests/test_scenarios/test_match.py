"""End-to-end match scenarios between two synchronizers."""

from src.networking.protocol import AckRecord, Color
from src.simulation.turns import GameOverReason, TurnState
from tests.scenario import Match


class TestOpening:
    def test_white_moves_first(self):
        m = Match()
        m.assert_turn("white")

    def test_turns_alternate(self):
        m = Match()
        for side, move in (("white", "e2e4"), ("black", "c7c5"), ("white", "g1f3")):
            m.play(side, move)
            m.assert_in_sync()
        m.assert_turn("black")

    def test_out_of_turn_clicks_do_nothing(self):
        m = Match()
        m["black"].click_square(52)  # e7
        m["black"].click_square(36)  # e5
        m.step()
        m.assert_turn("white")
        assert m["black"].last_move is None


class TestEndings:
    def test_scholars_mate(self):
        m = Match()
        for side, move in (
            ("white", "e2e4"), ("black", "e7e5"),
            ("white", "f1c4"), ("black", "b8c6"),
            ("white", "d1h5"), ("black", "g8f6"),
            ("white", "h5f7"),
        ):
            m.play(side, move)
        m.assert_in_sync()
        m.assert_game_over(GameOverReason.CHECKMATE, Color.WHITE)

    def test_promotion_crosses_the_wire(self):
        m = Match(fen="8/4P3/8/8/8/8/k7/7K w - - 0 1")
        m.play("white", "e7e8r")
        m.assert_in_sync()
        assert m["black"].board.piece_at(60).symbol() == "R"  # e8
        m.assert_turn("black")

    def test_forfeit(self):
        m = Match()
        m.play("white", "d2d4")
        m["white"].forfeit()
        m.step()
        m.assert_game_over(GameOverReason.FORFEIT, Color.BLACK)

    def test_agreed_draw(self):
        m = Match()
        m["white"].offer_draw()
        m.step()
        assert m["black"].pending_draw_offer
        m["black"].answer_draw_offer(True)
        m.step()
        m.assert_game_over(GameOverReason.DRAW, None)

    def test_declined_draw_play_continues(self):
        m = Match()
        m["white"].offer_draw()
        m.step()
        m["black"].answer_draw_offer(False)
        assert m["black"]._peer.sent_acks == [AckRecord(accepted=False)]
        m.step()
        assert not m["white"].awaiting_draw_answer
        m.play("white", "e2e4")
        m.assert_turn("black")

    def test_both_restart_after_mate(self):
        m = Match()
        for side, move in (
            ("white", "f2f3"), ("black", "e7e5"),
            ("white", "g2g4"), ("black", "d8h4"),
        ):
            m.play(side, move)
        m.assert_game_over(GameOverReason.CHECKMATE, Color.BLACK)
        m["white"].restart()
        assert m["white"].state is TurnState.GAME_OVER
        m["black"].restart()
        m.step()
        m.assert_turn("white")
        m.assert_in_sync()
        assert m["white"].state is TurnState.LOCAL_TURN


class TestRestart:
    def test_move_in_flight_at_game_end_is_discarded(self):
        m = Match()
        m["white"].click_square(6)   # g1
        m["white"].click_square(21)  # f3, not yet delivered
        m["black"].forfeit()
        m["white"].update()
        m.assert_game_over(GameOverReason.FORFEIT, Color.WHITE)

        m["white"].restart()
        m["black"].restart()
        m.step()
        m.assert_in_sync()
        m.assert_turn("white")
        assert m["black"].last_move is None

    def test_first_move_after_restart_is_kept(self):
        m = Match()
        m["white"].forfeit()
        m.step()
        m["black"].restart()
        m.step()
        assert m["white"].peer_restarted
        m["white"].restart()
        # Black still waits on the restart record queued ahead of this move.
        m.play("white", "d2d4")
        m.step()
        m.assert_in_sync()
        m.assert_turn("black")


class TestDrawOfferCrossing:
    def test_offer_withdrawn_by_move_then_offered_again(self):
        m = Match()
        m["white"].offer_draw()
        m["white"].click_square(12)  # e2
        m["white"].click_square(28)  # e4
        m.step()
        m.step()
        assert not m["black"].pending_draw_offer
        m.play("black", "e7e5")
        m["white"].offer_draw()
        m.step()
        assert m["white"].awaiting_draw_answer
        assert m["black"].pending_draw_offer

    def test_acceptance_crossing_a_move_draws_on_both_sides(self):
        m = Match()
        m["white"].offer_draw()
        m["white"].click_square(12)  # e2
        m["white"].click_square(28)  # e4
        m["black"].update()  # sees the offer, not yet the move
        m["black"].answer_draw_offer(True)
        m.step()
        m.assert_game_over(GameOverReason.DRAW, None)
