"""Tests for reading the envelope fields of a stored game."""
import pytest

from gamestore.services.game_view import GameView


class TestFromJson:

    def test_reads_envelope(self, make_game):
        view = GameView.from_json(make_game(state_id=7, active_player_id="p2"))

        assert view.game_state_id == 7
        assert view.active_player_id == "p2"
        assert view.is_game_over is False
        assert [p["playerId"] for p in view.players] == ["p1", "p2"]

    def test_game_end_status(self, make_game):
        assert GameView.from_json(make_game(status="GAME_END")).is_game_over is True

    @pytest.mark.parametrize("raw", [{}, {"gameStateId": "garbage"}, {"gameStateId": None}])
    def test_missing_or_bad_state_id_is_zero(self, raw):
        view = GameView.from_json(raw)
        assert view.game_state_id == 0
        assert view.active_player_id is None
        assert view.players == []


class TestPlayerAccess:

    def test_secret_matches(self, make_game):
        view = GameView.from_json(make_game())

        assert view.secret_matches("p1", "secret-1") is True
        assert view.secret_matches("p1", "secret-2") is False
        assert view.secret_matches("p1", None) is False
        assert view.secret_matches("ghost", "secret-1") is False

    def test_public_game_strips_secrets_without_touching_source(self, make_game):
        game = make_game()
        view = GameView.from_json(game)

        public = view.public_game()

        assert all("playerSecret" not in p for p in public["players"])
        assert game["players"][0]["playerSecret"] == "secret-1"

    def test_viewing_player(self, make_game):
        view = GameView.from_json(make_game())

        assert view.viewing_player("p2") == {"playerId": "p2", "name": "Bo"}
        assert view.viewing_player("ghost") is None
        assert view.viewing_player(None) is None


class TestPendingInputs:

    def test_keyed_by_player(self, make_game):
        view = GameView.from_json(make_game())

        assert view.pending_inputs_for("p1") == [{"inputType": "SELECT_CARDS"}]
        assert view.pending_inputs_for("p2") == []
        assert view.pending_inputs_for(None) == []

    def test_list_belongs_to_active_player(self, make_game):
        game = make_game(active_player_id="p2")
        game["pendingInputs"] = [{"inputType": "PLACE_WORKER"}]
        view = GameView.from_json(game)

        assert view.pending_inputs_for("p2") == [{"inputType": "PLACE_WORKER"}]
        assert view.pending_inputs_for("p1") == []

    def test_nothing_pending_after_game_end(self, make_game):
        view = GameView.from_json(make_game(status="GAME_END"))
        assert view.pending_inputs_for("p1") == []
