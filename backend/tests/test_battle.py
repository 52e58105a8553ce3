# backend/tests/test_battle.py

import pytest

from conftest import make_move, make_pokemon
from pokebattle.battle import (
    BattleArena, BattlePhase, BattleRandom, Side, apply_opponent_move, apply_player_move,
    calculate_damage, start_battle,
)
from pokebattle.exceptions import BattleSetupError, IllegalBattleStateError, IllegalMoveError
from pokebattle.models import MoveCategory


class StaticRNG:
    """Deterministic random source used to control damage rolls and AI picks in tests."""

    def __init__(self, multipliers=None, choices=None):
        self.multipliers = list(multipliers or [])
        self.choices = list(choices or [])

    def damage_multiplier(self):
        if not self.multipliers:
            return 1.0
        return self.multipliers.pop(0)

    def choice(self, seq):
        if not self.choices:
            return seq[0]
        return seq[self.choices.pop(0)]


TACKLE = make_move(1, "Tackle", power=40)
GROWL = make_move(45, "Growl", power=0, category=MoveCategory.STATUS)


def build_battle(starting_hp=100, player_moves=None, opponent_moves=None):
    player = make_pokemon(1, "Bulbasaur", moves=player_moves or [TACKLE, GROWL])
    opponent = make_pokemon(4, "Charmander", moves=opponent_moves or [TACKLE])
    return start_battle(player, opponent, starting_hp=starting_hp)


# --- Damage formula ---

def test_damage_at_max_roll():
    attacker = make_pokemon(attack=50)
    defender = make_pokemon(defense=50)
    # floor((((2*50/5+2) * 40 * 50/50) / 50 + 2) * 1.0) = floor(19.6)
    assert calculate_damage(TACKLE, attacker, defender, StaticRNG([1.0])) == 19


def test_damage_at_min_roll():
    attacker = make_pokemon(attack=50)
    defender = make_pokemon(defense=50)
    # floor(19.6 * 0.85) = floor(16.66)
    assert calculate_damage(TACKLE, attacker, defender, StaticRNG([0.85])) == 16


def test_special_moves_use_special_stats():
    ember = make_move(52, "Ember", power=40, category=MoveCategory.SPECIAL)
    attacker = make_pokemon(attack=10, special_attack=100)
    defender = make_pokemon(defense=200, special_defense=50)
    # floor((22 * 40 * 100/50) / 50 + 2) = floor(37.2)
    assert calculate_damage(ember, attacker, defender, StaticRNG([1.0])) == 37


@pytest.mark.parametrize("roll", [0.85, 0.9, 0.999, 1.0])
def test_zero_power_move_always_deals_one(roll):
    attacker = make_pokemon(attack=255)
    defender = make_pokemon(defense=5)
    assert calculate_damage(GROWL, attacker, defender, StaticRNG([roll])) == 1


def test_zero_defense_does_not_divide_by_zero():
    attacker = make_pokemon(attack=50)
    defender = make_pokemon(defense=0)
    assert calculate_damage(TACKLE, attacker, defender, StaticRNG([1.0])) > 0


def test_battle_random_multiplier_range():
    rng = BattleRandom(seed=7)
    rolls = [rng.damage_multiplier() for _ in range(1000)]
    assert all(0.85 <= roll < 1.0 for roll in rolls)


def test_battle_random_is_reproducible_with_seed():
    first, second = BattleRandom(seed=42), BattleRandom(seed=42)
    assert [first.damage_multiplier() for _ in range(5)] == [second.damage_multiplier() for _ in range(5)]


# --- Turn state machine ---

def test_start_battle_uses_nominal_hp_not_hp_stat():
    session = build_battle()
    assert session.player.stats.hp == 45
    assert session.player_hp == 100
    assert session.opponent_hp == 100
    assert session.phase == BattlePhase.PLAYER_TURN
    assert session.turn_owner == Side.PLAYER
    assert session.log == ()
    assert session.legal_moves == [TACKLE, GROWL]


def test_start_battle_requires_moves():
    with pytest.raises(BattleSetupError):
        start_battle(make_pokemon(moves=[]), make_pokemon())
    with pytest.raises(BattleSetupError):
        start_battle(make_pokemon(), make_pokemon(moves=[]))


def test_player_then_opponent_turn():
    session = build_battle()
    rng = StaticRNG([1.0, 1.0])

    after_player = apply_player_move(session, TACKLE, rng)
    assert after_player.opponent_hp == 81
    assert after_player.log == ("Bulbasaur used Tackle! Dealt 19 damage.",)
    assert after_player.phase == BattlePhase.RESOLVING_AI
    assert after_player.turn_owner == Side.OPPONENT
    assert after_player.legal_moves == []

    after_opponent = apply_opponent_move(after_player, rng)
    assert after_opponent.player_hp == 81
    assert after_opponent.turn_owner == Side.PLAYER
    assert len(after_opponent.log) == 2
    assert after_opponent.log[1] == "Charmander used Tackle! Dealt 19 damage."

    # transitions never touch the previous session
    assert session.opponent_hp == 100
    assert session.log == ()


def test_player_cannot_move_while_opponent_resolves():
    session = apply_player_move(build_battle(), TACKLE, StaticRNG())
    with pytest.raises(IllegalBattleStateError):
        apply_player_move(session, TACKLE, StaticRNG())


def test_opponent_cannot_move_on_player_turn():
    with pytest.raises(IllegalBattleStateError):
        apply_opponent_move(build_battle(), StaticRNG())


def test_unknown_move_is_rejected():
    with pytest.raises(IllegalMoveError):
        apply_player_move(build_battle(), make_move(99, "Hyper Beam", power=150), StaticRNG())


def test_opponent_picks_among_its_moves():
    session = build_battle(opponent_moves=[TACKLE, GROWL])
    session = apply_player_move(session, TACKLE, StaticRNG())
    session = apply_opponent_move(session, StaticRNG(choices=[1]))
    assert session.log[-1] == "Charmander used Growl! Dealt 1 damage."
    assert session.player_hp == 99


def test_player_knockout_ends_battle():
    session = apply_player_move(build_battle(starting_hp=10), TACKLE, StaticRNG([1.0]))
    assert session.opponent_hp == 0
    assert session.phase == BattlePhase.TERMINAL
    assert session.winner == Side.PLAYER
    assert session.is_over
    assert session.turn_owner is None
    assert session.log == (
        "Bulbasaur used Tackle! Dealt 19 damage.",
        "Charmander fainted! You won!",
    )


def test_opponent_knockout_ends_battle():
    session = build_battle(starting_hp=19)
    session = apply_player_move(session, GROWL, StaticRNG())
    session = apply_opponent_move(session, StaticRNG([1.0]))
    assert session.player_hp == 0
    assert session.winner == Side.OPPONENT
    assert session.log[-1] == "Bulbasaur fainted! You lost!"


def test_terminal_state_is_absorbing():
    finished = apply_player_move(build_battle(starting_hp=1), TACKLE, StaticRNG())
    with pytest.raises(IllegalBattleStateError):
        apply_player_move(finished, TACKLE, StaticRNG())
    with pytest.raises(IllegalBattleStateError):
        apply_opponent_move(finished, StaticRNG())
    assert finished.opponent_hp == 0
    assert finished.player_hp == 1
    assert len(finished.log) == 2


# --- Arena ---

@pytest.mark.asyncio
async def test_arena_end_to_end_turn():
    arena = BattleArena(rng=StaticRNG([1.0, 1.0]), ai_delay=0.01)
    assert arena.select_player(make_pokemon(1, "Bulbasaur", moves=[TACKLE])) is None
    assert arena.select_opponent(make_pokemon(4, "Charmander", moves=[TACKLE])) is not None

    session = await arena.submit_move(TACKLE)
    assert session.opponent_hp == 81
    assert len(session.log) == 1
    assert session.turn_owner == Side.OPPONENT

    # locked while the opponent is thinking
    with pytest.raises(IllegalBattleStateError):
        await arena.submit_move(TACKLE)

    session = await arena.wait_for_opponent()
    assert session.turn_owner == Side.PLAYER
    assert session.player_hp == 81
    assert len(session.log) == 2


@pytest.mark.asyncio
async def test_arena_requires_both_pokemon():
    arena = BattleArena(rng=StaticRNG())
    arena.select_player(make_pokemon())
    with pytest.raises(IllegalBattleStateError):
        await arena.submit_move(TACKLE)


@pytest.mark.asyncio
async def test_arena_rejects_reselection_mid_battle():
    arena = BattleArena(rng=StaticRNG(), ai_delay=0, starting_hp=1)
    arena.select_player(make_pokemon(1, "Bulbasaur"))
    arena.select_opponent(make_pokemon(4, "Charmander"))
    with pytest.raises(IllegalBattleStateError):
        arena.select_opponent(make_pokemon(7, "Squirtle"))

    session = await arena.submit_move(TACKLE)
    assert session.is_over
    assert await arena.wait_for_opponent() is session

    # a finished battle can be replaced by a new one
    fresh = arena.select_opponent(make_pokemon(7, "Squirtle"))
    assert fresh.opponent.name == "Squirtle"
    assert fresh.phase == BattlePhase.PLAYER_TURN
