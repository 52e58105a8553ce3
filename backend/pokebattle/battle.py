# backend/pokebattle/battle.py
"""
Single Pokémon vs single Pokémon battle engine.

A `BattleSession` is an immutable value; `apply_player_move` and
`apply_opponent_move` return the next session. `BattleArena` owns a session
and schedules the automated opponent reply after its thinking delay.
"""

import asyncio
import logging
import math
import random
from enum import Enum
from typing import List, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, computed_field

from .config import settings
from .exceptions import BattleSetupError, IllegalBattleStateError, IllegalMoveError
from .models import Move, MoveCategory, Pokemon

logger = logging.getLogger(__name__)

T = TypeVar("T")

DAMAGE_ROLL_MIN = 0.85
DAMAGE_ROLL_MAX = 1.0


class Side(str, Enum):
    PLAYER = "player"
    OPPONENT = "opponent"


class BattlePhase(str, Enum):
    PLAYER_TURN = "player_turn"
    RESOLVING_AI = "resolving_ai"  # opponent is "thinking", player input is locked
    TERMINAL = "terminal"


class BattleRandom:
    """Random source used by the engine. Pass a seed for reproducible battles."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def damage_multiplier(self) -> float:
        """Uniform in [0.85, 1.0)."""
        return DAMAGE_ROLL_MIN + self._rng.random() * (DAMAGE_ROLL_MAX - DAMAGE_ROLL_MIN)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)


def calculate_damage(move: Move, attacker: Pokemon, defender: Pokemon, rng: BattleRandom, level: Optional[int] = None) -> int:
    """
    Simplified main-series damage formula.

    No type effectiveness, STAB or critical hits. Always returns at least 1,
    so zero-power moves still chip the defender.
    """
    level = settings.battle_level if level is None else level
    if move.category == MoveCategory.PHYSICAL:
        attack, defense = attacker.stats.attack, defender.stats.defense
    else:
        attack, defense = attacker.stats.special_attack, defender.stats.special_defense
    defense = max(1, defense)

    base = ((2 * level / 5 + 2) * move.power * attack / defense) / 50 + 2
    damage = math.floor(base * rng.damage_multiplier())
    return max(1, damage)


class BattleSession(BaseModel):
    """Snapshot of a battle. Never mutated; transitions return a new session."""
    model_config = ConfigDict(frozen=True)

    player: Pokemon
    opponent: Pokemon
    player_hp: int
    opponent_hp: int
    max_hp: int
    phase: BattlePhase = BattlePhase.PLAYER_TURN
    winner: Optional[Side] = None
    log: Tuple[str, ...] = ()

    @computed_field
    @property
    def turn_owner(self) -> Optional[Side]:
        if self.phase == BattlePhase.PLAYER_TURN:
            return Side.PLAYER
        if self.phase == BattlePhase.RESOLVING_AI:
            return Side.OPPONENT
        return None

    @computed_field
    @property
    def is_over(self) -> bool:
        return self.phase == BattlePhase.TERMINAL

    @property
    def legal_moves(self) -> List[Move]:
        """Moves the player may submit right now."""
        if self.phase != BattlePhase.PLAYER_TURN:
            return []
        return list(self.player.moves)


def start_battle(player: Pokemon, opponent: Pokemon, starting_hp: Optional[int] = None) -> BattleSession:
    """Both sides start from the same nominal HP pool, whatever their hp stat."""
    starting_hp = settings.battle_starting_hp if starting_hp is None else starting_hp
    if starting_hp < 1:
        raise BattleSetupError(f"starting_hp must be positive, got {starting_hp}")
    for side, pokemon in ((Side.PLAYER, player), (Side.OPPONENT, opponent)):
        if not pokemon.moves:
            raise BattleSetupError(f"{side.value} Pokémon {pokemon.name} has no moves")
    logger.info(f"Battle started: {player.name} vs {opponent.name}")
    return BattleSession(
        player=player,
        opponent=opponent,
        player_hp=starting_hp,
        opponent_hp=starting_hp,
        max_hp=starting_hp,
    )


def apply_player_move(session: BattleSession, move: Move, rng: BattleRandom) -> BattleSession:
    """Resolves the player's attack. Either ends the battle or hands the turn to the opponent."""
    if session.phase != BattlePhase.PLAYER_TURN:
        raise IllegalBattleStateError(f"Player cannot move during {session.phase.value}")
    if move not in session.player.moves:
        raise IllegalMoveError(f"{session.player.name} does not know {move.name}")

    damage = calculate_damage(move, session.player, session.opponent, rng)
    opponent_hp = max(0, session.opponent_hp - damage)
    log = session.log + (f"{session.player.name} used {move.name}! Dealt {damage} damage.",)

    if opponent_hp == 0:
        logger.info(f"{session.opponent.name} fainted, player wins")
        return session.model_copy(update={
            "opponent_hp": 0,
            "phase": BattlePhase.TERMINAL,
            "winner": Side.PLAYER,
            "log": log + (f"{session.opponent.name} fainted! You won!",),
        })
    return session.model_copy(update={
        "opponent_hp": opponent_hp,
        "phase": BattlePhase.RESOLVING_AI,
        "log": log,
    })


def apply_opponent_move(session: BattleSession, rng: BattleRandom) -> BattleSession:
    """Opponent picks one of its moves at random and attacks."""
    if session.phase != BattlePhase.RESOLVING_AI:
        raise IllegalBattleStateError(f"Opponent cannot move during {session.phase.value}")

    move = rng.choice(session.opponent.moves)
    damage = calculate_damage(move, session.opponent, session.player, rng)
    player_hp = max(0, session.player_hp - damage)
    log = session.log + (f"{session.opponent.name} used {move.name}! Dealt {damage} damage.",)

    if player_hp == 0:
        logger.info(f"{session.player.name} fainted, opponent wins")
        return session.model_copy(update={
            "player_hp": 0,
            "phase": BattlePhase.TERMINAL,
            "winner": Side.OPPONENT,
            "log": log + (f"{session.player.name} fainted! You lost!",),
        })
    return session.model_copy(update={
        "player_hp": player_hp,
        "phase": BattlePhase.PLAYER_TURN,
        "log": log,
    })


class BattleArena:
    """
    Owns one battle at a time.

    Pick both sides with `select_player` / `select_opponent`, then call
    `submit_move`. The opponent's reply runs as a task after
    `ai_delay` seconds; `wait_for_opponent` awaits it.
    """

    def __init__(self, rng: Optional[BattleRandom] = None, ai_delay: Optional[float] = None,
                 starting_hp: Optional[int] = None):
        self.rng = rng or BattleRandom()
        self.ai_delay = settings.ai_think_delay_seconds if ai_delay is None else ai_delay
        self.starting_hp = starting_hp
        self.player: Optional[Pokemon] = None
        self.opponent: Optional[Pokemon] = None
        self._session: Optional[BattleSession] = None
        self._opponent_task: Optional[asyncio.Task] = None

    @property
    def session(self) -> Optional[BattleSession]:
        return self._session

    def _ensure_not_in_progress(self) -> None:
        if self._session is not None and not self._session.is_over:
            raise IllegalBattleStateError("Cannot change Pokémon while a battle is in progress")

    def select_player(self, pokemon: Pokemon) -> Optional[BattleSession]:
        self._ensure_not_in_progress()
        self.player = pokemon
        return self._maybe_start()

    def select_opponent(self, pokemon: Pokemon) -> Optional[BattleSession]:
        self._ensure_not_in_progress()
        self.opponent = pokemon
        return self._maybe_start()

    def _maybe_start(self) -> Optional[BattleSession]:
        if self.player is None or self.opponent is None:
            return None
        self._session = start_battle(self.player, self.opponent, self.starting_hp)
        return self._session

    async def submit_move(self, move: Move) -> BattleSession:
        """Applies the player's move; schedules the opponent reply if the battle goes on."""
        if self._session is None:
            raise IllegalBattleStateError("Select both Pokémon before submitting a move")
        self._session = apply_player_move(self._session, move, self.rng)
        if self._session.phase == BattlePhase.RESOLVING_AI:
            self._opponent_task = asyncio.create_task(self._resolve_opponent_turn())
        return self._session

    async def _resolve_opponent_turn(self) -> None:
        await asyncio.sleep(self.ai_delay)
        self._session = apply_opponent_move(self._session, self.rng)

    def cancel_pending(self) -> None:
        """Cancels a scheduled opponent reply that has not run yet."""
        if self._opponent_task is not None and not self._opponent_task.done():
            self._opponent_task.cancel()
        self._opponent_task = None

    async def wait_for_opponent(self) -> Optional[BattleSession]:
        """Waits for a pending opponent reply, if any, and returns the session."""
        if self._opponent_task is not None:
            await self._opponent_task
            self._opponent_task = None
        return self._session
