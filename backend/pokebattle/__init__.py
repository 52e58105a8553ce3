# pokebattle/__init__.py

# Expose core functions and models for easy import
from .pokedex_data import (
    fetch_pokemon_list, fetch_pokemon, fetch_pokemon_moves, fetch_generation,
    generation_window, filter_pokemon
)
from .battle import (
    BattleArena, BattlePhase, BattleRandom, BattleSession, Side,
    calculate_damage, start_battle, apply_player_move, apply_opponent_move
)
from .models import Move, MoveCategory, Pokemon, PokemonStats, PokemonTypeName, UNKNOWN_MOVE
from .resilience import Result, attempt, best_effort_map, linear_backoff
from .team import Team, add_to_team, remove_from_team
from .exceptions import (
    PokeAPIError, PokeAPIConnectionError, PokeAPIStatusError, ResourceNotFoundError, MalformedDataError,
    InvalidRangeError, UnknownGenerationError,
    BattleError, BattleSetupError, IllegalBattleStateError, IllegalMoveError, TeamFullError
)

__all__ = [
    # Fetch pipeline
    "fetch_pokemon_list", "fetch_pokemon", "fetch_pokemon_moves", "fetch_generation",
    "generation_window", "filter_pokemon",
    # Battle engine
    "BattleArena", "BattlePhase", "BattleRandom", "BattleSession", "Side",
    "calculate_damage", "start_battle", "apply_player_move", "apply_opponent_move",
    # Models
    "Move", "MoveCategory", "Pokemon", "PokemonStats", "PokemonTypeName", "UNKNOWN_MOVE",
    "Team", "add_to_team", "remove_from_team",
    # Resilience helpers
    "Result", "attempt", "best_effort_map", "linear_backoff",
    # Exceptions
    "PokeAPIError", "PokeAPIConnectionError", "PokeAPIStatusError", "ResourceNotFoundError",
    "MalformedDataError", "InvalidRangeError", "UnknownGenerationError",
    "BattleError", "BattleSetupError", "IllegalBattleStateError", "IllegalMoveError", "TeamFullError",
]

__version__ = "0.1.0" # Keep version consistent with pyproject.toml
