# backend/pokebattle/pokedex_data.py

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import httpx

from .clients import get_client
from .config import settings
from .exceptions import InvalidRangeError, MalformedDataError, UnknownGenerationError
from .models import (
    BaseMove, BasePokemon, EffectEntry, Move, MoveCategory, Pokemon, PokemonMoveSlot,
    PokemonStats, PokemonTypeName, UNKNOWN_MOVE
)
from .pokeapi_client import fetch_pokeapi
from .resilience import Result, best_effort_map

logger = logging.getLogger(__name__)

# (start_id, limit) per generation, as listed in the Pokedex view
GENERATION_WINDOWS: Dict[int, Tuple[int, int]] = {
    1: (1, 151),
    2: (152, 100),
    3: (252, 135),
}

# --- Helpers ---
def capitalize(value: str) -> str:
    """Upper-cases the first character and leaves the rest untouched."""
    return value[:1].upper() + value[1:]

def _extract_description(entries: List[EffectEntry]) -> str:
    # Prefer English, fall back to whatever comes first
    for entry in entries:
        if entry.language is not None and entry.language.name == "en" and entry.effect:
            return entry.effect
    if entries and entries[0].effect:
        return entries[0].effect
    return ""

def _chunk(ids: Sequence[int], size: int) -> List[Sequence[int]]:
    return [ids[i:i + size] for i in range(0, len(ids), size)]

def validate_range(start_id: int, limit: int) -> None:
    """Rejects identifier windows that cannot produce any Pokemon."""
    if limit < 1:
        raise InvalidRangeError(f"limit must be positive, got {limit}")
    if start_id < 1:
        raise InvalidRangeError(f"start_id must be positive, got {start_id}")

def generation_window(generation: int) -> Tuple[int, int]:
    """Returns the (start_id, limit) window for a generation."""
    try:
        return GENERATION_WINDOWS[generation]
    except KeyError:
        raise UnknownGenerationError(f"No Pokemon window defined for generation {generation}") from None

# --- Parsing ---
def parse_move(move_data: dict) -> Move:
    """Maps a /move payload to a Move. Raises ValidationError on unexpected shapes."""
    raw = BaseMove.model_validate(move_data)
    return Move(
        id=raw.id,
        name=capitalize(raw.name),
        type=PokemonTypeName(capitalize(raw.type.name)),
        power=raw.power if raw.power is not None else 0,
        accuracy=raw.accuracy if raw.accuracy is not None else 100,
        pp=raw.pp if raw.pp is not None else 0,
        category=MoveCategory(capitalize(raw.damage_class.name)),
        description=_extract_description(raw.effect_entries),
    )

def parse_pokemon(raw: BasePokemon, moves: List[Move]) -> Pokemon:
    """Maps a validated /pokemon payload plus its resolved moves to a Pokemon."""
    base_stats = [s.base_stat for s in raw.stats]
    return Pokemon(
        id=raw.id,
        name=capitalize(raw.name),
        types=[PokemonTypeName(capitalize(t.type.name)) for t in raw.types],
        stats=PokemonStats(
            hp=base_stats[0],
            attack=base_stats[1],
            defense=base_stats[2],
            special_attack=base_stats[3],
            special_defense=base_stats[4],
            speed=base_stats[5],
        ),
        moves=moves,
        sprite=raw.sprites.front_default,
    )

# --- Fetching ---
async def fetch_move(url: str, *, client: httpx.AsyncClient) -> Result[Move]:
    """Fetches and parses a single move."""
    fetched = await fetch_pokeapi(url, client=client)
    if not fetched.ok:
        return Result.failure(fetched.error, attempts=fetched.attempts)
    try:
        return Result.success(parse_move(fetched.value), attempts=fetched.attempts)
    except ValueError as e: # ValidationError included
        logger.warning(f"Unexpected move data from {url}: {e}")
        return Result.failure(MalformedDataError(f"Unexpected move data from {url}"), attempts=fetched.attempts)

async def fetch_pokemon_moves(move_refs: List[PokemonMoveSlot], *, client: httpx.AsyncClient) -> List[Move]:
    """
    Resolves the first moves of a Pokemon, one request at a time.

    A move that cannot be fetched or parsed is replaced by UNKNOWN_MOVE so the
    number of slots never changes.
    """
    urls = [slot.move.url for slot in move_refs[:settings.max_moves_per_pokemon]]

    async def _fetch(url: Optional[str]) -> Result[Move]:
        if not url:
            return Result.failure(MalformedDataError("Move reference without URL"))
        return await fetch_move(url, client=client)

    return await best_effort_map(
        urls,
        _fetch,
        substitute=lambda url, error: UNKNOWN_MOVE,
        delay=settings.request_delay_seconds,
    )

async def fetch_pokemon(pokemon_id: int, *, client: httpx.AsyncClient) -> Result[Pokemon]:
    """Fetches one Pokemon with its moves."""
    fetched = await fetch_pokeapi(f"/pokemon/{pokemon_id}", client=client)
    if not fetched.ok:
        logger.warning(f"Could not fetch base data for Pokémon ID: {pokemon_id} from PokeAPI.")
        return Result.failure(fetched.error, attempts=fetched.attempts)

    try:
        raw = BasePokemon.model_validate(fetched.value)
        if raw.id != pokemon_id:
            raise ValueError(f"payload id {raw.id} does not match the requested id")
        # Built without moves first so bad type labels or stats cost no move requests
        pokemon = parse_pokemon(raw, [])
    except ValueError as e: # ValidationError and unknown type labels included
        logger.warning(f"Unexpected data for Pokémon ID {pokemon_id}: {e}")
        return Result.failure(MalformedDataError(f"Unexpected data for Pokémon ID {pokemon_id}"))

    moves = await fetch_pokemon_moves(raw.moves, client=client)
    return Result.success(pokemon.model_copy(update={"moves": moves}), attempts=fetched.attempts)

async def fetch_pokemon_batch(ids: Sequence[int], *, client: httpx.AsyncClient) -> List[Pokemon]:
    """Fetches a chunk of Pokemon sequentially; failures are left out of the result."""
    return await best_effort_map(
        ids,
        lambda pokemon_id: fetch_pokemon(pokemon_id, client=client),
        delay=settings.request_delay_seconds,
    )

async def fetch_pokemon_list(
    start_id: int = 1, limit: int = 151, *, client: Optional[httpx.AsyncClient] = None
) -> List[Pokemon]:
    """
    Fetches Pokemon start_id .. start_id + limit - 1.

    Chunks of `settings.batch_size` ids are processed one after another to stay
    gentle with PokeAPI. Pokemon that cannot be fetched are skipped, so the
    result may be partial or empty but keeps the id order.

    Raises:
        InvalidRangeError: if the window is invalid. Nothing is requested then.
    """
    validate_range(start_id, limit)
    client = client or await get_client()

    ids = list(range(start_id, start_id + limit))
    all_pokemon: List[Pokemon] = []
    for batch_ids in _chunk(ids, settings.batch_size):
        logger.info(f"Fetching Pokémon batch: IDs {batch_ids[0]} to {batch_ids[-1]}")
        all_pokemon.extend(await fetch_pokemon_batch(batch_ids, client=client))

    logger.info(f"Fetched {len(all_pokemon)} of {limit} Pokémon starting at ID {start_id}.")
    return all_pokemon

async def fetch_generation(generation: int, *, client: Optional[httpx.AsyncClient] = None) -> List[Pokemon]:
    """Fetches the Pokemon window of a generation (1, 2 or 3)."""
    start_id, limit = generation_window(generation)
    return await fetch_pokemon_list(start_id, limit, client=client)

# --- Search & filter ---
def filter_pokemon(
    pokemon: Sequence[Pokemon], search: str = "", type_name: Optional[PokemonTypeName] = None
) -> List[Pokemon]:
    """Case-insensitive name search combined with an optional type filter."""
    term = search.lower()
    return [
        p for p in pokemon
        if term in p.name.lower() and (type_name is None or type_name in p.types)
    ]
