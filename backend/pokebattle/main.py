# backend/pokebattle/main.py

from fastapi import FastAPI, HTTPException, Path, Query, Request, status
from contextlib import asynccontextmanager
import logging
import uuid
from typing import Any, Dict, List, Optional

from .battle import BattleArena
from .clients import get_client, close_client
from .config import settings
from .exceptions import BattleError, BattleSetupError, InvalidRangeError, UnknownGenerationError
from .models import BattleStartRequest, MoveRequest, Pokemon, PokemonTypeName
from .pokedex_data import fetch_generation, fetch_pokemon_list, filter_pokemon

# Configure logging
logger = logging.getLogger(__name__)
logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup phase
    logger.info("Application startup...")
    await get_client() # Ensures client is created
    logger.info("PokeAPI HTTPX client initialized.")

    yield # Application runs here

    # Shutdown phase
    logger.info("Application shutdown...")
    await close_client()
    logger.info("Resources cleaned up.")

app = FastAPI(
    title="Pokébattle API",
    description="Team builder and battle simulator backed by PokeAPI",
    version="1.0.0",
    lifespan=lifespan,
)

# In-memory battle registry, battle id -> arena
app.state.battles = {}


def _get_arena(request: Request, battle_id: str) -> BattleArena:
    arena = request.app.state.battles.get(battle_id)
    if arena is None:
        raise HTTPException(status_code=404, detail=f"Battle '{battle_id}' not found.")
    return arena

def _register_battle(battles: Dict[str, BattleArena], battle_id: str, arena: BattleArena) -> None:
    """Stores a new arena, making room once `settings.max_battles` is reached."""
    while len(battles) >= settings.max_battles:
        finished = [bid for bid, a in battles.items() if a.session is not None and a.session.is_over]
        # Dicts keep insertion order, so the first key is the oldest battle
        evicted_id = finished[0] if finished else next(iter(battles))
        logger.info(f"Evicting battle {evicted_id} from the registry")
        battles.pop(evicted_id).cancel_pending()
    battles[battle_id] = arena

def _battle_state(battle_id: str, arena: BattleArena) -> Dict[str, Any]:
    return {"id": battle_id, **arena.session.model_dump(mode="json")}


# --- API Endpoints ---

@app.get("/")
async def read_root():
    """ Basic root endpoint to check if the API is running. """
    return {
        "message": "Welcome to the Pokébattle API!",
        "documentation": "/docs",
    }

@app.get(
    "/api/pokemon",
    response_model=List[Pokemon],
    summary="List Pokémon in an ID window",
    description="Fetches Pokémon start_id .. start_id+limit-1 from PokeAPI. Pokémon that cannot be fetched are left out.",
    tags=["Pokedex"]
)
async def list_pokemon(
    start_id: int = Query(1, description="First National Pokédex ID"),
    limit: int = Query(151, description="Number of IDs to fetch"),
    search: str = Query("", description="Case-insensitive name filter"),
    type: Optional[PokemonTypeName] = Query(None, description="Only Pokémon with this type"),
):
    logger.info(f"Received request for Pokémon list: start_id={start_id}, limit={limit}")
    try:
        pokemon = await fetch_pokemon_list(start_id, limit)
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return filter_pokemon(pokemon, search, type)

@app.get(
    "/api/generations/{generation}/pokemon",
    response_model=List[Pokemon],
    summary="List Pokémon of a generation",
    tags=["Pokedex"]
)
async def list_generation(
    generation: int = Path(..., description="Generation number (1-3)"),
    search: str = Query("", description="Case-insensitive name filter"),
    type: Optional[PokemonTypeName] = Query(None, description="Only Pokémon with this type"),
):
    logger.info(f"Received request for generation {generation}")
    try:
        pokemon = await fetch_generation(generation)
    except UnknownGenerationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return filter_pokemon(pokemon, search, type)

@app.get("/api/types", response_model=List[str], summary="List all Pokémon types", tags=["Metadata"])
async def get_types():
    return [t.value for t in PokemonTypeName]

@app.post("/api/battles", status_code=status.HTTP_201_CREATED, summary="Start a battle", tags=["Battle"])
async def create_battle(payload: BattleStartRequest, request: Request):
    arena = BattleArena()
    try:
        arena.select_player(payload.player)
        arena.select_opponent(payload.opponent)
    except BattleSetupError as e:
        raise HTTPException(status_code=422, detail=str(e))
    battle_id = uuid.uuid4().hex
    _register_battle(request.app.state.battles, battle_id, arena)
    logger.info(f"Battle {battle_id} created: {payload.player.name} vs {payload.opponent.name}")
    return _battle_state(battle_id, arena)

@app.get("/api/battles/{battle_id}", summary="Read battle state", tags=["Battle"])
async def get_battle(battle_id: str, request: Request):
    return _battle_state(battle_id, _get_arena(request, battle_id))

@app.post("/api/battles/{battle_id}/moves", summary="Submit the player's move", tags=["Battle"])
async def submit_move(
    battle_id: str,
    payload: MoveRequest,
    request: Request,
    wait: bool = Query(False, description="Wait for the opponent's reply before answering"),
):
    arena = _get_arena(request, battle_id)
    moves = arena.session.player.moves
    if payload.move_index >= len(moves):
        raise HTTPException(status_code=409, detail=f"No move in slot {payload.move_index}.")
    try:
        await arena.submit_move(moves[payload.move_index])
    except BattleError as e:
        logger.warning(f"Rejected move for battle {battle_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if wait:
        await arena.wait_for_opponent()
    return _battle_state(battle_id, arena)
