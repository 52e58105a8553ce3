# backend/pokebattle/models.py
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class PokemonTypeName(str, Enum):
    """The 18 elemental types, capitalized the way records present them."""
    NORMAL = "Normal"
    FIRE = "Fire"
    WATER = "Water"
    ELECTRIC = "Electric"
    GRASS = "Grass"
    ICE = "Ice"
    FIGHTING = "Fighting"
    POISON = "Poison"
    GROUND = "Ground"
    FLYING = "Flying"
    PSYCHIC = "Psychic"
    BUG = "Bug"
    ROCK = "Rock"
    GHOST = "Ghost"
    DRAGON = "Dragon"
    DARK = "Dark"
    STEEL = "Steel"
    FAIRY = "Fairy"


class MoveCategory(str, Enum):
    """Damage class of a move; picks the attack/defense stat pair."""
    PHYSICAL = "Physical"
    SPECIAL = "Special"
    STATUS = "Status"


# --- Records exposed by the package ---

class PokemonStats(BaseModel):
    """Six base stats, mapped positionally from PokeAPI."""
    model_config = ConfigDict(frozen=True)

    hp: int = Field(..., ge=0)
    attack: int = Field(..., ge=0)
    defense: int = Field(..., ge=0)
    special_attack: int = Field(..., ge=0)
    special_defense: int = Field(..., ge=0)
    speed: int = Field(..., ge=0)


class Move(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="Move ID, 0 is reserved for the unknown placeholder")
    name: str
    type: PokemonTypeName
    power: int = Field(0, ge=0, description="0 means a status / no damage move")
    accuracy: int = Field(100, ge=0, le=100)
    pp: int = Field(0, ge=0)
    category: MoveCategory
    description: str = ""


# Stands in for any move whose data could not be retrieved
UNKNOWN_MOVE = Move(
    id=0,
    name="Unknown Move",
    type=PokemonTypeName.NORMAL,
    power=0,
    accuracy=100,
    pp=0,
    category=MoveCategory.PHYSICAL,
    description="Move data unavailable",
)


class Pokemon(BaseModel):
    """A fully hydrated Pokémon record."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0, description="National Pokédex ID")
    name: str = Field(..., description="Capitalized Pokémon name")
    types: List[PokemonTypeName] = Field(..., min_length=1, max_length=2)
    stats: PokemonStats
    moves: List[Move] = Field(default_factory=list, max_length=4)
    sprite: Optional[str] = Field(None, description="Default front sprite URL")


# --- PokeAPI payload shapes ---
# Only the fields the pipeline reads are declared, extra keys are ignored.

class NamedAPIResource(BaseModel):
    name: str
    url: Optional[str] = None


class PokemonTypeSlot(BaseModel):
    slot: Optional[int] = None
    type: NamedAPIResource


class PokemonStatData(BaseModel):
    base_stat: int
    stat: Optional[NamedAPIResource] = None


class PokemonMoveSlot(BaseModel):
    move: NamedAPIResource


class SpriteData(BaseModel):
    front_default: Optional[str] = None


class BasePokemon(BaseModel):
    """Raw /pokemon/{id} payload."""
    id: int
    name: str
    types: List[PokemonTypeSlot]
    stats: List[PokemonStatData] = Field(..., min_length=6)
    moves: List[PokemonMoveSlot] = []
    sprites: SpriteData = SpriteData()


class EffectEntry(BaseModel):
    effect: Optional[str] = None
    language: Optional[NamedAPIResource] = None


class BaseMove(BaseModel):
    """Raw /move/{id} payload."""
    id: int
    name: str
    type: NamedAPIResource
    power: Optional[int] = None
    accuracy: Optional[int] = None
    pp: Optional[int] = None
    damage_class: NamedAPIResource
    effect_entries: List[EffectEntry] = []


# --- API request bodies ---

class BattleStartRequest(BaseModel):
    """Both combatants, as returned by the Pokémon endpoints."""
    player: Pokemon
    opponent: Pokemon


class MoveRequest(BaseModel):
    move_index: int = Field(..., ge=0, le=3, description="Slot of the move in the player's move list")
