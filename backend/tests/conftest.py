# backend/tests/conftest.py

import pytest
import pytest_asyncio

from pokebattle.clients import build_client
from pokebattle.config import settings
from pokebattle.models import Move, MoveCategory, Pokemon, PokemonStats, PokemonTypeName

BASE_URL = "https://pokeapi.co/api/v2"


@pytest.fixture(autouse=True)
def no_delays(monkeypatch):
    """Throttle, backoff and AI thinking time would make the suite crawl."""
    monkeypatch.setattr(settings, "pokeapi_base_url", BASE_URL)
    monkeypatch.setattr(settings, "request_delay_seconds", 0.0)
    monkeypatch.setattr(settings, "retry_backoff_seconds", 0.0)
    monkeypatch.setattr(settings, "ai_think_delay_seconds", 0.0)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def recorded_sleeps(monkeypatch):
    """Restores the default throttle and backoff, recording every wait instead of sleeping."""
    monkeypatch.setattr(settings, "request_delay_seconds", 0.1)
    monkeypatch.setattr(settings, "retry_backoff_seconds", 1.0)
    sleep = RecordingSleep()
    monkeypatch.setattr("pokebattle.resilience.asyncio.sleep", sleep)
    return sleep


@pytest_asyncio.fixture
async def client():
    async with build_client() as c:
        yield c


def move_url(move_id: int) -> str:
    return f"{BASE_URL}/move/{move_id}/"


def pokemon_payload(pokemon_id: int, name: str = None, types=("grass",), move_ids=(1, 2, 3, 4, 5),
                    stats=(45, 49, 49, 65, 65, 45)) -> dict:
    """Trimmed /pokemon/{id} response."""
    return {
        "id": pokemon_id,
        "name": name or f"pokemon-{pokemon_id}",
        "types": [{"slot": i + 1, "type": {"name": t, "url": "..."}} for i, t in enumerate(types)],
        "stats": [{"base_stat": value, "effort": 0, "stat": {"name": "stat", "url": "..."}} for value in stats],
        "moves": [{"move": {"name": f"move-{m}", "url": move_url(m)}} for m in move_ids],
        "sprites": {"front_default": f"https://raw.example/sprites/{pokemon_id}.png"},
    }


def move_payload(move_id: int, name: str = None, type_name: str = "normal", power=40, accuracy=100, pp=35,
                 damage_class: str = "physical", effect: str = "Inflicts regular damage.") -> dict:
    """Trimmed /move/{id} response."""
    return {
        "id": move_id,
        "name": name or f"move-{move_id}",
        "type": {"name": type_name, "url": "..."},
        "power": power,
        "accuracy": accuracy,
        "pp": pp,
        "damage_class": {"name": damage_class, "url": "..."},
        "effect_entries": [{"effect": effect, "language": {"name": "en", "url": "..."}}] if effect else [],
    }


def make_move(move_id: int = 1, name: str = "Tackle", power: int = 40,
              category: MoveCategory = MoveCategory.PHYSICAL) -> Move:
    return Move(id=move_id, name=name, type=PokemonTypeName.NORMAL, power=power, accuracy=100, pp=35,
                category=category)


def make_pokemon(pokemon_id: int = 1, name: str = "Bulbasaur", attack: int = 50, defense: int = 50,
                 special_attack: int = 50, special_defense: int = 50, moves=None) -> Pokemon:
    return Pokemon(
        id=pokemon_id,
        name=name,
        types=[PokemonTypeName.NORMAL],
        stats=PokemonStats(hp=45, attack=attack, defense=defense, special_attack=special_attack,
                           special_defense=special_defense, speed=45),
        moves=moves if moves is not None else [make_move()],
    )
