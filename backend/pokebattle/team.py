# backend/pokebattle/team.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List

from .exceptions import TeamFullError
from .models import Pokemon

MAX_TEAM_SIZE = 6


class Team(BaseModel):
    """Roster of up to six Pokémon, in slot order. The same Pokémon may appear twice."""
    model_config = ConfigDict(frozen=True)

    members: List[Pokemon] = Field(default_factory=list, max_length=MAX_TEAM_SIZE)

    @property
    def is_full(self) -> bool:
        return len(self.members) >= MAX_TEAM_SIZE


def add_to_team(team: Team, pokemon: Pokemon) -> Team:
    if team.is_full:
        raise TeamFullError(f"A team holds at most {MAX_TEAM_SIZE} Pokémon")
    return Team(members=[*team.members, pokemon])


def remove_from_team(team: Team, index: int) -> Team:
    """Removes the Pokémon in slot `index`; later slots shift left."""
    if not 0 <= index < len(team.members):
        raise IndexError(f"No Pokémon in team slot {index}")
    return Team(members=[p for i, p in enumerate(team.members) if i != index])
