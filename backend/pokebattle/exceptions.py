# backend/pokebattle/exceptions.py


class PokeAPIError(Exception):
    """Base error for anything that went wrong talking to PokeAPI."""


class PokeAPIConnectionError(PokeAPIError):
    """Transport level failure (timeout, DNS, refused connection...)."""


class PokeAPIStatusError(PokeAPIError):
    """PokeAPI answered with a non-success status code."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"HTTP {status_code} for {url}")
        self.url = url
        self.status_code = status_code


class ResourceNotFoundError(PokeAPIStatusError):
    """PokeAPI answered 404."""


class MalformedDataError(PokeAPIError):
    """Response body could not be decoded or does not have the expected shape."""


class InvalidRangeError(ValueError):
    """Requested identifier window is not valid."""


class UnknownGenerationError(ValueError):
    """No identifier window is defined for the requested generation."""


class BattleError(Exception):
    """Base error for battle engine misuse."""


class BattleSetupError(BattleError):
    """A battle cannot be started with the given combatants."""


class IllegalBattleStateError(BattleError):
    """An action was submitted when the battle does not accept it."""


class IllegalMoveError(BattleError):
    """The submitted move does not belong to the acting Pokemon."""


class TeamFullError(Exception):
    """The team roster already holds the maximum number of Pokemon."""
