# backend/pokebattle/config.py

import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
# Useful for local development
env_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
load_dotenv(dotenv_path=env_path)

class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_prefix="POKEBATTLE_", env_file_encoding='utf-8')

    # PokeAPI base URL
    pokeapi_base_url: str = "https://pokeapi.co/api/v2"

    # HTTP timeouts in seconds
    request_timeout_seconds: float = 10.0
    connect_timeout_seconds: float = 5.0
    # Requests go out one at a time, so the pool stays small
    max_connections: int = 5
    user_agent: str = "pokebattle/0.1.0"

    # --- Fetch pipeline ---
    # Identifiers are fetched in chunks of this size, one chunk at a time
    batch_size: int = 10
    # Fixed throttle before every single upstream request
    request_delay_seconds: float = 0.1
    # Total attempts per request (first try included)
    max_fetch_attempts: int = 3
    # Linear backoff: wait retry_backoff_seconds * attempt_number between attempts
    retry_backoff_seconds: float = 1.0
    # Only the first N declared moves of a Pokemon are resolved
    max_moves_per_pokemon: int = 4

    # --- Battle engine ---
    # Nominal HP pool both sides start with (independent of the hp base stat)
    battle_starting_hp: int = 100
    battle_level: int = 50
    # Opponent "thinking time" before its automated reply
    ai_think_delay_seconds: float = 1.0
    # Battles kept in memory by the API; finished ones are evicted first
    max_battles: int = 100

    log_level: str = "INFO"


# Create a single instance of the settings to be imported in other modules
settings = Settings()
