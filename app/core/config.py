"""
Parrot-Bot Configuration Module
"""
from typing import Annotated, List
from pydantic_settings import BaseSettings, NoDecode
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Bot Configuration
    BOT_TOKEN: str = Field(..., description="Telegram Bot Token")
    ADMIN_IDS: Annotated[List[int], NoDecode] = Field(default=[], description="List of admin Telegram IDs")

    @field_validator("ADMIN_IDS", mode="before")
    def parse_admin_ids(cls, v):
        if isinstance(v, int):
            return [v]
        if isinstance(v, str):
            if v.strip() == "":
                return []
            return [int(x.strip()) for x in v.split(",")]
        return v

    # Database (in-memory by default, records live as long as the process)
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="Database connection string"
    )

    # Jokes
    JOKE_API_URL: str = Field(
        default="https://v2.jokeapi.dev/joke/Programming,Miscellaneous,Pun?safe-mode&type=single,twopart",
        description="JokeAPI endpoint for random jokes"
    )
    JOKE_API_TIMEOUT: float = Field(default=10.0, description="JokeAPI request timeout in seconds")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FILE: str = Field(default="logs/bot.log", description="Log file path")

    # Application
    APP_NAME: str = Field(default="Parrot-Bot", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
