from __future__ import annotations
import os
from dataclasses import dataclass
from enum import Enum

from dotenv import load_dotenv
from sqlalchemy.engine import URL

from bookshelf.errors import ConfigError

load_dotenv()


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


def which() -> Environment:
    value = os.getenv("APP_ENV", Environment.DEVELOPMENT.value).strip().lower()
    try:
        return Environment(value)
    except ValueError:
        raise ConfigError(f"Unknown APP_ENV {value!r}") from None


@dataclass(frozen=True)
class DatabaseConfig:
    host: str = "localhost"
    port: int = 5432
    username: str = "app"
    password: str = "passwd"
    database: str = "app"

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        port = os.getenv("DATABASE_PORT", str(cls.port))
        if not port.isdigit():
            raise ConfigError(f"DATABASE_PORT must be a number, got {port!r}")
        return cls(
            host=os.getenv("DATABASE_HOST", cls.host),
            port=int(port),
            username=os.getenv("DATABASE_USERNAME", cls.username),
            password=os.getenv("DATABASE_PASSWORD", cls.password),
            database=os.getenv("DATABASE_NAME", cls.database),
        )

    @property
    def url(self) -> URL:
        return URL.create(
            "postgresql+psycopg2",
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )


def database_url() -> str | URL:
    """DATABASE_URL if set, else a URL assembled from the DATABASE_* parts."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return DatabaseConfig.from_env().url
