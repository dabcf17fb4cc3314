"""Service settings loaded from the environment.

Environment variables:
    REVIEWER_ENV: Deployment name (default: local)
    REVIEWER_DEBUG: Django debug mode (default: false)
    REVIEWER_SECRET_KEY: Django secret key
    REVIEWER_ALLOWED_HOSTS: JSON list of allowed hosts (default: ["*"])
    REVIEWER_LOG_LEVEL: Root log level (default: INFO)
    REVIEWER_LOG_JSON: Render logs as JSON (default: true)
    REVIEWER_TRANSACTION_TIMEOUT: Unit of work timeout in seconds (default: 30)

    REVIEWER_DB_ENGINE: sqlite or postgresql (default: sqlite)
    REVIEWER_DB_NAME: Database name, or file path for sqlite
    REVIEWER_DB_HOST / REVIEWER_DB_PORT / REVIEWER_DB_USER / REVIEWER_DB_PASSWORD
    REVIEWER_DB_CONN_MAX_AGE: Persistent connection lifetime in seconds
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent

_ENGINES = {
    'sqlite': 'django.db.backends.sqlite3',
    'postgresql': 'django.db.backends.postgresql',
}


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='REVIEWER_DB_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    engine: Literal['sqlite', 'postgresql'] = 'sqlite'
    name: str = Field(default=str(BASE_DIR / 'db.sqlite3'))
    host: str = 'localhost'
    port: int = 5432
    user: str = 'reviewer'
    password: SecretStr = SecretStr('')
    conn_max_age: int = Field(default=0, ge=0)

    def as_django(self) -> dict:
        """Build the entry for Django's DATABASES setting."""
        config = {
            'ENGINE': _ENGINES[self.engine],
            'NAME': self.name,
            'CONN_MAX_AGE': self.conn_max_age,
        }
        if self.engine == 'postgresql':
            config.update({
                'HOST': self.host,
                'PORT': self.port,
                'USER': self.user,
                'PASSWORD': self.password.get_secret_value(),
            })
        return config


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='REVIEWER_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    env: str = 'local'
    debug: bool = False
    secret_key: SecretStr = SecretStr('insecure-local-development-key')
    allowed_hosts: list[str] = Field(default_factory=lambda: ['*'])
    log_level: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR'] = 'INFO'
    log_json: bool = True
    transaction_timeout: float = Field(default=30.0, gt=0)

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


@lru_cache
def get_settings() -> ServiceSettings:
    return ServiceSettings()
