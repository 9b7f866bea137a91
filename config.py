from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent / ".env"


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 27017
    db_name: str = "tronics"
    product_collection: str = "products"
    users_collection: str = "users"

    host: str = "0.0.0.0"
    port: int = 8080

    jwt_token_secret: str = "devsecret"
    token_expire_minutes: int = 15
    bcrypt_rounds: int = 12

    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

    @property
    def mongo_uri(self) -> str:
        return f"mongodb://{self.db_host}:{self.db_port}"
