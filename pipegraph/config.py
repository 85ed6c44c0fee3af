from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PIPEGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage Configuration
    graph_storage_path: str = Field(default="graph_data.json")

    # Query Defaults
    default_status: str = Field(default="imported")
    default_mode: str = Field(default="out")
    build_times: str = Field(default="build")
    digits: int = Field(default=3, ge=0)

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/pipegraph.log")

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        return Path(self.log_file).parent

    def ensure_directories(self):
        """Ensure necessary directories exist."""
        if self.log_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)


settings = Settings()
settings.ensure_directories()
