from typing import FrozenSet, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    index_dir: str = "./data/skos_index"
    thesaurus_path: Optional[str] = None

    # Comma-separated language codes; empty means every supported language
    index_languages: str = ""
    index_transitive_collections: bool = True
    index_verbose: bool = True

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @property
    def index_language_set(self) -> FrozenSet[str]:
        return frozenset(
            code.strip().lower()
            for code in self.index_languages.split(",")
            if code.strip()
        )


settings = Settings()
