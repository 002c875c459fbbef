"""Application and rubric configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from opic_evaluator.assessment.lexicon import Lexicon
from opic_evaluator.models.level import Level


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class RubricWeights(BaseModel):
    """Weights of the rubric total score; they must sum to 1."""

    model_config = ConfigDict(frozen=True)

    fluency: float = 0.16
    completion: float = 0.22
    cohesion: float = 0.20
    lexical: float = 0.18
    grammar: float = 0.14
    volume: float = 0.10

    @model_validator(mode="after")
    def _check_sum(self) -> "RubricWeights":
        total = sum(self.model_dump().values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Rubric weights must sum to 1.0, got {total:.4f}")
        return self


class RubricPenalties(BaseModel):
    """Deductions applied after the weighted sum."""

    model_config = ConfigDict(frozen=True)

    repetition: float = Field(default=0.06, ge=0)
    long_sentence: float = Field(default=0.03, ge=0)
    long_sentence_words: float = Field(default=18.0, gt=0)


class LevelThreshold(BaseModel):
    """Minimum total score required for a base level."""

    model_config = ConfigDict(frozen=True)

    threshold: float = Field(ge=0, le=1)
    level: Level


DEFAULT_THRESHOLDS: tuple[LevelThreshold, ...] = (
    LevelThreshold(threshold=0.95, level=Level.AL),
    LevelThreshold(threshold=0.90, level=Level.IH),
    LevelThreshold(threshold=0.85, level=Level.IM3),
    LevelThreshold(threshold=0.80, level=Level.IM2),
    LevelThreshold(threshold=0.66, level=Level.IM1),
    LevelThreshold(threshold=0.56, level=Level.IL),
    LevelThreshold(threshold=0.42, level=Level.NH),
    LevelThreshold(threshold=0.24, level=Level.NM),
)


class RubricConfig(BaseModel):
    """Tunable rubric: weights, penalties, score-to-level table and word lists.

    Rubric strictness is expressed entirely through this object. Thresholds
    are kept sorted from highest to lowest regardless of input order.
    """

    model_config = ConfigDict(frozen=True)

    weights: RubricWeights = Field(default_factory=RubricWeights)
    penalties: RubricPenalties = Field(default_factory=RubricPenalties)
    thresholds: tuple[LevelThreshold, ...] = DEFAULT_THRESHOLDS
    lexicon: Lexicon = Field(default_factory=Lexicon)

    @field_validator("thresholds")
    @classmethod
    def _sort_thresholds(
        cls, value: tuple[LevelThreshold, ...]
    ) -> tuple[LevelThreshold, ...]:
        levels = [t.level for t in value]
        if len(set(levels)) != len(levels):
            raise ValueError("Each level may appear only once in the threshold table")
        return tuple(sorted(value, key=lambda t: t.threshold, reverse=True))


def load_rubric(path: Path | str | None = None) -> RubricConfig:
    """Load a rubric from YAML, falling back to the built-in defaults.

    Args:
        path: YAML file with optional ``weights``, ``penalties``,
            ``thresholds`` (mapping of level id to score or list of pairs)
            and ``lexicon`` sections.

    Returns:
        Validated RubricConfig.
    """
    if path is None:
        return RubricConfig()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rubric file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    rubric = data.get("rubric", data)
    thresholds = rubric.get("thresholds")
    if isinstance(thresholds, dict):
        rubric = {
            **rubric,
            "thresholds": [
                {"level": level, "threshold": score} for level, score in thresholds.items()
            ],
        }
    return RubricConfig.model_validate(rubric)


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        server = data.get('server') or {}
        evaluation = data.get('evaluation') or {}
        storage = data.get('storage') or {}
        flattened = {
            'host': server.get('host'),
            'port': server.get('port'),
            'rubric_path': evaluation.get('rubric_path'),
            'collapse_novice_bands': evaluation.get('collapse_novice_bands'),
            'data_dir': storage.get('data_dir'),
        }

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Evaluation
    rubric_path: Path | None = Field(default=None)
    collapse_novice_bands: bool = Field(default=False)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)
    data_dir: Path | None = Field(default=None)

    @property
    def storage_dir(self) -> Path:
        d = self.data_dir or self.project_root / "data"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def resolved_rubric_path(self) -> Path | None:
        if self.rubric_path is None or self.rubric_path.is_absolute():
            return self.rubric_path
        return self.project_root / self.rubric_path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()


@functools.lru_cache
def get_rubric() -> RubricConfig:
    """Rubric configured in settings, loaded once."""
    return load_rubric(get_settings().resolved_rubric_path)
