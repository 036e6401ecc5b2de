import os
from pathlib import Path
from typing import Any, List, Literal, Optional

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dentaku.dentaku_datatypes import ConfigurationError
from dentaku.dentaku_printer import RADIX_FORMATS

CONFIG_ENV_VAR = "DENTAKU_CONFIG"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class DentakuConfig(BaseSettings):
    """Session settings read from a YAML file.

    print_base:     initial `.printBase` (2, 8, 10 or 16)
    prelude:        lines evaluated once when a runner starts
    log_level:      level name handed to logging.basicConfig
    warn_unparsed:  report trailing text the parser did not consume

    Each field can also come from a DENTAKU_<FIELD> environment variable;
    values from the file win over the environment.
    """
    print_base: int = 10
    prelude: List[str] = Field(default_factory=list)
    log_level: LogLevel = "WARNING"
    warn_unparsed: bool = True

    model_config = SettingsConfigDict(env_prefix="DENTAKU_", extra="ignore")

    @field_validator("print_base", mode="before")
    @classmethod
    def _reject_bool_base(cls, v: Any) -> Any:
        # bool is a subclass of int
        if isinstance(v, bool):
            raise ValueError("print_base must be an integer")
        return v

    @field_validator("print_base")
    @classmethod
    def _check_radix(cls, v: int) -> int:
        if v not in RADIX_FORMATS:
            raise ValueError(f"unsupported print_base: {v} (use one of {sorted(RADIX_FORMATS)})")
        return v

    @field_validator("prelude", mode="before")
    @classmethod
    def _split_prelude(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return v.splitlines()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @classmethod
    def from_mapping(cls, data: Any) -> 'DentakuConfig':
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"config must be a mapping, not {type(data).__name__}", data)
        try:
            return cls(**{str(k): v for k, v in data.items()})
        except ValidationError as e:
            raise ConfigurationError(f"invalid config: {e}", data) from e


def load_config(path: Optional[str] = None) -> DentakuConfig:
    """Loads settings from path, or from $DENTAKU_CONFIG; defaults when neither is set."""
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return DentakuConfig.from_mapping(None)
    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigurationError(f"config file not found: {p}", str(p))
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {p}: {e}", str(p)) from e
    return DentakuConfig.from_mapping(data)
