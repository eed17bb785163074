# httpload/config.py
import logging
import os
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from httpload import settings
from httpload.errors import ConfigError

logger = logging.getLogger(__name__)


class TestConfig(BaseModel):
    """
    One load test as described by a YAML file. Keys use the camelCase
    names of the file format (dataFile, outputFile, captureResult, ...),
    python code can pass the snake_case field names as well.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    # not collected by pytest despite the name
    __test__ = False

    url: str
    method: str = settings.DEFAULT_METHOD
    headers: Dict[str, str] = Field(default_factory=dict)
    data: List[str] = Field(default_factory=list)
    data_file: Optional[str] = Field(default=None, alias="dataFile")
    output_file: Optional[str] = Field(default=None, alias="outputFile")
    repeats: int = Field(default=settings.DEFAULT_REPEATS, ge=0)
    concurrency: int = Field(default=settings.DEFAULT_CONCURRENCY, ge=1)
    delay: int = Field(default=settings.DEFAULT_DELAY_MS, ge=0)
    capture_result: str = Field(default=settings.CAPTURE_NONE, alias="captureResult")
    post_data_format: str = Field(default=settings.FORMAT_RAW, alias="postDataFormat")
    post_body: str = Field(default="", alias="postBody")

    @field_validator("method", mode="before")
    @classmethod
    def _method(cls, v):
        return v or settings.DEFAULT_METHOD

    @field_validator("data", mode="before")
    @classmethod
    def _data(cls, v):
        # yaml turns bare numbers into ints, rows are always text
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError(f"data must be a list of rows, got {type(v).__name__}")
        return [str(row) for row in v]

    @field_validator("headers", mode="before")
    @classmethod
    def _headers(cls, v):
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError(f"headers must be a mapping, got {type(v).__name__}")
        return {str(k): str(val) for k, val in v.items()}

    @field_validator("capture_result", "post_data_format", mode="before")
    @classmethod
    def _lower(cls, v):
        return str(v or "").strip().lower()

    @field_validator("post_body", mode="before")
    @classmethod
    def _body(cls, v):
        return "" if v is None else str(v)


def _resolve(path: Optional[str], base_dir: str) -> Optional[str]:
    if not path or os.path.isabs(path):
        return path
    return os.path.join(base_dir, path)


def load_config(config_file: str) -> TestConfig:
    """Read a YAML config; dataFile/outputFile are made relative to its directory."""
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"error opening config file: {e}") from e
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigError(f"error decoding config: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"error decoding config: expected a mapping, got {type(raw).__name__}")

    try:
        config = TestConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"error decoding config: {e}") from e

    base_dir = os.path.dirname(os.path.abspath(config_file))
    config = config.model_copy(update={
        "data_file": _resolve(config.data_file, base_dir),
        "output_file": _resolve(config.output_file, base_dir),
    })
    logger.debug("loaded %s: %s %s", config_file, config.method, config.url)
    return config


def load_data(config: TestConfig) -> List[str]:
    """Inline data rows followed by the non-blank, stripped lines of dataFile."""
    data = list(config.data)
    if config.data_file:
        try:
            with open(config.data_file, "r") as f:
                for line in f:
                    text = line.strip()
                    if text:
                        data.append(text)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"error reading data file: {e}") from e
    return data
