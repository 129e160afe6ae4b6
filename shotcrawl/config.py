"""
Loading and validation of the ShotCrawl run configuration.
Pydantic describes the schema; YAML/JSON files supply optional base values.
"""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, NamedTuple, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

from shotcrawl.exceptions import ConfigError

__all__ = [
    "FILE_TYPES",
    "Resolution",
    "CrawlConfig",
    "parse_resolution",
    "load_config",
    "build_config",
]

FileType = Literal["png", "jpeg", "webp", "pdf"]
FILE_TYPES: tuple[str, ...] = ("png", "jpeg", "webp", "pdf")
WaitUntil = Literal["load", "domcontentloaded", "networkidle"]

_RESOLUTION_RE = re.compile(r"^\s*(\d+)\s*[xX×]\s*(\d+)\s*$")


class Resolution(NamedTuple):
    """Viewport size in CSS pixels."""

    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"

    def as_viewport(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


def parse_resolution(value: Union[str, Resolution, tuple, list, Mapping]) -> Resolution:
    """Parse ``WIDTHxHEIGHT`` (or a pair / mapping) into a :class:`Resolution`."""
    if isinstance(value, Resolution):
        return value
    if isinstance(value, Mapping):
        width, height = value.get("width"), value.get("height")
    elif isinstance(value, (tuple, list)) and len(value) == 2:
        width, height = value
    elif isinstance(value, str):
        match = _RESOLUTION_RE.match(value)
        if not match:
            raise ValueError(f"resolution must look like WIDTHxHEIGHT, got {value!r}")
        width, height = match.groups()
    else:
        raise ValueError(f"unsupported resolution value: {value!r}")
    try:
        res = Resolution(int(width), int(height))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"resolution dimensions must be integers, got {value!r}") from exc
    if res.width <= 0 or res.height <= 0:
        raise ValueError(f"resolution dimensions must be positive, got {res}")
    return res


class CrawlConfig(BaseModel):
    """Configuration of a single crawl run. Immutable once built."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: HttpUrl = Field(..., description="Seed URL; always the first task.")
    resolution: Resolution = Field(Resolution(1920, 1080), description="Viewport WIDTHxHEIGHT.")
    output_dir: Path = Field(Path("./screenshots"), description="Directory for captures.")
    file_type: FileType = Field("png", description="Capture format.")
    max_depth: int = Field(1, ge=1, description="Maximum link depth; the seed is depth 1.")
    max_pages: int = Field(10, ge=1, description="Hard cap on claimed pages.")
    follow_external: bool = Field(False, description="Follow links to other origins.")

    concurrency: int = Field(1, ge=1, description="Number of pages rendered in parallel.")
    render_timeout: float = Field(30.0, gt=0, description="Timeout for one render (seconds).")
    wait_until: WaitUntil = Field("networkidle", description="Navigation readiness event.")
    full_page: bool = Field(False, description="Capture the full scrollable page.")
    traversal: Literal["depth", "breadth"] = Field("depth", description="Expansion order.")
    strip_fragments: bool = Field(True, description="Treat URLs differing only in #fragment as one page.")
    user_agent: Optional[str] = Field(None, min_length=1, description="User-Agent override.")

    @field_validator("resolution", mode="before")
    @classmethod
    def _parse_resolution(cls, v: Any) -> Resolution:
        return parse_resolution(v)

    @field_validator("file_type", mode="before")
    @classmethod
    def _lower_file_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return "jpeg" if v == "jpg" else v
        return v

    @property
    def seed(self) -> str:
        """Seed URL as a plain string."""
        return str(self.url)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path]) -> dict[str, Any]:
    """
    Read base settings from a YAML or JSON file.
    Returns the raw mapping; validation happens in :func:`build_config`.
    """
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise ConfigError(f"Config file not found: {path_obj}")

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ConfigError(f"Unsupported config format: {suffix}")


def build_config(base: Optional[Mapping[str, Any]] = None, **overrides: Any) -> CrawlConfig:
    """
    Merge file values with explicit overrides (``None`` overrides are ignored)
    and validate the result. Any problem surfaces as :class:`ConfigError`.
    """
    data: dict[str, Any] = dict(base or {})
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return CrawlConfig(**data)
    except ValidationError as exc:
        raise ConfigError(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "config"
        parts.append(f"{loc}: {err.get('msg')}")
    return "Invalid configuration: " + "; ".join(parts)
