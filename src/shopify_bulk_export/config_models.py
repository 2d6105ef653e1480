"""
Pydantic models for export input and YAML job configuration.

``ExportInput`` / ``ResumeInput`` validate the options passed to
``run_bulk_export`` / ``resume_bulk_export``; ``ExportJobConfig`` validates the
job files read by the ``bulk-export`` command.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

from graphql import DocumentNode
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from shopify_bulk_export.core.errors import InputValidationError
from shopify_bulk_export.core.models import DEFAULT_API_VERSION, DEFAULT_INTERVAL_MS, StoreConfig
from shopify_bulk_export.utils.logging import LOG_LEVELS, is_logger

InputT = TypeVar("InputT", bound="ExportInput")


class StoreInput(BaseModel):
    """Store connection options."""
    name: str = Field(..., min_length=1, description="Store subdomain: <name>.myshopify.com")
    access_token: str = Field(..., min_length=1, description="Admin API access token")
    api_version: str = Field(DEFAULT_API_VERSION, min_length=1, description="Admin API version")

    @field_validator("name", "access_token")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    def to_config(self) -> StoreConfig:
        return StoreConfig(name=self.name, access_token=self.access_token, api_version=self.api_version)


def _validate_logs(v: Any) -> Any:
    if v is None or isinstance(v, bool):
        return bool(v)
    if isinstance(v, str):
        if v.lower() not in LOG_LEVELS:
            raise ValueError(f"logs level must be one of: {', '.join(LOG_LEVELS)}")
        return v.lower()
    if is_logger(v):
        return v
    raise ValueError("logs must be a bool, a level name, or a logger with debug/log/info/error methods")


def _validate_cache(v: Union[bool, str]) -> Union[bool, str]:
    if isinstance(v, str) and not v.strip():
        return True
    return v


class ExportInput(BaseModel):
    """Options for a new bulk export."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    store: StoreInput
    query: Union[str, DocumentNode] = Field(..., description="Query text or parsed document")
    variables: Optional[Dict[str, Any]] = Field(None, description="Values inlined into the query")
    interval: int = Field(DEFAULT_INTERVAL_MS, ge=0, description="Delay between status checks, in ms")
    logs: Any = Field(False, description="False, True, a level name, or a logger")
    cache: Union[bool, str] = Field(True, description="False, True, or a cache directory")
    record_model: Optional[Type[BaseModel]] = Field(None, description="Model each record is validated into")

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v):
        if isinstance(v, str) and not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("logs")
    @classmethod
    def validate_logs(cls, v):
        return _validate_logs(v)

    @field_validator("cache")
    @classmethod
    def validate_cache(cls, v):
        return _validate_cache(v)


class ResumeInput(ExportInput):
    """Options for resuming a bulk operation that was already submitted."""

    operation_id: str = Field(..., min_length=1, description="e.g. gid://shopify/BulkOperation/1234")
    query: Optional[Union[str, DocumentNode]] = Field(
        None, description="Original query; when given, the result is cached under the same key as a run"
    )

    @field_validator("operation_id")
    @classmethod
    def operation_id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


def format_validation_error(e: ValidationError) -> str:
    lines = []
    for error in e.errors():
        field_path = ".".join(str(loc) for loc in error["loc"]) or "input"
        lines.append(f"  {field_path}: {error['msg']}")
    return "Invalid export input:\n" + "\n".join(lines)


def parse_input(model: Type[InputT], options: Union[InputT, Mapping[str, Any], BaseModel, None]) -> InputT:
    """
    Validate ``options`` into ``model``.

    Raises:
        InputValidationError: If anything required is missing or malformed.
    """
    if isinstance(options, model):
        return options
    if isinstance(options, BaseModel):
        options = dict(options)
    if not isinstance(options, Mapping):
        raise InputValidationError("Missing input: expected a mapping of export options")

    try:
        return model.model_validate(dict(options))
    except ValidationError as e:
        raise InputValidationError(format_validation_error(e)) from e


# ---------- YAML job files ----------


class StoreJobConfig(BaseModel):
    """Store section of a job file."""
    name: str = Field(..., min_length=1)
    access_token: Optional[str] = Field(None, description="Inline access token")
    access_token_env: Optional[str] = Field(None, description="Environment variable holding the token")
    api_version: str = Field(DEFAULT_API_VERSION)

    @model_validator(mode="after")
    def validate_token_source(self):
        if not self.access_token and not self.access_token_env:
            raise ValueError("store requires access_token or access_token_env")
        return self

    def resolve_access_token(self) -> str:
        if self.access_token:
            return self.access_token
        token = os.environ.get(self.access_token_env or "", "")
        if not token:
            raise InputValidationError(f"Environment variable {self.access_token_env} is not set")
        return token


class OutputConfig(BaseModel):
    """Where the CLI writes exported records."""
    path: str = Field("output/export.jsonl", description="JSONL output file")


class ScheduleConfig(BaseModel):
    """Configuration for scheduled execution."""
    enabled: bool = Field(False, description="Whether scheduling is enabled")
    interval_hours: int = Field(24, ge=1, le=168, description="Interval between runs in hours")


class ExportJobConfig(BaseModel):
    """Root configuration model for export job files."""
    store: StoreJobConfig
    query: Optional[str] = None
    query_file: Optional[str] = None
    variables: Optional[Dict[str, Any]] = None
    interval: int = Field(DEFAULT_INTERVAL_MS, ge=0)
    logs: Union[bool, str] = "info"
    cache: Union[bool, str] = True
    resume: Optional[str] = Field(None, description="Operation id to resume instead of submitting")
    output: OutputConfig = Field(default_factory=OutputConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)

    @field_validator("logs")
    @classmethod
    def validate_logs(cls, v):
        return _validate_logs(v)

    @model_validator(mode="after")
    def validate_query_source(self):
        if self.query and self.query_file:
            raise ValueError("set only one of query or query_file")
        if not self.resume and not (self.query or self.query_file):
            raise ValueError("query or query_file is required unless resume is set")
        if self.resume and self.schedule.enabled:
            raise ValueError("a resumed export cannot be scheduled")
        return self


def load_and_validate_config(config_path: str) -> ExportJobConfig:
    """
    Load and validate an export job from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the YAML is malformed or fails validation
    """
    import yaml

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")

    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")

    try:
        return ExportJobConfig(**raw_config)
    except ValidationError as e:
        raise ValueError(
            f"Configuration validation failed for {config_path}:\n"
            + format_validation_error(e).split("\n", 1)[1]
        ) from e


def config_to_export_input(config: ExportJobConfig, base_dir: Optional[Path] = None) -> ExportInput:
    """
    Convert a job file into the options for a run, or a resume when ``resume`` is set.

    ``query_file`` is resolved relative to ``base_dir`` (the job file's folder).
    """
    query = config.query
    if config.query_file:
        query_path = Path(config.query_file)
        if not query_path.is_absolute() and base_dir is not None:
            query_path = base_dir / query_path
        query = query_path.read_text(encoding="utf-8")

    options: Dict[str, Any] = {
        "store": {
            "name": config.store.name,
            "access_token": config.store.resolve_access_token(),
            "api_version": config.store.api_version,
        },
        "query": query,
        "variables": config.variables,
        "interval": config.interval,
        "logs": config.logs,
        "cache": config.cache,
    }

    if config.resume:
        options["operation_id"] = config.resume
        return parse_input(ResumeInput, options)
    return parse_input(ExportInput, options)
