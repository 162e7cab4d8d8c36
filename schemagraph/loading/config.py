"""
Configuration for schema loading sessions.
Handles loading and validation of loader options including:
- Strict vs. flexible issue handling
- Default draft and base URI for documents without them
- Remote document fetching (timeout, retries, on/off)
"""
import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

from schemagraph.keywords.metadata import JsonSchemaVersion

logger = logging.getLogger(__name__)


class LoaderOptions(BaseModel):
    """Options of one loading session."""

    model_config = ConfigDict(frozen=True)

    strict: bool = Field(
        default=False,
        description="Raise on the first ERROR-level issue instead of collecting issues "
                    "and raising when the session is finalized."
    )

    default_version: JsonSchemaVersion = Field(
        default=JsonSchemaVersion.DRAFT6,
        description="Draft used for documents whose $schema names no supported draft"
    )

    default_base_uri: str | None = Field(
        default=None,
        description="URI of documents loaded without one; a unique URI is generated when unset"
    )

    fetch_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout of one remote document request",
        gt=0
    )

    fetch_retries: int = Field(
        default=2,
        description="Retries of a failed remote document request",
        ge=0
    )

    allow_remote_fetch: bool = Field(
        default=True,
        description="Fetch documents that were not preloaded. "
                    "When false, a $ref into an unknown document is unresolvable."
    )

    report_unknown_keywords: bool = Field(
        default=True,
        description="Record keyword.unknown issues for keys no keyword of the draft uses"
    )


def load_options(options_path: str | Path) -> LoaderOptions:
    """
    Load loader options from YAML file.

    Args:
        options_path: Path to options file (YAML format)

    Returns:
        Validated LoaderOptions instance

    Raises:
        FileNotFoundError: If options file doesn't exist
        ValueError: If options validation fails
    """
    options_path = Path(options_path)

    if not options_path.exists():
        raise FileNotFoundError(f"Options file not found: {options_path}")

    try:
        with open(options_path, "r") as f:
            options_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML options: {e}") from e

    if not options_data:
        logger.warning(f"Empty options file at {options_path}, using defaults")
        return get_default_options()

    if not isinstance(options_data, dict):
        raise ValueError(f"Options file {options_path} must hold a mapping")

    if "default_version" in options_data:
        options_data["default_version"] = _parse_version(options_data["default_version"])

    try:
        options = LoaderOptions(**options_data)
    except Exception as e:
        raise ValueError(f"Failed to load options: {e}") from e

    logger.info(f"Loaded loader options from {options_path}")
    logger.info(f"  - Strict: {options.strict}")
    logger.info(f"  - Default draft: {options.default_version.value}")
    logger.info(f"  - Remote fetch: {options.allow_remote_fetch}")

    return options


def get_default_options() -> LoaderOptions:
    """
    Get default loader options.

    Returns:
        LoaderOptions with flexible mode, draft 6 and remote fetching enabled
    """
    return LoaderOptions()


def _parse_version(value: object) -> object:
    """Accept ``6``, ``"6"``, ``"draft6"``, ``"draft-06"`` or a $schema URI."""
    if isinstance(value, str):
        text = value.strip().lower()
        detected = JsonSchemaVersion.from_schema_uri(text)
        if detected is not None:
            return detected
        digits = text.removeprefix("draft").lstrip("-0")
        if digits.isdigit():
            return int(digits)
    return value
