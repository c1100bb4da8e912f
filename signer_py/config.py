"""Pipeline configuration from environment variables and CLI flags."""

import os
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError
from .models.pipeline import ImageReference, PipelineConfig

DEFAULT_IMAGE_TAG = "latest"

# Environment variables read at process start
ENV_IMAGE_NAME = "IMAGE_NAME"
ENV_IMAGE_TAG = "IMAGE_TAG"
ENV_REGISTRY = "REGISTRY"
ENV_BUILD = "BUILD_IMAGE_FROM_DOCKERFILE"
ENV_BUILD_CONTEXT = "BUILD_CONTEXT"
ENV_DOCKERFILE = "DOCKERFILE"
ENV_SBOM_DIR = "SBOM_OUTPUT_DIR"
ENV_IDENTITY_TOKEN = "SIGSTORE_ID_TOKEN"
ENV_IDENTITY_TOKEN_FILE = "SIGSTORE_ID_TOKEN_FILE"

_TRUE_VALUES = {"true", "1", "yes", "y", "on"}
_FALSE_VALUES = {"false", "0", "no", "n", "off", ""}


def parse_bool(value: Optional[str], name: str = ENV_BUILD) -> bool:
    """
    Parse a boolean flag such as BUILD_IMAGE_FROM_DOCKERFILE.

    Args:
        value: Raw value ("true"/"false" and common spellings)
        name: Variable name used in the error message

    Returns:
        Parsed boolean (unset counts as False)

    Raises:
        ConfigError: If the value is not a recognised boolean
    """
    if value is None:
        return False
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be 'true' or 'false', got {value!r}")


def _pick(overrides: Mapping[str, Any], key: str, env: Mapping[str, str], env_key: str) -> Optional[Any]:
    """CLI value if given, otherwise the environment value."""
    value = overrides.get(key)
    if value is not None:
        return value
    return env.get(env_key)


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> PipelineConfig:
    """
    Build the immutable pipeline configuration.

    Command line values take precedence over environment variables. The
    result is constructed once and passed to every stage.

    Args:
        overrides: Values from the command line (None entries are ignored)
        env: Environment mapping (defaults to os.environ)

    Returns:
        PipelineConfig

    Raises:
        ConfigError: If a required value is missing or malformed
    """
    overrides = overrides or {}
    env = os.environ if env is None else env

    image_name = _pick(overrides, "image_name", env, ENV_IMAGE_NAME)
    if not image_name:
        raise ConfigError(f"Image name is required (--image-name or {ENV_IMAGE_NAME})")

    registry = _pick(overrides, "registry", env, ENV_REGISTRY)
    if not registry:
        raise ConfigError(f"Registry is required (--registry or {ENV_REGISTRY})")

    image_tag = _pick(overrides, "image_tag", env, ENV_IMAGE_TAG) or DEFAULT_IMAGE_TAG

    build = overrides.get("build_from_source")
    if build is None:
        build = parse_bool(env.get(ENV_BUILD), ENV_BUILD)

    settings: Dict[str, Any] = {
        "build_context": _pick(overrides, "build_context", env, ENV_BUILD_CONTEXT) or ".",
        "dockerfile": _pick(overrides, "dockerfile", env, ENV_DOCKERFILE) or "Dockerfile",
        "sbom_dir": _pick(overrides, "sbom_dir", env, ENV_SBOM_DIR) or os.getcwd(),
        "identity_token": _pick(overrides, "identity_token", env, ENV_IDENTITY_TOKEN) or None,
        "identity_token_file": (
            _pick(overrides, "identity_token_file", env, ENV_IDENTITY_TOKEN_FILE) or None
        ),
    }

    return PipelineConfig(
        image_reference=ImageReference(name=image_name, tag=image_tag, registry=registry),
        registry=registry,
        build_from_source=bool(build),
        **settings,
    )
