"""Tests for building the pipeline configuration."""

from pathlib import Path

import pytest

from signer_py.config import load_config, parse_bool
from signer_py.errors import ConfigError

BASE_ENV = {
    "IMAGE_NAME": "acme/app",
    "IMAGE_TAG": "v1",
    "REGISTRY": "docker.io",
    "BUILD_IMAGE_FROM_DOCKERFILE": "false",
}


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("true", True),
        ("TRUE", True),
        (" yes ", True),
        ("1", True),
        ("false", False),
        ("False", False),
        ("0", False),
        ("", False),
        (None, False),
    ],
)
def test_parse_bool(value, expected: bool) -> None:
    """Boolean flags accept the usual spellings."""
    assert parse_bool(value) is expected


def test_parse_bool_rejects_garbage() -> None:
    """An unrecognised value is a configuration error, not a silent false."""
    with pytest.raises(ConfigError, match="BUILD_IMAGE_FROM_DOCKERFILE"):
        parse_bool("maybe")


def test_load_config_from_environment(tmp_path: Path) -> None:
    """All values can come from the environment."""
    env = dict(BASE_ENV, SBOM_OUTPUT_DIR=str(tmp_path))
    config = load_config(env=env)

    assert config.image_reference.full_name == "acme/app:v1"
    assert config.image_reference.registry == "docker.io"
    assert config.registry == "docker.io"
    assert config.build_from_source is False
    assert config.build_context == "."
    assert config.dockerfile == "Dockerfile"
    assert config.sbom_dir == str(tmp_path)
    assert config.identity_token is None


def test_load_config_defaults_tag_to_latest() -> None:
    """IMAGE_TAG is optional."""
    env = {"IMAGE_NAME": "acme/app", "REGISTRY": "docker.io"}
    config = load_config(env=env)

    assert config.image_reference.tag == "latest"
    assert config.build_from_source is False


def test_load_config_sbom_dir_defaults_to_cwd(workdir: Path) -> None:
    """The SBOM lands in the working directory unless told otherwise."""
    config = load_config(env=BASE_ENV)
    assert Path(config.sbom_dir).resolve() == workdir.resolve()


def test_load_config_cli_overrides_environment() -> None:
    """Command line values win over the environment; None means 'not given'."""
    overrides = {
        "image_name": "ghcr.io/acme/other",
        "image_tag": None,
        "registry": "ghcr.io",
        "build_from_source": True,
        "identity_token": "token-from-cli",
    }
    config = load_config(overrides, env=BASE_ENV)

    assert config.image_reference.full_name == "ghcr.io/acme/other:v1"
    assert config.registry == "ghcr.io"
    assert config.build_from_source is True
    assert config.identity_token == "token-from-cli"


def test_load_config_pull_flag_overrides_build_env() -> None:
    """--pull (False) beats BUILD_IMAGE_FROM_DOCKERFILE=true."""
    env = dict(BASE_ENV, BUILD_IMAGE_FROM_DOCKERFILE="true")

    assert load_config(env=env).build_from_source is True
    assert load_config({"build_from_source": False}, env=env).build_from_source is False


@pytest.mark.parametrize(
    ("missing", "message"),
    [
        pytest.param("IMAGE_NAME", "Image name is required", id="no image name"),
        pytest.param("REGISTRY", "Registry is required", id="no registry"),
    ],
)
def test_load_config_requires_values(missing: str, message: str) -> None:
    """Required settings must be present."""
    env = {key: value for key, value in BASE_ENV.items() if key != missing}
    with pytest.raises(ConfigError, match=message):
        load_config(env=env)


def test_load_config_rejects_bad_build_flag() -> None:
    """A malformed build flag stops the run before any stage."""
    env = dict(BASE_ENV, BUILD_IMAGE_FROM_DOCKERFILE="sometimes")
    with pytest.raises(ConfigError):
        load_config(env=env)


def test_load_config_token_file() -> None:
    """A token file may be configured instead of a token."""
    env = dict(BASE_ENV, SIGSTORE_ID_TOKEN_FILE="/var/run/sigstore/token")
    config = load_config(env=env)

    assert config.identity_token is None
    assert config.identity_token_file == "/var/run/sigstore/token"
