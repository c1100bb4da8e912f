"""Tests for image provisioning."""

from pathlib import Path

import pytest

from signer_py.core.provisioner import ImageProvisioner
from signer_py.errors import (
    BuildFailureError,
    MissingBuildContextError,
    ProvisionError,
    PullFailureError,
    PushFailureError,
)
from tests.conftest import FakeRunner


def test_pull(runner: FakeRunner, make_config) -> None:
    """Without a build request the image is pulled."""
    config = make_config()
    image = ImageProvisioner(runner=runner).provision(config)

    assert image == config.image_reference
    assert runner.calls == [["docker", "pull", "acme/app:v1"]]


def test_pull_failure(runner: FakeRunner, make_config) -> None:
    """A failed pull raises PullFailureError."""
    runner.fail("docker", "pull", stderr="manifest unknown")

    with pytest.raises(PullFailureError, match="manifest unknown") as exc_info:
        ImageProvisioner(runner=runner).provision(make_config())

    assert isinstance(exc_info.value, ProvisionError)
    assert exc_info.value.stage == "provision"


def test_build_and_push(runner: FakeRunner, make_config, workdir: Path) -> None:
    """A build is followed by a push of the same reference."""
    (workdir / "Dockerfile").write_text("FROM scratch\n")
    config = make_config(build_from_source=True)

    image = ImageProvisioner(runner=runner).provision(config)

    assert image == config.image_reference
    assert runner.calls == [
        ["docker", "build", "-t", "acme/app:v1", "-f", str(workdir / "Dockerfile"), str(workdir)],
        ["docker", "push", "acme/app:v1"],
    ]


def test_build_without_dockerfile(runner: FakeRunner, make_config) -> None:
    """A missing Dockerfile is reported before docker is invoked."""
    config = make_config(build_from_source=True)

    with pytest.raises(MissingBuildContextError, match="Dockerfile not found"):
        ImageProvisioner(runner=runner).provision(config)

    assert not runner.calls


def test_build_failure_skips_push(runner: FakeRunner, make_config, workdir: Path) -> None:
    """A failed build is never pushed."""
    (workdir / "Dockerfile").write_text("FROM scratch\n")
    runner.fail("docker", "build")

    with pytest.raises(BuildFailureError):
        ImageProvisioner(runner=runner).provision(make_config(build_from_source=True))

    assert not runner.called("docker", "push")


def test_push_failure(runner: FakeRunner, make_config, workdir: Path) -> None:
    """A failed push fails the stage after a successful build."""
    (workdir / "Dockerfile").write_text("FROM scratch\n")
    runner.fail("docker", "push", stderr="denied: requested access to the resource is denied")

    with pytest.raises(PushFailureError, match="denied"):
        ImageProvisioner(runner=runner).provision(make_config(build_from_source=True))

    assert runner.called("docker", "build")


def test_custom_dockerfile(runner: FakeRunner, make_config, workdir: Path) -> None:
    """A Dockerfile with another name inside the context is used."""
    (workdir / "Dockerfile.prod").write_text("FROM scratch\n")
    config = make_config(build_from_source=True, dockerfile="Dockerfile.prod")

    ImageProvisioner(runner=runner).provision(config)

    assert runner.find("docker", "build")[5] == str(workdir / "Dockerfile.prod")


@pytest.mark.parametrize(("stream", "captured"), [(True, False), (False, True)])
def test_output_streaming(runner: FakeRunner, make_config, stream: bool, captured: bool) -> None:
    """Docker output is either shown to the user or captured."""
    ImageProvisioner(runner=runner, stream_output=stream).provision(make_config())
    assert runner.kwargs_for("docker", "pull") == {"capture_output": captured}
