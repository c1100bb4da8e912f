"""Signing pipeline orchestration.

Equivalent to sbom.sh, expressed as an explicit state machine:

    START -> AUTHENTICATED -> PROVISIONED -> SIGNED -> SBOM_GENERATED
          -> ATTESTED -> DONE
          -> ATTESTATION_FAILED

Any fatal stage error moves the machine to FAILED and stops the run.
"""

from typing import Callable, Dict, FrozenSet, Optional, TypeVar

from ..errors import PipelineStateError, StageError
from ..models.pipeline import (
    ImageReference,
    PipelineConfig,
    PipelineResult,
    PipelineState,
    SBOMDocument,
    StageResult,
)
from ..utils.subprocess import CommandRunner
from ..utils.logging import get_logger
from .attestation import CosignAttestor
from .provisioner import ImageProvisioner
from .registry import RegistryAuthenticator
from .sbom import SBOMGenerator
from .signer import CosignSigner, IdentityProvider

logger = get_logger(__name__)

T = TypeVar("T")

TRANSITIONS: Dict[PipelineState, FrozenSet[PipelineState]] = {
    PipelineState.START: frozenset({PipelineState.AUTHENTICATED, PipelineState.FAILED}),
    PipelineState.AUTHENTICATED: frozenset({PipelineState.PROVISIONED, PipelineState.FAILED}),
    PipelineState.PROVISIONED: frozenset({PipelineState.SIGNED, PipelineState.FAILED}),
    PipelineState.SIGNED: frozenset({PipelineState.SBOM_GENERATED, PipelineState.FAILED}),
    PipelineState.SBOM_GENERATED: frozenset(
        {PipelineState.ATTESTED, PipelineState.ATTESTATION_FAILED, PipelineState.FAILED}
    ),
    PipelineState.ATTESTED: frozenset({PipelineState.DONE}),
}


class PipelineOrchestrator:
    """
    Run login, provisioning, signing, SBOM generation and attestation in order.

    Every stage runs only after the previous one succeeded. Attestation is
    the single stage whose failure does not fail the run: the SBOM stays on
    disk and the run ends in ATTESTATION_FAILED.
    """

    def __init__(
        self,
        config: PipelineConfig,
        authenticator: RegistryAuthenticator,
        provisioner: ImageProvisioner,
        signer: CosignSigner,
        sbom_generator: SBOMGenerator,
        attestor: CosignAttestor,
    ):
        self.config = config
        self.authenticator = authenticator
        self.provisioner = provisioner
        self.signer = signer
        self.sbom_generator = sbom_generator
        self.attestor = attestor
        self.state = PipelineState.START
        self.result = PipelineResult(
            image=config.image_reference.full_name,
            registry=config.registry,
        )

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        identity_provider: Optional[IdentityProvider] = None,
        runner: Optional[CommandRunner] = None,
        stream_output: bool = True,
    ) -> "PipelineOrchestrator":
        """
        Wire the default docker/cosign components for a configuration.

        Args:
            config: Pipeline configuration
            identity_provider: Source of signing identities (interactive if None)
            runner: Command runner shared by all components
            stream_output: Show docker build/push/pull output
        """
        return cls(
            config=config,
            authenticator=RegistryAuthenticator(runner=runner),
            provisioner=ImageProvisioner(runner=runner, stream_output=stream_output),
            signer=CosignSigner(identity_provider=identity_provider, runner=runner),
            sbom_generator=SBOMGenerator(output_dir=config.sbom_dir, runner=runner),
            attestor=CosignAttestor(identity_provider=identity_provider, runner=runner),
        )

    def _transition(self, new_state: PipelineState) -> None:
        allowed = TRANSITIONS.get(self.state, frozenset())
        if new_state not in allowed:
            raise PipelineStateError(
                f"Illegal pipeline transition {self.state.value} -> {new_state.value}"
            )
        logger.debug(f"Pipeline state: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.result.state = new_state

    def _run_stage(
        self,
        stage: str,
        title: str,
        action: Callable[[], T],
        success_message: str,
    ) -> T:
        """Run one stage, logging entry and outcome and recording the result."""
        logger.step(title)
        try:
            value = action()
        except StageError as e:
            self.result.stages.append(
                StageResult(stage=stage, success=False, message=e.message, error=e.detail)
            )
            raise
        self.result.stages.append(StageResult(stage=stage, success=True, message=success_message))
        logger.success(success_message)
        return value

    def run(self) -> PipelineResult:
        """
        Execute the pipeline once.

        Returns:
            PipelineResult; its exit_code is the process exit status

        Raises:
            PipelineStateError: If the orchestrator has already run
        """
        if self.state != PipelineState.START:
            raise PipelineStateError("Pipeline has already been run")

        logger.step("Starting Container Signing and SBOM Generation Process")
        try:
            self._execute()
        except StageError as e:
            self._transition(PipelineState.FAILED)
            logger.error(f"{e}. Exiting.")
            return self.result

        logger.step("Process Completed")
        return self.result

    def _execute(self) -> None:
        config = self.config
        image = config.image_reference
        registry = config.registry

        session = self._run_stage(
            "authenticate",
            f"Performing Docker Login for Registry: {registry}",
            lambda: self.authenticator.authenticate(registry),
            f"Docker login successful for {registry}.",
        )
        self._transition(PipelineState.AUTHENTICATED)
        self.authenticator.check_image_registry(image, session)

        if config.build_from_source:
            provisioned = f"Docker image built and pushed successfully: {image.full_name}"
        else:
            provisioned = f"Docker image pulled successfully: {image.full_name}"
        image = self._run_stage(
            "provision",
            f"Preparing Docker Image: {image.full_name}",
            lambda: self.provisioner.provision(config, session),
            provisioned,
        )
        self._transition(PipelineState.PROVISIONED)

        self._run_stage(
            "sign",
            "Signing Docker Image with Cosign (Keyless)",
            lambda: self.signer.sign(image, session),
            "Image signed successfully with Cosign.",
        )
        self._transition(PipelineState.SIGNED)

        sbom = self._run_stage(
            "sbom",
            "Generating SBOM for Image using 'docker scout'",
            lambda: self.sbom_generator.generate(image),
            f"SBOM generated to local file: {self.sbom_generator.output_path(image)}",
        )
        self._record_sbom(sbom)
        self._transition(PipelineState.SBOM_GENERATED)

        self._attest(sbom, image, session)

    def _record_sbom(self, sbom: SBOMDocument) -> None:
        self.result.sbom_file = str(sbom.path)
        self.result.sbom_sha256 = sbom.sha256
        logger.result(f"You can inspect the SBOM file locally using: cat {sbom.path}")

    def _attest(self, sbom: SBOMDocument, image: ImageReference, session) -> None:
        try:
            self._run_stage(
                "attest",
                "Attesting (Signing and Associating) the SBOM File with the Image",
                lambda: self.attestor.attest(sbom, image, session),
                f"SBOM file successfully attested (signed) and associated with image {image.full_name}.",
            )
        except StageError as e:
            if e.fatal:
                raise
            logger.warning(
                f"{e}. The SBOM file still exists locally, but it's not signed "
                "and associated in the registry."
            )
            self._transition(PipelineState.ATTESTATION_FAILED)
            return

        self.result.attested = True
        logger.result(
            f"You can verify this SBOM attestation using: signer-py verify --image-name {image.name} "
            f"--image-tag {image.tag} --certificate-identity <your identity> --attestation"
        )
        self._transition(PipelineState.ATTESTED)
        self._transition(PipelineState.DONE)
