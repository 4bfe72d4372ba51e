"""
PGP workbench facade.

This is the main entry point for users of the library. It creates workflows
that share one backend, inspector and classifier, and wipes all of them when
it is closed.
"""

import asyncio
from typing import Self, TypeVar

import structlog

from pgp_workbench.config import WorkbenchConfig
from pgp_workbench.crypto.pgpy_backend import PgpyBackend
from pgp_workbench.crypto.protocol import PGPBackend
from pgp_workbench.models.errors import ClassifiedError
from pgp_workbench.models.keys import KeyInfo
from pgp_workbench.services.error_classifier import ErrorClassifier
from pgp_workbench.services.key_inspector import KeyInspector
from pgp_workbench.workflows.base import Workflow
from pgp_workbench.workflows.decrypt import DecryptWorkflow
from pgp_workbench.workflows.encrypt import EncryptWorkflow
from pgp_workbench.workflows.inspect import InspectWorkflow
from pgp_workbench.workflows.sign import SignWorkflow
from pgp_workbench.workflows.verify import VerifyWorkflow

logger = structlog.get_logger(__name__)

W = TypeVar("W", bound=Workflow)


class PGPWorkbench:
    """
    Factory and owner of PGP workflows.

    Example:
        ```python
        async with PGPWorkbench() as workbench:
            decrypt = workbench.decrypt()
            decrypt.set_field("private_key", armored_private_key)
            decrypt.set_field("message", armored_message)

            await decrypt.validate_key()
            if decrypt.needs_passphrase:
                decrypt.set_field("passphrase", "correct horse")

            result = await decrypt.submit()
        # every workflow is wiped here
        ```

    Args:
        config: Workbench configuration. Uses defaults if not provided.
        backend: PGP backend. Uses PgpyBackend if not provided.
    """

    def __init__(
        self,
        config: WorkbenchConfig | None = None,
        backend: PGPBackend | None = None,
    ) -> None:
        self._config = config or WorkbenchConfig()
        self._backend = backend or PgpyBackend()
        self._classifier = ErrorClassifier()
        self._inspector = KeyInspector(self._config, self._classifier)
        self._workflows: list[Workflow] = []
        self._lock = asyncio.Lock()
        self._closed = False

    async def __aenter__(self) -> Self:
        """Enter async context."""
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    @property
    def config(self) -> WorkbenchConfig:
        return self._config

    @property
    def inspector(self) -> KeyInspector:
        return self._inspector

    @property
    def is_closed(self) -> bool:
        return self._closed

    def inspect_key(self, armored_text: str) -> KeyInfo | ClassifiedError:
        """Inspect a key block without creating a workflow."""
        return self._inspector.inspect(armored_text)

    def encrypt(self) -> EncryptWorkflow:
        return self._create(EncryptWorkflow)

    def decrypt(self) -> DecryptWorkflow:
        return self._create(DecryptWorkflow)

    def sign(self) -> SignWorkflow:
        return self._create(SignWorkflow)

    def verify(self) -> VerifyWorkflow:
        return self._create(VerifyWorkflow)

    def inspect(self) -> InspectWorkflow:
        return self._create(InspectWorkflow)

    async def close(self) -> None:
        """Wipe every workflow created by this workbench."""
        async with self._lock:
            for workflow in self._workflows:
                workflow.clear_all()
            logger.debug("Workbench closed", workflows=len(self._workflows))
            self._workflows.clear()
            self._closed = True

    def _create(self, workflow_type: type[W]) -> W:
        if self._closed:
            msg = "Workbench is closed"
            raise RuntimeError(msg)
        workflow = workflow_type(
            self._backend,
            config=self._config,
            inspector=self._inspector,
            classifier=self._classifier,
        )
        self._workflows.append(workflow)
        logger.debug("Workflow created", operation=str(workflow.operation))
        return workflow
