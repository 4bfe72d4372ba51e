"""
Guided PGP operations.

Each workflow owns its inputs in a wipeable session and moves through
IDLE -> VALIDATING -> NEEDS_PASSPHRASE / READY -> RUNNING -> SUCCEEDED / FAILED.
"""

from pgp_workbench.workflows.base import Workflow
from pgp_workbench.workflows.decrypt import DecryptWorkflow
from pgp_workbench.workflows.encrypt import EncryptWorkflow
from pgp_workbench.workflows.inspect import InspectWorkflow
from pgp_workbench.workflows.sign import SignWorkflow
from pgp_workbench.workflows.verify import VerifyWorkflow

__all__ = [
    "Workflow",
    "EncryptWorkflow",
    "DecryptWorkflow",
    "SignWorkflow",
    "VerifyWorkflow",
    "InspectWorkflow",
]
