"""Inspect workflow."""

from datetime import datetime

from pgp_workbench.models.errors import OperationKind
from pgp_workbench.models.keys import ExpiryStatus, KeyInfo
from pgp_workbench.services.key_inspector import (
    days_until_expiry,
    format_fingerprint,
    get_expiry_status,
)
from pgp_workbench.workflows.base import Workflow


class InspectWorkflow(Workflow):
    """
    Show what a key block contains.

    Field: key. Accepts public and private keys; submit() returns the KeyInfo.
    """

    operation = OperationKind.INSPECT
    field_names = ("key",)
    key_field = "key"
    message_field = None

    @property
    def key_info(self) -> KeyInfo | None:
        return self._session.derived_key_info

    @property
    def formatted_fingerprint(self) -> str | None:
        info = self._session.derived_key_info
        return format_fingerprint(info.fingerprint) if info else None

    def expiry_status(self, now: datetime | None = None) -> ExpiryStatus | None:
        info = self._session.derived_key_info
        if info is None:
            return None
        return get_expiry_status(info.expiration_date, now, self._config)

    def days_until_expiry(self, now: datetime | None = None) -> int | None:
        info = self._session.derived_key_info
        if info is None:
            return None
        return days_until_expiry(info.expiration_date, now)

    def _check_key(self, info: KeyInfo) -> None:
        """Public and private keys are both accepted."""

    def _execute(self) -> KeyInfo | None:
        # Validation already produced the result
        return self._session.derived_key_info
