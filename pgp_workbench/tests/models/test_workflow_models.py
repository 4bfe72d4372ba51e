from types import MappingProxyType

from pgp_workbench.models.errors import ClassifiedError, ErrorKind, FieldTag, OperationKind
from pgp_workbench.models.workflow import VerificationResult, WorkflowState, WorkflowStatus


def test_workflow_state_defaults_to_empty_snapshot() -> None:
    state = WorkflowState(operation=OperationKind.SIGN, status=WorkflowStatus.IDLE)

    assert dict(state.fields) == {}
    assert state.output is None
    assert state.last_error is None
    assert not state.is_busy
    assert not state.needs_passphrase


def test_workflow_state_fields_are_read_only() -> None:
    state = WorkflowState(
        operation=OperationKind.SIGN,
        status=WorkflowStatus.READY,
        fields=MappingProxyType({"message": "hi"}),
    )

    assert state.fields["message"] == "hi"
    assert isinstance(state.fields, MappingProxyType)


def test_invalid_verification_result_carries_error() -> None:
    result = VerificationResult(valid=False, error="Signature does not match the message")

    assert not result.valid
    assert result.signed_by is None
    assert result.error


def test_field_tags_use_input_names() -> None:
    error = ClassifiedError(
        kind=ErrorKind.WRONG_PASSPHRASE,
        field=FieldTag.PASSPHRASE,
        message="Incorrect passphrase.",
    )

    assert error.field == "passphrase"
    assert FieldTag.PRIVATE_KEY == "privateKey"
    assert FieldTag.PUBLIC_KEY == "publicKey"
    assert ErrorKind.INVALID_KEY_FORMAT == "InvalidKeyFormat"
