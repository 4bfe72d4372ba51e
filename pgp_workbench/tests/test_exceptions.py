from pgp_workbench.exceptions import (
    CryptoError,
    KeyFormatError,
    MissingInputError,
    PassphraseError,
    PassphraseRequiredError,
    PGPWorkbenchError,
    UnknownFieldError,
    WorkflowError,
    WrongPassphraseError,
)


def test_pgp_workbench_error_str_without_context() -> None:
    error = PGPWorkbenchError("Something failed")

    assert str(error) == "Something failed"


def test_pgp_workbench_error_str_with_context() -> None:
    error = PGPWorkbenchError("Failed", key_id="abcd", attempt=3)

    assert "Failed" in str(error)
    assert "key_id='abcd'" in str(error)
    assert "attempt=3" in str(error)


def test_key_format_error_keeps_expected_key_type() -> None:
    error = KeyFormatError("A private key is required", expected="private")

    assert error.expected == "private"
    assert error.message == "A private key is required"
    assert isinstance(error, CryptoError)


def test_passphrase_errors_share_a_parent() -> None:
    assert issubclass(WrongPassphraseError, PassphraseError)
    assert issubclass(PassphraseRequiredError, PassphraseError)


def test_passphrase_required_error_has_default_message() -> None:
    error = PassphraseRequiredError()

    assert "Passphrase required" in str(error)


def test_workflow_errors_carry_their_subject() -> None:
    missing = MissingInputError("A message is required.", input_name="message")
    unknown = UnknownFieldError("Unknown field: nope", field="nope")

    assert missing.input_name == "message"
    assert unknown.field == "nope"
    assert isinstance(missing, WorkflowError)
    assert isinstance(unknown, WorkflowError)
