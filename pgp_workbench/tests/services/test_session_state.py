import pytest

from pgp_workbench.exceptions import UnknownFieldError
from pgp_workbench.models.errors import ClassifiedError, ErrorKind, FieldTag
from pgp_workbench.models.workflow import VerificationResult
from pgp_workbench.services.session_state import SecureSession


@pytest.fixture
def session() -> SecureSession:
    return SecureSession(["private_key", "passphrase", "message"])


def test_new_session_has_empty_fields(session: SecureSession) -> None:
    assert session.field_names == ("private_key", "passphrase", "message")
    assert session.get("message") == ""
    assert session.is_blank("passphrase")
    assert session.is_empty("passphrase")
    assert session.output is None


def test_set_replaces_and_wipes_previous_buffer(session: SecureSession) -> None:
    session.set("passphrase", "first")
    previous = session._fields["passphrase"]

    session.set("passphrase", "second")

    assert previous.is_wiped
    assert session.get("passphrase") == "second"


def test_whitespace_is_blank_but_not_empty(session: SecureSession) -> None:
    session.set("passphrase", "   ")

    assert session.is_blank("passphrase")
    assert not session.is_empty("passphrase")

    session.wipe()

    assert session.is_empty("passphrase")


def test_unknown_field_raises(session: SecureSession) -> None:
    with pytest.raises(UnknownFieldError) as exc_info:
        session.set("nope", "value")

    assert exc_info.value.field == "nope"


def test_borrow_yields_copies_wiped_on_exit(session: SecureSession) -> None:
    session.set("passphrase", "secret")

    with session.borrow("passphrase", "message") as (passphrase, message):
        assert passphrase.text == "secret"
        assert message.is_blank()

    assert passphrase.is_wiped
    assert message.is_wiped
    assert session.get("passphrase") == "secret"


def test_borrow_wipes_copies_on_exception(session: SecureSession) -> None:
    session.set("passphrase", "secret")

    with pytest.raises(ValueError), session.borrow("passphrase") as (passphrase,):
        raise ValueError("boom")

    assert passphrase.is_wiped


def test_output_setter_wipes_previous_output(session: SecureSession) -> None:
    session.output = "first"
    previous = session._output

    session.output = "second"

    assert previous is not None
    assert previous.is_wiped
    assert session.output == "second"


def test_wipe_clears_every_buffer_and_result(session: SecureSession) -> None:
    session.set("private_key", "key text")
    session.set("passphrase", "secret")
    session.output = "plaintext"
    session.verification = VerificationResult(valid=True)
    session.last_error = ClassifiedError(
        kind=ErrorKind.OPERATION_FAILED, field=FieldTag.NONE, message="failed"
    )
    buffers = list(session._fields.values())
    output = session._output

    session.wipe()

    assert all(buffer.is_wiped for buffer in buffers)
    assert output is not None and output.is_wiped
    assert session.output is None
    assert session.verification is None
    assert session.last_error is None
    assert session.derived_key_info is None
    assert session.get("passphrase") == ""


def test_session_context_manager_wipes(session: SecureSession) -> None:
    with session:
        session.set("passphrase", "secret")
        buffer = session._fields["passphrase"]

    assert buffer.is_wiped


def test_snapshot_fields_is_read_only(session: SecureSession) -> None:
    session.set("message", "hello")
    snapshot = session.snapshot_fields()

    assert snapshot["message"] == "hello"
    with pytest.raises(TypeError):
        snapshot["message"] = "changed"  # type: ignore[index]
