import pytest

from pgp_workbench.config import WorkbenchConfig
from pgp_workbench.crypto.pgpy_backend import PgpyBackend
from pgp_workbench.models.errors import ClassifiedError, ErrorKind, FieldTag
from pgp_workbench.models.workflow import WorkflowStatus
from pgp_workbench.tests.keys import PASSPHRASE, KeyPair
from pgp_workbench.workflows.decrypt import DecryptWorkflow


def _encrypt_to(key: KeyPair, plaintext: str) -> str:
    backend = PgpyBackend()
    return backend.encrypt(plaintext, [backend.parse_key(key.public)])


@pytest.mark.asyncio
async def test_decrypt_with_protected_key_walks_the_passphrase_step(
    carol_protected: KeyPair,
) -> None:
    workflow = DecryptWorkflow()
    workflow.set_field("private_key", carol_protected.private)
    workflow.set_field("message", _encrypt_to(carol_protected, "Secret plans"))

    await workflow.validate_key()
    assert workflow.status == WorkflowStatus.NEEDS_PASSPHRASE

    workflow.set_field("passphrase", PASSPHRASE)
    result = await workflow.submit()

    assert result == "Secret plans"
    assert workflow.status == WorkflowStatus.SUCCEEDED
    assert workflow.output == "Secret plans"


@pytest.mark.asyncio
async def test_wrong_passphrase_targets_passphrase_field(carol_protected: KeyPair) -> None:
    workflow = DecryptWorkflow()
    workflow.set_field("private_key", carol_protected.private)
    workflow.set_field("passphrase", "not the passphrase")
    workflow.set_field("message", _encrypt_to(carol_protected, "Secret plans"))

    result = await workflow.submit()

    assert isinstance(result, ClassifiedError)
    assert result.kind == ErrorKind.WRONG_PASSPHRASE
    assert result.field == FieldTag.PASSPHRASE
    assert workflow.status == WorkflowStatus.FAILED


@pytest.mark.asyncio
async def test_message_for_another_key_is_operation_failed(alice: KeyPair, bob: KeyPair) -> None:
    workflow = DecryptWorkflow(config=WorkbenchConfig(run_in_thread=False))
    workflow.set_field("private_key", bob.private)
    workflow.set_field("message", _encrypt_to(alice, "for alice"))

    result = await workflow.submit()

    assert isinstance(result, ClassifiedError)
    assert result.kind == ErrorKind.OPERATION_FAILED
    assert result.field == FieldTag.NONE
    assert result.message == "Message was not encrypted to this key"


@pytest.mark.asyncio
async def test_garbage_message_targets_message_field(alice: KeyPair) -> None:
    workflow = DecryptWorkflow()
    workflow.set_field("private_key", alice.private)
    workflow.set_field("message", "this is not armored")

    result = await workflow.submit()

    assert isinstance(result, ClassifiedError)
    assert result.kind == ErrorKind.INVALID_MESSAGE_FORMAT
    assert result.field == FieldTag.MESSAGE


@pytest.mark.asyncio
async def test_surrounding_whitespace_in_armored_fields_is_ignored(alice: KeyPair) -> None:
    workflow = DecryptWorkflow()
    workflow.set_field("private_key", f"\n  {alice.private}  \n")
    workflow.set_field("message", f"\n\n{_encrypt_to(alice, 'padded')}\n\n")

    assert await workflow.submit() == "padded"
