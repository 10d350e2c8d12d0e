"""
Integration tests for LedgerService.

Wires the service from settings with connection profiles and wallets on disk,
an in-process certificate authority and a mocked ledger network, and checks
the structured responses seen by an external caller.
"""

import json

import pytest

from ledgergate.api.schemas import RegisterUserRequest
from ledgergate.config.settings import TestingSettings
from ledgergate.core.exceptions import ConfigurationError
from ledgergate.service import LedgerService


@pytest.fixture
def config(tmp_path, profile_document_factory):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    for org in ("Org1", "Org2"):
        (config_dir / f"connection-{org.lower()}.json").write_text(json.dumps(profile_document_factory(org)))

    class IntegrationSettings(TestingSettings):
        CONFIG_DIR = str(config_dir)
        WALLET_ROOT = str(tmp_path / "wallets")
        WALLET_BACKEND = "filesystem"

    return IntegrationSettings()


@pytest.fixture
def ca_services():
    return {}


@pytest.fixture
def service(config, ca_services, connector, ca_service_factory):
    def ca_factory(profile):
        return ca_services.setdefault(profile.organization, ca_service_factory())

    return LedgerService.from_settings(config, ca_factory, connector)


def test_register_and_get_secret(service, ca_services, connector, tmp_path):
    """Test registering a new user: enrollment, ledger user record and secret"""
    response = service.register_and_get_secret({
        "username": "alice",
        "orgName": "Org1",
        "name": "Alice",
        "password": "pw",
        "userType": "lawyer",
        "permissions": "READ-WRITE",
    })

    assert response.success is True
    assert response.secret == "secret-alice"
    assert response.message == "alice enrolled Successfully"
    assert (tmp_path / "wallets" / "org1-wallet" / "alice.id").exists()
    assert (tmp_path / "wallets" / "org1-wallet" / "admin.id").exists()

    gateway = connector.connect.return_value
    network = gateway.get_network.return_value
    gateway.get_network.assert_called_once_with("mychannel")
    network.get_contract.assert_called_once_with("fabcar")
    function_name, record = network.get_contract.return_value.submit_transaction.call_args[0]
    assert function_name == "CreateUser"
    assert json.loads(record) == {"id": "alice", "name": "Alice", "password": "pw",
                                  "type": "lawyer", "access": "READ-WRITE"}

    request, _ = ca_services["Org1"].register_calls[0]
    assert request["attrs"] == [{"name": "role", "value": "approver", "ecert": True}]


def test_register_existing_user(service, ca_services, connector):
    """Test that re-registering returns success without a secret or a ledger write"""
    request = RegisterUserRequest(username="bob", org="Org2", permission_tier="READ")
    service.register_and_get_secret(request)
    connector.connect.reset_mock()

    response = service.register_and_get_secret(request)

    assert response.success is True
    assert response.secret is None
    connector.connect.assert_not_called()
    assert len(ca_services["Org2"].register_calls) == 1


def test_register_failure_is_structured(service, ca_services):
    """Test that CA rejections are reported with kind and message"""
    ca_services["Org1"].register_error = RuntimeError("affiliation not found")

    response = service.register_and_get_secret({"username": "carol", "orgName": "Org1"})

    assert response.success is False
    assert response.error_data["kind"] == "RegistrationFailed"
    assert "affiliation not found" in response.message
    assert service.is_user_registered("carol", "Org1") is False


def test_register_invalid_request(service):
    response = service.register_and_get_secret({"orgName": "Org1"})

    assert response.success is False
    assert response.error_data["kind"] == "InvalidArguments"


def test_invoke_transaction(service):
    """Test a successful invocation response"""
    response = service.invoke_transaction("mychannel", "fabcar", "UpdateLegalRecord",
                                          ["record-1", "{}"], "dave", "Org2")

    assert response.success
    assert response.error is None
    assert response.result == {
        "message": "Transaction UpdateLegalRecord has been submitted successfully",
        "result": {"transactionId": "tx-0001"},
    }
    assert service.is_user_registered("dave", "Org2") is True


def test_invoke_errors_are_structured(service, connector):
    """Test unknown functions, unknown organizations and malformed requests"""
    unknown_function = service.invoke_transaction("mychannel", "fabcar", "DeleteUser", ["x"], "dave", "Org1")
    assert unknown_function.result is None
    assert unknown_function.error_data["kind"] == "UnknownFunction"

    unknown_org = service.invoke_transaction("mychannel", "fabcar", "CreateUser", ["{}"], "dave", "Org7")
    assert unknown_org.error_data["kind"] == "UnknownOrganization"

    malformed = service.invoke_transaction("", "fabcar", "CreateUser", ["{}"], "dave", "Org1")
    assert malformed.error_data["kind"] == "InvalidArguments"

    connector.connect.assert_not_called()


def test_invoke_submission_failure(service, connector):
    contract = connector.connect.return_value.get_network.return_value.get_contract.return_value
    contract.submit_transaction.side_effect = RuntimeError("MVCC_READ_CONFLICT")

    response = service.invoke_transaction("mychannel", "fabcar", "CreateUser", ["{}"], "erin", "Org1")

    assert not response.success
    assert response.error_data["kind"] == "SubmissionFailed"
    assert response.model_dump(by_alias=True)["errorData"]["retriable"] is False


def test_corrupt_wallet_record_is_structured(service, connector, tmp_path):
    """Test that an unreadable identity file yields a WalletFailure response"""
    wallet_dir = tmp_path / "wallets" / "org1-wallet"
    wallet_dir.mkdir(parents=True, exist_ok=True)
    (wallet_dir / "alice.id").write_text("{not json")

    response = service.invoke_transaction("mychannel", "fabcar", "CreateUser", ["{}"], "alice", "Org1")

    assert not response.success
    assert response.error_data["kind"] == "WalletFailure"
    assert response.error_data["retriable"] is True
    connector.connect.assert_not_called()


def test_incomplete_wallet_record_is_structured(service, ca_services, tmp_path):
    wallet_dir = tmp_path / "wallets" / "org2-wallet"
    wallet_dir.mkdir(parents=True, exist_ok=True)
    (wallet_dir / "gina.id").write_text(json.dumps({"type": "X.509"}))

    response = service.get_registered_user("gina", "Org2")

    assert response.success is False
    assert response.error_data["kind"] == "WalletFailure"
    assert ca_services["Org2"].register_calls == []
    assert ca_services["Org2"].enroll_calls == []


def test_invoke_as_admin(service, ca_services):
    """Test that the admin label is served by the bootstrap identity"""
    response = service.invoke_transaction("mychannel", "fabcar", "CreateUser", ["{}"], "admin", "Org1")

    assert response.success
    assert ca_services["Org1"].register_calls == []


def test_undecodable_transaction_id_is_a_success(service, connector):
    contract = connector.connect.return_value.get_network.return_value.get_contract.return_value
    contract.submit_transaction.return_value = b"\xff\xfe"

    response = service.invoke_transaction("mychannel", "fabcar", "CreateUser", ["{}"], "hank", "Org1")

    assert response.success
    assert response.result["result"] == {"transactionId": "\ufffd\ufffd"}


def test_identity_survives_restart(config, connector, service, ca_service_factory):
    """Test that a second service on the same wallets needs no CA calls"""
    service.get_registered_user("frank", "Org1")
    fresh_services = {}

    restarted = LedgerService.from_settings(
        config, lambda profile: fresh_services.setdefault(profile.organization, ca_service_factory()), connector)
    response = restarted.get_registered_user("frank", "Org1")

    assert response.success
    assert response.message == "frank enrolled Successfully"
    assert fresh_services["Org1"].enroll_calls == []


def test_invalid_configuration(config, connector):
    class BrokenSettings(type(config)):
        WALLET_BACKEND = "couchdb"

    with pytest.raises(ConfigurationError):
        LedgerService.from_settings(BrokenSettings(), lambda profile: None, connector)


def test_missing_connection_profile(config, connector, tmp_path):
    class MissingProfiles(type(config)):
        CONFIG_DIR = str(tmp_path / "nowhere")

    with pytest.raises(ConfigurationError):
        LedgerService.from_settings(MissingProfiles(), lambda profile: None, connector)
