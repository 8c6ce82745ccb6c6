from __future__ import annotations

import pytest

from conftest import CALLER_ADDRESS, CALLER_CREDENTIAL, OTHER_CREDENTIAL
from shopwatch.domain.errors import Unauthorized
from shopwatch.domain.models import AllowList
from shopwatch.security.auth import AuthenticationGate


@pytest.fixture
def gate(allow_list: AllowList) -> AuthenticationGate:
    return AuthenticationGate(allow_list)


def test_authenticates_exact_address(gate: AuthenticationGate) -> None:
    assert gate.authenticate(CALLER_ADDRESS, CALLER_CREDENTIAL) == "e2e-runner"
    assert gate.authenticate(CALLER_ADDRESS, CALLER_CREDENTIAL.upper()) == "e2e-runner"


def test_authenticates_cidr_member(gate: AuthenticationGate) -> None:
    assert gate.authenticate("192.168.1.77", OTHER_CREDENTIAL) == "ci-subnet"


def test_credential_is_bound_to_its_entry(gate: AuthenticationGate) -> None:
    with pytest.raises(Unauthorized) as excinfo:
        gate.authenticate("192.168.1.77", CALLER_CREDENTIAL)
    assert excinfo.value.reason == "invalid credential"


def test_unknown_address_is_rejected_whatever_the_credential(gate: AuthenticationGate) -> None:
    for credential in (CALLER_CREDENTIAL, "not-hex", None, ""):
        with pytest.raises(Unauthorized) as excinfo:
            gate.authenticate("203.0.113.9", credential)
        assert excinfo.value.reason == "address not allowed"


def test_malformed_and_wrong_credentials_look_the_same(gate: AuthenticationGate) -> None:
    reasons = set()
    for credential in ("zz" * 32, CALLER_CREDENTIAL[:-1], "f" * 64):
        with pytest.raises(Unauthorized) as excinfo:
            gate.authenticate(CALLER_ADDRESS, credential)
        reasons.add((excinfo.value.reason, str(excinfo.value)))

    assert reasons == {("invalid credential", "invalid credential")}


def test_missing_credential(gate: AuthenticationGate) -> None:
    with pytest.raises(Unauthorized) as excinfo:
        gate.authenticate(CALLER_ADDRESS, None)
    assert excinfo.value.reason == "missing credential"


def test_empty_allow_list_rejects_everyone() -> None:
    gate = AuthenticationGate(AllowList())

    with pytest.raises(Unauthorized):
        gate.authenticate("127.0.0.1", CALLER_CREDENTIAL)
