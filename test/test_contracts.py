import json
import pytest

from fixtures.chain import GREETER_ABI, GREETER_ADDRESS
from web3sync.contracts import DeployedContracts

DEPLOYMENTS = {
    "devnet": {"YourContract": {"address": GREETER_ADDRESS, "abi": GREETER_ABI}},
    "sepolia": {},
}


def test_from_path(tmp_path):
    path = tmp_path / "deployed.json"
    path.write_text(json.dumps(DEPLOYMENTS))
    contracts = DeployedContracts.from_path(str(path), "devnet")
    assert contracts.names() == ["YourContract"]
    assert contracts.get_contract_by_name("YourContract") == {
        "contract_address": GREETER_ADDRESS,
        "abi": GREETER_ABI,
    }


def test_network_from_env(monkeypatch):
    monkeypatch.setenv("WEB3_NETWORK", "sepolia")
    assert DeployedContracts(DEPLOYMENTS).network == "sepolia"
    monkeypatch.delenv("WEB3_NETWORK")
    assert DeployedContracts(DEPLOYMENTS).network == "devnet"


def test_unknown_contract():
    with pytest.raises(KeyError):
        DeployedContracts(DEPLOYMENTS, "sepolia").get_contract_by_name("YourContract")
    with pytest.raises(KeyError, match="available: YourContract"):
        DeployedContracts(DEPLOYMENTS, "devnet").get_contract_by_name("Greeter")
    with pytest.raises(KeyError):
        DeployedContracts(DEPLOYMENTS, "mainnet").get_contract_by_name("YourContract")
    assert DeployedContracts(DEPLOYMENTS, "mainnet").names() == []
