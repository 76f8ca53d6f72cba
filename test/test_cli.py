import json

from web3sync.__main__ import main
from web3sync.greetings import GREETINGS
from web3sync.records import RecordsRepo


def test_show(cache_path: str, capsys):
    repo = RecordsRepo(GREETINGS, cache_path=cache_path)
    repo.ensure_schema()
    repo.insert({"greeting_setter": "0x1", "greeting": "hi", "premium": 1, "value": 42})
    repo.commit()
    repo.conn.close()

    assert main(["show", "--cache-path", cache_path]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["total"] == 1
    assert data["events"][0]["greeting"] == "hi"


def test_run_without_rpc(cache_path: str, monkeypatch, tmp_path):
    monkeypatch.delenv("WEB3_PROVIDER_URI", raising=False)
    contracts = tmp_path / "deployed.json"
    contracts.write_text("{}")
    assert main(["run", "--contracts", str(contracts), "--cache-path", cache_path]) == 2


def test_run_unknown_contract(cache_path: str, tmp_path):
    contracts = tmp_path / "deployed.json"
    contracts.write_text(json.dumps({"devnet": {}}))
    args = [
        "run",
        "--contracts",
        str(contracts),
        "--cache-path",
        cache_path,
        "--rpc",
        "http://127.0.0.1:8545",
        "--network",
        "devnet",
    ]
    assert main(args) == 2
