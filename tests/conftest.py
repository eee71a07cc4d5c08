import json

import pytest

from breed_blockchain import settings
from breed_blockchain.blockchain_utils import get_deployer_account, get_web3


############ CONSTANTS ############

DEV_KEY = "ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

LIBRARY_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
PLACEHOLDER = "__$" + "a1" * 17 + "$__"
LONG_VERSION = "0.8.6+commit.11564f7e"


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


############ STANDARD FIXTURES ############


@pytest.fixture(autouse=True)
def clear_caches():
    get_web3.cache_clear()
    get_deployer_account.cache_clear()
    yield
    get_web3.cache_clear()
    get_deployer_account.cache_clear()


@pytest.fixture
def project_paths(tmp_path, monkeypatch):
    paths = {
        "root": tmp_path,
        "sources": tmp_path / "contracts",
        "tests": tmp_path / "test",
        "cache": tmp_path / "ressources" / "cache",
        "artifacts": tmp_path / "ressources" / "artifacts",
        "deployments": tmp_path / "ressources" / "deployments",
    }
    for key, value in paths.items():
        monkeypatch.setitem(settings.PATHS, key, value)
    yield paths


@pytest.fixture
def build_info():
    yield {
        "_format": "hh-sol-build-info-1",
        "id": "abc",
        "solcVersion": "0.8.6",
        "solcLongVersion": LONG_VERSION,
        "input": {
            "language": "Solidity",
            "sources": {
                "contracts/IterableMapping.sol": {"content": "library IterableMapping {}"},
                "contracts/NFTBreed.sol": {"content": "contract NFTBreed {}"},
            },
            "settings": {"optimizer": {"enabled": True, "runs": 200}},
        },
    }


@pytest.fixture
def library_artifact():
    yield {
        "_format": "hh-sol-artifact-1",
        "contractName": "IterableMapping",
        "sourceName": "contracts/IterableMapping.sol",
        "abi": [],
        "bytecode": "0x6080604052",
        "deployedBytecode": "0x6080",
        "linkReferences": {},
        "deployedLinkReferences": {},
    }


@pytest.fixture
def nft_artifact():
    yield {
        "_format": "hh-sol-artifact-1",
        "contractName": "NFTBreed",
        "sourceName": "contracts/NFTBreed.sol",
        "abi": [{"type": "function", "name": "breed", "inputs": [], "outputs": []}],
        "bytecode": "0x6080" + PLACEHOLDER + "6000",
        "deployedBytecode": "0x6080",
        "linkReferences": {
            "contracts/IterableMapping.sol": {
                "IterableMapping": [{"start": 2, "length": 20}],
            }
        },
        "deployedLinkReferences": {},
    }


@pytest.fixture
def artifacts(project_paths, build_info, library_artifact, nft_artifact):
    artifacts_dir = project_paths["artifacts"]
    _write(artifacts_dir / "build-info" / "abc.json", build_info)
    for artifact in (library_artifact, nft_artifact):
        directory = artifacts_dir / artifact["sourceName"]
        name = artifact["contractName"]
        _write(directory / f"{name}.json", artifact)
        _write(
            directory / f"{name}.dbg.json",
            {"_format": "hh-sol-dbg-1", "buildInfo": "../../build-info/abc.json"},
        )
    yield artifacts_dir


@pytest.fixture
def network_config():
    yield {
        "name": "BNB Smart Chain Testnet",
        "url": "https://testnet.example",
        "chain_id": 97,
        "gas_price": 20000000000,
        "accounts": ["0x" + DEV_KEY],
        "explorer_url": "https://testnet.bscscan.com",
    }
