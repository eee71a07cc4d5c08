import copy
import logging

import pytest

from breed_blockchain import settings

from conftest import DEV_KEY

OTHER_KEY = "59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"


def test_testnet_network():
    configs = settings.build_network_configs(
        {"DEPLOYER_URL_TESTNET": "https://testnet.example", "PRIVATE_KEY": DEV_KEY}
    )
    testnet = configs["testnet"]

    assert testnet["url"] == "https://testnet.example"
    assert testnet["chain_id"] == 97
    assert testnet["gas_price"] == 20000000000
    assert testnet["accounts"] == ["0x" + DEV_KEY]
    assert testnet["explorer_url"] == "https://testnet.bscscan.com"


def test_mainnet_network_prefers_mainnet_key():
    configs = settings.build_network_configs(
        {
            "DEPLOYER_URL_MAINNET": "https://mainnet.example",
            "PRIVATE_KEY": DEV_KEY,
            "PRIVATE_KEY_MAINNET": OTHER_KEY,
        }
    )
    mainnet = configs["bsc_mainnet"]

    assert mainnet["chain_id"] == 56
    assert mainnet["gas_price"] == 20000000000
    assert mainnet["accounts"] == ["0x" + OTHER_KEY]


def test_mainnet_network_falls_back_to_private_key():
    configs = settings.build_network_configs({"PRIVATE_KEY": DEV_KEY})
    assert configs["bsc_mainnet"]["accounts"] == ["0x" + DEV_KEY]


def test_prefixed_key_is_not_prefixed_twice():
    configs = settings.build_network_configs({"PRIVATE_KEY": "0x" + DEV_KEY})
    assert configs["testnet"]["accounts"] == ["0x" + DEV_KEY]


def test_smartchain_does_not_pin_chain_id():
    configs = settings.build_network_configs({"API_URL": "https://bsc.example"})
    smartchain = configs["smartchain"]

    assert smartchain["url"] == "https://bsc.example"
    assert smartchain["chain_id"] is None
    assert smartchain["gas_price"] is None
    assert smartchain["accounts"] == []


def test_local_node_defaults():
    local = settings.build_network_configs({})["hardhat"]

    assert local["url"] == "http://127.0.0.1:8545"
    assert local["chain_id"] == 31337
    assert local["accounts"] == [settings.HARDHAT_DEV_KEY]


def test_missing_variables_leave_networks_unconfigured():
    configs = settings.build_network_configs({})
    assert configs["testnet"]["url"] is None
    assert configs["testnet"]["accounts"] == []


def test_unknown_network_is_rejected():
    with pytest.raises(ValueError, match="Known networks"):
        settings.get_network_config("ropsten")


def test_default_network_is_used(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_NETWORK", "bsc_mainnet")
    assert settings.get_network_config()["chain_id"] == 56


def test_compiler_settings():
    assert settings.SOLIDITY["version"] == "0.8.6"
    assert settings.SOLIDITY["settings"]["optimizer"]["enabled"] is True


def test_paths_layout():
    root = settings.PATHS["root"]
    assert settings.PATHS["sources"] == root / "contracts"
    assert settings.PATHS["cache"] == root / "ressources" / "cache"
    assert settings.PATHS["artifacts"] == root / "ressources" / "artifacts"


@pytest.fixture
def restore_logging():
    logger = logging.getLogger("breed_blockchain")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in logger.handlers:
        handler.close()
    logger.handlers = handlers
    logger.setLevel(level)


@pytest.mark.parametrize("debug", [True, False])
def test_configure_logging_on_fresh_root(tmp_path, monkeypatch, restore_logging, debug):
    monkeypatch.setattr(settings, "BASE_DIR", tmp_path)
    monkeypatch.setattr(settings, "DEBUG", debug)
    monkeypatch.setattr(settings, "LOGGING", copy.deepcopy(settings.LOGGING))

    settings.configure_logging()

    assert (tmp_path / "logs").is_dir()
    logger = logging.getLogger("breed_blockchain")
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert bool(file_handlers) is not debug
    assert logger.level == (logging.DEBUG if debug else logging.INFO)
