"""Deployment settings: compiler, paths and networks."""

import logging
import logging.config
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(os.getenv("DEPLOYER_PROJECT_ROOT", Path.cwd())).resolve()

ENVIRONMENT = os.getenv("DEPLOY_ENV", "development")
if ENVIRONMENT == "production":
    env_file = BASE_DIR / ".env.production"
elif ENVIRONMENT == "testnet":
    env_file = BASE_DIR / ".env.testnet"
else:
    env_file = BASE_DIR / ".env"

if env_file.exists():
    load_dotenv(env_file)
else:
    load_dotenv(BASE_DIR / ".env")

DEBUG = os.getenv("DEBUG", "False").lower() == "true"

SOLIDITY = {
    "version": "0.8.6",
    "settings": {
        "optimizer": {
            "enabled": True,
            "runs": 200,
        },
    },
}

PATHS = {
    "root": BASE_DIR,
    "sources": BASE_DIR / "contracts",
    "tests": BASE_DIR / "test",
    "cache": BASE_DIR / "ressources" / "cache",
    "artifacts": BASE_DIR / "ressources" / "artifacts",
    "deployments": BASE_DIR / "ressources" / "deployments",
}

# Account #0 of the local development node.
HARDHAT_DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

BSC_GAS_PRICE = 20000000000

DEFAULT_NETWORK = os.getenv("DEPLOY_NETWORK", "testnet")

ETHERSCAN_API_KEY = os.getenv("ETHERSCAN_API_KEY", "")
ETHERSCAN_API_URL = os.getenv("ETHERSCAN_API_URL", "https://api.etherscan.io/v2/api")

DEPLOY_RECEIPT_TIMEOUT = int(os.getenv("DEPLOY_RECEIPT_TIMEOUT", "300"))


def _with_prefix(key):
    if not key:
        return None
    return key if key.startswith("0x") else f"0x{key}"


def _accounts(*keys):
    return [_with_prefix(key) for key in keys if key]


def build_network_configs(environ):
    """Network table built from an environment mapping."""
    private_key = environ.get("PRIVATE_KEY")
    mainnet_key = environ.get("PRIVATE_KEY_MAINNET") or private_key

    return {
        "hardhat": {
            "name": "Local Development Node",
            "url": environ.get("HARDHAT_RPC_URL", "http://127.0.0.1:8545"),
            "chain_id": 31337,
            "gas_price": None,
            "accounts": _accounts(environ.get("HARDHAT_PRIVATE_KEY") or HARDHAT_DEV_KEY),
            "explorer_url": None,
        },
        "smartchain": {
            "name": "BNB Smart Chain",
            "url": environ.get("API_URL"),
            "chain_id": None,
            "gas_price": None,
            "accounts": _accounts(private_key),
            "explorer_url": None,
        },
        "testnet": {
            "name": "BNB Smart Chain Testnet",
            "url": environ.get("DEPLOYER_URL_TESTNET"),
            "chain_id": 97,
            "gas_price": BSC_GAS_PRICE,
            "accounts": _accounts(private_key),
            "explorer_url": "https://testnet.bscscan.com",
        },
        "bsc_mainnet": {
            "name": "BNB Smart Chain Mainnet",
            "url": environ.get("DEPLOYER_URL_MAINNET"),
            "chain_id": 56,
            "gas_price": BSC_GAS_PRICE,
            "accounts": _accounts(mainnet_key),
            "explorer_url": "https://bscscan.com",
        },
    }


NETWORK_CONFIGS = build_network_configs(os.environ)


def get_network_config(name=None):
    name = name or DEFAULT_NETWORK
    if name not in NETWORK_CONFIGS:
        known = ", ".join(sorted(NETWORK_CONFIGS))
        raise ValueError(f"Unknown network '{name}'. Known networks: {known}")
    return NETWORK_CONFIGS[name]


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "[{levelname}] {asctime} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
        "file": {
            "class": "logging.FileHandler",
            "filename": BASE_DIR / "logs" / "deploy.log",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "breed_blockchain": {
            "handlers": ["console", "file"] if not DEBUG else ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
        },
    },
}


def configure_logging():
    logs_dir = BASE_DIR / "logs"
    logs_dir.mkdir(exist_ok=True)
    LOGGING["handlers"]["file"]["filename"] = logs_dir / "deploy.log"
    LOGGING["loggers"]["breed_blockchain"].update(
        handlers=["console", "file"] if not DEBUG else ["console"],
        level="DEBUG" if DEBUG else "INFO",
    )
    logging.config.dictConfig(LOGGING)

    logger = logging.getLogger(__name__)
    logger.debug("Environment: %s", ENVIRONMENT)
    logger.debug("Default network: %s", DEFAULT_NETWORK)
