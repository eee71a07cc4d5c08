"""Blockchain utilities for the deployer client, signer and contract factories."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
import logging

from eth_account import Account
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from . import settings
from .contract_loader import get_constructor, link_bytecode, load_artifact

logger = logging.getLogger(__name__)

GAS_MULTIPLIER = 1.2


class DeploymentError(RuntimeError):
    """A contract-creation transaction did not produce a contract."""


@dataclass
class DeployedContract:
    name: str
    address: str
    tx_hash: str
    block_number: int
    gas_used: int
    abi: list


def connect(config) -> Web3:
    url = config.get("url")
    if not url:
        raise ValueError(f"No RPC URL configured for {config['name']}")

    w3 = Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": 60}))
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    if not w3.is_connected():
        raise ConnectionError(f"Cannot connect to blockchain at {url}")

    expected = config.get("chain_id")
    if expected is not None and w3.eth.chain_id != expected:
        raise ValueError(
            f"Chain ID mismatch: connected to {w3.eth.chain_id}, expected {expected}"
        )
    return w3


@lru_cache(maxsize=None)
def get_web3(network=None):
    return connect(settings.get_network_config(network))


def load_account(config):
    accounts = config.get("accounts") or []
    if not accounts:
        raise ValueError(f"No private key configured for {config['name']}")
    key = accounts[0]
    if len(key) != 66 or not key.startswith("0x"):
        raise ValueError("Private key must be 66 chars (0x + 64 hex)")
    try:
        return Account.from_key(key)
    except ValueError as exc:
        raise ValueError(f"Invalid private key for {config['name']}") from exc


@lru_cache(maxsize=None)
def get_deployer_account(network=None):
    return load_account(settings.get_network_config(network))


def get_gas_price(w3, config) -> int:
    return config.get("gas_price") or w3.eth.gas_price


def _to_int(value: str) -> int:
    try:
        return int(value, 0)
    except ValueError:
        # "016" is rejected with base 0
        return int(value, 10)


def coerce_argument(abi_type: str, value):
    """Convert a command-line string into the Python value for an ABI type."""
    if not isinstance(value, str):
        return value

    if abi_type.endswith("]"):
        inner = abi_type[: abi_type.rindex("[")]
        items = [item.strip() for item in value.split(",") if item.strip()]
        return [coerce_argument(inner, item) for item in items]
    if abi_type.startswith(("uint", "int")):
        return _to_int(value)
    if abi_type == "bool":
        lowered = value.lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        raise ValueError(f"Invalid bool value: {value}")
    if abi_type == "address":
        if not Web3.is_address(value):
            raise ValueError(f"Invalid address: {value}")
        return Web3.to_checksum_address(value)
    if abi_type.startswith("bytes"):
        return bytes.fromhex(value[2:] if value.startswith("0x") else value)
    return value


def coerce_arguments(abi, args):
    constructor = get_constructor(abi)
    inputs = constructor.get("inputs", []) if constructor else []
    if len(args) != len(inputs):
        types = ", ".join(item["type"] for item in inputs) or "none"
        raise ValueError(
            f"Constructor expects {len(inputs)} arguments ({types}), got {len(args)}"
        )
    return [coerce_argument(item["type"], arg) for item, arg in zip(inputs, args)]


class ContractFactory:
    """Compiled contract bound to a client and a signer."""

    def __init__(self, name, abi, bytecode, w3, account, config):
        self.name = name
        self.abi = abi
        self.bytecode = bytecode
        self.w3 = w3
        self.account = account
        self.config = config

    def deploy(self, *args, value=0) -> DeployedContract:
        contract = self.w3.eth.contract(abi=self.abi, bytecode=self.bytecode)
        constructor = contract.constructor(*coerce_arguments(self.abi, args))

        tx_params = {"from": self.account.address, "value": value}
        try:
            gas_estimate = constructor.estimate_gas(tx_params)
        except Exception as exc:
            logger.error("Gas estimation failed for %s: %s", self.name, exc)
            raise

        tx = constructor.build_transaction(
            {
                **tx_params,
                "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
                "gas": int(gas_estimate * GAS_MULTIPLIER),
                "gasPrice": get_gas_price(self.w3, self.config),
                "chainId": self.config.get("chain_id") or self.w3.eth.chain_id,
            }
        )
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.to_hex(self.w3.eth.send_raw_transaction(signed.raw_transaction))
        logger.info("%s deployment sent: %s", self.name, tx_hash)

        receipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=settings.DEPLOY_RECEIPT_TIMEOUT
        )
        if receipt["status"] != 1 or not receipt.get("contractAddress"):
            raise DeploymentError(f"{self.name} deployment failed in transaction {tx_hash}")

        logger.info(
            "%s deployed at %s (block %s)",
            self.name,
            receipt["contractAddress"],
            receipt["blockNumber"],
        )
        return DeployedContract(
            name=self.name,
            address=receipt["contractAddress"],
            tx_hash=tx_hash,
            block_number=receipt["blockNumber"],
            gas_used=receipt["gasUsed"],
            abi=self.abi,
        )


def get_contract_factory(name, libraries=None, network=None, artifacts_dir=None):
    artifact = load_artifact(name, artifacts_dir)
    bytecode = link_bytecode(artifact, libraries)
    if bytecode == "0x":
        raise ValueError(f"{name} has no bytecode and cannot be deployed")

    return ContractFactory(
        artifact.get("contractName", name),
        artifact["abi"],
        bytecode,
        get_web3(network),
        get_deployer_account(network),
        settings.get_network_config(network),
    )


def get_balance(address, network=None) -> int:
    return get_web3(network).eth.get_balance(address)


def eth_to_wei(eth_amount) -> int:
    try:
        amount = Decimal(str(eth_amount))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid BNB amount: {eth_amount}") from exc
    return Web3.to_wei(amount, "ether")


def wei_to_eth(wei_amount: int) -> Decimal:
    return Decimal(Web3.from_wei(wei_amount, "ether"))


def get_network_info(network=None) -> dict:
    network = network or settings.DEFAULT_NETWORK
    try:
        config = settings.get_network_config(network)
        w3 = get_web3(network)
        account = get_deployer_account(network)
        return {
            "success": True,
            "network": network,
            "network_name": config["name"],
            "rpc_url": config["url"],
            "chain_id": w3.eth.chain_id,
            "deployer_address": account.address,
            "is_connected": w3.is_connected(),
            "latest_block": w3.eth.block_number,
            "explorer_url": config.get("explorer_url"),
        }
    except Exception as exc:
        logger.error("Error getting network info: %s", exc)
        return {
            "success": False,
            "error": str(exc),
            "network": network,
        }
