"""
Helper functions for deployment scripts
"""

from datetime import datetime, timezone
import json
import logging
from pathlib import Path

from breed_blockchain import settings

logger = logging.getLogger(__name__)


def _deployments_path(network: str, deployments_dir=None) -> Path:
    return Path(deployments_dir or settings.PATHS["deployments"]) / f"{network}.json"


def load_deployments(network: str, deployments_dir=None) -> dict:
    path = _deployments_path(network, deployments_dir)
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as file_handle:
        return json.load(file_handle)


def save_deployment(network: str, deployed, deployments_dir=None) -> Path:
    """
    Record a deployed contract in the network's address book.

    Args:
        network: Network name the contract was deployed to
        deployed: DeployedContract returned by a contract factory

    Returns:
        Path of the address book file
    """
    path = _deployments_path(network, deployments_dir)
    deployments = load_deployments(network, deployments_dir)
    deployments[deployed.name] = {
        "contract": deployed.name,
        "address": deployed.address,
        "transactionHash": deployed.tx_hash,
        "blockNumber": deployed.block_number,
        "deployedAt": datetime.now(timezone.utc).isoformat(),
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as file_handle:
        json.dump(deployments, file_handle, indent=2)
    logger.info("Recorded %s at %s in %s", deployed.name, deployed.address, path)
    return path


def get_contract_address(contract_name: str, network=None, deployments_dir=None) -> str:
    """
    Get deployed contract address from deployments.

    Args:
        contract_name: Name of the contract
        network: Network name, defaults to the configured default network

    Returns:
        Contract address as string
    """
    network = network or settings.DEFAULT_NETWORK
    deployments = load_deployments(network, deployments_dir)

    if contract_name in deployments:
        return deployments[contract_name]["address"]
    else:
        raise ValueError(f"Contract {contract_name} not found in {network} deployments")


def explorer_address_url(network: str, address: str):
    explorer_url = settings.get_network_config(network).get("explorer_url")
    if not explorer_url:
        return None
    return f"{explorer_url}/address/{address}"
