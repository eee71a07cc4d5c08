"""Verify deployed contract sources on the block explorer."""

import copy
import json
import logging
import time

import eth_abi
import requests

from . import settings
from .blockchain_utils import coerce_arguments
from .contract_loader import get_constructor, load_artifact, load_build_info
from .script.helpful_scripts import explorer_address_url, load_deployments

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
PENDING = "Pending in queue"
VERIFIED = "Pass - Verified"


class VerificationError(RuntimeError):
    """The explorer rejected or failed a verification request."""


def _collapse_type(item) -> str:
    abi_type = item["type"]
    if abi_type.startswith("tuple"):
        components = ",".join(_collapse_type(c) for c in item.get("components", []))
        return f"({components}){abi_type[len('tuple'):]}"
    return abi_type


def encode_constructor_arguments(abi, args) -> str:
    constructor = get_constructor(abi)
    inputs = constructor.get("inputs", []) if constructor else []
    values = coerce_arguments(abi, list(args))
    if not inputs:
        return ""
    return eth_abi.encode([_collapse_type(item) for item in inputs], values).hex()


def _is_already_verified(result: str) -> bool:
    return "already verified" in str(result).lower()


def build_verification_request(
    api_key, address, artifact, build_info, constructor_args=(), libraries=None
) -> dict:
    """
    Form payload for the explorer's verifysourcecode action.

    Args:
        api_key: Explorer API key
        address: Deployed contract address
        artifact: Contract artifact
        build_info: Build info the artifact was compiled from
        constructor_args: Arguments the contract was deployed with
        libraries: Linked libraries as {"source:Name": address}

    Returns:
        Dict ready to be posted as form data
    """
    standard_input = copy.deepcopy(build_info["input"])
    if libraries:
        linked = standard_input.setdefault("settings", {}).setdefault("libraries", {})
        for qualified, library_address in libraries.items():
            source_name, library_name = qualified.split(":", 1)
            linked.setdefault(source_name, {})[library_name] = library_address

    return {
        "apikey": api_key,
        "module": "contract",
        "action": "verifysourcecode",
        "contractaddress": address,
        "sourceCode": json.dumps(standard_input),
        "codeformat": "solidity-standard-json-input",
        "contractname": f"{artifact['sourceName']}:{artifact['contractName']}",
        "compilerversion": f"v{build_info['solcLongVersion']}",
        "constructorArguements": encode_constructor_arguments(artifact["abi"], constructor_args),
    }


def submit_verification(payload: dict, chain_id: int, api_url=None):
    """Return the verification GUID, or None when the source is already verified"""
    api_url = api_url or settings.ETHERSCAN_API_URL
    response = requests.post(
        api_url, params={"chainid": chain_id}, data=payload, timeout=REQUEST_TIMEOUT
    )
    response.raise_for_status()
    body = response.json()

    if body.get("status") == "1":
        logger.info("Verification submitted for %s: %s", payload["contractaddress"], body["result"])
        return body["result"]
    if _is_already_verified(body.get("result")):
        logger.info("%s is already verified", payload["contractaddress"])
        return None
    raise VerificationError(f"Verification request rejected: {body.get('result')}")


def wait_for_verification(
    guid, api_key, chain_id, api_url=None, poll_interval=5, max_attempts=20
) -> bool:
    api_url = api_url or settings.ETHERSCAN_API_URL
    params = {
        "chainid": chain_id,
        "apikey": api_key,
        "module": "contract",
        "action": "checkverifystatus",
        "guid": guid,
    }

    for attempt in range(1, max_attempts + 1):
        response = requests.get(api_url, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        result = response.json().get("result", "")

        if result == VERIFIED or _is_already_verified(result):
            return True
        if result != PENDING:
            raise VerificationError(f"Verification failed: {result}")

        logger.info("Verification pending (attempt %d/%d)", attempt, max_attempts)
        time.sleep(poll_interval)

    raise VerificationError(f"Verification still pending after {max_attempts} checks")


def _linked_libraries(artifact, network, libraries):
    link_references = artifact.get("linkReferences") or {}
    needed = [
        f"{source_name}:{library_name}"
        for source_name, names in link_references.items()
        for library_name in names
    ]
    if not needed:
        return {}

    libraries = libraries or {}
    deployments = load_deployments(network)
    linked = {}
    for qualified in needed:
        library_name = qualified.split(":", 1)[1]
        address = libraries.get(qualified) or libraries.get(library_name)
        if not address and library_name in deployments:
            address = deployments[library_name]["address"]
        if not address:
            raise ValueError(
                f"Address of library {qualified} unknown, deploy it first or pass it explicitly"
            )
        linked[qualified] = address
    return linked


def verify_contract(
    network, address, name="NFTBreed", constructor_args=(), libraries=None, poll_interval=5
) -> bool:
    config = settings.get_network_config(network)
    chain_id = config.get("chain_id")
    if chain_id is None or not config.get("explorer_url"):
        raise ValueError(f"Network {network} has no block explorer to verify on")
    if not settings.ETHERSCAN_API_KEY:
        raise ValueError("ETHERSCAN_API_KEY not set")

    artifact = load_artifact(name)
    build_info = load_build_info(name)
    payload = build_verification_request(
        settings.ETHERSCAN_API_KEY,
        address,
        artifact,
        build_info,
        constructor_args=constructor_args,
        libraries=_linked_libraries(artifact, network, libraries),
    )

    guid = submit_verification(payload, chain_id)
    if guid is not None:
        wait_for_verification(
            guid, settings.ETHERSCAN_API_KEY, chain_id, poll_interval=poll_interval
        )

    logger.info("%s verified: %s", name, explorer_address_url(network, address))
    return True
