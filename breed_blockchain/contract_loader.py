"""Load compiled contract artifacts and link libraries into their bytecode."""

import json
import logging
from pathlib import Path

from web3 import Web3

from . import settings

logger = logging.getLogger(__name__)


def _artifacts_dir(artifacts_dir=None) -> Path:
    return Path(artifacts_dir or settings.PATHS["artifacts"])


def _qualified_name(path: Path, artifacts_dir: Path) -> str:
    source_name = path.parent.relative_to(artifacts_dir).as_posix()
    return f"{source_name}:{path.stem}"


def find_artifact_path(name: str, artifacts_dir=None) -> Path:
    """
    Locate the artifact of a contract.

    Args:
        name: Bare contract name ("NFTBreed") or fully qualified
            name ("contracts/NFTBreed.sol:NFTBreed")

    Returns:
        Path of the artifact JSON file
    """
    artifacts_dir = _artifacts_dir(artifacts_dir)

    if ":" in name:
        source_name, contract_name = name.rsplit(":", 1)
        path = artifacts_dir / source_name / f"{contract_name}.json"
        if not path.exists():
            raise FileNotFoundError(
                f"Artifact for {name} not found at {path}. Run 'python -m breed_blockchain compile'."
            )
        return path

    candidates = sorted(
        path
        for path in artifacts_dir.glob(f"**/{name}.json")
        if "build-info" not in path.relative_to(artifacts_dir).parts
    )
    if not candidates:
        raise FileNotFoundError(
            f"Artifact for {name} not found in {artifacts_dir}. Run 'python -m breed_blockchain compile'."
        )
    if len(candidates) > 1:
        names = ", ".join(_qualified_name(path, artifacts_dir) for path in candidates)
        raise ValueError(
            f"Multiple artifacts for contract {name}, use a fully qualified name: {names}"
        )
    return candidates[0]


def load_artifact(name: str, artifacts_dir=None) -> dict:
    path = find_artifact_path(name, artifacts_dir)
    with path.open("r", encoding="utf-8") as file_handle:
        return json.load(file_handle)


def get_contract_abi(name: str, artifacts_dir=None):
    artifact = load_artifact(name, artifacts_dir)
    abi = artifact.get("abi")
    if not abi:
        raise ValueError(f"ABI missing from {name} artifact")
    return abi


def get_contract_bytecode(name: str, artifacts_dir=None):
    artifact = load_artifact(name, artifacts_dir)
    bytecode = artifact.get("bytecode")
    if not bytecode or bytecode == "0x":
        raise ValueError(
            f"Bytecode missing from {name} artifact, abstract contracts and interfaces cannot be deployed"
        )
    return bytecode


def load_build_info(name: str, artifacts_dir=None) -> dict:
    """Compiler input and version the artifact was produced from."""
    path = find_artifact_path(name, artifacts_dir)
    dbg_path = path.with_name(f"{path.stem}.dbg.json")
    if not dbg_path.exists():
        raise FileNotFoundError(f"Debug file for {name} not found at {dbg_path}")
    with dbg_path.open("r", encoding="utf-8") as file_handle:
        build_info_ref = json.load(file_handle)["buildInfo"]

    build_info_path = (dbg_path.parent / build_info_ref).resolve()
    if not build_info_path.exists():
        raise FileNotFoundError(
            f"Build info for {name} not found at {build_info_path}. Recompile with --force."
        )
    with build_info_path.open("r", encoding="utf-8") as file_handle:
        return json.load(file_handle)


def get_constructor(abi):
    return next((item for item in abi if item.get("type") == "constructor"), None)


def _needed_libraries(artifact: dict) -> dict:
    link_references = artifact.get("linkReferences") or {}
    return {
        f"{source_name}:{library_name}": offsets
        for source_name, libraries in link_references.items()
        for library_name, offsets in libraries.items()
    }


def link_bytecode(artifact: dict, libraries=None) -> str:
    """
    Write library addresses into the link references of unlinked bytecode.

    Args:
        artifact: Loaded contract artifact
        libraries: Mapping of library name (bare or fully qualified) to address

    Returns:
        Deployable bytecode as a 0x-prefixed hex string
    """
    libraries = libraries or {}
    contract_name = artifact.get("contractName", "contract")
    needed = _needed_libraries(artifact)

    resolved = {}
    for key, address in libraries.items():
        matches = [
            qualified
            for qualified in needed
            if qualified == key or qualified.split(":", 1)[1] == key
        ]
        if not matches:
            known = ", ".join(sorted(needed)) or "none"
            raise ValueError(
                f"{key} is not one of the libraries of {contract_name} (needed: {known})"
            )
        if len(matches) > 1:
            raise ValueError(
                f"Library name {key} is ambiguous for {contract_name}, use one of: {', '.join(matches)}"
            )
        if matches[0] in resolved:
            raise ValueError(f"Library {matches[0]} was given more than once")
        if not Web3.is_address(address):
            raise ValueError(f"Invalid address for library {key}: {address}")
        resolved[matches[0]] = Web3.to_checksum_address(address)

    missing = sorted(set(needed) - set(resolved))
    if missing:
        raise ValueError(
            f"Missing links for the following libraries of {contract_name}: {', '.join(missing)}"
        )

    bytecode = artifact.get("bytecode") or ""
    code = bytecode[2:] if bytecode.startswith("0x") else bytecode
    for qualified, offsets in needed.items():
        address_hex = resolved[qualified][2:].lower()
        for reference in offsets:
            start = reference["start"] * 2
            end = start + reference["length"] * 2
            code = code[:start] + address_hex + code[end:]
        logger.debug("Linked %s into %s at %s", qualified, contract_name, resolved[qualified])

    if "__$" in code:
        raise ValueError(f"{contract_name} still has unlinked library placeholders")
    return "0x" + code
