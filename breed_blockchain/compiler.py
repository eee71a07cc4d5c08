"""Compile the Solidity sources with solc and write per-contract artifacts."""

import copy
import hashlib
import json
import logging
import os
import shutil
from pathlib import Path

import solcx

from . import settings

logger = logging.getLogger(__name__)

ARTIFACT_FORMAT = "hh-sol-artifact-1"
DBG_FORMAT = "hh-sol-dbg-1"
BUILD_INFO_FORMAT = "hh-sol-build-info-1"
CACHE_FORMAT = "breed-sol-cache-1"
CACHE_FILE = "solidity-files-cache.json"

OUTPUT_SELECTION = [
    "abi",
    "evm.bytecode.object",
    "evm.bytecode.linkReferences",
    "evm.deployedBytecode.object",
    "evm.deployedBytecode.linkReferences",
    "metadata",
]


def collect_sources(sources_dir, root) -> dict:
    """Read every .sol file, keyed by its project-relative source name."""
    sources_dir = Path(sources_dir)
    root = Path(root)
    if not sources_dir.exists():
        raise FileNotFoundError(f"Sources directory {sources_dir} does not exist")

    sources = {}
    for path in sorted(sources_dir.rglob("*.sol")):
        try:
            source_name = path.relative_to(root).as_posix()
        except ValueError:
            source_name = path.relative_to(sources_dir.parent).as_posix()
        sources[source_name] = {"content": path.read_text(encoding="utf-8")}

    if not sources:
        raise FileNotFoundError(f"No Solidity sources found in {sources_dir}")
    return sources


def build_standard_input(sources: dict, solidity: dict) -> dict:
    compiler_settings = copy.deepcopy(solidity.get("settings", {}))
    compiler_settings["outputSelection"] = {"*": {"*": list(OUTPUT_SELECTION)}}
    return {
        "language": "Solidity",
        "sources": sources,
        "settings": compiler_settings,
    }


def _fingerprint(version: str, standard_input: dict) -> str:
    payload = json.dumps({"version": version, "input": standard_input}, sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _read_cache(cache_path: Path):
    if not cache_path.exists():
        return None
    try:
        with cache_path.open("r", encoding="utf-8") as file_handle:
            cache = json.load(file_handle)
    except json.JSONDecodeError:
        logger.warning("Ignoring corrupt compile cache at %s", cache_path)
        return None
    if cache.get("_format") != CACHE_FORMAT:
        return None
    return cache


def _write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as file_handle:
        json.dump(data, file_handle, indent=2)


def _ensure_solc(version: str) -> None:
    installed = {str(v) for v in solcx.get_installed_solc_versions()}
    if version not in installed:
        logger.info("Installing solc %s...", version)
        solcx.install_solc(version)


def _long_version(version: str) -> str:
    solcx.set_solc_version(version, silent=True)
    return str(solcx.get_solc_version(with_commit_hash=True))


def _write_outputs(output, standard_input, version, long_version, build_id, artifacts_dir: Path):
    if artifacts_dir.exists():
        shutil.rmtree(artifacts_dir)

    build_info_path = artifacts_dir / "build-info" / f"{build_id}.json"
    _write_json(
        build_info_path,
        {
            "_format": BUILD_INFO_FORMAT,
            "id": build_id,
            "solcVersion": version,
            "solcLongVersion": long_version,
            "input": standard_input,
        },
    )

    written = []
    for source_name, contracts in sorted(output.get("contracts", {}).items()):
        for contract_name, data in sorted(contracts.items()):
            evm = data.get("evm", {})
            bytecode = evm.get("bytecode", {})
            deployed = evm.get("deployedBytecode", {})

            path = artifacts_dir / source_name / f"{contract_name}.json"
            _write_json(
                path,
                {
                    "_format": ARTIFACT_FORMAT,
                    "contractName": contract_name,
                    "sourceName": source_name,
                    "abi": data.get("abi", []),
                    "bytecode": "0x" + bytecode.get("object", ""),
                    "deployedBytecode": "0x" + deployed.get("object", ""),
                    "linkReferences": bytecode.get("linkReferences", {}),
                    "deployedLinkReferences": deployed.get("linkReferences", {}),
                },
            )
            _write_json(
                path.with_name(f"{contract_name}.dbg.json"),
                {
                    "_format": DBG_FORMAT,
                    "buildInfo": Path(os.path.relpath(build_info_path, path.parent)).as_posix(),
                },
            )
            written.append(path)
    return written


def compile_contracts(force=False, paths=None, solidity=None):
    """
    Compile the project sources unless the cache shows nothing changed.

    Returns:
        List of artifact paths
    """
    paths = paths or settings.PATHS
    solidity = solidity or settings.SOLIDITY
    version = solidity["version"]
    artifacts_dir = Path(paths["artifacts"])
    cache_path = Path(paths["cache"]) / CACHE_FILE

    sources = collect_sources(paths["sources"], paths["root"])
    standard_input = build_standard_input(sources, solidity)
    fingerprint = _fingerprint(version, standard_input)

    if not force:
        cache = _read_cache(cache_path)
        if cache and cache.get("fingerprint") == fingerprint:
            cached = [artifacts_dir / name for name in cache.get("artifacts", [])]
            if all(path.exists() for path in cached):
                logger.info("Nothing to compile, %d artifacts are up to date", len(cached))
                return cached

    _ensure_solc(version)
    logger.info("Compiling %d Solidity files with solc %s", len(sources), version)
    output = solcx.compile_standard(
        standard_input, solc_version=version, allow_paths=str(paths["root"])
    )

    for error in output.get("errors", []):
        if error.get("severity") == "warning":
            logger.warning(error.get("formattedMessage") or error.get("message"))

    written = _write_outputs(
        output,
        standard_input,
        version,
        _long_version(version),
        fingerprint[:32],
        artifacts_dir,
    )

    _write_json(
        cache_path,
        {
            "_format": CACHE_FORMAT,
            "fingerprint": fingerprint,
            "solcVersion": version,
            "files": {
                name: hashlib.sha256(source["content"].encode("utf-8")).hexdigest()
                for name, source in sources.items()
            },
            "artifacts": [path.relative_to(artifacts_dir).as_posix() for path in written],
        },
    )
    logger.info("Compiled %d contracts successfully", len(written))
    return written


def clean(paths=None) -> None:
    paths = paths or settings.PATHS
    for key in ("cache", "artifacts"):
        path = Path(paths[key])
        if path.exists():
            shutil.rmtree(path)
            logger.info("Removed %s", path)
