import json

import pytest

from breed_blockchain.contract_loader import (
    find_artifact_path,
    get_contract_abi,
    get_contract_bytecode,
    link_bytecode,
    load_artifact,
    load_build_info,
)

from conftest import LIBRARY_ADDRESS, LONG_VERSION


def test_find_artifact_by_name(artifacts):
    path = find_artifact_path("NFTBreed")
    assert path == artifacts / "contracts" / "NFTBreed.sol" / "NFTBreed.json"


def test_find_artifact_by_qualified_name(artifacts):
    path = find_artifact_path("contracts/IterableMapping.sol:IterableMapping")
    assert path.name == "IterableMapping.json"


def test_missing_artifact_points_at_compile(artifacts):
    with pytest.raises(FileNotFoundError, match="compile"):
        find_artifact_path("AuctionRepository")

    with pytest.raises(FileNotFoundError):
        find_artifact_path("contracts/Other.sol:NFTBreed")


def test_ambiguous_name_lists_candidates(artifacts, nft_artifact):
    duplicate = artifacts / "contracts" / "legacy" / "NFTBreed.sol" / "NFTBreed.json"
    duplicate.parent.mkdir(parents=True)
    duplicate.write_text(json.dumps(nft_artifact), encoding="utf-8")

    with pytest.raises(ValueError) as exc_info:
        find_artifact_path("NFTBreed")

    assert "contracts/NFTBreed.sol:NFTBreed" in str(exc_info.value)
    assert "contracts/legacy/NFTBreed.sol:NFTBreed" in str(exc_info.value)


def test_load_artifact_parts(artifacts):
    artifact = load_artifact("NFTBreed")

    assert artifact["contractName"] == "NFTBreed"
    assert get_contract_abi("NFTBreed")[0]["name"] == "breed"
    assert get_contract_bytecode("IterableMapping") == "0x6080604052"


def test_missing_bytecode_is_rejected(artifacts, library_artifact):
    library_artifact["bytecode"] = "0x"
    path = artifacts / "contracts" / "IterableMapping.sol" / "IterableMapping.json"
    path.write_text(json.dumps(library_artifact), encoding="utf-8")

    with pytest.raises(ValueError, match="Bytecode missing"):
        get_contract_bytecode("IterableMapping")


def test_missing_abi_is_rejected(artifacts):
    with pytest.raises(ValueError, match="ABI missing"):
        get_contract_abi("IterableMapping")


def test_load_build_info_follows_debug_file(artifacts):
    build_info = load_build_info("NFTBreed")

    assert build_info["solcLongVersion"] == LONG_VERSION
    assert "contracts/NFTBreed.sol" in build_info["input"]["sources"]


def test_link_bytecode_writes_library_address(nft_artifact):
    bytecode = link_bytecode(nft_artifact, {"IterableMapping": LIBRARY_ADDRESS})
    assert bytecode == "0x6080" + LIBRARY_ADDRESS[2:].lower() + "6000"


def test_link_bytecode_accepts_qualified_and_lowercase(nft_artifact):
    bytecode = link_bytecode(
        nft_artifact,
        {"contracts/IterableMapping.sol:IterableMapping": LIBRARY_ADDRESS.lower()},
    )
    assert LIBRARY_ADDRESS[2:].lower() in bytecode
    assert "__$" not in bytecode


def test_link_bytecode_requires_every_library(nft_artifact):
    with pytest.raises(ValueError, match="Missing links"):
        link_bytecode(nft_artifact)


def test_link_bytecode_rejects_unknown_library(nft_artifact):
    with pytest.raises(ValueError, match="is not one of the libraries"):
        link_bytecode(
            nft_artifact,
            {"IterableMapping": LIBRARY_ADDRESS, "SafeMath": LIBRARY_ADDRESS},
        )


def test_link_bytecode_rejects_invalid_address(nft_artifact):
    with pytest.raises(ValueError, match="Invalid address"):
        link_bytecode(nft_artifact, {"IterableMapping": "0x1234"})


def test_link_bytecode_without_libraries(library_artifact):
    assert link_bytecode(library_artifact) == "0x6080604052"
