"""
Simple deployment script for the NFTBreed contracts
Deploys the library and the token without prompts
"""

import sys

from breed_blockchain import settings
from breed_blockchain.blockchain_utils import get_contract_factory
from breed_blockchain.script.helpful_scripts import save_deployment


def deploy_nft_breed(network=None):
    """Deploy IterableMapping, then NFTBreed linked against it"""
    network = network or settings.DEFAULT_NETWORK

    iterable_mapping = get_contract_factory("IterableMapping", network=network).deploy()
    save_deployment(network, iterable_mapping)

    nft_breed = get_contract_factory(
        "NFTBreed",
        libraries={"IterableMapping": iterable_mapping.address},
        network=network,
    ).deploy()
    save_deployment(network, nft_breed)

    print(f"NFTBreed Contract deployed to address: {nft_breed.address}")
    return nft_breed


def main(network=None):
    try:
        deploy_nft_breed(network)
    except Exception as e:
        print(e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
