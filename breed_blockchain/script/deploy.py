"""
Deployment script for the NFTBreed contracts
Supports the local node, BSC testnet and BSC mainnet
"""

from decimal import Decimal
import sys

from breed_blockchain import settings
from breed_blockchain.blockchain_utils import (
    get_balance,
    get_contract_factory,
    get_deployer_account,
    wei_to_eth,
)
from breed_blockchain.script.helpful_scripts import explorer_address_url, save_deployment

LIBRARY_NAME = "IterableMapping"
NFT_NAME = "NFTBreed"
AUCTION_NAME = "AuctionRepository"

MAINNET = "bsc_mainnet"
TESTNET = "testnet"
LOCAL = "hardhat"

LOW_BALANCE = Decimal("0.001")
TESTNET_FAUCET = "https://testnet.bnbchain.org/faucet-smart"


def deploy_contracts(network, nft_args=(), with_auction=False):
    """Deploy IterableMapping, NFTBreed and optionally AuctionRepository, in that order"""
    deployed = []

    iterable_mapping = get_contract_factory(LIBRARY_NAME, network=network).deploy()
    save_deployment(network, iterable_mapping)
    deployed.append(iterable_mapping)

    nft_breed_factory = get_contract_factory(
        NFT_NAME,
        libraries={LIBRARY_NAME: iterable_mapping.address},
        network=network,
    )
    nft_breed = nft_breed_factory.deploy(*nft_args)
    save_deployment(network, nft_breed)
    deployed.append(nft_breed)
    print(f"NFTBreed Contract deployed to address: {nft_breed.address}")

    if with_auction:
        auction = get_contract_factory(AUCTION_NAME, network=network).deploy(nft_breed.address)
        save_deployment(network, auction)
        deployed.append(auction)
        print(f"AuctionRepository Contract deployed to address: {auction.address}")

    return deployed


def _check_balance(network, account, assume_yes):
    try:
        balance = wei_to_eth(get_balance(account.address, network))
        print(f"Balance: {balance:.6f} BNB")
    except Exception as e:
        print(f"⚠️  Could not check balance: {e}")
        return

    if balance >= LOW_BALANCE:
        return

    print("⚠️  WARNING: Low balance! You may not have enough BNB for deployment.")
    if network == TESTNET:
        print(f"   Get test BNB from: {TESTNET_FAUCET}")

    if network == MAINNET and not assume_yes:
        response = input("Continue anyway? (yes/no): ")
        if response.lower() != "yes":
            print("Deployment cancelled")
            sys.exit(1)


def _print_next_steps(network, deployed):
    nft_breed = next(contract for contract in deployed if contract.name == NFT_NAME)

    if network == LOCAL:
        print("\n📋 NEXT STEPS (local node):")
        print("1. Point your frontend at the local node:")
        print(f"   NFT_CONTRACT_ADDRESS={nft_breed.address}")
        return

    print(f"\n📋 NEXT STEPS ({settings.get_network_config(network)['name']}):")
    step = 1
    for contract in deployed:
        url = explorer_address_url(network, contract.address)
        if url:
            print(f"{step}. View {contract.name} on BscScan:")
            print(f"   {url}")
            step += 1
    if step > 1:
        print(f"{step}. Verify NFTBreed:")
        print(f"   python -m breed_blockchain verify --network {network} {nft_breed.address}")
        step += 1
    if network == TESTNET:
        print(f"{step}. Test thoroughly before mainnet!")


def deploy_breed(network=None, nft_args=(), with_auction=False, assume_yes=False):
    """Deploy the NFTBreed contracts to the given network"""
    network = network or settings.DEFAULT_NETWORK
    config = settings.get_network_config(network)

    print("=" * 60)
    print("🚀 DEPLOYING NFTBREED CONTRACTS")
    print("=" * 60)
    print(f"Network: {network} ({config['name']})")
    print(f"Chain ID: {config['chain_id'] if config['chain_id'] is not None else 'N/A'}")

    try:
        account = get_deployer_account(network)
        print(f"Deployer: {account.address}")
    except Exception as e:
        print(f"❌ Error getting account: {e}")
        print("Make sure PRIVATE_KEY is set in your .env file")
        sys.exit(1)

    if network != LOCAL:
        _check_balance(network, account, assume_yes)

    print("-" * 60)

    if network == MAINNET and not assume_yes:
        print("⚠️  YOU ARE DEPLOYING TO BSC MAINNET (PRODUCTION)")
        print("⚠️  THIS WILL COST REAL BNB")
        print("-" * 60)
        response = input("Type 'DEPLOY' to confirm: ")
        if response != "DEPLOY":
            print("❌ Deployment cancelled")
            sys.exit(1)

    print("\n⏳ This may take a few moments...")

    try:
        deployed = deploy_contracts(network, nft_args=nft_args, with_auction=with_auction)
    except Exception as e:
        print("\n" + "=" * 60)
        print("❌ DEPLOYMENT FAILED")
        print("=" * 60)
        print(f"Error: {e}")
        print("\nTroubleshooting:")
        print("- Check your account has enough BNB")
        print("- Verify your RPC URL is correct")
        print("- Run 'python -m breed_blockchain compile' if artifacts are missing")

        if "insufficient funds" in str(e).lower():
            print("\n⚠️  Insufficient funds - top up the deployer account")

        sys.exit(1)

    print("\n" + "=" * 60)
    print("✅ NFTBREED DEPLOYED SUCCESSFULLY!")
    print("=" * 60)
    for contract in deployed:
        print(f"{contract.name}: {contract.address} (tx {contract.tx_hash})")

    _print_next_steps(network, deployed)
    print("=" * 60)

    return deployed


if __name__ == "__main__":
    deploy_breed()
