"""Command line entry point: compile, deploy and verify the NFTBreed contracts."""

import argparse
import logging
import sys

from . import settings
from .compiler import clean, compile_contracts
from .script.deploy import deploy_breed
from .script.deploy_simple import deploy_nft_breed
from .verify import verify_contract

logger = logging.getLogger("breed_blockchain")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="breed_blockchain", description="Compile, deploy and verify the NFTBreed contracts"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compile_parser = subparsers.add_parser("compile", help="compile the Solidity sources")
    compile_parser.add_argument("--force", action="store_true", help="ignore the compile cache")

    subparsers.add_parser("clean", help="remove the compile cache and artifacts")

    deploy_parser = subparsers.add_parser("deploy", help="deploy the contracts")
    deploy_parser.add_argument("--network", default=settings.DEFAULT_NETWORK)
    deploy_parser.add_argument(
        "--simple", action="store_true", help="library and token only, without checks"
    )
    deploy_parser.add_argument(
        "--with-auction", action="store_true", help="also deploy AuctionRepository"
    )
    deploy_parser.add_argument("--yes", action="store_true", help="skip confirmations")
    deploy_parser.add_argument(
        "--args", nargs="*", default=[], help="NFTBreed constructor arguments"
    )

    verify_parser = subparsers.add_parser("verify", help="verify a contract on the explorer")
    verify_parser.add_argument("--network", default=settings.DEFAULT_NETWORK)
    verify_parser.add_argument("--contract", default="NFTBreed")
    verify_parser.add_argument("address")
    verify_parser.add_argument("constructor_args", nargs="*")

    subparsers.add_parser("networks", help="list the configured networks")
    return parser


def _list_networks():
    for name, config in settings.NETWORK_CONFIGS.items():
        marker = "*" if name == settings.DEFAULT_NETWORK else " "
        chain_id = config["chain_id"] if config["chain_id"] is not None else "-"
        print(
            f"{marker} {name:<12} chain={chain_id:<6} "
            f"url={'yes' if config['url'] else 'no':<3} "
            f"key={'yes' if config['accounts'] else 'no'}"
        )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings.configure_logging()

    try:
        if args.command == "compile":
            compile_contracts(force=args.force)
        elif args.command == "clean":
            clean()
        elif args.command == "deploy":
            if args.simple:
                deploy_nft_breed(args.network)
            else:
                deploy_breed(
                    args.network,
                    nft_args=args.args,
                    with_auction=args.with_auction,
                    assume_yes=args.yes,
                )
        elif args.command == "verify":
            verify_contract(
                args.network,
                args.address,
                name=args.contract,
                constructor_args=args.constructor_args,
            )
        elif args.command == "networks":
            _list_networks()
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 1
        if code:
            logger.error("%s failed with exit code %s", args.command, code)
        return code
    except Exception as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
