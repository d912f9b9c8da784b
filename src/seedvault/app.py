"""
SeedVault - Multi-chain wallet vault.

Entry point for the application. build_context() wires the single
VaultStore into every service; main() is a small command-line front end
over that context.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from getpass import getpass
from typing import Optional

from .chains import DEFAULT_CHAIN, list_chains
from .config import Settings, load_settings
from .errors import MnemonicMismatch, VaultError
from .models import VaultStore
from .services import Authenticator, CryptoWorkerPool, SetupManager, TokenIssuer, WalletService
from .services.logging import configure_logging
from .wallet.crypto import KdfParams
from .wallet.passwords import validate_password

logger = logging.getLogger(__name__)

CONFIRM_ATTEMPTS = 3


@dataclass
class VaultContext:
    """Everything a host process needs, built once at startup."""
    settings: Settings
    store: VaultStore
    setups: SetupManager
    auth: Authenticator
    wallets: WalletService
    workers: CryptoWorkerPool

    def close(self) -> None:
        self.setups.stop()
        self.workers.shutdown()

    def __enter__(self) -> "VaultContext":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def build_context(settings: Optional[Settings] = None, start_sweeper: bool = True) -> VaultContext:
    """Construct the store and the services that share it."""
    settings = settings or load_settings()
    kdf = KdfParams(
        time_cost=settings.kdf_time_cost,
        memory_cost=settings.kdf_memory_cost,
        parallelism=settings.kdf_parallelism,
    )

    store = VaultStore(settings.vault_path)
    setups = SetupManager(
        store,
        kdf_params=kdf,
        ttl_seconds=settings.setup_ttl_seconds,
        grace_ttl_seconds=settings.setup_grace_ttl_seconds,
        sweep_interval=settings.sweep_interval_seconds,
    )
    auth = Authenticator(
        store,
        TokenIssuer(settings.token_secret, ttl_seconds=settings.token_ttl_seconds),
        allow_password_only=settings.allow_password_only_unlock,
        password_only_limit=settings.password_only_attempts_per_minute,
    )
    context = VaultContext(
        settings=settings,
        store=store,
        setups=setups,
        auth=auth,
        wallets=WalletService(store, kdf),
        workers=CryptoWorkerPool(settings.worker_threads),
    )
    if start_sweeper:
        setups.start()
    logger.debug(f"Vault context ready at {settings.vault_path}")
    return context


# ============================================
# Command-line interface
# ============================================

def _new_password() -> str:
    password = getpass("New password: ")
    check = validate_password(password)
    if check.is_valid:
        print(f"Password strength: {check.strength}")
    if getpass("Repeat password: ") != password:
        raise ValueError("Passwords do not match")
    return password


def _cmd_chains(ctx: VaultContext, args) -> int:
    for spec in list_chains():
        formats = ", ".join(spec.address_formats)
        print(f"{spec.name:<10} {spec.symbol:<6} {spec.derivation_path:<20} {formats}")
    return 0


def _cmd_create(ctx: VaultContext, args) -> int:
    setup = ctx.setups.create(_new_password(), args.chain or [DEFAULT_CHAIN], word_count=args.words)
    print("Write down your seed phrase and keep it offline:\n")
    print(f"    {ctx.setups.reveal(setup.setup_id)}\n")

    if args.skip_confirm:
        saved = ctx.setups.save(setup.setup_id)
    else:
        saved = None
        for _ in range(CONFIRM_ATTEMPTS):
            try:
                saved = ctx.workers.run(ctx.setups.confirm, setup.setup_id, input("Re-enter seed phrase: "))
                break
            except MnemonicMismatch as e:
                print(e.message, file=sys.stderr)
        if saved is None:
            ctx.setups.dismiss(setup.setup_id)
            print("Setup cancelled", file=sys.stderr)
            return 1

    for info in saved:
        print(f"Saved {info.display_label()}")
    return 0


def _cmd_import(ctx: VaultContext, args) -> int:
    if args.mnemonic:
        secret = {"mnemonic": getpass("Seed phrase: ")}
    else:
        secret = {"private_key": getpass("Private key (hex): ")}
    info = ctx.workers.run(
        ctx.wallets.import_wallet,
        _new_password(),
        args.chain,
        overwrite=args.overwrite,
        address_format=args.format,
        **secret,
    )
    print(f"Imported {info.address}")
    return 0


def _cmd_list(ctx: VaultContext, args) -> int:
    wallets = ctx.wallets.list_wallets()
    if not wallets:
        print("No wallets")
    for info in wallets:
        print(f"{info.display_label()}  accesses={info.access_count}")
    return 0


def _cmd_unlock(ctx: VaultContext, args) -> int:
    password = getpass("Password: ")
    if args.address:
        result = ctx.workers.run(ctx.auth.unlock_by_address, args.address, password)
    else:
        result = ctx.workers.run(ctx.auth.unlock_by_password_only, password)
    print(f"Unlocked {result.address} ({result.chain})")
    print(f"Token: {result.token}")
    if args.show_secrets:
        if result.mnemonic:
            print(f"Seed phrase: {result.mnemonic}")
        print(f"Private key: {result.private_key}")
    return 0


def _cmd_passwd(ctx: VaultContext, args) -> int:
    current = getpass("Current password: ")
    info = ctx.workers.run(ctx.wallets.change_password, args.address, current, _new_password())
    print(f"Password changed for {info.address}")
    return 0


def _cmd_remove(ctx: VaultContext, args) -> int:
    password = getpass("Password: ")
    ctx.workers.run(ctx.wallets.delete_wallet, args.address, password)
    print(f"Removed {args.address}")
    return 0


def _cmd_primary(ctx: VaultContext, args) -> int:
    info = ctx.wallets.set_primary(args.address)
    print(f"Primary wallet is now {info.address}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seedvault", description="Multi-chain wallet vault")
    parser.add_argument("--settings", help="Path to settings.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("chains", help="List supported chains").set_defaults(func=_cmd_chains)

    p = sub.add_parser("create", help="Generate a new wallet")
    p.add_argument("--chain", action="append", help="Chain to derive (repeatable)")
    p.add_argument("--words", type=int, choices=(12, 24), default=12)
    p.add_argument("--skip-confirm", action="store_true", help="Save without re-entering the phrase")
    p.set_defaults(func=_cmd_create)

    p = sub.add_parser("import", help="Import a seed phrase or private key")
    p.add_argument("--chain", default=DEFAULT_CHAIN)
    p.add_argument("--format", help="Address format (default: chain default)")
    p.add_argument("--overwrite", action="store_true")
    secret = p.add_mutually_exclusive_group(required=True)
    secret.add_argument("--mnemonic", action="store_true", help="Prompt for a seed phrase")
    secret.add_argument("--private-key", action="store_true", help="Prompt for a private key")
    p.set_defaults(func=_cmd_import)

    sub.add_parser("list", help="List wallets").set_defaults(func=_cmd_list)

    p = sub.add_parser("unlock", help="Unlock a wallet and print an access token")
    p.add_argument("--address")
    p.add_argument("--show-secrets", action="store_true")
    p.set_defaults(func=_cmd_unlock)

    for name, func, help_text in (
        ("passwd", _cmd_passwd, "Change a wallet password"),
        ("remove", _cmd_remove, "Delete a wallet"),
        ("primary", _cmd_primary, "Set the primary wallet"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--address", required=True)
        p.set_defaults(func=func)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)
    settings = load_settings(args.settings)

    # Configure logging before anything else
    configure_logging(
        logging.DEBUG if args.verbose else settings.log_level,
        retention_days=settings.log_retention_days,
    )

    with build_context(settings, start_sweeper=args.command == "create") as ctx:
        try:
            return args.func(ctx, args)
        except VaultError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
