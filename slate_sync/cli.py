from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from slate_sync.config import settings
from slate_sync.deployer import DeployInProgressError, EmptyInputError, ThemeDeployer
from slate_sync.schemas import DeployResult
from slate_sync.shopify_api import ShopifyThemesClient, ThemeApiError

logger = logging.getLogger("slate_sync")


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slate-sync",
        description="Deploy a built Slate theme to Shopify with Theme Kit.",
    )
    parser.add_argument("--env", default=None, help="Environment name; reads .env.<name> (default: .env).")
    parser.add_argument(
        "--log-level",
        default=settings.SLATE_SYNC_LOG_LEVEL,
        help="Logging level (default: SLATE_SYNC_LOG_LEVEL).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    sync_parser = subparsers.add_parser("sync", help="Upload the given theme files.")
    sync_parser.add_argument("files", nargs="+", help="Theme-relative paths, e.g. templates/index.liquid.")
    subparsers.add_parser("upload", help="Upload the whole theme without deleting remote files.")
    subparsers.add_parser("replace", help="Replace the remote theme, deleting files missing locally.")
    subparsers.add_parser("main-theme-id", help="Print the id of the store's published theme.")
    return parser


async def _run(args: argparse.Namespace) -> DeployResult | None:
    if args.command == "main-theme-id":
        theme_id = await ShopifyThemesClient(env_name=args.env).fetch_main_theme_id()
        print(theme_id)
        return None

    deployer = ThemeDeployer(env_name=args.env)
    if args.command == "sync":
        return await deployer.sync(args.files)
    if args.command == "upload":
        return await deployer.upload()
    return await deployer.replace()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)

    try:
        result = asyncio.run(_run(args))
    except (ThemeApiError, DeployInProgressError, EmptyInputError) as exc:
        raise SystemExit(str(exc)) from exc

    if result is None:
        return 0
    if result.status == "failed":
        logger.error("Deploy finished with errors: %s", result.error)
        return 1
    logger.info("Deploy %s: %d file(s)", result.status, len(result.files))
    return 0


if __name__ == "__main__":
    sys.exit(main())
