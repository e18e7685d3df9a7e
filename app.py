# app.py - command line front end for the qbt client
import argparse
import asyncio
import json
import logging
import sys

import httpx

from qbt import QbtError, connect, info_hash, info_hash_from_url
from qbt.config import load_config

logger = logging.getLogger("qbt.app")


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr
    )
    # Silence noisy libraries
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qbt", description="Talk to a qBittorrent WebUI.")
    parser.add_argument("--host", default=None, help="WebUI host, host:port or URL (QBT_HOST)")
    parser.add_argument("--username", default=None, help="WebUI username (QBT_USERNAME)")
    parser.add_argument("--password", default=None, help="WebUI password (QBT_PASSWORD)")
    parser.add_argument("--env-file", default=None, help="Load settings from this .env file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every request")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("version", help="Show application and WebAPI versions")

    list_cmd = commands.add_parser("list", help="List torrents")
    list_cmd.add_argument("--filter", default=None)
    list_cmd.add_argument("--category", default=None)
    list_cmd.add_argument("--sort", default=None)
    list_cmd.add_argument("--reverse", action="store_true")
    list_cmd.add_argument("--limit", type=int, default=None)

    for name in ("pause", "resume"):
        cmd = commands.add_parser(name, help=f"{name.title()} torrents")
        cmd.add_argument("hashes", nargs="+")

    delete_cmd = commands.add_parser("delete", help="Delete torrents")
    delete_cmd.add_argument("--delete-files", action="store_true")
    delete_cmd.add_argument("hashes", nargs="+")

    commands.add_parser("categories", help="List categories")

    hash_cmd = commands.add_parser("hash", help="Print the info hash of a .torrent file or URL")
    hash_cmd.add_argument("source")

    return parser


async def run(args, config) -> object:
    if args.command == "hash":
        if args.source.startswith(("http://", "https://")):
            return await info_hash_from_url(args.source, timeout=config["QBT_TIMEOUT"])
        with open(args.source, "rb") as f:
            return info_hash(f.read())

    qbt = await connect(
        args.host or config["QBT_HOST"],
        args.username or config["QBT_USERNAME"],
        args.password if args.password is not None else config["QBT_PASSWORD"],
        timeout=config["QBT_TIMEOUT"],
    )
    logger.debug(f"Logged in to {qbt.target.origin}")

    if args.command == "version":
        return {"app": await qbt.app_version(), "api": await qbt.api_version()}
    if args.command == "list":
        return await qbt.torrents(
            filter=args.filter, category=args.category, sort=args.sort,
            reverse=args.reverse, limit=args.limit,
        )
    if args.command == "pause":
        return await qbt.pause_torrents(args.hashes)
    if args.command == "resume":
        return await qbt.resume_torrents(args.hashes)
    if args.command == "delete":
        return await qbt.delete_torrents(args.hashes, delete_files=args.delete_files)
    # categories
    return await qbt.categories()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.env_file)
    except QbtError as e:
        print(f"qbt: {e}", file=sys.stderr)
        return 2
    configure_logging("DEBUG" if args.verbose else config["LOG_LEVEL"])

    try:
        result = asyncio.run(run(args, config))
    except (QbtError, httpx.HTTPError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"qbt: {e}", file=sys.stderr)
        return 1

    if result is not None:
        print(result if isinstance(result, str) else json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
