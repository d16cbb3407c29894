from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

from models.config import BrowserConfig
from runtime.config import CONFIG_FILE, load_config, resolve_defaults, save_config
from runtime.logs import setup_logging
from runtime.policy import AccessPolicy
from webui.web import DirectoryBrowserApp

logger = logging.getLogger("dirbrowse")


def application_dir() -> str:
    return os.path.dirname(os.path.abspath(sys.argv[0] or __file__))


async def serve(config: BrowserConfig, *, host: str, port: int) -> None:
    policy = AccessPolicy.from_config(config)
    app = DirectoryBrowserApp(config, policy, host=host, port=port)
    await app.start()
    try:
        await asyncio.Event().wait()
    except asyncio.CancelledError:
        pass
    finally:
        await app.stop()


def main(argv: list[str] | None = None) -> int:
    app_dir = application_dir()
    p = argparse.ArgumentParser(description="Browse this machine's directories over HTTP")
    p.add_argument(
        "--config",
        default=os.getenv("DIRBROWSE_CONFIG", os.path.join(app_dir, CONFIG_FILE)),
        help="Path of the JSON configuration file.",
    )
    p.add_argument(
        "--log-file",
        default=os.getenv("DIRBROWSE_LOG", os.path.join(app_dir, "log.txt")),
        help="Where to write the log ('-' for stderr).",
    )
    p.add_argument("--host", default=os.getenv("DIRBROWSE_HOST"), help="Override the listen address.")
    p.add_argument(
        "--port",
        type=int,
        default=int(os.environ["DIRBROWSE_PORT"]) if os.getenv("DIRBROWSE_PORT") else None,
        help="Override the listen port.",
    )
    p.add_argument(
        "--no-save",
        action="store_true",
        help="Do not rewrite the configuration file at startup.",
    )
    args = p.parse_args(argv)

    setup_logging(None if args.log_file == "-" else args.log_file)
    config = load_config(args.config)
    if not args.no_save:
        save_config(config, args.config)
    config = resolve_defaults(config, app_dir)

    host = args.host or config.address
    port = args.port if args.port is not None else config.port
    try:
        asyncio.run(serve(config, host=host, port=port))
    except OSError as exc:
        logger.critical("Could not listen on %s:%d: %s", host, port, exc)
        print(f"Could not listen on {host}:{port}: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
