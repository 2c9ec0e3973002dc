#!/usr/bin/env python3
"""
Pinterest Login - Command line entry point
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

sys.path.append(str(Path(__file__).parent))

from config import BrowserConfig, LOGGER, setup_logging
from cookie_extractor import encode_cookies
from credentials import CredentialProvider, StaticCredentialProvider, default_credential_provider
from errors import ConfigError, CredentialError
from models import OutcomeKind
from workflow import login

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_ACTION_REQUIRED = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Log in to Pinterest with a real browser and print the session cookies as JSON."
    )
    parser.add_argument("--head", action="store_true", help="show the browser window")
    parser.add_argument("-t", "--timeout", type=float, default=3.0,
                        help="per-operation timeout in seconds (default: 3)")
    parser.add_argument("--executable-path", help="Chromium executable to launch instead of the bundled one")
    parser.add_argument("--launch-arg", action="append", default=[], dest="launch_args",
                        help="extra browser argument, may be repeated; pass dash-prefixed values "
                             "with an equals sign, e.g. --launch-arg=--mute-audio")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--log-file")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> BrowserConfig:
    builder = BrowserConfig.builder().headless(not args.head).request_timeout(args.timeout)
    if args.executable_path:
        builder.executable_path(args.executable_path)
    if args.launch_args:
        builder.launch_args(*args.launch_args)
    return builder.build()


def collect_credentials(provider: CredentialProvider) -> StaticCredentialProvider:
    """Resolve credentials on the calling thread, before any event loop exists.

    A prompt blocked in a worker thread ignores Ctrl-C, so the CLI asks up front
    and hands the login flow a provider that never blocks.
    """
    credentials = provider.get_credentials()
    return StaticCredentialProvider(credentials.identifier, credentials.secret.get_secret_value())


async def main(
    argv: Optional[List[str]] = None,
    credential_provider: Optional[CredentialProvider] = None
) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)
    load_dotenv()

    try:
        config = build_config(args)
        outcome = await login(credential_provider or default_credential_provider(), config)
    except (ConfigError, CredentialError) as e:
        print(str(e), file=sys.stderr)
        return EXIT_FAILURE

    if outcome.is_success:
        print(encode_cookies(outcome.cookies))
        return EXIT_OK

    if outcome.kind == OutcomeKind.INVALID_CREDENTIALS:
        print("Authentication error: The email or password you entered is incorrect.", file=sys.stderr)
        return EXIT_ACTION_REQUIRED
    if outcome.kind == OutcomeKind.CHALLENGE_REQUIRED:
        print("The account requires verification, finish it in a headed browser (--head).", file=sys.stderr)
        return EXIT_ACTION_REQUIRED

    LOGGER.error(f"Login failed ({outcome.kind.value}): {outcome.detail}")
    print(f"The login was unsuccessful: {outcome.detail}", file=sys.stderr)
    return EXIT_FAILURE


def run() -> None:
    # --help and usage errors exit here, before anything prompts
    parse_args()
    load_dotenv()
    try:
        provider = collect_credentials(default_credential_provider())
    except CredentialError as e:
        print(str(e), file=sys.stderr)
        sys.exit(EXIT_FAILURE)

    try:
        sys.exit(asyncio.run(main(credential_provider=provider)))
    except KeyboardInterrupt:
        LOGGER.info("Login interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    run()
