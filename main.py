#!/usr/bin/env python3
"""
Main entry point for xbar-pr-status.

Usage:
    python main.py [--since DAYS] [--<status>-emoji GLYPH ...] GITHUB_API_TOKEN

Every option can also be set through the environment or a .env file, which
is how xbar plugins are usually configured:
    GITHUB_API_TOKEN=ghp_... SINCE=14 python main.py
"""

import os
import sys
from typing import Optional

import click
from dotenv import load_dotenv
from loguru import logger

from errors import XbarPrStatusError, format_error_chain
from pipeline import MAX_SINCE_DAYS, Config, run_pipeline
from xbar import Emoji

load_dotenv()

LOG_LEVEL_ENV = "XBAR_PR_STATUS_LOG"


def configure_logging() -> None:
    """Send logs to stderr so they never end up in the menu."""
    logger.remove()
    logger.add(sys.stderr, level=os.environ.get(LOG_LEVEL_ENV, "WARNING").upper())


def emoji_options(func):
    """Add a --<status>-emoji option, with a matching env var, per glyph."""
    for name, field in reversed(list(Emoji.model_fields.items())):
        func = click.option(
            f"--{name.replace('_', '-')}-emoji",
            name,
            envvar=f"{name.upper()}_EMOJI",
            default=field.default,
            show_default=True,
            help=f"Glyph for pull requests whose status is {name.replace('_', ' ')}.",
        )(func)
    return func


@click.command()
@click.argument("github_api_token", envvar="GITHUB_API_TOKEN")
@click.option(
    "--since",
    envvar="SINCE",
    type=click.IntRange(min=0, max=MAX_SINCE_DAYS),
    default=None,
    help="Ignore pull requests last updated more than this many days ago.",
)
@emoji_options
def main(github_api_token: str, since: Optional[int], **emoji: str):
    """
    Show the merge-readiness of your open pull requests in the menu bar.

    GITHUB_API_TOKEN needs the `repo` and `read:user` scopes. You can make one
    at https://github.com/settings/tokens
    """
    configure_logging()

    config = Config(
        github_api_token=github_api_token,
        since=since,
        emoji=Emoji(**emoji),
    )

    try:
        output = run_pipeline(config)
    except XbarPrStatusError as e:
        logger.error(f"Run failed: {e}")
        # xbar only shows stdout, so the error goes there too
        click.echo(format_error_chain(e))
        sys.exit(1)

    click.echo(output, nl=False)


if __name__ == "__main__":
    main()
