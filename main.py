"""
Entry point for desktop and browser.

pygbag loads ``main.py`` and expects it to drive an asyncio event loop, so
in the browser the async entry point runs; on the desktop the blocking loop
runs through the command-line interface.
"""

import asyncio

import env
from minigame_app import async_main, cli, main

__all__ = ["main", "async_main", "run"]


def run():
    if env.is_browser:
        asyncio.run(async_main())
    else:
        cli()


if __name__ == "__main__":
    run()
