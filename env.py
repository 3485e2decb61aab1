"""Platform detection and environment utilities for the minigame arcade.

This module provides a centralized location for runtime platform detection,
isolating browser-specific (pygbag/WASM) concerns from desktop runtime
logic.

Platform Support
----------------
The arcade supports two runtime environments:

1. **Desktop (CPython + PyGame)**:
   - Development and testing environment
   - Detected when not running in the browser
   - Uses PyGame for the window, mouse and keyboard input
   - High scores stored in a JSON file next to the program

2. **Browser (Pygbag/Emscripten/WASM)**:
   - Web deployment via WebAssembly
   - Detected via ``sys.platform == "emscripten"``
   - Requires async/await for cooperative multitasking
   - High scores stored in the page's ``localStorage``

Module Variables
----------------
is_browser : bool
    True when running in browser via pygbag (Emscripten/WASM).

is_desktop : bool
    True when running on desktop CPython with PyGame.

IS_PYGBAG : bool
    Alias for ``is_browser``.

Example Usage
-------------
Basic platform detection::

    import env

    if env.is_browser:
        asyncio.run(async_main())
    else:
        main()
"""

import sys

# Detection is performed at import time and cached in module-level flags.

# Pygbag patches sys.platform to "emscripten"; the platform module is not
# reliable in WASM environments.
is_browser = sys.platform == "emscripten"

is_desktop = not is_browser

IS_PYGBAG = is_browser


def get_platform_name():
    """Return a human-readable platform name.

    Returns
    -------
    str
        ``"browser"`` when running via pygbag/WASM, otherwise ``"desktop"``.

    Examples
    --------
    >>> import logging
    >>> logger = logging.getLogger(__name__)
    >>> logger.info("Arcade starting on %s", get_platform_name())
    """
    if is_browser:
        return "browser"
    return "desktop"


def require_browser():
    """Raise an error if not running in browser environment.

    Use at the start of browser-specific code paths (``localStorage``
    access, for instance) to fail fast with a clear error message.

    Raises
    ------
    RuntimeError
        If not running in pygbag browser environment.
    """
    if not is_browser:
        raise RuntimeError(
            "This code requires browser environment (pygbag/Emscripten). "
            f"Current platform: {get_platform_name()}"
        )


def require_desktop():
    """Raise an error if not running in desktop environment.

    Use at the start of desktop-only code paths such as file I/O.

    Raises
    ------
    RuntimeError
        If not running in desktop CPython environment.
    """
    if not is_desktop:
        raise RuntimeError(
            "This code requires desktop CPython environment. "
            f"Current platform: {get_platform_name()}"
        )
