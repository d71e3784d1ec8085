#!/usr/bin/env python3
# /termfolio/main.py
"""
Termfolio Main Entry Point
==========================

This script is the primary entry point for launching the terminal portfolio. It performs:
1) Environment Loading: reads ~/.config/termfolio/.env early (BROWSER, TERMFOLIO_KEYTRACE).
2) Path Setup: ensures the termfolio package is importable from a source checkout.
3) Configuration & Logging: loads config and initializes logging ASAP.
4) Core Import: imports the ConsoleApp class after logging is ready.
5) Curses Wrapper: safely initializes/tears down curses to avoid terminal corruption.
6) Application Run: instantiates ConsoleApp and starts its main loop.
"""

from __future__ import annotations

import curses
import locale
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# --- Step 1: Load Environment Variables from the User's Config Directory ---
dotenv_path = Path.home() / ".config" / "termfolio" / ".env"
if dotenv_path.is_file():
    load_dotenv(dotenv_path=dotenv_path)

# --- Step 2: Set up the Python Path ---
src_root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if os.path.isdir(src_root) and src_root not in sys.path:
    sys.path.insert(0, src_root)

# --- Step 3: Immediate Logging and Configuration Setup ---
try:
    from termfolio.utils.logging_config import setup_logging
    from termfolio.utils.utils import load_config

    config: dict[str, Any] = load_config()
    setup_logging(config)
    logger = logging.getLogger("termfolio")
except Exception as e:
    # Logging is not ready; print to stderr and exit.
    print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
    import traceback
    traceback.print_exc()
    sys.exit(1)

# --- Step 4: Import the Core Application ---
try:
    from termfolio.ui.ConsoleApp import ConsoleApp
except ImportError as e:
    logger.critical("Failed to import a critical application component: %s", e, exc_info=True)
    sys.exit(1)


# --- Step 5: Curses Application Runner ---
def main_app_runner(stdscr: curses.window, config: dict[str, Any]) -> None:
    """
    Target for `curses.wrapper`. Sets a short ESC delay, builds the console
    and runs its main loop until the quit key is pressed.
    """
    try:
        curses.set_escdelay(25)
    except AttributeError:
        os.environ.setdefault("ESCDELAY", "25")

    app = ConsoleApp(stdscr, config=config)

    # Ignore terminal suspension (Ctrl+Z), typical for full-screen TUIs.
    if hasattr(signal, "SIGTSTP"):
        signal.signal(signal.SIGTSTP, signal.SIG_IGN)

    try:
        app.run()
    finally:
        app.close()


def start() -> None:
    """Initializes locale and runs the curses application via wrapper."""
    logger.info("Termfolio starting up...")

    # Locale is important for proper character width/encoding behavior in curses.
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    try:
        curses.wrapper(main_app_runner, config)
        logger.info("Termfolio shut down gracefully.")
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    start()
