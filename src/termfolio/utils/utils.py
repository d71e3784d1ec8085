# termfolio/utils/utils.py
"""
termfolio.utils.utils
=====================

Core utility functions for the termfolio console.

Key functionalities include:
- Automatic User Configuration: creates `config.toml` and `.env` templates in
  `~/.config/termfolio` on first run.
- Layered Configuration Loading: a hardcoded, built-in default configuration
  recursively merged with the user's `~/.config/termfolio/config.toml`.
- External Resources: a guarded wrapper around `webbrowser` used to open
  mail, phone and web links on behalf of the console.
- Helper Utilities: deep-merging dictionaries and hex to xterm-256 colour
  conversion.

The console is always runnable, even if the user configuration files are
missing or corrupted, because every lookup falls back to the embedded
defaults.
"""

import copy
import logging
import shutil
import webbrowser
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger("termfolio")

# --- Constants ---
CALM_BG_IDX = 16
WHITE_FG_IDX = 255

ENV_TEMPLATE = """# Environment overrides for termfolio.
# Set TERMFOLIO_KEYTRACE=1 to write every decoded key event to keytrace.log.
TERMFOLIO_KEYTRACE=
# Browser used to open links (see the `webbrowser` module documentation).
BROWSER=
"""

# Hardcoded mirror of the shipped `config.toml`.
# It is the ultimate fallback, so the console can ALWAYS start.
DEFAULT_CONFIG: Dict[str, Any] = {
    "console": {
        "prompt": "$ ",
        "banner": [
            "Welcome to the terminal portfolio! Type 'help' for commands.",
            "Clean code always looks like it was written by someone who cares.",
        ],
        "scrollback": 1000,
    },
    "colors": {"foreground": "#00ff00", "background": "#000000"},
    "keybindings": {"quit": "ctrl+d", "scroll_up": "pageup", "scroll_down": "pagedown"},
    "timings": {"resume_open_delay": 1.0, "portfolio_open_delay": 2.0},
    "profile": {
        "name": "Alex Example",
        "about": "Alex Example - Full-Stack & Game Developer.",
        "whoami": (
            "My name is Alex and I'm a motivated full-stack/game developer with "
            "experience in building websites and games."
        ),
        "email": "alex@example.com",
        "phone": "+10000000000",
        "github": "https://github.com/example",
        "portfolio": "https://portfolio.example.com",
        "resume": "https://portfolio.example.com/assets/resume.pdf",
        "projects": [
            {"title": "Uplift Solution", "url": "https://portfolio.example.com/projects/uplift"},
            {"title": "Trilium Quest", "url": "https://portfolio.example.com/projects/trilium-quest"},
            {"title": "Arch Games Studio", "url": "https://portfolio.example.com/projects/arch-games"},
        ],
    },
    "jokes": [
        "Why do programmers prefer dark mode? Because light attracts bugs.",
        "There are 10 kinds of people: those who understand binary and those who don't.",
        "A SQL query walks into a bar, walks up to two tables and asks: 'Can I join you?'",
        "I would tell you a UDP joke, but you might not get it.",
        "Debugging: being the detective in a crime movie where you are also the murderer.",
    ],
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
}


# --- Helper Functions ---

def get_project_root() -> Path:
    """Determines the project's root directory for finding template files."""
    return Path(__file__).resolve().parents[3]


def get_user_config_dir() -> Path:
    return Path.home() / ".config" / "termfolio"


def ensure_user_config_exists() -> None:
    """Checks for user config files in `~/.config/termfolio` and creates them if missing."""
    try:
        config_dir = get_user_config_dir()
        user_config_path = config_dir / "config.toml"
        user_env_path = config_dir / ".env"

        config_dir.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            source_config_path = get_project_root() / "config.toml"
            if source_config_path.exists():
                shutil.copy(source_config_path, user_config_path)
                logger.info(f"Created user config template at: {user_config_path}")

        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Created user .env template at: {user_env_path}")

    except Exception as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config() -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the console can always run.
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    ensure_user_config_exists()

    user_config_path = get_user_config_dir() / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {user_config_path}")
        except Exception as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")

    return final_config


def open_external_resource(target: str) -> bool:
    """
    Opens a mail link, phone link or web page in a new browser context.

    Failures belong to the host, so they are logged and reported through the
    return value instead of being raised into the edit loop.
    """
    try:
        opened = webbrowser.open_new_tab(target)
    except Exception:
        logger.exception(f"Failed to open external resource: {target!r}")
        return False
    if not opened:
        logger.warning(f"No browser accepted external resource: {target!r}")
    else:
        logger.info(f"Opened external resource: {target!r}")
    return bool(opened)


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.

    Neither input is modified and the result shares no mutable values with them.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def hex_to_xterm(hex_color: str) -> int:
    """
    Converts a hexadecimal color string to the nearest xterm-256 color index.
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        return WHITE_FG_IDX
    try:
        r, g, b = (int(hex_color[i:i+2], 16) for i in (0, 2, 4))
    except ValueError:
        return WHITE_FG_IDX

    if r == g == b:
        if r < 8: return 16
        if r > 248: return 231
        return round(((r - 8) / 247) * 24) + 232

    return int(
        16
        + (36 * round(r / 255 * 5))
        + (6 * round(g / 255 * 5))
        + round(b / 255 * 5)
    )
