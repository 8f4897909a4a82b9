import logging
import os
import os.path
from configparser import RawConfigParser
from typing import Dict, Optional

base_logger = logging.getLogger("flavorconvert.config")

# Defaults used when no configuration file sets the option
DEFAULT_TEMPLATES_DIR = "/opt/hvs-flavortemplates"
DEFAULT_OUTPUT_FILE = "/opt/newflavorpart.json"

# Possible paths for base configuration files
CONFIG_FILES = {
    "flavorconvert": ["/etc/flavorconvert/flavorconvert.conf", "/usr/etc/flavorconvert/flavorconvert.conf"],
    "logging": ["/etc/flavorconvert/logging.conf", "/usr/etc/flavorconvert/logging.conf"],
}

# Paths to directories in which options can be overriden using configuration
# snippets
CONFIG_SNIPPETS_DIRS = {
    "flavorconvert": ["/usr/etc/flavorconvert/flavorconvert.conf.d", "/etc/flavorconvert/flavorconvert.conf.d"],
    "logging": ["/usr/etc/flavorconvert/logging.conf.d", "/etc/flavorconvert/logging.conf.d"],
}

CONFIG_ENV = {
    "flavorconvert": os.environ.get("FLAVORCONVERT_FLAVORCONVERT_CONFIG", ""),
    "logging": os.environ.get("FLAVORCONVERT_LOGGING_CONFIG", ""),
}

# Single instance
_config: Optional[Dict[str, RawConfigParser]] = None


def _read_snippets(component: str, parser: RawConfigParser) -> None:
    if not CONFIG_SNIPPETS_DIRS or not isinstance(CONFIG_SNIPPETS_DIRS, dict):
        raise Exception("Invalid CONFIG_SNIPPETS_DIRS")

    if not component in CONFIG_SNIPPETS_DIRS:
        raise Exception(f"Invalid component {component}")

    for d in (x for x in CONFIG_SNIPPETS_DIRS[component] if os.path.exists(x)):
        snippets = sorted([os.path.join(d, f) for f in os.listdir(d) if f and os.path.isfile(os.path.join(d, f))])
        applied_snippets = parser.read(snippets)
        if applied_snippets:
            base_logger.debug("Applied configuration snippets from %s", d)


def get_config(component: str) -> RawConfigParser:
    """Find the configuration file to use for the given component and apply the
    overrides defined by configuration snippets.

    Configuration files are looked up in /etc/flavorconvert and then in
    /usr/etc/flavorconvert; the first one found is the base configuration. If
    a configuration file path is set through a FLAVORCONVERT_*_CONFIG
    environment variable, only that file is used.

    Overrides can be placed in <component>.conf.d directories next to the base
    files. Snippets are applied in file name order.

    A missing configuration is not an error: every option has a default.
    """

    global _config

    if not _config:
        _config = {}

    if not component:
        raise Exception("No component provided to get_config")

    if component not in _config:
        # Use RawConfigParser, so we can also use it as the logging config
        _config[component] = RawConfigParser()

        if not CONFIG_ENV or not isinstance(CONFIG_ENV, dict):
            raise Exception("Invalid CONFIG_ENV")

        if not component in CONFIG_ENV:
            raise Exception(f"Invalid component '{component}'")

        if CONFIG_ENV[component]:
            if os.path.isfile(CONFIG_ENV[component]):
                config_files = _config[component].read(CONFIG_ENV[component])
                base_logger.debug("Reading configuration from %s", config_files)
                return _config[component]

            base_logger.warning(
                "Configuration file %s for %s set through environment variable not found, falling back to installed configuration",
                CONFIG_ENV[component],
                component,
            )

        if not CONFIG_FILES or not isinstance(CONFIG_FILES, dict):
            raise Exception("Invalid CONFIG_FILES")

        if not component in CONFIG_FILES:
            raise Exception(f"Invalid component {component}")

        for c in CONFIG_FILES[component]:
            config_file = _config[component].read(c)
            if config_file:
                base_logger.debug("Reading configuration from %s", config_file)
                _read_snippets(component, _config[component])
                break

    return _config[component]


def _get_env(component: str, option: str, section: Optional[str]) -> Optional[str]:
    opt_section = f"_{section.upper()}" if section else ""
    env_name = f"FLAVORCONVERT_{component.upper()}{opt_section}_{option.upper()}"
    env_value = os.environ.get(env_name, None)
    if env_value is not None:
        log_msg = f'option "{option}" on section {section} for component {component}.conf was overriden by environment variable {env_name}'
        base_logger.debug(log_msg.replace("on section None ", ""))

    return env_value


def get(component: str, option: str, section: Optional[str] = None, fallback: str = "") -> str:
    env_value = _get_env(component, option, section)
    if not section:
        section = component

    if env_value is not None:
        return env_value.strip('" ')

    return get_config(component).get(section, option, fallback=fallback).strip('" ')


def getboolean(component: str, option: str, section: Optional[str] = None, fallback: bool = False) -> bool:
    env_value = _get_env(component, option, section)
    if not section:
        section = component

    if env_value is not None:
        env_value_lower = env_value.lower().strip('" ')
        if env_value_lower not in RawConfigParser.BOOLEAN_STATES:
            return fallback
        return RawConfigParser.BOOLEAN_STATES[env_value_lower]

    return get_config(component).getboolean(section, option, fallback=fallback)


def templates_dir() -> str:
    return get("flavorconvert", "templates_dir", fallback=DEFAULT_TEMPLATES_DIR)


def output_file() -> str:
    return get("flavorconvert", "output_file", fallback=DEFAULT_OUTPUT_FILE)


def print_output() -> bool:
    return getboolean("flavorconvert", "print_output", fallback=True)
