"""
Configuration loading for wedge.
Uses XDG Base Directory: $XDG_CONFIG_HOME/wedge/wedge.yaml (default ~/.config/wedge/wedge.yaml).
Priority: CLI > wedge.yaml > hardcoded defaults.
"""
import os
import logging

logger = logging.getLogger(__name__)

# Default YAML content written when config file does not exist
_DEFAULT_YAML_CONTENT = """# wedge – keyboard wedge barcode listener
# CLI options override these values.

# Max quiet time in ms between two characters of one scan.
buffer_ms: 100
# Read characters from key presses instead of releases.
use_key_down: false
# "count": a quiet period ends the scan, short bursts are ignored.
# "terminator": a scan ends with the terminator character.
termination: "count"
min_length: 4
terminator: "m"
# Only listen to keyboards whose name contains this text.
device: null
poll_ms: 10
# "plain" or "json"
output: "plain"
verbose: false
"""

OUTPUT_FORMATS = ("plain", "json")


def get_config_dir():
    """
    Return wedge config directory per XDG Base Directory.
    Uses $XDG_CONFIG_HOME/wedge, or ~/.config/wedge if unset.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    if not xdg:
        xdg = os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(xdg, "wedge")


def get_config_path():
    """Return full path to wedge.yaml."""
    return os.path.join(get_config_dir(), "wedge.yaml")


def get_default_config():
    """
    Return hardcoded default config as a dict (single source of truth for lowest priority).
    """
    return {
        "buffer_ms": 100,
        "use_key_down": False,
        "termination": "count",
        "min_length": 4,
        "terminator": "m",
        "device": None,
        "poll_ms": 10,
        "output": "plain",
        "verbose": False,
    }


def ensure_config_file():
    """
    If wedge.yaml does not exist, create config dir and write default wedge.yaml.
    """
    path = get_config_path()
    if os.path.isfile(path):
        return
    try:
        dirpath = get_config_dir()
        os.makedirs(dirpath, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(_DEFAULT_YAML_CONTENT)
        logger.debug("Created default config at %s", path)
    except OSError as e:
        logger.warning("Could not create config file %s: %s", path, e)


def load_config():
    """
    Load config: defaults + wedge.yaml (if present).
    If wedge.yaml does not exist, it is created with default content, then defaults are returned.
    """
    import yaml

    defaults = get_default_config()
    path = get_config_path()

    if not os.path.isfile(path):
        ensure_config_file()
        return defaults

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not load config from %s: %s. Using defaults.", path, e)
        return defaults

    if not isinstance(data, dict):
        return defaults

    # Merge: user file over defaults (only known keys)
    merged = dict(defaults)
    for key in defaults:
        if key in data:
            merged[key] = data[key]
    return merged


def merge_cli_args(cfg, args):
    """
    Apply CLI arguments over a loaded config.

    Arguments left at None (not given on the command line) keep the config value.

    Args:
        cfg: Config dict from load_config()
        args: argparse.Namespace whose attribute names match config keys

    Returns:
        A new merged dict.
    """
    merged = dict(cfg)
    for key in cfg:
        value = getattr(args, key, None)
        if value is not None:
            merged[key] = value
    return merged
