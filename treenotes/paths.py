"""
Where TreeNotes keeps its preference file.

The home directory is chosen in this order: the TREENOTES_HOME variable, the
folder holding a frozen build's executable, then the source checkout.
"""

import os
import sys
from pathlib import Path

CONFIG_FILENAME = "config.json"


def get_app_dir() -> Path:
    """Directory that holds config.json for this install."""
    home = os.environ.get("TREENOTES_HOME")
    if home:
        return Path(home)
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    # source checkout: treenotes/ sits directly under the project root
    return Path(__file__).resolve().parent.parent


def get_config_path() -> Path:
    return get_app_dir() / CONFIG_FILENAME
