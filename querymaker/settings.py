import os
from dotenv import load_dotenv

# Field that marks a soft-deleted document
SOFT_DELETE_FIELD = "deletedAt"

# Suffix for variables generated in correlated $lookup "let" bindings
LET_SUFFIX = "_tmp"


def refresh():
    """Re-read settings from os.environ."""
    global SOFT_DELETE_FIELD, LET_SUFFIX
    SOFT_DELETE_FIELD = os.getenv("QUERYMAKER_SOFT_DELETE_FIELD", "deletedAt")
    LET_SUFFIX = os.getenv("QUERYMAKER_LET_SUFFIX", "_tmp")


def load_env_file(dotenv_path=None, override=False):
    """Load a .env file into os.environ, then refresh settings.

    Nothing is loaded at import; the host application decides when (and
    whether) a .env file is read.
    """
    load_dotenv(dotenv_path, override=override)
    refresh()


refresh()
