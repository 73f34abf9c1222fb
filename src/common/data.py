import os

from common.load_settings import load_settings

DATA_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data"
)
settings = load_settings()
MAX_FIELD_LENGTH = settings["max_field_length"]


def get_store_path() -> str:
    """
    Resolve the JSON file used to persist finished retros.
    Returns:
        str: RETRO_STORE_PATH if set, otherwise retros.json under DATA_DIR.
    """
    return settings["retro_store_path"] or os.path.join(DATA_DIR, "retros.json")
