import json
from pathlib import Path


def load_recipes(path):
    """Load seed recipes from a JSON file and return a list of dicts.

    The file holds a JSON array of recipe objects using the API's camelCase
    field names. An ``id`` on a seed entry is kept so seeded recipes have
    stable ids across restarts.

    Args:
        path (str or Path): Path to the JSON file.

    Returns:
        list: list of recipe dictionaries, empty if the file is missing.
    """
    p = Path(path)
    if not p.exists():
        return []
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{p} must contain a JSON array of recipes")
    return data
