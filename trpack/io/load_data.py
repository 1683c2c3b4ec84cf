# trpack/io/load_data.py
# Minimal job JSON loader

from __future__ import annotations
import json
from typing import Any


def load_jobs(path: str) -> list[dict[str, Any]]:
    """
    Load pack jobs from a JSON file.

    Expected format (one object or a list of them):
    {
        "id": "hello",
        "source": "puts 'hi'",
        "tr_from": "'a-y'", "tr_to": "'b-z'"    # or "table": [256 ints]
    }

    Args:
        path: path to job JSON file

    Returns:
        list of job dicts

    Raises:
        ValueError: if the file holds neither an object nor a list of objects
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(j, dict) for j in data):
        raise ValueError(f"{path}: expected a job object or a list of job objects")

    for i, job in enumerate(data):
        job.setdefault("id", f"job{i}")
    return data
