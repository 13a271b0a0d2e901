import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

PUZZLE_KEYS = ("puzzle", "quizzes", "quiz", "grid", "board", "initial_state")


def _coerce_lists(value: Any) -> Any:
    """numpy arrays (nested parquet columns) become plain lists, recursively."""
    if isinstance(value, dict):
        return {k: _coerce_lists(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_coerce_lists(v) for v in value]
    if hasattr(value, "tolist") and getattr(value, "ndim", 0) > 0:
        return [_coerce_lists(v) for v in value.tolist()]
    return value


def load_puzzles(file_path: str) -> List[Dict[str, Any]]:
    """
    Reads puzzles from a file. Handles .parquet, .csv, .json, .jsonl and plain text
    (one puzzle per line). Returns records of the form {"id": ..., "puzzle": <text>}.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    stem = Path(file_path).stem

    def _is_nonempty_str(value: Any) -> bool:
        return isinstance(value, str) and value.strip() != ""

    def _extract_puzzle_text(record: Dict[str, Any]) -> Optional[str]:
        for key in PUZZLE_KEYS:
            value = record.get(key)
            if _is_nonempty_str(value):
                return value.strip()
            # Nested 9x9 lists are flattened into the text format.
            if isinstance(value, list) and value and all(isinstance(row, list) for row in value):
                return "".join(str(cell) for row in value for cell in row)
        return None

    def _normalize_record(record: Dict[str, Any], index: int) -> Optional[Dict[str, Any]]:
        text = _extract_puzzle_text(record)
        if text is None:
            return None
        normalized = dict(record)
        normalized["puzzle"] = text
        if not _is_nonempty_str(str(record.get("id", "") or "")):
            normalized["id"] = f"{stem}-{index}"
        else:
            normalized["id"] = str(record["id"])
        return normalized

    def _normalize_all(records: List[Any]) -> List[Dict[str, Any]]:
        out = []
        for i, r in enumerate(records):
            if isinstance(r, dict):
                normalized = _normalize_record(r, i)
                if normalized is not None:
                    out.append(normalized)
        return out

    def _read_json_lines() -> List[Dict[str, Any]]:
        data = []
        with open(file_path, "r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    obj = json.loads(line)
                except json.JSONDecodeError:
                    continue
                data.append(obj)
        return _normalize_all(data)

    # Case 1: tabular files via pandas
    if file_path.endswith(".parquet"):
        df = pd.read_parquet(file_path)
        return _normalize_all([_coerce_lists(r) for r in df.to_dict(orient="records")])

    if file_path.endswith(".csv"):
        # Keep puzzle columns as text so leading zeros survive.
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
        return _normalize_all(df.to_dict(orient="records"))

    # Case 2: JSON file (array or object)
    if file_path.endswith(".json"):
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except json.JSONDecodeError:
            # Some sources use ".json" but actually store JSONL.
            return _read_json_lines()
        if isinstance(payload, list):
            return _normalize_all(payload)
        if isinstance(payload, dict):
            return _normalize_all([payload])
        return []

    # Case 3: JSONL file
    if file_path.endswith(".jsonl"):
        return _read_json_lines()

    # Case 4: plain text, one puzzle per non-blank line
    data = []
    with open(file_path, "r", encoding="utf-8") as f:
        for line in f:
            text = line.strip()
            if text and not text.startswith("#"):
                data.append({"puzzle": text})
    return _normalize_all(data)
