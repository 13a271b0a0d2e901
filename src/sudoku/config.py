"""Runtime configuration, read from the environment and overridable from the CLI."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_CELLS_TO_REMOVE = 45

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class SudokuConfig:
    cells_to_remove: int = DEFAULT_CELLS_TO_REMOVE
    trace_enabled: bool = True
    log_level: str = "INFO"
    # None keeps session records in memory.
    store_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        if not 0 <= self.cells_to_remove <= 81:
            raise ValueError(f"cells_to_remove must be in 0..81, got {self.cells_to_remove}")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SudokuConfig":
        env = os.environ if environ is None else environ
        values = {}

        raw = env.get("SUDOKU_CELLS_TO_REMOVE")
        if raw:
            try:
                values["cells_to_remove"] = int(raw)
            except ValueError:
                raise ValueError(f"SUDOKU_CELLS_TO_REMOVE must be an integer, got {raw!r}") from None

        raw = env.get("SUDOKU_TRACE")
        if raw:
            lowered = raw.strip().lower()
            if lowered in _TRUE:
                values["trace_enabled"] = True
            elif lowered in _FALSE:
                values["trace_enabled"] = False
            else:
                raise ValueError(f"SUDOKU_TRACE must be a boolean flag, got {raw!r}")

        raw = env.get("SUDOKU_LOG_LEVEL")
        if raw:
            values["log_level"] = raw

        raw = env.get("SUDOKU_STORE_DIR")
        if raw:
            values["store_dir"] = Path(raw)

        return cls(**values)
