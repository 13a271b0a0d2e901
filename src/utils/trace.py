"""Tracing module: records solver and generator steps and writes them to CSV."""

import csv
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TraceStep:
    """A single step in the solving process."""

    timestamp: float
    step_number: int
    action_type: str  # 'place', 'backtrack', 'solution_found', 'exhausted', 'seed', 'remove'
    row: Optional[int] = None
    col: Optional[int] = None
    value: Optional[int] = None
    depth: Optional[int] = None  # Number of cells filled by the search so far
    reason: Optional[str] = None


class Tracer:
    """Records solver steps for logging and analysis."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.steps: List[TraceStep] = []
        self.start_time = datetime.now().timestamp()
        self.step_counter = 0

    def _get_timestamp(self) -> float:
        """Get elapsed time in seconds since tracer creation."""
        return datetime.now().timestamp() - self.start_time

    def _record(self, action_type: str, **fields: Any) -> None:
        if not self.enabled:
            return
        self.step_counter += 1
        self.steps.append(TraceStep(
            timestamp=self._get_timestamp(),
            step_number=self.step_counter,
            action_type=action_type,
            **fields,
        ))

    def log_place(self, row: int, col: int, value: int, depth: int):
        """Log a digit placed by the search."""
        self._record('place', row=row, col=col, value=value, depth=depth)

    def log_backtrack(self, row: int, col: int, reason: str = "No legal digit completes the grid"):
        """Log a backtrack out of a cell."""
        self._record('backtrack', row=row, col=col, reason=reason)

    def log_solution_found(self, depth: int):
        self._record('solution_found', depth=depth)

    def log_exhausted(self, row: Optional[int], col: Optional[int]):
        self._record('exhausted', row=row, col=col, reason="Search space exhausted")

    def log_seed(self, box_row: int, box_col: int):
        """Log a diagonal box seeded by the generator."""
        self._record('seed', row=box_row, col=box_col)

    def log_remove(self, removed: int, attempts: int):
        self._record('remove', value=removed, reason=f"Blanked {removed} cells in {attempts} picks")

    def to_csv(self, filepath: Path) -> None:
        """Write trace to CSV file."""
        if not self.steps:
            logger.info("No trace steps to write")
            return

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        fieldnames = [
            'timestamp', 'step_number', 'action_type', 'row', 'col', 'value', 'depth', 'reason'
        ]

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for step in self.steps:
                writer.writerow(asdict(step))

        logger.info("Trace written to %s (%d steps)", filepath, len(self.steps))

    def summary(self) -> Dict[str, Any]:
        """Get a summary of the trace."""
        action_counts: Dict[str, int] = {}
        for step in self.steps:
            action_counts[step.action_type] = action_counts.get(step.action_type, 0) + 1

        return {
            'total_steps': len(self.steps),
            'elapsed_time_seconds': self._get_timestamp(),
            'action_counts': action_counts,
            'num_placements': action_counts.get('place', 0),
            'num_backtracks': action_counts.get('backtrack', 0),
        }


# Global tracer instance
_global_tracer: Optional[Tracer] = None


def get_tracer() -> Tracer:
    """Get or create the global tracer. It records nothing until `enable_tracing` is called."""
    global _global_tracer
    if _global_tracer is None:
        _global_tracer = Tracer(enabled=False)
    return _global_tracer


def reset_tracer() -> None:
    """Reset the global tracer."""
    global _global_tracer
    _global_tracer = None


def enable_tracing(enabled: bool = True) -> None:
    """Enable or disable tracing."""
    get_tracer().enabled = enabled
