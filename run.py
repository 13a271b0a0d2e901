"""CLI entrypoint: load or generate puzzle(s), run the solver, and report results."""

import argparse
import csv
import logging
import random
from dataclasses import replace
from pathlib import Path

from solver import solve_puzzle
from src.sudoku.config import SudokuConfig
from src.sudoku.errors import MalformedPuzzleText
from src.sudoku.generator import generate
from src.sudoku.loader import load_puzzles
from src.sudoku.parser import format_grid, serialize_grid
from src.utils.trace import enable_tracing, get_tracer, reset_tracer

logger = logging.getLogger("run")

PUZZLE_SUFFIXES = [".json", ".jsonl", ".parquet", ".csv", ".txt"]


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Solve or generate 9x9 Sudoku puzzles")
    parser.add_argument("input", type=Path, nargs="?", help="Path to a puzzle file or directory of puzzles")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write solutions as CSV")
    parser.add_argument("--generate", type=int, default=0, metavar="N", help="Generate N puzzles instead of solving")
    parser.add_argument(
        "--cells-to-remove",
        type=int,
        default=None,
        help="Cells blanked per generated puzzle (default: SUDOKU_CELLS_TO_REMOVE or 45).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible generation")
    parser.add_argument("--trace", type=Path, default=None, help="Write the solver trace of the last puzzle to CSV")
    parser.add_argument("--log-level", default=None, help="Logging level (default: SUDOKU_LOG_LEVEL or INFO)")
    args = parser.parse_args(argv)
    if args.input is None and not args.generate:
        parser.error("either an input path or --generate N is required")
    return args


def build_config(args) -> SudokuConfig:
    config = SudokuConfig.from_env()
    overrides = {}
    if args.cells_to_remove is not None:
        overrides["cells_to_remove"] = args.cells_to_remove
    if args.log_level:
        overrides["log_level"] = args.log_level
    return replace(config, **overrides)


def collect_puzzles(input_path: Path) -> list:
    puzzles = []
    if input_path.is_file():
        puzzles = load_puzzles(str(input_path))
    elif input_path.is_dir():
        for file_path in sorted(input_path.iterdir()):
            if file_path.suffix in PUZZLE_SUFFIXES:
                puzzles.extend(load_puzzles(str(file_path)))
    else:
        raise ValueError(f"Input path {input_path} is neither file nor directory")
    return puzzles


def solve_all(puzzles: list, trace_enabled: bool = True) -> list:
    results = []
    for puzzle in puzzles:
        reset_tracer()
        enable_tracing(trace_enabled)
        tracer = get_tracer()
        puzzle_id = puzzle.get("id", "unknown")

        try:
            solution = solve_puzzle(puzzle)
        except MalformedPuzzleText as e:
            logger.error("Skipping puzzle %s: %s", puzzle_id, e)
            results.append({"id": puzzle_id, "solution": "", "steps": -1})
            continue

        summary = tracer.summary()
        results.append({
            "id": puzzle_id,
            "solution": serialize_grid(solution) if solution else "",
            # Placements are the measure of search effort; bookkeeping steps are not counted.
            "steps": summary["num_placements"],
        })
        if not solution:
            logger.warning("Puzzle %s has no solution", puzzle_id)
    return results


def write_results_csv(results, output_path: Path):
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["id", "solution", "steps"])
        for r in results:
            writer.writerow([r["id"], r["solution"], r["steps"]])


def generate_all(count: int, config: SudokuConfig, seed=None) -> list:
    rng = random.Random(seed)
    generated = []
    for i in range(count):
        reset_tracer()
        enable_tracing(config.trace_enabled)
        puzzle = generate(cells_to_remove=config.cells_to_remove, rng=rng)
        generated.append({
            "id": f"generated-{i}",
            "puzzle": serialize_grid(puzzle.puzzle),
            "solution": serialize_grid(puzzle.solution),
            "steps": get_tracer().summary()["num_placements"],
        })
        print(format_grid(puzzle.puzzle))
        print()
    return generated


def main(argv=None):
    args = parse_args(argv)
    config = build_config(args)
    logging.basicConfig(level=config.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.generate:
        results = generate_all(args.generate, config, seed=args.seed)
    else:
        puzzles = collect_puzzles(args.input)
        logger.info("Loaded %d puzzles from %s", len(puzzles), args.input)
        results = solve_all(puzzles, config.trace_enabled)

    if args.trace:
        get_tracer().to_csv(args.trace)

    if args.output:
        if args.generate:
            with open(args.output, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(["id", "puzzle", "solution", "steps"])
                for r in results:
                    writer.writerow([r["id"], r["puzzle"], r["solution"], r["steps"]])
        else:
            write_results_csv(results, args.output)
    else:
        for r in results:
            print(f"{r['id']},{r['solution']},{r['steps']}")
    return results


if __name__ == "__main__":
    main()
