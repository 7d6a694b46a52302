from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from ..errors import GridError
from ..utils.logging import setup_logging
from .models import ScenarioSpec
from .runner import run_scenario


def load_scenario(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Scenario JSON not found: {path}")
    return json.loads(p.read_text())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Replay a demand-response scenario against the grid controller."
    )
    parser.add_argument(
        "--input",
        "-i",
        required=True,
        help="Path to scenario JSON.",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Path to write the full result JSON (status, passes, requests).",
    )
    parser.add_argument(
        "--csv",
        help="Path to write final substation loading as CSV.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default from SMARTGRID_LOG_LEVEL, INFO).",
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        raw = load_scenario(args.input)
        spec = ScenarioSpec.model_validate(raw)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2
    except ValidationError as e:
        print("Scenario validation error:", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    try:
        result = run_scenario(spec)
    except GridError as e:
        print(f"Scenario error: {e}", file=sys.stderr)
        return 2

    if args.output:
        Path(args.output).write_text(json.dumps(result.to_dict(), indent=2))
    if args.csv:
        result.status.to_frame().to_csv(args.csv)

    print(result.status.render())

    shed = sum(len(p.shed) for p in result.passes)
    allocated = sum(len(p.allocated) for p in result.passes)
    print(f"\nAllocated: {allocated}, Shed: {shed}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
