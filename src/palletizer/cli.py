from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from palletizer.client import PalletizerClient
from palletizer.config import ClientSettings
from palletizer.errors import PalletizerError
from palletizer.models import PackingRequest, PackingResponse
from palletizer.pallets import get_pallet_constraints
from palletizer.report import format_summary
from palletizer.units import inches_to_mm, pounds_to_grams

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_SOFT_ERROR = 2

_CARTON_LENGTH_KEYS = ("length", "width", "height")
_CONSTRAINT_LENGTH_KEYS = ("max_length", "max_width", "max_height")


def build_request(data: dict[str, Any]) -> PackingRequest:
    """
    Build a PackingRequest from an input document.

    The document uses the wire format, with two conveniences:
    - "pallet_preset": name from palletizer.pallets, instead of "packing_constraints"
    - "units": "imperial" -> carton/constraint lengths in inches and weights in pounds
    """
    data = dict(data)
    units = str(data.pop("units", "metric")).strip().lower()
    if units not in ("metric", "imperial"):
        raise ValueError(f"Unknown units '{units}'. Valid: ['imperial', 'metric']")
    imperial = units == "imperial"

    cartons = []
    for carton in data.get("cartons", []):
        carton = dict(carton)
        if imperial:
            for key in _CARTON_LENGTH_KEYS:
                if key in carton:
                    carton[key] = inches_to_mm(float(carton[key]))
            if "weight" in carton:
                carton["weight"] = pounds_to_grams(float(carton["weight"]))
        cartons.append(carton)
    data["cartons"] = cartons

    # 1) Constraints from preset OR explicit packing_constraints
    if "pallet_preset" in data:
        # JSON numbers such as 4048 name presets too
        preset = str(data.pop("pallet_preset"))
        data["packing_constraints"] = get_pallet_constraints(preset).model_dump()
        logger.info(f"Using pallet preset: {preset}")
    elif "packing_constraints" in data:
        constraints = dict(data["packing_constraints"])
        if imperial:
            for key in _CONSTRAINT_LENGTH_KEYS:
                if key in constraints:
                    constraints[key] = inches_to_mm(float(constraints[key]))
            if "max_weight" in constraints:
                constraints["max_weight"] = pounds_to_grams(float(constraints["max_weight"]))
        data["packing_constraints"] = constraints
    else:
        raise ValueError("Input must include either 'pallet_preset' or 'packing_constraints'")

    return PackingRequest.model_validate(data)


def load_input(path: Path) -> tuple[PackingRequest, bool]:
    """Read an input file; returns the request and whether it was written in imperial units."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    imperial = str(data.get("units", "metric")).strip().lower() == "imperial"
    return build_request(data), imperial


def write_response(response: PackingResponse, path: str) -> None:
    """Write the response JSON, creating parent folders and overwriting any existing file."""
    output_path = Path(path).resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(response.model_dump_json(indent=2), encoding="utf-8")
    logger.info(f"Response written to {output_path}")


def cmd_pack(args: argparse.Namespace, client: PalletizerClient) -> int:
    try:
        request, imperial = load_input(Path(args.input))
    except (OSError, TypeError, ValueError) as e:
        # pydantic's ValidationError is a ValueError
        logger.error(f"Invalid input {args.input}: {e}")
        return EXIT_FAILED

    logger.info(f"Packing {request.total_quantity()} cartons ({len(request.cartons)} types)")
    try:
        response = client.pack(request, timeout=args.timeout)
    except PalletizerError as e:
        logger.error(f"Pack failed: {e}")
        return EXIT_FAILED

    if args.output:
        try:
            write_response(response, args.output)
        except OSError as e:
            logger.error(f"Could not write response to {args.output}: {e}")
            return EXIT_FAILED
    print(format_summary(response, imperial=imperial))

    if response.error:
        return EXIT_SOFT_ERROR
    return EXIT_OK


def cmd_health(args: argparse.Namespace, client: PalletizerClient) -> int:
    try:
        health = client.health(timeout=args.timeout)
    except PalletizerError as e:
        logger.error(f"Health check failed: {e}")
        return EXIT_FAILED
    print(health.model_dump_json(indent=2))
    return EXIT_OK


def cmd_metrics(args: argparse.Namespace, client: PalletizerClient) -> int:
    try:
        metrics = client.metrics(timeout=args.timeout)
    except PalletizerError as e:
        logger.error(f"Metrics request failed: {e}")
        return EXIT_FAILED
    print(metrics.model_dump_json(indent=2))
    return EXIT_OK


COMMANDS = {
    "pack": cmd_pack,
    "health": cmd_health,
    "metrics": cmd_metrics,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="palletizer", description="Palletizer API client")
    parser.add_argument("--endpoint", default=None, help="API base URL (default: PALLETIZER_API_URL or https://api.palletizer.app)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-call deadline in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")

    sub = parser.add_subparsers(dest="command", required=True)
    pack = sub.add_parser("pack", help="Send a packing request")
    pack.add_argument("--input", required=True, help="Input request JSON file")
    pack.add_argument("--output", default=None, help="Write the response JSON to this file")
    sub.add_parser("health", help="Query service health")
    sub.add_parser("metrics", help="Query service metrics")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = ClientSettings.from_env()
    except ValueError as e:
        logging.basicConfig(level=logging.WARNING)
        logger.error(str(e))
        return EXIT_FAILED

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with PalletizerClient.with_endpoint(args.endpoint or settings.api_url, timeout=settings.timeout) as client:
        return COMMANDS[args.command](args, client)


if __name__ == "__main__":
    raise SystemExit(main())
