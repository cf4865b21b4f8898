"""CLI commands for Foodprint."""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

from foodprint.services.carbon_service import carbon_resolver
from foodprint.services.response_interpreter import interpret_response


def serve(host: str, port: int, reload: bool = False) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("foodprint.main:app", host=host, port=port, reload=reload)


def lookup(name: str, category: str | None = None) -> None:
    """Print the carbon footprint for one ingredient and how it was found."""
    result = carbon_resolver.match(name, category)
    print(
        f"{name}: {result.carbon_per_kg} kg CO2e/kg "
        f"({result.tier.value} match on '{result.matched_key}')"
    )


def interpret(path: str, dish: str | None = None, image_name: str | None = None) -> None:
    """Interpret a saved raw model response and print the resolved estimate."""
    from foodprint.api.schemas import build_estimate_response
    from foodprint.services.estimate_service import Estimate

    file_path = Path(path)
    if not file_path.exists():
        print(f"Error: File '{path}' not found.")
        sys.exit(1)

    if image_name:
        analysis = interpret_response(file_path.read_text(), image_name, "image")
    else:
        analysis = interpret_response(file_path.read_text(), dish, "text")

    estimate = Estimate(
        analysis=carbon_resolver.resolve_analysis(analysis),
        model_used="offline",
        processing_time_ms=0,
        analyzed_at=datetime.now(timezone.utc),
    )
    print(build_estimate_response(estimate).model_dump_json(by_alias=True, indent=2))


def main():
    parser = argparse.ArgumentParser(description="Foodprint CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes"
    )

    # lookup command
    lookup_parser = subparsers.add_parser(
        "lookup", help="Look up the carbon footprint of an ingredient"
    )
    lookup_parser.add_argument("name", help="Ingredient name")
    lookup_parser.add_argument(
        "--category", help="Ingredient category used when no table entry matches"
    )

    # interpret command
    interpret_parser = subparsers.add_parser(
        "interpret", help="Interpret a saved raw model response"
    )
    interpret_parser.add_argument("file", help="File containing the raw response text")
    source = interpret_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--dish", help="Dish name (text analysis)")
    source.add_argument("--image-name", help="Uploaded image file name (image analysis)")

    args = parser.parse_args()

    if args.command == "serve":
        serve(args.host, args.port, args.reload)
    elif args.command == "lookup":
        lookup(args.name, args.category)
    elif args.command == "interpret":
        interpret(args.file, dish=args.dish, image_name=args.image_name)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
