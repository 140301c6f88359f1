#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.sommelier.advisor import SommelierAdvisor  # noqa: E402
from backend.sommelier.cart import CartStore  # noqa: E402
from backend.sommelier.catalog import CatalogError, load_catalog  # noqa: E402
from backend.sommelier.contracts import LANGUAGES, AdvisoryRequest  # noqa: E402
from backend.sommelier.generator import OpenAIChatGenerator  # noqa: E402
from backend.sommelier.logging_config import configure_structlog  # noqa: E402
from backend.sommelier.pairings import StaticPairingLookup  # noqa: E402
from backend.sommelier.persistence import JsonFilePersistence  # noqa: E402
from backend.sommelier.prompts import format_price  # noqa: E402
from backend.sommelier.settings import settings  # noqa: E402
from backend.sommelier.suggestions import SuggestionStore  # noqa: E402


def _catalog(path: str) -> list:
    try:
        return load_catalog(path)
    except CatalogError as exc:
        raise SystemExit(str(exc)) from exc


def cmd_advise(args: argparse.Namespace) -> int:
    wines = _catalog(args.catalog)
    pairings = StaticPairingLookup.from_file(args.pairings) if args.pairings else None
    advisor = SommelierAdvisor(OpenAIChatGenerator(), pairings, limit=args.top_k)
    SuggestionStore(JsonFilePersistence(settings.suggestions_path)).add_query(args.query, args.lang)

    response = advisor.advise_sync(
        AdvisoryRequest(message=args.query, language=args.lang, wines=wines)
    )
    if args.json:
        print(json.dumps(response.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2))
        return 0

    for part in response.parts():
        if part.kind == "text":
            print(part.payload)
        elif part.kind == "recommendation_set":
            print()
            for wine in part.payload:
                print(f"- {wine.name} | {format_price(wine.price)} | {wine.volume} | {wine.link}")
        elif part.kind == "food_pairing_set":
            print()
            for dish in part.payload:
                print(f"* {dish}")
    return 0


def cmd_suggest(args: argparse.Namespace) -> int:
    store = SuggestionStore(JsonFilePersistence(settings.suggestions_path))
    for text in store.get_suggestions(args.lang, args.count):
        print(text)
    return 0


def cmd_cart(args: argparse.Namespace) -> int:
    cart = CartStore(JsonFilePersistence(settings.cart_path))
    if args.action == "add":
        if not args.catalog or not args.wine_id:
            raise SystemExit("cart add requires --catalog and a wine id")
        wines = {wine.id: wine for wine in _catalog(args.catalog)}
        wine = wines.get(args.wine_id)
        if wine is None:
            raise SystemExit(f"Unknown wine id: {args.wine_id}")
        if not cart.add_item(wine, args.quantity):
            print("Cart is full", file=sys.stderr)
            return 1
    elif args.action == "remove":
        cart.remove_item(args.wine_id or "")
    elif args.action == "set":
        cart.update_quantity(args.wine_id or "", args.quantity)
    elif args.action == "clear":
        cart.clear_cart()
    elif args.action == "export":
        print(cart.export_data())
        return 0
    elif args.action == "checkout":
        print(cart.checkout_url())
        return 0

    if cart.get_item_count():
        print(cart.shopping_list())
    else:
        print("Cart is empty")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wine sommelier CLI.")
    parser.add_argument("--verbose", action="store_true", help="Include info-level logs on stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    advise = sub.add_parser("advise", help="Ask for wine advice")
    advise.add_argument("query", help="Free-text wine request")
    advise.add_argument("--catalog", required=True, help="Catalog snapshot JSON file")
    advise.add_argument("--lang", choices=LANGUAGES, default=settings.DEFAULT_LANGUAGE)
    advise.add_argument("-k", "--top-k", type=int, default=settings.RECOMMENDATION_LIMIT)
    advise.add_argument("--pairings", help="JSON table of food pairings keyed by colour")
    advise.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    advise.set_defaults(handler=cmd_advise)

    suggest = sub.add_parser("suggest", help="Show suggested prompts")
    suggest.add_argument("--lang", choices=LANGUAGES, default=settings.DEFAULT_LANGUAGE)
    suggest.add_argument("-n", "--count", type=int, default=settings.SUGGESTION_TARGET)
    suggest.set_defaults(handler=cmd_suggest)

    cart = sub.add_parser("cart", help="Inspect or change the shopping cart")
    cart.add_argument(
        "action", choices=["list", "add", "remove", "set", "clear", "export", "checkout"]
    )
    cart.add_argument("wine_id", nargs="?")
    cart.add_argument("-q", "--quantity", type=int, default=1)
    cart.add_argument("--catalog", help="Catalog snapshot JSON file (for add)")
    cart.set_defaults(handler=cmd_cart)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_structlog(json_logs=not settings.DEBUG)
    if not args.verbose:
        logging.getLogger().setLevel(logging.WARNING)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
