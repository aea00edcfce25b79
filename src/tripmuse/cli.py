"""
TripMuse CLI entrypoint.

This CLI is intended for quick local demos and debugging without the web UI.
It reads catalogs and event logs from JSON files and delegates all learning and
ranking logic to `tripmuse.learning` and `tripmuse.recommender`.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from tripmuse.catalog.loader import load_events, load_items, load_swipes, load_venues
from tripmuse.config.settings import get_settings
from tripmuse.core.logging import configure_logging
from tripmuse.domain.models import VenuePreferences
from tripmuse.learning.manager import PreferenceManager
from tripmuse.recommender.venues import rank_venues
from tripmuse.scoring.explain import one_line_summary, top_reason


def _parse_override_pairs(pairs: list[str]) -> dict[str, Any]:
    """Parse `dotted.path=JSON` arguments into a nested overrides mapping."""
    out: dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid --override '{pair}', expected PATH=VALUE")
        path, raw = pair.split("=", 1)
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        node = out
        keys = [k.strip() for k in path.split(".")]
        for key in keys[:-1]:
            node = node.setdefault(key, {})
        node[keys[-1]] = value
    return out


def _replay(manager: PreferenceManager, events_path: str | None) -> int:
    if not events_path:
        return 0
    events = load_events(events_path)
    for event in events:
        manager.record_behavior(event)
    return len(events)


def _cmd_rank_venues(args: argparse.Namespace) -> int:
    """Handle the `rank-venues` subcommand."""
    settings = get_settings()
    venues = load_venues(args.venues)
    swipes = load_swipes(args.swipes) if args.swipes else []
    prefs = VenuePreferences(
        interests=args.interest or [],
        traits=args.trait or [],
        budget_level=int(args.budget),
        travel_style=args.travel_style,
        settings_overrides=_parse_override_pairs(args.override) or None,
    )

    result = rank_venues(venues, prefs, swipes, limit=args.limit, settings=settings)

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    meta = result.meta
    print(f"Generated at: {result.generated_at.isoformat()}")
    print(
        f"Catalog: {meta.get('catalog_size')} venues, {meta.get('unseen_count')} unseen, "
        f"stage={meta.get('threshold_stage')}"
    )
    for i, scored in enumerate(result.results, start=1):
        print(f"{i:>2}. {scored.venue.name} [{scored.venue.category}]  {top_reason(scored)}")
        print(f"    {one_line_summary(scored)}")
    return 0


def _cmd_replay(args: argparse.Namespace) -> int:
    """Replay an event log, then rank candidate items for one actor."""
    manager = PreferenceManager(settings=get_settings())
    count = _replay(manager, args.events)
    items = load_items(args.items)

    cold_start = manager.is_cold_start(args.actor)
    ranked = manager.get_personalized_recommendations(args.actor, items)[: args.limit]

    if args.json:
        payload = {
            "actor_id": args.actor,
            "replayed_events": count,
            "cold_start": cold_start,
            "results": [item.model_dump(mode="json") for item in ranked],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    mode = "popularity (cold start)" if cold_start else "hybrid"
    print(f"Replayed {count} events; ranking for {args.actor} via {mode}")
    for i, item in enumerate(ranked, start=1):
        print(f"{i:>2}. {item.title or item.id} [{item.category}]  rating={item.rating:.1f} reviews={item.reviews}")
    return 0


def _cmd_insights(args: argparse.Namespace) -> int:
    manager = PreferenceManager(settings=get_settings())
    _replay(manager, args.events)
    insights = manager.get_insights(args.actor)

    if args.json:
        print(json.dumps(insights.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    print(f"Actor: {args.actor}")
    print(f"Interactions: {insights.total_interactions}  confidence={insights.confidence:.2f}")
    print("Top preferences:")
    for fw in insights.top_preferences:
        print(f"    - {fw.feature}: {fw.weight:+.3f}")
    for tip in insights.recommendations:
        print(f"* {tip}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the TripMuse CLI."""
    parser = argparse.ArgumentParser(prog="tripmuse")
    parser.add_argument("--log-level", default=None, help="Override the configured log level (e.g. DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    rank = sub.add_parser("rank-venues", help="Score and rank a venue catalog for a set of preferences.")
    rank.add_argument("--venues", required=True, help="JSON file with a list of venues")
    rank.add_argument("--swipes", default=None, help="JSON file with the actor's swipe history")
    rank.add_argument("--interest", action="append", default=[], help="Repeatable interest keyword")
    rank.add_argument("--trait", action="append", default=[], help="Repeatable trait id (see /api/settings)")
    rank.add_argument("--budget", type=int, default=2, help="Budget level 0..4")
    rank.add_argument("--travel-style", dest="travel_style", default="solo")
    rank.add_argument("--limit", type=int, default=None)
    rank.add_argument(
        "--override",
        action="append",
        default=[],
        help="Per-run settings override: PATH=VALUE (e.g. venue_scoring.adjustments.novelty_bonus=0.1)",
    )
    rank.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    rank.set_defaults(func=_cmd_rank_venues)

    rep = sub.add_parser("replay", help="Replay behavior events and rank candidate items for an actor.")
    rep.add_argument("--events", required=True, help="JSON file with a list of behavior events")
    rep.add_argument("--items", required=True, help="JSON file with a list of candidate items")
    rep.add_argument("--actor", required=True)
    rep.add_argument("--limit", type=int, default=20)
    rep.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    rep.set_defaults(func=_cmd_replay)

    ins = sub.add_parser("insights", help="Show what has been learned about an actor.")
    ins.add_argument("--events", default=None, help="JSON file with a list of behavior events")
    ins.add_argument("--actor", required=True)
    ins.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    ins.set_defaults(func=_cmd_insights)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m tripmuse.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
