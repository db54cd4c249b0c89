from __future__ import annotations

import argparse
import logging

import pandas as pd

from marketlens import load_config
from marketlens.config import ProjectConfig
from marketlens.errors import UpstreamUnavailableError
from marketlens.feed import MarketFeed
from marketlens.ingestion.validation import format_validation_report, validate_bundle
from marketlens.markets import build_market_table
from marketlens.models import Region
from marketlens.providers import build_market_source
from marketlens.service import MarketService
from marketlens.stress import (
    budget_buffer,
    cost_impact_frame,
    load_reference_prices,
    load_scenarios,
    run_scenarios,
)
from marketlens.stress.state import PlannerState
from marketlens.utils.records import sort_by


def _service(cfg: ProjectConfig) -> MarketService:
    feed = MarketFeed(build_market_source(cfg), interval_sec=cfg.polling.interval_sec)
    snapshot = feed.refresh()
    if snapshot.used_fallback:
        print(f"(primary source unavailable; using {snapshot.provider_name} data)")
    return MarketService.from_snapshot(
        snapshot,
        load_scenarios(cfg.scenarios.path),
        markets=build_market_table(cfg.extra_markets()),
        forecast_confidence=cfg.forecast.default_confidence,
        news_per_region=cfg.forecast.news_per_region,
        reference=load_reference_prices(cfg.scenarios.reference_prices_path),
    )


def _parse_volume(text: str) -> tuple[str, float]:
    symbol, sep, qty = text.partition("=")
    if not sep or not symbol:
        raise argparse.ArgumentTypeError(f"Expected SYMBOL=QTY, got {text!r}")
    try:
        return symbol.strip().upper(), float(qty)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid quantity in {text!r}") from exc


def _with_volumes(
    service: MarketService, state: PlannerState, volumes: list[tuple[str, float]] | None
) -> PlannerState | None:
    # Volumes are keyed by canonical symbol; aliases such as CO resolve to WTI.
    for symbol, qty in volumes or []:
        canonical = service.canonical_symbol(symbol)
        if canonical is None:
            known = ", ".join(i.symbol for i in service.stress_universe())
            print(f"Unknown symbol {symbol!r}. Known symbols: {known}")
            return None
        state = state.with_volume(canonical, qty)
    return state


def _cmd_markets(args: argparse.Namespace) -> int:
    service = _service(load_config(args.config))
    rows = sort_by(service.search(args.query, args.category), args.sort, args.direction)
    df = pd.DataFrame([r.to_dict() for r in rows])
    if df.empty:
        print("No markets match.")
        return 0
    print(df[["symbol", "name", "category", "price", "change", "change_percent", "last_update"]].to_string(index=False))
    b = service.breadth()
    print(f"\n{b['total']} assets | {b['gainers']} up | {b['losers']} down | {b['unchanged']} unchanged")
    return 0


def _cmd_overview(args: argparse.Namespace) -> int:
    service = _service(load_config(args.config))
    overview = service.impact_overview(args.symbol)
    if overview is None:
        print(f"No data for {args.symbol}")
        return 1

    print(f"{overview.name} ({overview.symbol}) {overview.currency} {overview.current_price:,.2f}")
    for region in Region:
        analysis = overview.region(region)
        print(f"\n[{region.value}]")
        if analysis is None:
            print("  (no analysis)")
            continue
        print(f"  {analysis.daily_summary}")
        print(f"  -> {analysis.recommended_action}")
        for signal in analysis.key_signals:
            print(f"  * {signal.title}: {signal.value}")
        for news in analysis.news:
            print(f"  [{news.score:.0f}] {news.title}")

    if overview.forecasts:
        df = pd.DataFrame([f.to_dict() for f in overview.forecasts])
        print()
        print(df[["period", "target_price", "confidence", "direction", "source"]].to_string(index=False))
    return 0


def _cmd_stress(args: argparse.Namespace) -> int:
    service = _service(load_config(args.config))
    state = _with_volumes(service, PlannerState().with_scenario(args.scenario), args.volume)
    if state is None:
        return 1

    result = service.stress(state)
    if result.scenario is None:
        known = ", ".join(s.id for s in service.scenarios)
        print(f"No scenario selected. Known scenarios: {known}")
        return 1

    print(f"{result.scenario.name} [{result.scenario.severity.value}]")
    print(cost_impact_frame(result.impacts).to_string(index=False))
    print(f"\nTotal monthly cost impact: {result.total_cost:+,.0f}")
    print(f"Budget buffer (3 months): {budget_buffer(result.total_cost):,.0f}")
    return 0


def _cmd_compare(args: argparse.Namespace) -> int:
    service = _service(load_config(args.config))
    state = _with_volumes(service, PlannerState(), args.volume)
    if state is None:
        return 1
    df = run_scenarios(service.scenarios, service.stress_universe(), state.volumes)
    print(df.to_string(index=False))
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    source = build_market_source(cfg)
    result = source.fetch()
    results = validate_bundle(result.data, source.markets)
    print(format_validation_report(results))
    return 0 if all(r.is_valid for r in results.values()) else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="marketlens")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_markets = sub.add_parser("markets", help="List normalized markets")
    p_markets.add_argument("--config", help="Path to YAML config")
    p_markets.add_argument("--query", default="")
    p_markets.add_argument("--category", default="all")
    p_markets.add_argument("--sort", default="name")
    p_markets.add_argument("--direction", choices=["asc", "desc"], default="asc")
    p_markets.set_defaults(func=_cmd_markets)

    p_over = sub.add_parser("overview", help="Regional + forecast overview for one market")
    p_over.add_argument("symbol")
    p_over.add_argument("--config", help="Path to YAML config")
    p_over.set_defaults(func=_cmd_overview)

    p_stress = sub.add_parser("stress", help="Apply one stress scenario")
    p_stress.add_argument("--scenario", required=True)
    p_stress.add_argument("--volume", action="append", type=_parse_volume, help="SYMBOL=QTY")
    p_stress.add_argument("--config", help="Path to YAML config")
    p_stress.set_defaults(func=_cmd_stress)

    p_cmp = sub.add_parser("compare", help="Compare all stress scenarios")
    p_cmp.add_argument("--volume", action="append", type=_parse_volume, help="SYMBOL=QTY")
    p_cmp.add_argument("--config", help="Path to YAML config")
    p_cmp.set_defaults(func=_cmd_compare)

    p_val = sub.add_parser("validate", help="Validate the current market bundle")
    p_val.add_argument("--config", help="Path to YAML config")
    p_val.set_defaults(func=_cmd_validate)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )
    try:
        return int(args.func(args))
    except UpstreamUnavailableError as exc:
        print(f"Could not load market data: {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
