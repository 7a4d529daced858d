"""stratbench backtesting entry point."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from typing import Union

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from stratbench.backtest.engine import BacktestEngine
from stratbench.backtest.export import export_results
from stratbench.backtest.models import BacktestConfig, BacktestResult, OptimizationResult, StrategyError
from stratbench.backtest.optimizer import compare_strategies, optimize_parameters
from stratbench.config.settings import (
    DEFAULT_COMMISSION_RATE,
    DEFAULT_END_DATE,
    DEFAULT_INITIAL_BALANCE,
    DEFAULT_RISK_FREE_RATE,
    DEFAULT_START_DATE,
    DEFAULT_SYMBOL,
)
from stratbench.data.loader import load_price_series
from stratbench.strategies.registry import default_registry

console = Console()


def _float_list(value: str) -> list[float]:
    try:
        return [float(v) for v in value.split(",") if v.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected comma-separated numbers, got '{value}'")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="stratbench: strategy backtesting engine")
    parser.add_argument("--data", "-d", type=str, required=True, help="Price series file (.csv or .json)")
    parser.add_argument(
        "--strategy", "-s", type=str, default="DAY_TRADING",
        help="Strategy timeframe key (default: DAY_TRADING)",
    )
    parser.add_argument("--compare", action="store_true", help="Backtest every registered strategy")
    parser.add_argument("--optimize", action="store_true", help="Grid-search the strategy's parameters")
    parser.add_argument("--target-profit", type=_float_list, default=None, help="Candidates, e.g. 1,2,3")
    parser.add_argument("--stop-loss", type=_float_list, default=None, help="Candidates, e.g. 0.5,1")
    parser.add_argument("--max-hold-time", type=_float_list, default=None, help="Candidates in seconds")
    parser.add_argument("--cash", type=float, default=DEFAULT_INITIAL_BALANCE, help="Starting balance")
    parser.add_argument("--commission", type=float, default=DEFAULT_COMMISSION_RATE, help="Commission rate")
    parser.add_argument("--risk-free-rate", type=float, default=DEFAULT_RISK_FREE_RATE)
    parser.add_argument("--start-date", type=str, default=DEFAULT_START_DATE, help="Span start (YYYY-MM-DD)")
    parser.add_argument("--end-date", type=str, default=DEFAULT_END_DATE, help="Span end (YYYY-MM-DD)")
    parser.add_argument("--symbol", type=str, default=DEFAULT_SYMBOL)
    parser.add_argument("--export", type=str, default=None, help="Write the result to .json or .csv")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    if args.compare and args.export:
        parser.error("--export writes a single result and cannot be combined with --compare")
    if args.optimize and not (args.target_profit or args.stop_loss or args.max_hold_time):
        parser.error("--optimize needs at least one of --target-profit, --stop-loss, --max-hold-time")
    return args


# ── Display helpers ─────────────────────────────────────────────────


def _display_summary(result: BacktestResult) -> None:
    """Display summary panel."""
    pnl = result.final_balance - result.initial_balance
    color = "green" if pnl >= 0 else "red"

    lines = [
        f"Strategy:     {result.strategy} ({result.timeframe})",
        f"Steps:        {max(len(result.equity) - 1, 0)}",
        f"",
        f"Initial:      ${result.initial_balance:>12,.2f}",
        f"Final:        ${result.final_balance:>12,.2f}",
        f"P&L:          [{color}]${pnl:>12,.2f} ({result.total_return:+.2f}%)[/{color}]",
    ]

    console.print(Panel("\n".join(lines), title="Backtest Summary", border_style="cyan"))


def _display_metrics(result: BacktestResult) -> None:
    """Display performance metrics table."""
    table = Table(title="Performance Metrics", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Total Trades", str(result.total_trades))
    table.add_row("Winning / Losing", f"{result.winning_trades} / {result.losing_trades}")
    table.add_row("Win Rate", f"{result.win_rate:.2f}%")
    table.add_row("Total Return", f"{result.total_return:+.2f}%")
    table.add_row("Annualized Return", f"{result.annualized_return * 100:+.2f}%")
    table.add_row("Sharpe Ratio", f"{result.sharpe_ratio:.2f}")
    table.add_row("Max Drawdown", f"{result.max_drawdown:.2f}%")
    table.add_row("Profit Factor", f"{result.profit_factor:.2f}")
    table.add_row("Avg Win", f"{result.avg_win:+.2f}%")
    table.add_row("Avg Loss", f"{result.avg_loss:+.2f}%")
    table.add_row("Avg Hold Time", f"{result.avg_hold_time / 3600:.2f}h")

    console.print(table)


def _display_trade_log(result: BacktestResult, max_trades: int = 20) -> None:
    """Display recent trade log."""
    trades = result.trades
    if not trades:
        console.print("[dim]No trades executed.[/dim]")
        return

    table = Table(title=f"Trade Log (last {min(max_trades, len(trades))} of {len(trades)})",
                  show_header=True, header_style="bold cyan")
    table.add_column("Exit")
    table.add_column("Dir")
    table.add_column("Qty", justify="right")
    table.add_column("Entry", justify="right")
    table.add_column("Exit Price", justify="right")
    table.add_column("P/L", justify="right")
    table.add_column("Reason")

    for trade in trades[-max_trades:]:
        color = "green" if trade.profit_loss > 0 else "red"
        table.add_row(
            str(trade.exit_time),
            trade.direction,
            f"{trade.quantity:,.4f}",
            f"${trade.entry_price:,.2f}",
            f"${trade.exit_price:,.2f}",
            f"[{color}]{trade.profit_loss:+.2f}%[/{color}]",
            trade.exit_reason,
        )

    console.print(table)


def _display_equity_curve(result: BacktestResult, width: int = 60, height: int = 15) -> None:
    """Display ASCII equity curve."""
    values = result.equity
    if len(values) < 2:
        return

    min_val = min(values)
    max_val = max(values)
    val_range = max_val - min_val

    if val_range == 0:
        return

    # Resample to fit width
    if len(values) > width:
        step = len(values) / width
        sampled = [values[int(i * step)] for i in range(width)]
    else:
        sampled = values
        width = len(sampled)

    console.print(Panel.fit("[bold cyan]Equity Curve[/bold cyan]"))

    for row in range(height - 1, -1, -1):
        threshold = min_val + (val_range * row / (height - 1))
        if row == height - 1:
            label = f"${max_val:>10,.0f} |"
        elif row == 0:
            label = f"${min_val:>10,.0f} |"
        elif row == height // 2:
            mid = (max_val + min_val) / 2
            label = f"${mid:>10,.0f} |"
        else:
            label = "             |"

        line_chars = ["█" if v >= threshold else " " for v in sampled]
        console.print(f"{label}{''.join(line_chars)}")

    console.print("             +" + "─" * width)


def _display_comparison(results: dict[str, Union[BacktestResult, StrategyError]]) -> None:
    """Display one row per compared strategy."""
    table = Table(title="Strategy Comparison", show_header=True, header_style="bold cyan")
    table.add_column("Timeframe", style="bold")
    table.add_column("Trades", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("Return", justify="right")
    table.add_column("Sharpe", justify="right")
    table.add_column("Max DD", justify="right")

    for timeframe, res in results.items():
        if isinstance(res, StrategyError):
            table.add_row(timeframe, f"[red]error: {res.error}[/red]", "", "", "", "")
            continue
        table.add_row(
            timeframe,
            str(res.total_trades),
            f"{res.win_rate:.2f}%",
            f"{res.total_return:+.2f}%",
            f"{res.sharpe_ratio:.2f}",
            f"{res.max_drawdown:.2f}%",
        )

    console.print(table)


def _display_optimization(best: OptimizationResult) -> None:
    if best.parameters is None:
        console.print("[yellow]No parameter combinations evaluated.[/yellow]")
        return
    lines = [f"{key}: {value}" for key, value in best.parameters.items()]
    lines.append(f"sharpe: {best.sharpe_ratio:.4f} ({len(best.trials)} combinations)")
    console.print(Panel("\n".join(lines), title="Best Parameters", border_style="green"))


def _display_result(result: BacktestResult) -> None:
    console.print()
    _display_summary(result)
    console.print()
    _display_metrics(result)
    console.print()
    _display_trade_log(result)
    console.print()
    _display_equity_curve(result)
    console.print()


# ── Main ────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    log_level = logging.DEBUG if args.debug else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    try:
        config = BacktestConfig(
            initial_balance=args.cash,
            commission_rate=args.commission,
            risk_free_rate=args.risk_free_rate,
            start_date=date.fromisoformat(args.start_date),
            end_date=date.fromisoformat(args.end_date),
            symbol=args.symbol,
        )
        records = load_price_series(args.data)
        registry = default_registry()
        engine = BacktestEngine(config)

        console.print(f"\n[bold green]stratbench backtester[/bold green]")
        console.print(f"Data: {args.data} ({len(records)} points) | Span: {args.start_date} to {args.end_date}\n")

        if args.compare:
            results = compare_strategies(engine, registry.keys(), records, registry=registry)
            _display_comparison(results)
            return 0

        strategy = registry.get(args.strategy)
        if args.optimize:
            ranges = {
                key: values
                for key, values in (
                    ("target_profit", args.target_profit),
                    ("stop_loss", args.stop_loss),
                    ("max_hold_time", args.max_hold_time),
                )
                if values
            }
            best = optimize_parameters(engine, strategy, records, ranges, show_progress=True)
            _display_optimization(best)
            result = best.result
        else:
            result = engine.run(strategy, records)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1

    if result is None:
        return 0

    _display_result(result)
    if args.export:
        export_results(result, args.export)
        console.print(f"[dim]Result written to {args.export}[/dim]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
