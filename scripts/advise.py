#!/usr/bin/env python3
"""Estimate equity for a spot and show the recommended action."""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from equibot.advisor import Advisor, AdvisorConfig
from equibot.game.cards import parse_cards
from equibot.game.equity import EquityConfig, OpponentModel
from equibot.strategy.models import (
    ActionKind,
    AvailableAction,
    EquityReport,
    GameObservation,
)


def parse_actions(text: str) -> list[AvailableAction]:
    """Parse 'fold,call:20,bet' into available actions."""
    actions = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        kind, _, amount = part.partition(":")
        actions.append(AvailableAction(ActionKind.from_string(kind), int(amount or 0)))
    return actions


def main():
    parser = argparse.ArgumentParser(
        description="Estimate hold'em equity and recommend an action"
    )
    parser.add_argument(
        "-H", "--hand",
        help="Hole cards (e.g., 'AsKs' or 'As Ks')",
    )
    parser.add_argument(
        "-b", "--board",
        default="",
        help="Board cards, 0-5 (e.g., 'Qs7s2h')",
    )
    parser.add_argument(
        "--opponent",
        help="Specific opponent hole cards (default: random hand)",
    )
    parser.add_argument(
        "--range",
        dest="opponent_range",
        help="Opponent range (e.g., 'TT+, AQs+')",
    )
    parser.add_argument(
        "-t", "--trials",
        type=int,
        help="Number of trials (default depends on opponent model)",
    )
    parser.add_argument(
        "-s", "--seed",
        type=int,
        help="Random seed for reproducible results",
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=1,
        help="Threads to sample with (default: 1)",
    )
    parser.add_argument(
        "-p", "--pot",
        type=int,
        default=0,
        help="Total pot before calling (default: 0)",
    )
    parser.add_argument(
        "-a", "--actions",
        default="",
        help="Available actions, e.g. 'check,bet' or 'fold,call:20,bet'",
    )
    parser.add_argument(
        "--json",
        help="Read the observation from a JSON file ('-' for stdin)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()
    console = Console()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        observation = _load_observation(args)
        if args.opponent_range:
            opponent = OpponentModel.from_range(args.opponent_range)
        else:
            opponent = OpponentModel.coerce(args.opponent)
    except (ValueError, OSError) as e:
        console.print(f"[red]{e}[/]")
        return 1

    equity_config = EquityConfig(workers=args.workers)
    if args.trials is not None:
        equity_config.random_trials = args.trials
        equity_config.specific_trials = args.trials
        equity_config.range_trials = args.trials

    advisor = Advisor(
        AdvisorConfig(equity=equity_config, action_cooldown=0.0),
        opponent=opponent,
        seed=args.seed,
    )

    console.print(f"[bold]Hand:[/] {_cards_display(observation.hole_cards)}")
    console.print(f"[bold]Board:[/] {_cards_display(observation.board_cards) or '-'}")
    console.print(f"[bold]Opponent:[/] {opponent.label}")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Simulating...")

        def callback(trials_done, equity):
            progress.update(task, description=f"Trial {trials_done}, equity={equity:.1%}")

        report = advisor.report(observation, callback=callback)

    _display_report(console, report)

    if observation.available_actions:
        decision = advisor.decide(observation, report)
        color = {
            ActionKind.FOLD: "red",
            ActionKind.CHECK: "dim",
            ActionKind.CALL: "blue",
            ActionKind.BET: "green",
        }.get(decision.kind, "yellow")
        size = f" {decision.bet_size.value}" if decision.bet_size else ""
        console.print(Panel(
            f"[{color}]{decision.kind.name}{size}[/]\n{decision.rationale}",
            title="[bold]Recommendation[/]",
            border_style=color,
        ))

    return 0 if report.available else 1


def _load_observation(args) -> GameObservation:
    if args.json:
        if args.json == "-":
            data = json.load(sys.stdin)
        else:
            with open(args.json) as f:
                data = json.load(f)
        observation = GameObservation.from_dict(data)
        # Fail early on bad card codes
        parse_cards(observation.hole_cards + observation.board_cards)
        return observation

    if not args.hand:
        raise ValueError("Either --hand or --json is required")

    return GameObservation(
        hole_cards=[str(c) for c in parse_cards(args.hand)],
        board_cards=[str(c) for c in parse_cards(args.board)],
        pot_size=args.pot,
        total_pot=args.pot,
        available_actions=parse_actions(args.actions),
    )


def _cards_display(codes: list[str]) -> str:
    return " ".join(c.symbol for c in parse_cards(codes))


def _display_report(console: Console, report: EquityReport) -> None:
    """Display equity summary."""
    table = Table(title="Equity", show_header=False)
    table.add_column("Stat", style="cyan")
    table.add_column("Value", justify="right")

    if report.available:
        pct = report.percent
        style = "green" if pct >= 70 else "yellow" if pct >= 50 else "red"
        table.add_row("Equity", f"[{style}]{pct:.1f}%[/]")
    else:
        table.add_row("Equity", "[dim]N/A[/]")
    table.add_row("Hand", report.hand_description)
    table.add_row("Trials", f"{report.trials_run}{' (exact)' if report.exact else ''}")

    console.print(table)


if __name__ == "__main__":
    sys.exit(main())
