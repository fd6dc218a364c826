"""
Console and CSV reporting of analysis passes.
"""

import csv
import os
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from tabulate import tabulate

from cycle_arbitrage.config import ExecutionCostModel
from cycle_arbitrage.exceptions import ReportingError
from cycle_arbitrage.types import (
    ArbitrageOpportunity,
    MultiPathOpportunity,
    ReserveSnapshot,
)
from cycle_arbitrage.utils import format_duration, format_percentage, get_logger

logger = get_logger(__name__)

CSV_HEADERS = [
    "timestamp",
    "block_number",
    "optimal_input",
    "final_output",
    "gross_profit",
    "net_profit",
    "profit_percentage",
    "gas_cost",
    "search_method",
    "path_type",
    "path",
    "gas_units",
    "fetch_time_ms",
    "analysis_time_ms",
]

TOP_OPPORTUNITIES = 5


def init_csv_file(csv_file_path: str) -> None:
    """
    Create the CSV file with its header row if it does not exist yet.

    Raises:
        ReportingError: If the file cannot be created
    """
    if os.path.exists(csv_file_path):
        return
    try:
        directory = os.path.dirname(csv_file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(csv_file_path, "w", newline="") as f:
            csv.writer(f).writerow(CSV_HEADERS)
    except OSError as e:
        raise ReportingError(
            f"Failed to initialize CSV file: {e}", path=csv_file_path
        ) from e


def opportunity_row(
    opportunity: ArbitrageOpportunity,
    block_number: int,
    cost_model: ExecutionCostModel,
    fetch_time_ms: int = 0,
    analysis_time_ms: int = 0,
    timestamp: Optional[datetime] = None,
) -> List:
    """One CSV row, column order matching CSV_HEADERS."""
    timestamp = timestamp or datetime.now(timezone.utc)
    hop_count = opportunity.hop_count()
    return [
        timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3] + " UTC",
        block_number,
        f"{opportunity.optimal_input:.6f}",
        f"{opportunity.final_output:.6f}",
        f"{opportunity.gross_profit:.6f}",
        f"{opportunity.net_profit:.6f}",
        f"{opportunity.profit_percentage:.4f}",
        f"{opportunity.execution_cost:.8f}",
        opportunity.search_method,
        opportunity.path_type(),
        opportunity.description(),
        cost_model.gas_units(hop_count),
        fetch_time_ms,
        analysis_time_ms,
    ]


def write_opportunity(
    csv_file_path: str,
    opportunity: ArbitrageOpportunity,
    block_number: int,
    cost_model: ExecutionCostModel,
    fetch_time_ms: int = 0,
    analysis_time_ms: int = 0,
) -> None:
    """
    Append one opportunity to the CSV file, writing the header first if needed.

    Raises:
        ReportingError: If the file cannot be written
    """
    init_csv_file(csv_file_path)
    row = opportunity_row(
        opportunity, block_number, cost_model, fetch_time_ms, analysis_time_ms
    )
    try:
        with open(csv_file_path, "a", newline="") as f:
            csv.writer(f).writerow(row)
    except OSError as e:
        raise ReportingError(
            f"Failed to write to CSV: {e}", path=csv_file_path
        ) from e


def format_single_pool_reserves(snapshot: ReserveSnapshot) -> str:
    """e.g. "1000.00 WMNT / 5000.00 MOE"."""
    reserve_a, reserve_b = snapshot.reserves_in_units()
    return (
        f"{reserve_a:.2f} {snapshot.token_a.symbol} / "
        f"{reserve_b:.2f} {snapshot.token_b.symbol}"
    )


def opportunities_table(
    opportunities: Sequence[ArbitrageOpportunity], limit: int = TOP_OPPORTUNITIES
) -> str:
    """Grid table of the first ``limit`` opportunities."""
    table_data = []
    for rank, opp in enumerate(opportunities[:limit], start=1):
        table_data.append(
            [
                rank,
                opp.description(),
                opp.path_type(),
                f"{opp.optimal_input:.6f}",
                f"{opp.net_profit:.6f}",
                format_percentage(opp.profit_percentage),
            ]
        )
    return tabulate(
        table_data,
        headers=["#", "Path", "Type", "Input", "Net Profit", "Profit %"],
        tablefmt="grid",
    )


def print_opportunity(opportunity: ArbitrageOpportunity, iterations: int) -> None:
    print("💎 OPTIMAL ARBITRAGE OPPORTUNITY FOUND!")
    print(f"   🛣  Path: {opportunity.description()}")
    print(
        f"   🎯 Optimal Input: {opportunity.optimal_input:.6f} "
        f"(via {opportunity.search_method})"
    )
    print(f"   📈 Final Output: {opportunity.final_output:.6f}")
    print(f"   💰 Gross Profit: {opportunity.gross_profit:.6f}")
    print(
        f"   🎯 Net Profit: {opportunity.net_profit:.6f} "
        f"({format_percentage(opportunity.profit_percentage)})"
    )
    print(f"   ⛽ After {opportunity.execution_cost:.8f} gas cost")
    print(f"   🔍 Search iterations: {iterations}")


def print_pass_summary(
    result: MultiPathOpportunity,
    ranked: Sequence[ArbitrageOpportunity],
    block_number: int,
    iterations: int,
    fetch_time_ms: int = 0,
) -> None:
    """
    Console summary of one analysis pass.

    Args:
        result: Pass result from the analyzer
        ranked: Profitable opportunities, best first
        block_number: Block the reserves were read at
        iterations: Ternary search rounds used
        fetch_time_ms: Time spent fetching reserves
    """
    timing = (
        f"fetch {format_duration(fetch_time_ms / 1000)}, "
        f"analysis {format_duration(result.analysis_time_ms / 1000)}"
    )
    print(
        f"\n🔗 Block #{block_number:,}: {result.candidate_count} candidate cycles, "
        f"{len(ranked)} profitable ({timing})"
    )

    if not ranked:
        best = result.best_attempt()
        if best is None:
            print("   📊 No arbitrage cycles found")
        else:
            print(
                "   📊 No profitable opportunity after costs. "
                f"Gross: {best.gross_profit:.6f}, Net: {best.net_profit:.6f}"
            )
        return

    print_opportunity(ranked[0], iterations)
    if len(ranked) > 1:
        print(opportunities_table(ranked))
