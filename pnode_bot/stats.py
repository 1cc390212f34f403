"""
pNode Statistics.

Queries the ``get-pods`` RPC method and aggregates the pod list into
per-version counts and a total, rendered as a chat-ready report.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .rpc import RpcClient

console = Console()

GET_PODS_METHOD = "get-pods"
VERSION_FRAGMENTS = ("0.4.0", "0.4.1", "0.4.2")


@dataclass
class StatsReport:
    """Per-version pod counts plus the network total."""
    counts: dict[str, int] = field(default_factory=dict)
    total: int = 0


def extract_pods(rpc_result: Any) -> list:
    """Pull the pod list out of a ``get-pods`` result, or ``[]`` if the shape is off."""
    if isinstance(rpc_result, dict) and isinstance(rpc_result.get("pods"), list):
        return rpc_result["pods"]
    console.print(
        f"[yellow]extract_pods: unexpected RPC shape {escape(json.dumps(rpc_result, default=str))}[/yellow]"
    )
    return []


def count_by_fragment(pods: Sequence[Any], fragment: str) -> int:
    """Count pods whose version text contains ``fragment`` (case-sensitive)."""
    count = 0
    for pod in pods:
        version = pod.get("version") if isinstance(pod, dict) else None
        if fragment in ("" if version is None else str(version)):
            count += 1
    return count


def total_count(rpc_result: Any) -> int:
    """
    Total number of pods on the network.

    Prefers the remote ``total_count`` counter; falls back to the length of the
    pod list. The two are not reconciled when they disagree. A counter that is
    not a whole number (fractional, NaN, infinite) is ignored.
    """
    if isinstance(rpc_result, dict):
        total = rpc_result.get("total_count")
        if isinstance(total, int) and not isinstance(total, bool):
            return total
        if isinstance(total, float) and total.is_integer():
            return int(total)
    return len(extract_pods(rpc_result))


def format_report(report: StatsReport) -> str:
    """Render a report as a monospace code block."""
    lines = ["```ml", "pNodes Version: Counts"]
    for fragment, count in report.counts.items():
        lines.append(f"       `{fragment}`:      {count}")
    lines.append(f"         Total:      {report.total}")
    lines.append("```")
    return "\n".join(lines)


class PodStatsCollector:
    """Collect pod statistics from the RPC endpoint."""

    def __init__(self, rpc: RpcClient, fragments: Sequence[str] = VERSION_FRAGMENTS):
        self.rpc = rpc
        self.fragments = tuple(fragments)

    async def get_pods_by_version(self, fragment: str) -> int:
        """Number of pods whose version contains ``fragment``."""
        rpc_result = await self.rpc.call(GET_PODS_METHOD)
        return count_by_fragment(extract_pods(rpc_result), fragment)

    async def get_total_pods(self) -> int:
        """Total number of pods reported by the network."""
        rpc_result = await self.rpc.call(GET_PODS_METHOD)
        return total_count(rpc_result)

    async def collect(self) -> StatsReport:
        """
        Run all queries concurrently and combine them into a report.

        The first failing query aborts the whole collection.
        """
        *counts, total = await asyncio.gather(
            *(self.get_pods_by_version(f) for f in self.fragments),
            self.get_total_pods(),
        )
        return StatsReport(counts=dict(zip(self.fragments, counts)), total=total)

    async def build_report(self) -> str:
        """Build the chat report. Never raises; failures become an error line."""
        try:
            report = await self.collect()
        except Exception as e:
            console.print(f"[red]Failed to collect pod stats: {escape(str(e))}[/red]")
            return f"Error retrieving data: {e}"
        return format_report(report)

    def print_table(self, report: StatsReport):
        """Print a report as a rich table."""
        table = Table(title="pNodes Version Counts")

        table.add_column("Version", style="cyan")
        table.add_column("Pods", justify="right")

        for fragment, count in report.counts.items():
            table.add_row(fragment, str(count))
        table.add_section()
        table.add_row("[bold]Total[/bold]", f"[bold]{report.total}[/bold]")

        console.print(table)
