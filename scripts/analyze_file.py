#!/usr/bin/env python3
"""
Stream an analysis of a local text file from a running analysis service.

Run from the repository root (service started with `python -m analysis_service`):
  python scripts/analyze_file.py contract.txt --action riskScan

The answer is rendered as Markdown while it streams.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown

from analysis_service.actions import AnalysisAction
from analysis_service.assembler import MessageState, ResponseAssembler
from analysis_service.client import AnalysisClient
from analysis_service.errors import ValidationError


async def run(path: Path, action: str, base_url: str) -> int:
    console = Console()
    text = path.read_text(encoding="utf-8", errors="replace")

    with Live(Markdown(""), console=console, refresh_per_second=12) as live:
        assembler = ResponseAssembler(on_update=lambda m: live.update(Markdown(m.text)))
        async with AnalysisClient(base_url=base_url) as client:
            try:
                message = await client.analyze(text, action, assembler=assembler)
            except ValidationError as exc:
                console.print(f"[bold red]Rejected:[/bold red] {exc.reason}")
                return 2

    if message.state is MessageState.FAILED:
        console.print(f"[bold red]Stream failed:[/bold red] {message.error}")
        return 1
    console.print(f"[dim]{message.fragment_count} fragments, {len(message.text)} chars[/dim]")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("path", type=Path)
    parser.add_argument("--action", choices=[a.value for a in AnalysisAction], default=AnalysisAction.SUMMARIZE.value)
    parser.add_argument("--url", default="http://localhost:8080")
    args = parser.parse_args()
    return asyncio.run(run(args.path, args.action, args.url))


if __name__ == "__main__":
    sys.exit(main())
