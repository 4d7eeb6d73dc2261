#!/usr/bin/env python3
"""Investigate a DataManager log and save its error record locally.

Usage:
    python scripts/investigate_log.py LOG_ID [--output-dir DIR] [--token TOKEN]

Fetches the log with getLogById, then the text of its errorRecordContentId
with getContent, and writes it to downloaded_error_{logId}_{contentId}.txt.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from erp_tools.infra.config import config
from erp_tools.models.context import RequestContext
from erp_tools.services.tool_execution_engine import execute_tool_call
from erp_tools.services.tool_registry import build_tools


async def investigate(log_id: str, output_dir: Path, token: str = None) -> int:
    tools = build_tools(config)
    request_context = RequestContext.with_token(token)

    print(f"Investigating log {log_id}...")
    log_result = await execute_tool_call(tools, "getLogById", {"logId": log_id}, request_context)
    if log_result.is_error:
        print(f"✗ Error fetching log: {log_result.message}", file=sys.stderr)
        return 1

    log = log_result.structured_content
    print(f"  Status: {log.get('statusId')}")

    content_id = log.get("errorRecordContentId")
    if not content_id:
        print("  No error record content found for this log.")
        return 0

    print(f"  Fetching error record {content_id}...")
    content_result = await execute_tool_call(tools, "getContent", {"contentId": content_id}, request_context)
    if content_result.is_error:
        print(f"✗ Failed to fetch content: {content_result.message}", file=sys.stderr)
        return 1

    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / f"downloaded_error_{log_id}_{content_id}.txt"
    output_file.write_text(content_result.structured_content.get("textData", ""), encoding="utf-8")
    print(f"✓ Saved error record to: {output_file.absolute()}")
    return 0


async def main():
    parser = argparse.ArgumentParser(description="Fetch a DataManager log and its error record")
    parser.add_argument("log_id", help="DataManagerLog ID to investigate")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory to write the error record to (default: current directory)",
    )
    parser.add_argument(
        "--token",
        type=str,
        default=None,
        help="Delegated backend token (default: BACKEND_ACCESS_TOKEN)",
    )

    args = parser.parse_args()
    sys.exit(await investigate(args.log_id, args.output_dir, args.token))


if __name__ == "__main__":
    asyncio.run(main())
