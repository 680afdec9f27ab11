import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from agents.contract_risk_agent import ContractRiskAgent
from agents.generation_client import GenerationClient
from analysis.errors import AnalysisFailedError, GenerationError
from analysis.presentation.report_builder import build_risk_report, render_text
from configs.settings import Config
from tools.credential_store import LocalCredentialStore, mask_api_key
from tools.logger import setup_logger

logger = setup_logger("tos-risk-cli")


# =========================================================
# Commands
# =========================================================

async def run_analysis(mode: str, *, text: Optional[str], url: Optional[str], as_json: bool) -> int:
    """
    Run one analysis and print the result.

    Returns a process exit code.
    """
    client = GenerationClient()
    agent = ContractRiskAgent(generation_client=client)
    logger.info(f"Received contract URL: {url}" if mode == "url" else "Received contract text")

    try:
        if mode == "url":
            result = await agent.analyze_from_url(url or "")
        else:
            result = await agent.analyze_text(text or "")
    except AnalysisFailedError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        await client.aclose()

    if as_json:
        print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
    else:
        print(render_text(build_risk_report(result)))
    return 0


def store_api_key(api_key: str) -> int:
    api_key = (api_key or "").strip()
    if not api_key:
        print("No API key given.", file=sys.stderr)
        return 1

    LocalCredentialStore().set(Config.API_KEY_STORE_KEY, api_key)
    print(f"API key saved: {mask_api_key(api_key)}")
    return 0


async def verify_api_key(api_key: Optional[str]) -> int:
    client = GenerationClient()
    try:
        valid = await client.verify_credential(api_key)
    except GenerationError as e:
        print(f"Connection check failed: {e}", file=sys.stderr)
        return 1
    finally:
        await client.aclose()

    print("API key is valid." if valid else "Invalid API key. Please check your key and try again.")
    return 0 if valid else 1


# =========================================================
# CLI / Execution Entry
# =========================================================

def main(argv=None) -> int:
    """
    Example:
        >>> # python src/main.py --mode url --url example.com/terms
        >>> # python src/main.py --mode file --file terms.txt --json
        >>> # python src/main.py --mode server
    """
    parser = argparse.ArgumentParser(description="Terms-of-service risk analyzer")
    parser.add_argument(
        "--mode",
        choices=["text", "file", "url", "server", "set-key", "verify-key"],
        default="text",
    )
    parser.add_argument("--text", dest="text")
    parser.add_argument("--file", dest="file")
    parser.add_argument("--url", dest="url")
    parser.add_argument("--key", dest="api_key")
    parser.add_argument("--json", dest="as_json", action="store_true")
    args = parser.parse_args(argv)

    if args.mode == "server":
        from mcp_server.mcp_server import mcp
        mcp.run()
        return 0

    if args.mode == "set-key":
        return store_api_key(args.api_key)

    if args.mode == "verify-key":
        return asyncio.run(verify_api_key(args.api_key))

    text = args.text
    if args.mode == "file":
        if not args.file:
            parser.error("--file is required for mode=file")
        text = Path(args.file).read_text(encoding="utf-8")
    elif args.mode == "text" and text is None:
        text = sys.stdin.read()
    elif args.mode == "url" and not args.url:
        parser.error("--url is required for mode=url")

    return asyncio.run(run_analysis(args.mode, text=text, url=args.url, as_json=args.as_json))


if __name__ == "__main__":
    sys.exit(main())
