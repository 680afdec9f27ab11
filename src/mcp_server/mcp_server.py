from functools import lru_cache
from typing import Dict

from mcp.server.fastmcp import FastMCP

from agents.contract_risk_agent import ContractRiskAgent
from agents.generation_client import GenerationClient
from analysis.presentation.report_builder import build_risk_report
from tools.logger import setup_logger

logger = setup_logger("mcp-server")
mcp = FastMCP("tos-risk-analyzer")


@lru_cache(maxsize=1)
def _build_agent() -> ContractRiskAgent:
    """
    One agent (and so one generation queue) for the whole server process.
    """
    return ContractRiskAgent(generation_client=GenerationClient())


def _to_payload(result) -> Dict:
    payload = result.model_dump(mode="json")
    payload["report"] = build_risk_report(result).model_dump(mode="json")
    return payload


@mcp.tool()
async def analyze_contract_text(contract_text: str) -> Dict:
    """
    Analyze pasted terms-of-service text for risky clauses.

    Example:
        >>> await analyze_contract_text("We may change these terms at any time ...")
    """
    logger.info("Analyzing provided contract text")
    result = await _build_agent().analyze_text(contract_text)
    return _to_payload(result)


@mcp.tool()
async def analyze_contract_url(url: str) -> Dict:
    """
    Fetch a terms-of-service page and analyze it for risky clauses.

    Example:
        >>> await analyze_contract_url("example.com/terms")
    """
    logger.info(f"Analyzing contract URL: {url}")
    result = await _build_agent().analyze_from_url(url)
    return _to_payload(result)


if __name__ == "__main__":
    mcp.run()
