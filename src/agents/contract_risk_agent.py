import asyncio
from datetime import datetime, timezone
from typing import Optional

from agents.contract_aggregation_agent import ContractAggregationAgent
from agents.generation_client import GenerationClient
from analysis.errors import AnalysisFailedError
from analysis.models import AnalysisResult
from analysis.prompt_builder import build_analysis_prompt
from analysis.response_normalizer import ResponseNormalizer
from configs.settings import Config
from ingestion.url_text_extractor import UrlTextExtractor
from tools.logger import setup_logger

logger = setup_logger("contract-risk-agent")


class ContractRiskAgent:
    """
    End-to-end orchestrator for terms-of-service risk analysis.

    text/URL -> prompt -> generation -> normalization -> summary

    Every failure reaches the caller as AnalysisFailedError, with the
    original error kept on .cause.

    Example:
        >>> agent = ContractRiskAgent(GenerationClient())
        >>> result = await agent.analyze_text("By using the service you agree ...")
        >>> result.summary.risk_level
    """

    def __init__(
        self,
        generation_client: GenerationClient,
        text_extractor: Optional[UrlTextExtractor] = None,
        normalizer: Optional[ResponseNormalizer] = None,
        aggregation_agent: Optional[ContractAggregationAgent] = None,
        timeout: Optional[float] = Config.ANALYSIS_TIMEOUT,
    ):
        self.generation_client = generation_client
        self.text_extractor = text_extractor or UrlTextExtractor()
        self.normalizer = normalizer or ResponseNormalizer()
        self.aggregation_agent = aggregation_agent or ContractAggregationAgent()
        self.timeout = timeout

    # -----------------------------------------------------
    # Public API
    # -----------------------------------------------------

    async def analyze_text(self, contract_text: str) -> AnalysisResult:
        try:
            return await self._with_timeout(self._analyze(contract_text))
        except Exception as e:
            logger.error(f"Text analysis failed: {e}")
            raise AnalysisFailedError(e) from e

    async def analyze_from_url(self, url: str) -> AnalysisResult:
        try:
            return await self._with_timeout(self._analyze_url(url))
        except Exception as e:
            logger.error(f"URL analysis failed: {e}")
            raise AnalysisFailedError(e) from e

    # -----------------------------------------------------
    # Pipeline
    # -----------------------------------------------------

    async def _analyze_url(self, url: str) -> AnalysisResult:
        logger.info(f"Starting URL analysis: {url}")
        contract_text = await self.text_extractor.extract_from_url(url)
        result = await self._analyze(contract_text)
        return result.model_copy(update={"source_url": url})

    async def _analyze(self, contract_text: str) -> AnalysisResult:
        if not isinstance(contract_text, str) or not contract_text.strip():
            raise ValueError("Please enter contract text or provide a URL to analyze.")

        logger.info(f"Starting contract analysis ({len(contract_text)} chars)")

        prompt = build_analysis_prompt(
            contract_text,
            rules=self.normalizer.rules,
            max_findings=self.normalizer.max_findings,
            snippet_max=self.normalizer.snippet_max,
        )
        raw_response = await self.generation_client.generate(prompt)

        analysis = self.normalizer.normalize(raw_response, prompt)
        summary = self.aggregation_agent.aggregate(analysis)

        logger.info(
            f"Contract analysis completed | Findings={summary.total_clauses} | "
            f"RiskLevel={summary.risk_level} | Reported={analysis.overall_risk} | "
            f"Strategy={analysis.parse_strategy}"
        )

        return AnalysisResult(
            analysis=analysis,
            summary=summary,
            analyzed_at=datetime.now(timezone.utc),
            input_length=len(contract_text),
        )

    async def _with_timeout(self, coro):
        if self.timeout is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=self.timeout)
