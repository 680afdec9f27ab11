from typing import Optional

from configs.category_rules import CategoryRules, load_category_rules
from configs.settings import Config


# The normalizer splits the prompt on this line to recover the analyzed text.
CONTRACT_TEXT_MARKER = "Contract Text to Analyze:\n"

SYSTEM_PROMPT = (
    "You are a legal analysis expert specializing in consumer protection. "
    "Provide responses in valid JSON format only."
)

ANALYSIS_PROMPT_TEMPLATE = """You are a legal language analyst. Analyze the provided Terms text and detect clauses that could be harmful, misleading, or expensive for the user.

Categories to detect (non-exhaustive): {category_list}.

Rules:
- Return ONLY valid JSON. No prose before or after.
- Include up to {max_findings} clauses if present (not just one).
- For each clause, the field "snippet" MUST be a verbatim substring copied from the provided contract text. Prefer a single sentence or the smallest span (<= {snippet_max} chars) that evidences the clause.
- Keep summaries concise (<= 2 sentences). Risk: Low/Medium/High.

JSON schema:
{{
  "clauses": [
    {{
      "category": "{category_choices}",
      "emoji": "🚨",
      "summary": "Plain English summary",
      "risk": "Low|Medium|High",
      "whyItMatters": "Brief reason",
      "snippet": "verbatim substring from the input"
    }}
  ],
  "overallRisk": "Low|Medium|High",
  "totalClauses": 0,
  "summary": "Overall assessment"
}}

"""


def build_analysis_prompt(
    contract_text: str,
    *,
    rules: Optional[CategoryRules] = None,
    max_findings: int = Config.MAX_FINDINGS,
    snippet_max: int = Config.SNIPPET_MAX_LENGTH,
) -> str:
    """
    Build the single instruction string sent to the generation service.

    The contract text is appended verbatim after CONTRACT_TEXT_MARKER.

    Example:
        >>> prompt = build_analysis_prompt("We may change these terms at any time.")
        >>> prompt.endswith("We may change these terms at any time.")
        True
    """
    rules = rules or load_category_rules()
    labels = rules.labels

    header = ANALYSIS_PROMPT_TEMPLATE.format(
        category_list="; ".join(labels),
        category_choices=" | ".join(labels),
        max_findings=max_findings,
        snippet_max=snippet_max,
    )
    return header + CONTRACT_TEXT_MARKER + contract_text


def extract_contract_text(prompt: str) -> str:
    """
    Recover the contract text embedded by build_analysis_prompt.

    Returns an empty string when the marker is missing.
    """
    if not isinstance(prompt, str):
        return ""
    idx = prompt.find(CONTRACT_TEXT_MARKER)
    if idx == -1:
        return ""
    return prompt[idx + len(CONTRACT_TEXT_MARKER):]
