"""
Prompt assembly for the authenticity analysis.

Pure string composition: the same text and URL always give a byte-identical
prompt, so results can be reproduced and tested.
"""

from typing import Optional

from .schemas import AUTHENTICITY_TIERS

PREAMBLE = (
    "You are a professional fact-checker and news authenticity analyst with expertise in "
    "journalism, media literacy, and information verification. Your role is to provide "
    "accurate, evidence-based assessments of news articles."
)

ANALYSIS_FRAMEWORK = """ANALYSIS FRAMEWORK:

1. CONTENT ASSESSMENT:
   - Identify the main claims, facts, and assertions
   - Distinguish between factual statements and opinions/analysis
   - Check for proper attribution and sourcing within the article
   - Evaluate the logical consistency of the narrative

2. SOURCE CREDIBILITY:
   - Assess the reputation and track record of the publication
   - Consider the author's credentials and expertise
   - Evaluate the publication date and timeliness
   - Check for editorial standards and correction policies

3. FACT VERIFICATION:
   - Cross-reference key claims with authoritative sources
   - Look for corroboration from multiple independent sources
   - Check official statements, government records, or primary sources
   - Verify quotes, statistics, and specific details

4. BIAS AND PRESENTATION:
   - Identify potential bias in language or framing
   - Check for balanced reporting and multiple perspectives
   - Look for sensationalism or misleading headlines
   - Assess whether context is appropriately provided"""

# One line per tier, in the order of AUTHENTICITY_TIERS
TIER_DESCRIPTIONS = {
    "Highly Authentic": "Well-sourced, verified facts, reputable publication, balanced reporting",
    "Mostly Authentic": "Generally accurate with minor issues or unverified details",
    "Partially Authentic": "Mix of accurate and questionable information",
    "Likely Misleading": "Significant inaccuracies, poor sourcing, or biased presentation",
    "Highly Misleading": "Mostly false information or deliberately deceptive",
    "Unverified": "Insufficient information to make a determination",
}

GUIDELINES = """IMPORTANT GUIDELINES:
- Be conservative in your assessments - err on the side of caution
- Consider the difference between "unverified" and "false" - lack of evidence is not proof of falsehood
- Legitimate news sources can have different perspectives while still being authentic
- Focus on factual accuracy rather than political or ideological alignment
- Consider the article's purpose (news reporting vs. opinion vs. analysis)
- Account for the complexity of breaking news where details may still be emerging"""

CLAIM_STATUSES = """For each claim analysis:
- "verified": Confirmed by multiple reliable sources or official records
- "contradicted": Directly refuted by credible evidence
- "unverified": Insufficient evidence available, but not necessarily false"""

CLOSING = (
    "Provide specific, actionable reasoning for your assessment. "
    "Include relevant source URLs that support your analysis."
)


def _authenticity_scale() -> str:
    lines = ["AUTHENTICITY SCALE:"]
    for label, low, high in AUTHENTICITY_TIERS:
        lines.append(f'- "{label}" ({low}-{high}%): {TIER_DESCRIPTIONS[label]}')
    return "\n".join(lines)


def build_prompt(text: str, source_url: Optional[str] = None) -> str:
    """
    Build the analysis prompt for one article.

    Args:
        text: Article text, already truncated
        source_url: Where the article came from, when known

    Returns:
        The full instruction block
    """
    sections = [PREAMBLE]
    if source_url:
        sections.append(f"SOURCE URL: {source_url}")
    sections.append(f"ARTICLE TO ANALYZE:\n{text}")
    sections.append(ANALYSIS_FRAMEWORK)
    sections.append(_authenticity_scale())
    sections.append(GUIDELINES)
    sections.append(CLAIM_STATUSES)
    sections.append(CLOSING)
    return "\n\n".join(sections)
