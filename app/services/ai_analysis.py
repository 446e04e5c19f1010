"""
SWOT analysis of an idea via an OpenAI-compatible chat-completions API.

The reply is free text; ``extract_sections`` splits it into the summary and
the four SWOT sections, substituting placeholder text for any section it
cannot find.
"""

import logging
import re
from typing import Dict

import httpx
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.errors import Forbidden, NotFound, ServiceUnavailable
from app.models.ai_summary import AISummary
from app.models.feedback import Feedback
from app.models.idea import Idea
from app.models.user import User

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert business analyst and startup advisor with deep knowledge "
    "of technology, market trends, and business models."
)
UNAVAILABLE_MESSAGE = "AI analysis is currently unavailable"

DEFAULT_SUMMARY = "Analysis could not be generated properly."
DEFAULT_SECTION = "Not available."

# Each section runs until the heading of the next one, with or without a
# "N." list prefix. Threats runs to the end of the reply.
_SECTION_PATTERNS = {
    "summary": re.compile(r"Summary:?\s*([\s\S]+?)(?=\s*(?:Strengths|\d+\.\s*Strengths|•|\*))", re.I),
    "strengths": re.compile(r"Strengths:?\s*([\s\S]+?)(?=\s*(?:Weaknesses|\d+\.\s*Weaknesses))", re.I),
    "weaknesses": re.compile(r"Weaknesses:?\s*([\s\S]+?)(?=\s*(?:Opportunities|\d+\.\s*Opportunities))", re.I),
    "opportunities": re.compile(r"Opportunities:?\s*([\s\S]+?)(?=\s*(?:Threats|\d+\.\s*Threats))", re.I),
    "threats": re.compile(r"Threats:?\s*([\s\S]+)", re.I),
}


def extract_sections(text: str) -> Dict[str, str]:
    sections = {}
    for name, pattern in _SECTION_PATTERNS.items():
        match = pattern.search(text or "")
        if match:
            sections[name] = match.group(1).strip()
        else:
            sections[name] = DEFAULT_SUMMARY if name == "summary" else DEFAULT_SECTION
    return sections


def build_prompt(idea: Idea, feedback_count: int, average_rating: float) -> str:
    tags = ", ".join(tag.name for tag in idea.tags)
    return f"""Please analyze the following startup/app idea and provide a comprehensive SWOT analysis (Strengths, Weaknesses, Opportunities, Threats).

IDEA DETAILS:
Title: {idea.title}
Description: {idea.description}
Problem Statement: {idea.problem}
Proposed Solution: {idea.solution}
Target Audience: {idea.target_audience or "Not specified"}
Market Size: {idea.market_size or "Not specified"}
Competition: {idea.competition or "Not specified"}
Business Model: {idea.business_model or "Not specified"}
Tags/Categories: {tags}

Community Feedback:
- Number of feedback submissions: {feedback_count}
- Average rating (1-5): {average_rating:.1f}

Please structure your analysis as follows:
1. Summary (2-3 paragraphs summarizing the idea and its potential)
2. Strengths (bullet points)
3. Weaknesses (bullet points)
4. Opportunities (bullet points)
5. Threats (bullet points)

Be honest, constructive, and provide actionable insights. Focus on both business and technical aspects."""


async def request_completion(prompt: str) -> str:
    """Call the chat-completions endpoint and return the reply text."""
    if not settings.OPENAI_API_KEY:
        raise ServiceUnavailable(UNAVAILABLE_MESSAGE)

    url = f"{settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"
    try:
        async with httpx.AsyncClient(timeout=settings.AI_REQUEST_TIMEOUT) as client:
            resp = await client.post(
                url,
                headers={"Authorization": f"Bearer {settings.OPENAI_API_KEY}"},
                json={
                    "model": settings.OPENAI_MODEL,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": 0.7,
                    "max_tokens": 1500,
                },
            )
            resp.raise_for_status()
            data = resp.json()
        return data["choices"][0]["message"]["content"] or ""
    except (httpx.HTTPError, KeyError, IndexError, ValueError) as exc:
        logger.warning("AI analysis request failed: %s", exc)
        raise ServiceUnavailable(UNAVAILABLE_MESSAGE) from exc


async def generate_analysis(db: AsyncSession, user: User, idea_id: int) -> AISummary:
    """Generate (or regenerate) the idea's SWOT analysis. Owner or admin only."""
    idea = (await db.execute(
        select(Idea).options(selectinload(Idea.tags)).where(Idea.id == idea_id)
    )).scalar_one_or_none()
    if idea is None:
        raise NotFound("Idea not found")
    if idea.user_id != user.id and not user.is_admin:
        raise Forbidden("You don't have permission to generate AI analysis for this idea")

    feedback_count, average_rating = (await db.execute(
        select(func.count(Feedback.id), func.avg(Feedback.rating)).where(Feedback.idea_id == idea_id)
    )).one()

    text = await request_completion(build_prompt(idea, feedback_count or 0, float(average_rating or 0)))
    sections = extract_sections(text)

    summary = (await db.execute(
        select(AISummary).where(AISummary.idea_id == idea_id)
    )).scalar_one_or_none()
    if summary is None:
        summary = AISummary(idea_id=idea_id)
        db.add(summary)
    summary.content = sections["summary"]
    summary.strengths = sections["strengths"]
    summary.weaknesses = sections["weaknesses"]
    summary.opportunities = sections["opportunities"]
    summary.threats = sections["threats"]

    await db.commit()
    logger.info("AI analysis generated for idea %s", idea_id)
    return summary


async def get_analysis(db: AsyncSession, idea_id: int) -> AISummary:
    exists = (await db.execute(select(Idea.id).where(Idea.id == idea_id))).scalar_one_or_none()
    if exists is None:
        raise NotFound("Idea not found")

    summary = (await db.execute(
        select(AISummary).where(AISummary.idea_id == idea_id)
    )).scalar_one_or_none()
    if summary is None:
        raise NotFound("AI analysis not found for this idea")
    return summary
