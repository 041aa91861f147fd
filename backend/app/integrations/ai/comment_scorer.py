"""Comment reply-worthiness scoring.

The LLM delegate produces a structured assessment; whenever it cannot (no
answer, open circuit, malformed JSON, schema mismatch) a deterministic keyword
heuristic takes over, so ``score`` always returns an analysis.
"""
import json
import logging
import re
from typing import Protocol

from pydantic import ValidationError

from app.config import Settings
from app.integrations.resilience import CircuitBreaker
from app.models.comment import AIPriority, AISentiment, CommentCategory, ReplyTone
from app.schemas.comment import CommentAnalysis
from app.utils.helpers import clamp, truncate

logger = logging.getLogger(__name__)

FALLBACK_REASONING = "Fallback heuristic analysis due to AI failure."

# Case-insensitive substrings signalling a comment that expects an answer
REPLY_KEYWORDS = (
    "comment", "pourquoi", "quand", "où", "help", "aide", "problème", "bug", "erreur", "support",
    "fonctionne", "ne marche pas", "how", "why", "when", "where", "issue", "error", "doesn't work",
    "not working", "problem", "question", "need help", "can you", "could you", "please", "thanks",
    "merci", "urgent", "important", "feedback", "avis", "suggestion", "réclamation", "demande",
    "request", "info", "information", "clarification", "détail", "explication", "explain", "details",
)

_LATIN_LETTER = re.compile(r"[a-zA-Z]")
_FRENCH_ACCENT = re.compile(r"[àâçéèêëîïôûùüÿñæœ]", re.IGNORECASE)
_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class ScoringDelegateError(Exception):
    """The LLM answer could not be turned into an analysis."""


class CompletionDelegate(Protocol):
    model_name: str

    async def complete(self, prompt: str) -> str: ...


class ScorableComment(Protocol):
    content: str
    likes_count: int
    post_content: str | None
    author_name: str | None
    platform: object


_PROMPT_EN = """
Analyze the following comment and return ONLY a valid JSON with this structure:
{{
  "score": 85,
  "category": "question",
  "sentiment": "positive",
  "priority": "high",
  "reasoning": "Short explanation of the analysis",
  "suggested_tone": "professional"
}}

RULES:
- score: 0-100 (relevance for replying)
- category: "question", "constructive_criticism", "compliment", "spam", "promotion", "other"
- sentiment: "positive", "negative", "neutral"
- priority: "high", "medium", "low"
- suggested_tone: "professional", "friendly", "formal", "casual"
{context}
Return ONLY the JSON."""

_PROMPT_FR = """
Analyse le commentaire suivant et retourne UNIQUEMENT un JSON valide avec cette structure :
{{
  "score": 85,
  "category": "question",
  "sentiment": "positive",
  "priority": "high",
  "reasoning": "Explication courte de l'analyse",
  "suggested_tone": "professional"
}}

RÈGLES :
- score : 0-100 (pertinence pour répondre)
- category : "question", "critique_constructive", "compliment", "spam", "promotion", "autre"
- sentiment : "positive", "negative", "neutral"
- priority : "high", "medium", "low"
- suggested_tone : "professional", "friendly", "formal", "casual"
{context}
Retourne UNIQUEMENT le JSON."""


def is_english(text: str) -> bool:
    return bool(_LATIN_LETTER.search(text)) and not _FRENCH_ACCENT.search(text)


def build_prompt(comment: ScorableComment) -> str:
    platform = getattr(comment.platform, "value", comment.platform)
    context = (
        f'\nPost: "{truncate(comment.post_content, 200, suffix="") if comment.post_content else "N/A"}"\n'
        f'Comment: "{comment.content}"\n'
        f"Author: {comment.author_name or 'Anonymous'}\n"
        f"Platform: {platform}\n"
        f"Likes: {comment.likes_count or 0}\n"
    )
    template = _PROMPT_EN if is_english(comment.content) else _PROMPT_FR
    return template.format(context=context)


def fallback_score(content: str, likes_count: int) -> int:
    score = 30
    if "?" in content:
        score += 25
    lowered = content.lower()
    if any(keyword in lowered for keyword in REPLY_KEYWORDS):
        score += 20
    if likes_count > 5:
        score += 15
    if likes_count > 20:
        score += 10
    if len(content) < 10:
        score -= 20
    return int(clamp(score, 0, 100))


def fallback_analysis(comment: ScorableComment) -> CommentAnalysis:
    return CommentAnalysis(
        score=fallback_score(comment.content, comment.likes_count or 0),
        category=CommentCategory.OTHER,
        sentiment=AISentiment.NEUTRAL,
        priority=AIPriority.MEDIUM,
        reasoning=FALLBACK_REASONING,
        suggested_tone=ReplyTone.PROFESSIONAL,
        fallback=True,
    )


def strip_code_fence(raw: str) -> str:
    text = (raw or "").strip()
    fenced = _CODE_FENCE.match(text)
    return fenced.group(1) if fenced else text


def parse_analysis(raw: str) -> CommentAnalysis:
    text = strip_code_fence(raw)
    if not text:
        raise ScoringDelegateError("empty response from LLM")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ScoringDelegateError(f"response is not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ScoringDelegateError("response is not a JSON object")
    payload.pop("fallback", None)
    try:
        return CommentAnalysis.model_validate(payload)
    except ValidationError as exc:
        raise ScoringDelegateError(f"response does not match the analysis schema: {exc}") from exc


class CommentScorer:
    """Score comments through the LLM, falling back to the keyword heuristic."""

    def __init__(self, llm: CompletionDelegate, breaker: CircuitBreaker):
        self.llm = llm
        self.breaker = breaker

    @property
    def model_name(self) -> str:
        return self.llm.model_name

    async def _complete_and_parse(self, prompt: str) -> CommentAnalysis:
        return parse_analysis(await self.llm.complete(prompt))

    async def score(self, comment: ScorableComment) -> CommentAnalysis:
        # An unusable answer counts against the circuit like a failed call
        try:
            return await self.breaker.call(self._complete_and_parse, build_prompt(comment))
        except Exception as exc:
            logger.warning("AI analysis failed, using fallback heuristic: %s", exc)
            return fallback_analysis(comment)


def build_comment_scorer(settings: Settings, llm: CompletionDelegate) -> CommentScorer:
    breaker = CircuitBreaker(
        "llm",
        failure_threshold=settings.LLM_CIRCUIT_FAILURE_THRESHOLD,
        open_timeout=settings.LLM_CIRCUIT_OPEN_SECONDS,
    )
    return CommentScorer(llm, breaker)
