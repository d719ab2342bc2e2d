"""Lead scoring.

`get_lead_scorer()` returns the Gemini-backed scorer when an API key is
configured and the deterministic rule-based scorer otherwise. The Gemini
scorer falls back to the rules on any failure, so callers always get a
result.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

PURCHASE_WORDS = ["orçamento", "preço", "comprar", "valor", "quanto custa", "pagamento"]
URGENT_WORDS = ["urgente", "rápido", "hoje", "amanhã", "imediato", "preciso"]
INQUIRY_WORDS = ["informação", "saber", "como", "quando", "onde"]
POSITIVE_WORDS = ["ótimo", "excelente", "bom", "quero", "preciso", "interesse"]
NEGATIVE_WORDS = ["ruim", "problema", "reclamação", "insatisfeito"]


@dataclass
class LeadInput:
    full_name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None
    business_type: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    tags: list[str] = field(default_factory=list)


@dataclass
class LeadAnalysis:
    lead_score: int
    temperature: str  # hot | warm | cold
    details: dict[str, Any] = field(default_factory=dict)

    def as_json(self) -> dict[str, Any]:
        return {**self.details, "leadScore": self.lead_score, "temperature": self.temperature}


class LeadScorer(Protocol):
    async def score(self, lead: LeadInput) -> LeadAnalysis:
        ...


def temperature_for(score: int) -> str:
    if score >= 75:
        return "hot"
    if score >= 50:
        return "warm"
    return "cold"


def _clamp(value, low, high, default):
    try:
        return max(low, min(high, float(value)))
    except (TypeError, ValueError):
        return default


class RuleBasedLeadScorer:
    """Deterministic scoring from data completeness and message keywords."""

    async def score(self, lead: LeadInput) -> LeadAnalysis:
        return self.analyze(lead)

    def analyze(self, lead: LeadInput) -> LeadAnalysis:
        message = lead.message or ""
        lower = message.lower()
        has_message = len(message) > 20

        score = 30
        if lead.phone:
            score += 25
        if has_message and len(message) > 50:
            score += 20
        elif has_message:
            score += 10
        if lead.company:
            score += 15
        if lead.city and lead.state:
            score += 10

        intent = "inquiry"
        urgency = "medium"
        keywords: list[str] = []
        if lower:
            purchase_hits = [w for w in PURCHASE_WORDS if w in lower]
            if purchase_hits:
                intent = "purchase"
                score += 10
                keywords.extend(purchase_hits)
            else:
                keywords.extend(w for w in INQUIRY_WORDS if w in lower)

            urgent_hits = [w for w in URGENT_WORDS if w in lower]
            if urgent_hits:
                urgency = "high"
                score += 5
                keywords.extend(urgent_hits)

        # Temperature uses the uncapped score.
        temperature = temperature_for(score)

        sentiment = 0.0
        for word in POSITIVE_WORDS:
            if word in lower:
                sentiment += 0.2
        for word in NEGATIVE_WORDS:
            if word in lower:
                sentiment -= 0.3
        sentiment = max(-1.0, min(1.0, sentiment))

        if lead.phone and "9" in lead.phone:
            preference = "whatsapp"
        elif lead.phone:
            preference = "phone"
        else:
            preference = "email"

        details = {
            "source": "rules",
            "intent": {"primary": intent, "confidence": 0.7, "keywords": keywords},
            "sentiment": {
                "score": round(sentiment, 2),
                "label": "positive" if sentiment > 0.2 else "negative" if sentiment < -0.2 else "neutral",
            },
            "urgencyLevel": urgency,
            "communicationPreference": preference,
            "customerProfile": {
                "type": "business" if lead.company else "individual",
                "segment": "premium" if score >= 70 else "standard" if score >= 50 else "budget",
            },
            "conversionProbability": min(0.95, score / 100),
        }
        return LeadAnalysis(lead_score=min(100, score), temperature=temperature, details=details)


class GeminiLeadScorer:
    """Scores leads through the Gemini generateContent REST endpoint."""

    def __init__(self, api_key: str, model: str, timeout: float, fallback: Optional[RuleBasedLeadScorer] = None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.fallback = fallback or RuleBasedLeadScorer()

    async def score(self, lead: LeadInput) -> LeadAnalysis:
        try:
            text = await self._generate(self._build_prompt(lead))
            return self._parse(text)
        except Exception as e:
            logger.warning("Gemini scoring failed, using rule-based fallback: %s", e)
            return await self.fallback.score(lead)

    def _build_prompt(self, lead: LeadInput) -> str:
        location = ", ".join(p for p in (lead.city, lead.state, lead.country) if p) or "Não informada"
        return f"""Você é um especialista em análise de leads para uma empresa de isolamento acústico automotivo (RuidCar).
Analise os dados do lead abaixo.

Nome: {lead.full_name}
Email: {lead.email}
Telefone: {lead.phone or 'Não informado'}
Empresa: {lead.company or 'Não informada'}
Tipo de Negócio: {lead.business_type or 'Não informado'}
Localização: {location}
Mensagem: {lead.message or 'Sem mensagem'}
Tags: {', '.join(lead.tags) or 'Sem tags'}

Responda APENAS com JSON no formato:
{{
  "intent": {{"primary": "purchase|inquiry|support|complaint|other", "confidence": 0.0, "keywords": []}},
  "sentiment": {{"score": 0.0, "label": "positive|neutral|negative"}},
  "urgencyLevel": "high|medium|low",
  "communicationPreference": "whatsapp|email|phone|any",
  "suggestedActions": [],
  "conversionProbability": 0.0,
  "leadScore": 0,
  "temperature": "hot|warm|cold"
}}"""

    async def _generate(self, prompt: str) -> str:
        url = GEMINI_URL.format(model=self.model)
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2},
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(url, params={"key": self.api_key}, json=payload)
            response.raise_for_status()
            data = response.json()
        return data["candidates"][0]["content"]["parts"][0]["text"]

    def _parse(self, text: str) -> LeadAnalysis:
        match = re.search(r"\{[\s\S]*\}", text)
        if not match:
            raise ValueError("no JSON object in model response")
        parsed = json.loads(match.group(0))

        score = int(_clamp(parsed.get("leadScore"), 0, 100, 50))
        temperature = parsed.get("temperature")
        if temperature not in ("hot", "warm", "cold"):
            temperature = temperature_for(score)

        intent = parsed.get("intent") or {}
        sentiment = parsed.get("sentiment") or {}
        details = {
            "source": "gemini",
            "intent": {
                "primary": intent.get("primary") or "inquiry",
                "confidence": _clamp(intent.get("confidence"), 0, 1, 0.5),
                "keywords": intent.get("keywords") or [],
            },
            "sentiment": {
                "score": _clamp(sentiment.get("score"), -1, 1, 0.0),
                "label": sentiment.get("label") or "neutral",
            },
            "urgencyLevel": parsed.get("urgencyLevel") or "medium",
            "communicationPreference": parsed.get("communicationPreference") or "any",
            "suggestedActions": parsed.get("suggestedActions") or [],
            "conversionProbability": _clamp(parsed.get("conversionProbability"), 0, 1, 0.5),
        }
        return LeadAnalysis(lead_score=score, temperature=temperature, details=details)


def get_lead_scorer() -> LeadScorer:
    if settings.GEMINI_API_KEY:
        return GeminiLeadScorer(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            timeout=settings.LEAD_SCORING_TIMEOUT_SECONDS,
        )
    return RuleBasedLeadScorer()
