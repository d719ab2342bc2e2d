"""Tests for rule-based and Gemini lead scoring."""

from unittest.mock import AsyncMock

import httpx
import pytest

from app.core.config import settings
from app.services.lead_scoring import (
    GeminiLeadScorer,
    LeadInput,
    RuleBasedLeadScorer,
    get_lead_scorer,
    temperature_for,
)


def analyze(**kwargs):
    lead = LeadInput(full_name="Teste", email="teste@example.com", **kwargs)
    return RuleBasedLeadScorer().analyze(lead)


def test_bare_lead_scores_base_points():
    result = analyze()
    assert result.lead_score == 30
    assert result.temperature == "cold"
    assert result.details["source"] == "rules"
    assert result.details["communicationPreference"] == "email"


def test_phone_and_short_message():
    # 36 characters: more than 20, not more than 50
    result = analyze(phone="1133334444", message="Gostaria de mais detalhes, por favor")
    assert result.lead_score == 30 + 25 + 10
    assert result.temperature == "warm"
    assert result.details["communicationPreference"] == "phone"


def test_company_and_location():
    result = analyze(company="Frota Sul", city="Curitiba", state="PR")
    assert result.lead_score == 30 + 15 + 10
    assert result.details["customerProfile"]["type"] == "business"


def test_city_without_state_earns_nothing():
    assert analyze(city="Curitiba").lead_score == 30


def test_purchase_and_urgency_keywords():
    result = analyze(message="Orçamento urgente")
    assert result.lead_score == 30 + 10 + 5
    assert result.details["intent"]["primary"] == "purchase"
    assert result.details["urgencyLevel"] == "high"
    assert "orçamento" in result.details["intent"]["keywords"]


def test_score_is_capped_but_temperature_uses_full_score():
    result = analyze(
        phone="11987654321",
        company="Frotas Norte",
        city="São Paulo",
        state="SP",
        message="Quero um orçamento urgente para a frota toda, obrigado pela atenção",
    )
    assert result.lead_score == 100
    assert result.temperature == "hot"
    assert result.details["communicationPreference"] == "whatsapp"
    assert result.as_json()["leadScore"] == 100


@pytest.mark.parametrize("score,expected", [(0, "cold"), (49, "cold"), (50, "warm"), (74, "warm"), (75, "hot")])
def test_temperature_thresholds(score, expected):
    assert temperature_for(score) == expected


def gemini():
    return GeminiLeadScorer(api_key="k", model="gemini-test", timeout=1.0)


@pytest.mark.asyncio
async def test_gemini_response_is_parsed_and_clamped(monkeypatch):
    scorer = gemini()
    reply = """```json
{"leadScore": 130, "temperature": "warm", "intent": {"primary": "purchase", "confidence": 2},
 "sentiment": {"score": -4, "label": "negative"}, "conversionProbability": 0.4}
```"""
    monkeypatch.setattr(scorer, "_generate", AsyncMock(return_value=reply))

    result = await scorer.score(LeadInput(full_name="A", email="a@example.com"))
    assert result.lead_score == 100
    assert result.temperature == "warm"
    assert result.details["source"] == "gemini"
    assert result.details["intent"]["confidence"] == 1
    assert result.details["sentiment"]["score"] == -1
    assert result.details["conversionProbability"] == 0.4


@pytest.mark.asyncio
async def test_gemini_invalid_temperature_is_derived(monkeypatch):
    scorer = gemini()
    monkeypatch.setattr(scorer, "_generate", AsyncMock(return_value='{"leadScore": 80, "temperature": "boiling"}'))
    result = await scorer.score(LeadInput(full_name="A", email="a@example.com"))
    assert result.temperature == "hot"


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", [
    httpx.ConnectError("down"),
    httpx.ReadTimeout("slow"),
])
async def test_gemini_transport_failure_falls_back_to_rules(monkeypatch, failure):
    scorer = gemini()
    monkeypatch.setattr(scorer, "_generate", AsyncMock(side_effect=failure))
    result = await scorer.score(LeadInput(full_name="A", email="a@example.com", phone="11900000000"))
    assert result.details["source"] == "rules"
    assert result.lead_score == 55


@pytest.mark.asyncio
async def test_gemini_unparseable_reply_falls_back_to_rules(monkeypatch):
    scorer = gemini()
    monkeypatch.setattr(scorer, "_generate", AsyncMock(return_value="não sei"))
    result = await scorer.score(LeadInput(full_name="A", email="a@example.com"))
    assert result.details["source"] == "rules"


def test_prompt_mentions_lead_fields():
    prompt = gemini()._build_prompt(LeadInput(full_name="Maria", email="m@example.com", city="Recife", state="PE"))
    assert "Nome: Maria" in prompt
    assert "Localização: Recife, PE" in prompt
    assert "Telefone: Não informado" in prompt


def test_scorer_selection(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
    assert isinstance(get_lead_scorer(), RuleBasedLeadScorer)

    monkeypatch.setattr(settings, "GEMINI_API_KEY", "secret")
    scorer = get_lead_scorer()
    assert isinstance(scorer, GeminiLeadScorer)
    assert scorer.model == settings.GEMINI_MODEL
