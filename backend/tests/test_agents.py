import asyncio
from agents.base_agent import AgentStatus
from agents.key_terms_agent import KeyTermsAgent
from agents.simplification_agent import SimplificationAgent
from agents.translation_agent import TranslationAgent
from models.content import SimplifiedContent
from conftest import KEY_TERMS, SIMPLIFIED, SOURCE_TEXT, TRANSLATED_ES

NO_WAIT = {"max_retries": 2, "retry_delay": 0}


def test_simplification_returns_camel_case_payload(fake_llm):
    fake_llm.queue("SimplificationOutput", SIMPLIFIED)
    result = asyncio.run(SimplificationAgent(fake_llm, NO_WAIT).execute(SOURCE_TEXT))

    assert result.status == AgentStatus.SUCCESS
    assert result.output == SIMPLIFIED
    call = fake_llm.calls[0]
    assert call["prompt"] == f"Text to simplify:\n{SOURCE_TEXT}"
    assert call["max_tokens"] == 3000
    assert "ADHD and dyslexia" in call["system"]


def test_simplification_retries_schema_violations(fake_llm):
    too_few_points = {**SIMPLIFIED, "bulletPoints": ["only one"]}
    fake_llm.queue("SimplificationOutput", too_few_points, SIMPLIFIED)

    result = asyncio.run(SimplificationAgent(fake_llm, NO_WAIT).execute(SOURCE_TEXT))

    assert result.succeeded
    assert result.retry_count == 1
    assert len(fake_llm.calls) == 2


def test_simplification_fails_after_max_retries(fake_llm):
    fake_llm.queue("SimplificationOutput", ValueError("LLM returned invalid JSON"))

    result = asyncio.run(SimplificationAgent(fake_llm, NO_WAIT).execute(SOURCE_TEXT))

    assert result.status == AgentStatus.FAILED
    assert "invalid JSON" in result.error
    assert result.retry_count == 3
    assert len(fake_llm.calls) == 3


def test_translation_prompt_numbers_key_points(fake_llm):
    fake_llm.queue("TranslationOutput", TRANSLATED_ES)
    content = SimplifiedContent.model_validate(SIMPLIFIED)

    result = asyncio.run(TranslationAgent(fake_llm, NO_WAIT).execute({
        "content": content,
        "target_language": "es",
    }))

    assert result.output == TRANSLATED_ES
    prompt = fake_llm.calls[0]["prompt"]
    assert prompt.startswith("Target Language: Spanish")
    assert "1. Chlorophyll absorbs sunlight.\n2. Carbon dioxide" in prompt
    assert "right-to-left" not in fake_llm.calls[0]["system"]


def test_translation_to_arabic_adds_rtl_instruction(fake_llm):
    fake_llm.queue("TranslationOutput", TRANSLATED_ES)
    content = SimplifiedContent.model_validate(SIMPLIFIED)

    asyncio.run(TranslationAgent(fake_llm, NO_WAIT).execute({"content": content, "target_language": "ar"}))

    assert "Target Language: Arabic" in fake_llm.calls[0]["prompt"]
    assert "right-to-left" in fake_llm.calls[0]["system"]


def test_key_terms_unknown_language_falls_back_to_english(fake_llm):
    fake_llm.queue("KeyTermList", KEY_TERMS)
    content = SimplifiedContent.model_validate(SIMPLIFIED)

    result = asyncio.run(KeyTermsAgent(fake_llm, NO_WAIT).execute({
        "content": content,
        "original_text": SOURCE_TEXT,
        "language": "tlh",
    }))

    assert result.output == KEY_TERMS
    call = fake_llm.calls[0]
    assert call["prompt"].startswith("Target Language: English")
    assert "Key Points: Chlorophyll absorbs sunlight.. Carbon dioxide" in call["prompt"]
    assert call["max_tokens"] == 1500


def test_key_terms_requires_at_least_three(fake_llm):
    fake_llm.queue("KeyTermList", {"terms": KEY_TERMS["terms"][:2]})
    content = SimplifiedContent.model_validate(SIMPLIFIED)

    result = asyncio.run(KeyTermsAgent(fake_llm, {"max_retries": 0}).execute({
        "content": content,
        "original_text": "",
        "language": "en",
    }))

    assert result.status == AgentStatus.FAILED
