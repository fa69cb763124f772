"""
Shared LLM invocation utilities for text generation.
"""

from __future__ import annotations

import json
import re
from typing import Optional

from impact_engine.core.config import get_settings
from impact_engine.core.exceptions import LLMValidationError
from impact_engine.core.logger import logger
from impact_engine.infrastructure.llm.litellm_provider import LiteLLMProvider
from impact_engine.interfaces.llm_provider import ILLMProvider


def generate_text(
    llm_provider: ILLMProvider,
    prompt: str,
    temperature: float = 0.2,
    max_output_tokens: int = 800,
    response_schema: Optional[dict] = None,
    response_mime_type: Optional[str] = None,
    system_instruction: Optional[str] = None,
) -> Optional[str]:
    """
    Generate text from the configured LLM provider.

    Returns None when the provider is unavailable or the call fails.
    """
    if not prompt:
        return None

    if isinstance(llm_provider, LiteLLMProvider):
        return _generate_text_litellm(
            llm_provider=llm_provider,
            prompt=prompt,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_schema=response_schema,
            system_instruction=system_instruction,
        )

    settings = getattr(llm_provider, "_settings", None) or get_settings()
    api_key = getattr(settings, "GOOGLE_API_KEY", None)
    if not api_key:
        return None

    try:
        from google import genai
        from google.genai.types import Content, GenerateContentConfig, Part
    except Exception as exc:
        logger.warning(f"GenAI import failed: {exc}")
        return None

    config_kwargs: dict = {
        "temperature": temperature,
        "max_output_tokens": max_output_tokens,
    }
    if response_schema:
        config_kwargs["response_schema"] = response_schema
    if response_mime_type:
        config_kwargs["response_mime_type"] = response_mime_type
    if system_instruction:
        config_kwargs["system_instruction"] = system_instruction

    try:
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=llm_provider.get_model(),
            contents=[Content(role="user", parts=[Part(text=prompt)])],
            config=GenerateContentConfig(**config_kwargs),
        )
        text = (response.text or "").strip()
        return text or None
    except Exception as exc:
        logger.warning(f"GenAI request failed: {exc}")
    return None


def _generate_text_litellm(
    llm_provider: LiteLLMProvider,
    prompt: str,
    temperature: float,
    max_output_tokens: int,
    response_schema: Optional[dict],
    system_instruction: Optional[str],
) -> Optional[str]:
    try:
        import litellm
    except Exception as exc:
        logger.warning(f"LiteLLM import failed: {exc}")
        return None

    messages = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})

    user_prompt = prompt
    if response_schema:
        schema_text = json.dumps(response_schema, ensure_ascii=False)
        user_prompt = f"{prompt}\n\nReturn JSON only. Schema:\n{schema_text}"
    messages.append({"role": "user", "content": user_prompt})

    kwargs: dict = {
        "model": llm_provider.get_model(),
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_output_tokens,
    }
    if llm_provider.get_api_base():
        kwargs["api_base"] = llm_provider.get_api_base()
    if llm_provider.get_api_key():
        kwargs["api_key"] = llm_provider.get_api_key()

    try:
        response = litellm.completion(**kwargs)
        content = response.choices[0].message.content if response.choices else ""
        text = (content or "").strip()
        return text or None
    except Exception as exc:
        logger.warning(f"LiteLLM request failed: {exc}")
        return None


def extract_json(raw_output: str) -> dict:
    """
    Pull the JSON object out of an LLM answer.

    Accepts a fenced ```json block or the first bare ``{...}`` span.

    Raises:
        LLMValidationError: If no JSON object can be decoded
    """
    json_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", raw_output)
    if json_match:
        json_str = json_match.group(1).strip()
    else:
        json_match = re.search(r"\{[\s\S]*\}", raw_output)
        if not json_match:
            raise LLMValidationError("No JSON found in output", raw_output=raw_output)
        json_str = json_match.group(0)

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise LLMValidationError(f"Invalid JSON in output: {exc}", raw_output=raw_output) from exc
    if not isinstance(data, dict):
        raise LLMValidationError("Expected a JSON object", raw_output=raw_output)
    return data
