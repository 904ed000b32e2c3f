# utils/ai_client.py
import asyncio
import json
import logging
import re
from typing import Any, Callable, Dict, Optional

import httpx
from openai import AsyncOpenAI, OpenAIError

from escola360.core.config import AIConfig

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class AIClientError(Exception):
    pass


class GenerationTransportError(AIClientError):
    """The provider could not be reached, timed out or answered with an error status."""


class GenerationSchemaError(AIClientError):
    """The provider answered, but not with JSON matching the requested structure."""


async def _fetch_gemini(
    prompt: str,
    config: AIConfig,
    *,
    response_schema: Optional[Dict[str, Any]] = None,
    system_instruction: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> str:
    payload: Dict[str, Any] = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": config.temperature,
            "responseMimeType": "application/json",
        },
    }
    if response_schema is not None:
        payload["generationConfig"]["responseSchema"] = response_schema
    if system_instruction:
        payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

    client = http_client or httpx.AsyncClient(timeout=config.timeout)
    try:
        resp = await client.post(config.api_url, params={"key": config.api_key}, json=payload)
    finally:
        if http_client is None:
            await client.aclose()

    if resp.status_code != 200:
        raise GenerationTransportError(f"AI provider returned status {resp.status_code}: {resp.text}")

    try:
        data = resp.json()
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (ValueError, KeyError, IndexError, TypeError):
        raise GenerationSchemaError(f"Unexpected Gemini response: {resp.text[:500]}")


async def _fetch_openai(
    prompt: str,
    config: AIConfig,
    *,
    response_schema: Optional[Dict[str, Any]] = None,
    system_instruction: Optional[str] = None,
) -> str:
    # The chat API has no Gemini-style schema field; the schema travels in the prompt.
    if response_schema is not None:
        prompt = (
            f"{prompt}\n\nResponda SOMENTE com JSON válido seguindo este schema "
            f"(se o tipo raiz for ARRAY, envolva a lista em {{\"items\": [...]}}):\n"
            f"{json.dumps(response_schema, ensure_ascii=False)}"
        )
    messages = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})
    messages.append({"role": "user", "content": prompt})

    client = AsyncOpenAI(api_key=config.api_key, timeout=config.timeout)
    try:
        response = await client.chat.completions.create(
            model=config.model,
            messages=messages,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )
    except OpenAIError as e:
        raise GenerationTransportError(f"OpenAI API error: {e}")
    finally:
        await client.close()

    content = response.choices[0].message.content
    if not content:
        raise GenerationSchemaError("OpenAI returned an empty message")
    return content


def _extract_json_from_text(text: str) -> Optional[Any]:
    """
    Try to extract a JSON object or array from a text blob.
    First, attempt to parse the whole string. If that fails, locate the first {...} or [...] block.
    """
    text = text.strip()
    # Handle markdown code blocks
    if text.startswith("```json"):
        text = text[7:-3].strip()
    elif text.startswith("```"):
        text = text[3:-3].strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        for pattern in (r"\{.*\}", r"\[.*\]"):
            matches = re.search(pattern, text, re.DOTALL)
            if matches:
                try:
                    return json.loads(matches.group(0))
                except json.JSONDecodeError:
                    continue
    logger.warning("Failed to extract any valid JSON from the AI response.")
    return None


async def call_ai_model(
    prompt: str,
    *,
    config: Optional[AIConfig] = None,
    response_schema: Optional[Dict[str, Any]] = None,
    system_instruction: Optional[str] = None,
    schema_parser: Optional[Callable[[Any], Any]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    backoff_base: float = 1.0,
) -> Any:
    """
    Call the AI provider and return a validated object (if schema_parser provided).

    Makes config.max_retries + 1 attempts; the default configuration makes one.
    Raises GenerationTransportError or GenerationSchemaError from the last attempt.
    """
    config = config or AIConfig()
    if not config.api_key:
        raise GenerationTransportError("AI_API_KEY not set")
    provider = config.provider.strip().lower()
    if provider not in ("google-gemini", "openai"):
        raise ValueError(f"Unsupported AI_PROVIDER: {config.provider}")

    last_exc: Optional[AIClientError] = None
    for attempt in range(1, config.max_retries + 2):
        try:
            logger.info("AI call attempt %d (%s/%s)", attempt, provider, config.model)
            if provider == "openai":
                raw_text = await _fetch_openai(
                    prompt, config, response_schema=response_schema, system_instruction=system_instruction
                )
            else:
                raw_text = await _fetch_gemini(
                    prompt,
                    config,
                    response_schema=response_schema,
                    system_instruction=system_instruction,
                    http_client=http_client,
                )

            logger.debug("AI raw response (truncated): %s", raw_text[:1000])

            parsed = _extract_json_from_text(raw_text)
            if parsed is None:
                raise GenerationSchemaError("Failed to extract valid JSON from the AI's response text.")
            # json_object mode cannot return a bare array
            if provider == "openai" and isinstance(parsed, dict) and list(parsed) == ["items"]:
                parsed = parsed["items"]

            if schema_parser:
                try:
                    return schema_parser(parsed)
                except (ValueError, TypeError) as e:
                    logger.warning("Schema parser rejected AI output: %s", e)
                    raise GenerationSchemaError(f"Schema validation failed: {e}")

            return parsed

        except httpx.RequestError as e:
            logger.exception("AI call failed on attempt %d: %s", attempt, e)
            last_exc = GenerationTransportError(f"AI provider unreachable: {e}")
        except AIClientError as e:
            logger.exception("AI call failed on attempt %d: %s", attempt, e)
            last_exc = e

        if attempt <= config.max_retries:
            sleep_time = backoff_base * (2 ** (attempt - 1))
            await asyncio.sleep(sleep_time)

    raise last_exc
