"""Claude transport for the capture collaborators.

Two backends, picked per call by :func:`_use_api`:

* the Anthropic API, when ``ANTHROPIC_API_KEY`` is set
* the ``claude -p`` CLI, otherwise or when ``PARAVAULT_USE_CLI=1``

Every failure surfaces as :class:`LLMError`. Callers translate it into
their own domain error.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import subprocess

import anthropic

logger = logging.getLogger(__name__)

# Short names accepted in ``[llm] model``; anything else is passed through.
MODELS: dict[str, str] = {
    "haiku": "claude-haiku-4-5-20251001",
    "sonnet": "claude-sonnet-4-6",
}
DEFAULT_MODEL = "haiku"

_CLI_STDERR_LIMIT = 500


class LLMError(Exception):
    """A Claude call failed or returned nothing."""


def _resolve_model(model: str | None) -> str:
    name = model or DEFAULT_MODEL
    return MODELS.get(name, name)


def _use_api() -> tuple[bool, str]:
    api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
    forced_cli = os.environ.get("PARAVAULT_USE_CLI", "").strip() == "1"
    return bool(api_key) and not forced_cli, api_key


# ── Backends ────────────────────────────────────────────────────


def _call_anthropic_api(
    system_prompt: str,
    user_prompt: str,
    *,
    api_key: str,
    model: str | None,
    timeout: int,
    max_tokens: int,
    label: str,
) -> str:
    client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
    request: dict[str, object] = {
        "model": _resolve_model(model),
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": user_prompt}],
    }
    if system_prompt.strip():
        request["system"] = system_prompt

    logger.debug("Anthropic API call %s with %s", label, request["model"])
    try:
        response = client.messages.create(**request)  # type: ignore[arg-type]
    except anthropic.APIError as exc:
        raise LLMError(f"Anthropic API failed (label={label}): {exc}") from exc

    text = "".join(block.text for block in response.content if block.type == "text").strip()
    if not text:
        raise LLMError(f"Anthropic API returned empty response (label={label})")
    return text


def _call_cli(
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None,
    timeout: int,
    label: str,
) -> str:
    command = ["claude", "-p"]
    if model:
        command += ["--model", model]
    # A nested CLAUDECODE makes `claude` refuse to start
    env = dict(os.environ)
    env.pop("CLAUDECODE", None)

    logger.debug("claude -p call %s", label)
    try:
        proc = subprocess.run(
            command,
            input=f"{system_prompt}\n\n{user_prompt}",
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )
    except FileNotFoundError as exc:
        raise LLMError(f"Claude CLI not found on PATH (label={label})") from exc
    except subprocess.TimeoutExpired as exc:
        raise LLMError(f"Claude CLI timed out after {timeout}s (label={label})") from exc

    if proc.returncode != 0:
        stderr = proc.stderr[:_CLI_STDERR_LIMIT]
        raise LLMError(f"Claude CLI failed (exit {proc.returncode}, label={label}): {stderr}")
    text = proc.stdout.strip()
    if not text:
        raise LLMError(f"Claude CLI returned empty response (label={label})")
    return text


# ── Public API ──────────────────────────────────────────────────


def call_claude(
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None = None,
    timeout: int = 60,
    max_tokens: int = 1024,
    label: str = "capture",
) -> str:
    """Send one prompt to Claude and return the stripped reply.

    Args:
        system_prompt: Instructions for the model.
        user_prompt: The text to act on.
        model: Short name from :data:`MODELS` or a full model id.
        timeout: Seconds before the call is abandoned.
        max_tokens: Reply cap for the API backend.
        label: Names the call in logs and error messages.

    Raises:
        LLMError: On any backend failure or an empty reply.
    """
    use_api, api_key = _use_api()
    if use_api:
        return _call_anthropic_api(
            system_prompt,
            user_prompt,
            api_key=api_key,
            model=model,
            timeout=timeout,
            max_tokens=max_tokens,
            label=label,
        )
    return _call_cli(system_prompt, user_prompt, model=model, timeout=timeout, label=label)


async def acall_claude(
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None = None,
    timeout: int = 60,
    max_tokens: int = 1024,
    label: str = "capture",
) -> str:
    """Run :func:`call_claude` in a worker thread so callers can await it."""
    return await asyncio.to_thread(
        call_claude,
        system_prompt,
        user_prompt,
        model=model,
        timeout=timeout,
        max_tokens=max_tokens,
        label=label,
    )


_FENCED_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


def extract_json_array(text: str) -> str:
    """Pull the JSON array out of a model reply.

    Prefers a fenced code block, then the span from the first ``[`` to the
    last ``]``. Returns the stripped reply when neither is present.
    """
    text = text.strip()
    fenced = _FENCED_RE.search(text)
    if fenced:
        return fenced.group(1)
    start, end = text.find("["), text.rfind("]")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text
