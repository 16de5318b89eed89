from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests

from ...config import ProviderSettings
from ...errors import UpstreamProviderError
from .. import prompts

logger = logging.getLogger(__name__)

T = TypeVar('T')

EMPTY_CHAT_REPLY = "I apologize, but I couldn't generate a response."


@dataclass
class Completion:
    text: str
    citations: List[Any] = field(default_factory=list)


def parse_json_output(text: str) -> Dict[str, Any]:
    """Parse a model reply that should be a JSON object, tolerating code fences."""
    cleaned = (text or '').strip()
    if not cleaned:
        raise ValueError('Empty model output')
    if '```json' in cleaned:
        cleaned = cleaned.split('```json', 1)[1].split('```', 1)[0].strip()
    elif '```' in cleaned:
        cleaned = cleaned.split('```', 1)[1].split('```', 1)[0].strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        start, end = cleaned.find('{'), cleaned.rfind('}')
        if start < 0 or end <= start:
            raise
        parsed = json.loads(cleaned[start:end + 1])
    if not isinstance(parsed, dict):
        raise ValueError(f'Expected a JSON object, got {type(parsed).__name__}')
    return parsed


def post_json(url: str, *, json_body: Dict[str, Any], headers: Dict[str, str], timeout: float,
              params: Optional[Dict[str, Any]] = None) -> requests.Response:
    """Single-attempt POST; callers surface non-200 answers as provider errors."""
    return requests.post(url, params=params, headers=headers, json=json_body, timeout=timeout)


def response_error(resp: requests.Response) -> str:
    """Short description of a failed vendor response for error messages."""
    try:
        body = resp.json()
    except ValueError:
        return f'HTTP {resp.status_code}: {resp.text[:200]}'
    err = body.get('error') if isinstance(body, dict) else None
    if isinstance(err, dict):
        err = err.get('message') or err.get('status')
    return f'HTTP {resp.status_code}: {err or str(body)[:200]}'


class LLMProvider:
    """Shared behaviour for chat-completion style vendors.

    Subclasses implement ``_complete`` for their API; everything else (prompt
    selection, JSON parsing, error wrapping) lives here. Any failure leaves
    the adapter as ``UpstreamProviderError("<Vendor> <operation> error: ...")``.
    """

    vendor = 'LLM'
    default_model = ''

    def __init__(self, settings: ProviderSettings):
        self.settings = settings
        self.name = settings.name
        self.priority = settings.priority
        self.rate_limit = settings.rate_limit
        self.model = settings.model or self.default_model
        self.timeout_s = settings.timeout_s
        self.is_active = settings.configured

    def _complete(self, messages: List[Dict[str, str]], *, temperature: float, max_tokens: Optional[int],
                  json_mode: bool, model: Optional[str] = None) -> Completion:
        raise NotImplementedError

    def _guard(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except UpstreamProviderError:
            raise
        except Exception as exc:
            logger.warning('%s %s failed: %s', self.vendor, operation, type(exc).__name__)
            raise UpstreamProviderError(f'{self.vendor} {operation} error: {exc}', provider=self.name) from exc

    def _decorate(self, result: Dict[str, Any], completion: Completion) -> Dict[str, Any]:
        return result

    def _structured(self, operation: str, prompt: prompts.Prompt, *, temperature: float,
                    options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        options = options or {}
        system, user = prompt

        def run() -> Dict[str, Any]:
            completion = self._complete(
                [{'role': 'system', 'content': system}, {'role': 'user', 'content': user}],
                temperature=options.get('temperature', temperature),
                max_tokens=options.get('maxTokens'),
                json_mode=True,
                model=options.get('model'),
            )
            return self._decorate(parse_json_output(completion.text), completion)

        return self._guard(operation, run)

    def chat(self, messages: List[Dict[str, Any]], options: Optional[Dict[str, Any]] = None) -> str:
        options = options or {}
        cleaned = [{'role': str(m.get('role') or 'user'), 'content': str(m.get('content') or '')} for m in messages or []]

        def run() -> str:
            completion = self._complete(
                cleaned,
                temperature=options.get('temperature', 0.7),
                max_tokens=options.get('maxTokens', 1000),
                json_mode=bool(options.get('responseFormat')),
                model=options.get('model'),
            )
            return (completion.text or '').strip() or EMPTY_CHAT_REPLY

        return self._guard('chat', run)

    def analyze(self, input: Dict[str, Any], specialization: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        prompt = self._guard('analysis', lambda: prompts.analysis_prompt(specialization, input))
        return self._structured('analysis', prompt, temperature=0.3, options=options)

    def predict(self, data: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._structured('prediction', prompts.prediction_prompt(data or {}), temperature=0.2, options=options)

    def educate(self, query: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        level = (options or {}).get('level') or 'intermediate'
        return self._structured('education', prompts.education_prompt(query, level), temperature=0.4, options=options)

    def process_emotion(self, data: Any, input_type: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._structured('emotion analysis', prompts.emotion_prompt(data, input_type), temperature=0.3,
                                options=options)
