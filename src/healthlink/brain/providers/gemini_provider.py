from __future__ import annotations

from typing import Any, Dict, List, Optional

from ...config import ProviderSettings
from .base import Completion, LLMProvider, post_json, response_error

GEMINI_API_BASE_URL = 'https://generativelanguage.googleapis.com/v1beta'


def _to_contents(messages: List[Dict[str, str]]) -> Dict[str, Any]:
    """Split OpenAI-style messages into Gemini ``systemInstruction`` + ``contents``."""
    system_parts = [m['content'] for m in messages if m['role'] == 'system']
    contents = [
        {'role': 'model' if m['role'] == 'assistant' else 'user', 'parts': [{'text': m['content']}]}
        for m in messages if m['role'] != 'system'
    ]
    body: Dict[str, Any] = {'contents': contents}
    if system_parts:
        body['systemInstruction'] = {'parts': [{'text': '\n\n'.join(system_parts)}]}
    return body


def extract_gemini_text(response_json: Dict[str, Any]) -> str:
    candidates = response_json.get('candidates') or []
    if not candidates:
        raise ValueError('Gemini returned no candidates')
    content = (candidates[0] or {}).get('content') or {}
    parts = content.get('parts') or []
    text_parts = [p['text'] for p in parts if isinstance(p, dict) and isinstance(p.get('text'), str)]
    if not text_parts:
        raise ValueError('Gemini candidate contained no text')
    return '\n'.join(text_parts)


class GeminiProvider(LLMProvider):
    """Google Gemini over the generativelanguage REST API."""

    vendor = 'Gemini'
    default_model = 'gemini-2.5-flash'

    def _url(self, model: str) -> str:
        base = (self.settings.base_url or GEMINI_API_BASE_URL).rstrip('/')
        return f'{base}/models/{model}:generateContent'

    def _complete(self, messages: List[Dict[str, str]], *, temperature: float, max_tokens: Optional[int],
                  json_mode: bool, model: Optional[str] = None) -> Completion:
        body = _to_contents(messages)
        generation_config: Dict[str, Any] = {'temperature': temperature}
        if max_tokens:
            generation_config['maxOutputTokens'] = max_tokens
        if json_mode:
            generation_config['responseMimeType'] = 'application/json'
        body['generationConfig'] = generation_config
        resp = post_json(
            self._url(model or self.model),
            params={'key': self.settings.api_key},
            headers={'Content-Type': 'application/json'},
            json_body=body,
            timeout=self.timeout_s,
        )
        if resp.status_code != 200:
            raise RuntimeError(response_error(resp))
        return Completion(text=extract_gemini_text(resp.json()))


def create_provider(settings: ProviderSettings) -> GeminiProvider:
    return GeminiProvider(settings)
