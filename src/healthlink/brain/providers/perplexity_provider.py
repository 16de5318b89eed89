from __future__ import annotations

from typing import Any, Dict, List, Optional

from ...config import ProviderSettings
from .base import Completion, LLMProvider, post_json, response_error

PERPLEXITY_API_URL = 'https://api.perplexity.ai/chat/completions'


class PerplexityProvider(LLMProvider):
    """Perplexity online models; structured results carry the search citations."""

    vendor = 'Perplexity'
    default_model = 'sonar'

    def _complete(self, messages: List[Dict[str, str]], *, temperature: float, max_tokens: Optional[int],
                  json_mode: bool, model: Optional[str] = None) -> Completion:
        body: Dict[str, Any] = {
            'model': model or self.model,
            'messages': messages,
            'temperature': temperature,
            'top_p': 0.9,
            'search_recency_filter': 'month',
            'return_related_questions': False,
        }
        if max_tokens:
            body['max_tokens'] = max_tokens
        resp = post_json(
            self.settings.base_url or PERPLEXITY_API_URL,
            headers={
                'Authorization': f'Bearer {self.settings.api_key}',
                'Content-Type': 'application/json',
            },
            json_body=body,
            timeout=self.timeout_s,
        )
        if resp.status_code != 200:
            raise RuntimeError(response_error(resp))
        data = resp.json()
        try:
            text = data['choices'][0]['message']['content'] or ''
        except (KeyError, IndexError, TypeError):
            raise ValueError('Unexpected Perplexity response format')
        return Completion(text=text, citations=list(data.get('citations') or []))

    def _decorate(self, result: Dict[str, Any], completion: Completion) -> Dict[str, Any]:
        result.setdefault('citations', completion.citations)
        return result


def create_provider(settings: ProviderSettings) -> PerplexityProvider:
    return PerplexityProvider(settings)
