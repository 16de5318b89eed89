from __future__ import annotations

from typing import Any, Dict, List, Optional

from ...config import ProviderSettings
from .base import Completion, LLMProvider


class OpenAIProvider(LLMProvider):
    """OpenAI (or Azure OpenAI when the Azure endpoint is configured) via the openai SDK."""

    vendor = 'OpenAI'
    default_model = 'gpt-4o-mini'

    def __init__(self, settings: ProviderSettings, client: Any = None):
        super().__init__(settings)
        self._client = client

    def _get_client(self):
        if self._client is not None:
            return self._client
        extra = self.settings.extra or {}
        if extra.get('azure_endpoint'):
            from openai import AzureOpenAI
            self._client = AzureOpenAI(
                api_key=self.settings.api_key,
                api_version=extra.get('api_version') or '2024-02-15-preview',
                azure_endpoint=extra['azure_endpoint'],
                timeout=self.timeout_s,
                max_retries=0,
            )
            if extra.get('deployment'):
                self.model = extra['deployment']
        else:
            from openai import OpenAI
            kwargs: Dict[str, Any] = {'api_key': self.settings.api_key, 'timeout': self.timeout_s, 'max_retries': 0}
            if self.settings.base_url:
                kwargs['base_url'] = self.settings.base_url
            self._client = OpenAI(**kwargs)
        return self._client

    def _complete(self, messages: List[Dict[str, str]], *, temperature: float, max_tokens: Optional[int],
                  json_mode: bool, model: Optional[str] = None) -> Completion:
        client = self._get_client()
        kwargs: Dict[str, Any] = {
            'model': model or self.model,
            'messages': messages,
            'temperature': temperature,
        }
        if max_tokens:
            kwargs['max_tokens'] = max_tokens
        if json_mode:
            kwargs['response_format'] = {'type': 'json_object'}
        resp = client.chat.completions.create(**kwargs)
        return Completion(text=(resp.choices[0].message.content or '').strip())


def create_provider(settings: ProviderSettings) -> OpenAIProvider:
    return OpenAIProvider(settings)
