"""Gemini generateContent provider implementation."""
import logging
import requests
from typing import Any, Dict, Optional
from chat_provider import ChatProviderBase, ChatProviderError
from chat_data import ChatResult, ChatSuccess, ChatFailure


class GeminiChatProvider(ChatProviderBase):
    """
    Chat provider using the Gemini REST API.

    Sends one prompt per call (no conversation history) and reads the reply
    from candidates[0].content.parts[0].text.
    """

    API_URL = "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent"

    def __init__(
        self,
        api_key: Optional[str],
        api_url: Optional[str] = None,
        temperature: float = 0.7,
        top_k: int = 40,
        top_p: float = 0.95,
        max_output_tokens: int = 1024,
        timeout: Optional[float] = 30
    ):
        """
        Initialize Gemini provider.

        Args:
            api_key: Gemini API key; when missing every call fails without I/O
            api_url: generateContent endpoint
            temperature: Sampling temperature
            top_k: Top-k sampling cutoff
            top_p: Nucleus sampling cutoff
            max_output_tokens: Reply length limit
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.api_url = api_url or self.API_URL
        self.temperature = temperature
        self.top_k = top_k
        self.top_p = top_p
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "topK": self.top_k,
                "topP": self.top_p,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

    def complete(self, prompt: str) -> ChatResult:
        try:
            return ChatSuccess(self._generate(prompt))
        except ChatProviderError as e:
            return ChatFailure(str(e))

    def _generate(self, prompt: str) -> str:
        if not self.api_key:
            raise ChatProviderError("Gemini API key not configured")

        try:
            logging.info(f"Making Gemini API request: {self.api_url}")
            logging.debug(f"Prompt length: {len(prompt)} chars")

            response = requests.post(
                self.api_url,
                params={"key": self.api_key},
                json=self.build_payload(prompt),
                timeout=self.timeout,
            )

            logging.info(f"Gemini response status: {response.status_code}")
            if not response.ok:
                raise ChatProviderError(f"HTTP {response.status_code}: {response.text[:200]}")

            data = response.json()
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during Gemini request: {e}")
            raise ChatProviderError(f"Network error: {str(e)}")
        except ValueError as e:
            raise ChatProviderError(f"Invalid JSON in response: {str(e)}")

        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: Any) -> str:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ChatProviderError(f"No response generated: {e!r}")

        if not isinstance(text, str) or not text.strip():
            raise ChatProviderError("No response generated: empty text")
        return text
