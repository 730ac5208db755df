"""
Stateless relay between the assistant widget and a hosted inference API.

The widget speaks an OpenAI-like shape; the inference API takes a single
prompt string. No retries, no conversation state.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api-inference.huggingface.co/models/"
DEFAULT_MODEL = "HuggingFaceH4/zephyr-7b-beta"
NO_REPLY = "No response from the model."


def build_prompt(messages: List[Dict[str, Any]]) -> str:
    """Flatten chat messages into a 'User: ...' / 'Assistant: ...' transcript."""
    lines = []
    for message in messages or []:
        speaker = "User" if message.get("role") == "user" else "Assistant"
        lines.append(f"{speaker}: {message.get('content', '')}")
    return "\n".join(lines) + "\nAssistant:"


def extract_reply(data: Any) -> str:
    """Pull generated text from either a list or a single-object response."""
    if isinstance(data, list) and data and isinstance(data[0], dict):
        text = data[0].get("generated_text")
        if text:
            return text
    if isinstance(data, dict) and data.get("generated_text"):
        return data["generated_text"]
    return NO_REPLY


def chat_response(content: str) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class ChatRelay:
    """Forwards one chat request to the inference API."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30,
    ):
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.timeout = timeout

    def complete(self, payload: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        """Return (HTTP status, JSON body) for the widget."""
        if not self.api_key:
            return 500, {"error": "API key not configured"}

        model = payload.get("model") or self.model
        prompt = build_prompt(payload.get("messages") or [])
        url = f"{self.api_url.rstrip('/')}/{model}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                url, headers=headers, json={"inputs": prompt}, timeout=self.timeout
            )
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("Chat relay request failed: %s", e)
            return 500, {"error": str(e)}
        except ValueError as e:
            logger.error("Chat relay got a non-JSON reply: %s", e)
            return 500, {"error": f"Invalid response from model API: {e}"}

        return 200, chat_response(extract_reply(data))
