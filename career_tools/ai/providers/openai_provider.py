from __future__ import annotations

import asyncio
import logging
from typing import Optional

from openai import APIConnectionError, APIError, APIStatusError, APITimeoutError, AsyncOpenAI

from career_tools.ai.types import PromptPair
from career_tools.core.errors import UpstreamError, UpstreamTimeout, UpstreamUnavailable

logger = logging.getLogger(__name__)


class OpenAIProvider:
    """Non-streaming chat completion against an OpenAI-compatible endpoint.

    The SDK's own retries are disabled: a failed call is reported once and the
    caller decides what to do with it.
    """

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.model = model
        self._client: AsyncOpenAI | None = None
        if api_key:
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url or None,
                max_retries=0,
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def complete(self, prompt: PromptPair, *, timeout_s: float) -> str:
        if self._client is None:
            raise UpstreamUnavailable("Model API key is not configured.")

        payload = [{"role": m.role, "content": m.content} for m in prompt.messages()]
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self.model,
                    messages=payload,
                    temperature=prompt.options.temperature,
                    max_tokens=prompt.options.max_tokens,
                    stream=False,
                    timeout=timeout_s,
                ),
                timeout=timeout_s,
            )
        except (asyncio.TimeoutError, APITimeoutError) as exc:
            raise UpstreamTimeout(f"Model call exceeded {timeout_s:.1f}s") from exc
        except APIStatusError as exc:
            raise UpstreamError(
                f"Model API returned status {exc.status_code}", status_code=exc.status_code
            ) from exc
        except APIConnectionError as exc:
            raise UpstreamError(f"Model API connection failed: {exc}") from exc
        except APIError as exc:
            raise UpstreamError(f"Model API call failed: {exc.message}") from exc

        content = response.choices[0].message.content if response.choices else ""
        if not content:
            raise UpstreamError("Model API returned an empty completion", status_code=200)
        logger.debug("model_completion_received model=%s chars=%s", self.model, len(content))
        return content
