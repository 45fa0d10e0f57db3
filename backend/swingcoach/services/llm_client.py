"""
Multimodal LLM client for swing scoring and insight generation
Talks to any OpenAI-compatible chat completions endpoint
"""

import asyncio
import base64
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from swingcoach.config.base import settings
from swingcoach.models.upload import HostedVideo, VideoUpload
from swingcoach.utils.logger import get_logger

logger = get_logger(__name__)


class LLMError(Exception):
    """Base error for LLM calls; kind names the failure category"""
    kind = "llm-error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class LLMConfigurationError(LLMError):
    kind = "api-key-missing"


class LLMEncodingError(LLMError):
    kind = "encoding-failure"


class LLMTimeoutError(LLMError):
    kind = "transport-timeout"


class LLMTransportError(LLMError):
    kind = "transport-error"


class LLMSizeRejectedError(LLMError):
    kind = "size-rejected"


class LLMServerError(LLMError):
    kind = "server-error"


class LLMEmptyResponseError(LLMError):
    kind = "empty-response"


class VideoPart:
    """The video half of a multimodal request"""

    def __init__(self, url: str, mode: str, size_bytes: int = 0):
        self.url = url
        self.mode = mode
        self.size_bytes = size_bytes

    @classmethod
    def from_upload(cls, upload: VideoUpload) -> "VideoPart":
        """Inline mode: base64 data URL tagged with the upload's mime type"""
        try:
            encoded = base64.b64encode(upload.content).decode("ascii")
        except (TypeError, ValueError) as e:
            raise LLMEncodingError(f"Could not encode {upload.filename}: {e}") from e
        if not encoded:
            raise LLMEncodingError(f"Upload {upload.filename} is empty")
        return cls(f"data:{upload.mime_type};base64,{encoded}", "inline", upload.size)

    @classmethod
    def from_hosted(cls, hosted: HostedVideo) -> "VideoPart":
        """Hosted mode: the provider fetches the video itself, no bytes are sent"""
        return cls(hosted.uri, "hosted")

    def to_content(self) -> Dict[str, Any]:
        return {"type": "image_url", "image_url": {"url": self.url}}


class LLMClient:
    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.OPENAI_MODEL
        self._missing_key_logged = False

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                if not self._missing_key_logged:
                    logger.error("OPENAI_API_KEY not set, LLM analysis disabled")
                    self._missing_key_logged = True
                raise LLMConfigurationError("OPENAI_API_KEY is not configured")
            self._client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.OPENAI_BASE_URL or None,
                max_retries=0,
            )
        return self._client

    async def generate(
        self,
        prompt: str,
        video: Optional[VideoPart] = None,
        temperature: float = 0.5,
        max_tokens: int = 2048,
        timeout: float = 120.0,
    ) -> str:
        """
        Submit a prompt with an optional video and return the first candidate's text

        Args:
            prompt: Text prompt
            video: Inline or hosted video part
            temperature: Sampling temperature
            max_tokens: Maximum output tokens
            timeout: Deadline in seconds; the call is abandoned when it passes

        Returns:
            Raw response text

        Raises:
            LLMError subclass describing the failure kind
        """
        content = [{"type": "text", "text": prompt}]
        if video is not None:
            content.append(video.to_content())

        client = self.client
        size_mb = video.size_bytes / (1024 * 1024) if video else 0.0
        logger.info(
            f"Sending {video.mode if video else 'text-only'} request to {self.model} "
            f"({size_mb:.2f}MB, timeout {timeout:.0f}s)"
        )

        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": content}],
                    temperature=temperature,
                    max_tokens=max_tokens,
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"LLM call abandoned after {timeout:.0f}s")
            raise LLMTimeoutError(f"LLM call exceeded {timeout:.0f}s") from e
        except openai.APITimeoutError as e:
            logger.error(f"LLM API timeout: {e}")
            raise LLMTimeoutError(str(e)) from e
        except openai.APIConnectionError as e:
            logger.error(f"LLM connection error: {e}")
            raise LLMTransportError(str(e)) from e
        except openai.APIStatusError as e:
            message = str(e)
            if e.status_code == 413 or "size" in message.lower():
                logger.error(f"LLM rejected the request due to size limits ({size_mb:.2f}MB): {message}")
                raise LLMSizeRejectedError(message, {"status": e.status_code, "size_mb": size_mb}) from e
            if e.status_code >= 500:
                logger.error(f"LLM server error {e.status_code}: {message}")
                raise LLMServerError(message, {"status": e.status_code}) from e
            logger.error(f"LLM request failed with status {e.status_code}: {message}")
            raise LLMTransportError(message, {"status": e.status_code}) from e
        except openai.OpenAIError as e:
            logger.error(f"LLM client error: {e}")
            raise LLMTransportError(str(e)) from e

        if getattr(response, "usage", None):
            logger.debug(f"Token usage: {response.usage.total_tokens} total")

        if not response.choices or not response.choices[0].message or not response.choices[0].message.content:
            logger.error("LLM returned no text in the first candidate")
            raise LLMEmptyResponseError("Empty LLM response")

        return response.choices[0].message.content


llm_client = LLMClient()
