import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from PIL import Image

from constants import DEFAULT_MODEL_NAME
from errors import ConfigurationError, ExtractionFailed

logger = logging.getLogger(__name__)

SUPPORTED_MODELS = {"gemini-2.0-flash", "gemini-2.5-flash", "gemini-flash-latest"}

api_name_to_colloquial = {
    "gemini-2.0-flash": "Gemini 2.0 Flash",
    "gemini-2.5-flash": "Gemini 2.5 Flash",
    "gemini-flash-latest": "Gemini Flash",
}


def get_api_key() -> Optional[str]:
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")


class Model(ABC):
    def __init__(self, model_name):
        self.model_name = model_name

    @abstractmethod
    def call_model(
        self,
        user_prompt: str,
        image: Optional[Image.Image] = None,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Send one prompt (plus optional image) and return the raw response text."""


def create_model(model_name: str = DEFAULT_MODEL_NAME, api_key: Optional[str] = None) -> "GeminiModel":
    if model_name not in SUPPORTED_MODELS:
        raise ConfigurationError(
            f"Model '{model_name}' is not supported. Choose one of: {', '.join(sorted(SUPPORTED_MODELS))}."
        )
    return GeminiModel(model_name, api_key=api_key)


class GeminiModel(Model):
    def __init__(self, model_name: str = DEFAULT_MODEL_NAME, api_key: Optional[str] = None):
        super().__init__(model_name)
        api_key = api_key or get_api_key()
        if not api_key:
            raise ConfigurationError("API Key is missing. Set GEMINI_API_KEY before scanning screenshots.")

        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(self.model_name)

    def call_model(self, user_prompt, image=None, response_schema=None):
        parts: list = [user_prompt]
        if image is not None:
            parts.append(image)

        generation_config: Dict[str, Any] = {}
        if response_schema is not None:
            generation_config = {
                "response_mime_type": "application/json",
                "response_schema": response_schema,
            }

        try:
            response = self.model.generate_content(parts, generation_config=generation_config or None)
            return response.text
        except (google_exceptions.PermissionDenied, google_exceptions.Unauthenticated) as exc:
            raise ConfigurationError(f"Gemini rejected the API key: {exc.message}") from exc
        except google_exceptions.InvalidArgument as exc:
            if "api key" in str(exc).lower():
                raise ConfigurationError(f"Gemini rejected the API key: {exc.message}") from exc
            raise ExtractionFailed(f"Gemini rejected the request: {exc.message}") from exc
        except google_exceptions.GoogleAPIError as exc:
            raise ExtractionFailed(f"Gemini request failed: {exc}") from exc
        except ValueError as exc:
            # response.text raises ValueError when the candidate was blocked or empty.
            raise ExtractionFailed(f"Gemini returned no usable answer: {exc}") from exc
