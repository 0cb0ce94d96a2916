"""JSON extraction utilities for parsing structured data from LLM responses.

Model output may wrap the JSON object in prose, markdown fences or other
noise. The extractor keeps everything from the first opening brace to the
last closing brace and parses that.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import MalformedOutputError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class JSONExtractor:
    """Extract structured data from LLM responses.

    Example:
        extractor = JSONExtractor()
        data = extractor.extract_object('garbage {"message": "hi"} trailing')
        # Returns: {"message": "hi"}
    """

    def extract_object(self, response: str) -> Dict[str, Any]:
        """Extract a JSON object from an LLM response.

        Args:
            response: Raw LLM response text

        Returns:
            The parsed object

        Raises:
            MalformedOutputError: If no object can be found or parsed
        """
        if not response or not response.strip():
            raise MalformedOutputError("Empty response from model")

        start = response.find("{")
        end = response.rfind("}")
        if start == -1 or end == -1 or end < start:
            raise MalformedOutputError("No JSON object found in response")

        candidate = response[start:end + 1]
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as exc:
            logger.debug("Unparseable model output: %r", candidate[:500])
            raise MalformedOutputError(f"Invalid JSON in response: {exc.msg}") from exc

        if not isinstance(data, dict):
            raise MalformedOutputError("Response JSON is not an object")
        return data

    def extract_to_model(self, response: str, model_class: Type[T]) -> T:
        """Extract JSON and parse into a Pydantic model.

        Args:
            response: Raw LLM response
            model_class: Pydantic model class to parse into

        Raises:
            MalformedOutputError: If extraction fails or the object does not
                match ``model_class``
        """
        data = self.extract_object(response)
        try:
            return model_class.model_validate(data)
        except ValidationError as exc:
            logger.debug("Model output failed validation: %s", exc)
            raise MalformedOutputError(
                f"Response does not match {model_class.__name__}: {exc.error_count()} error(s)"
            ) from exc
