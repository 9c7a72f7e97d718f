"""
Vertex AI REST client for LLM interactions.
"""
import json
import logging
from typing import Optional, Dict, Any, List, Protocol, Type, TypeVar

import requests
import google.auth
import google.auth.exceptions
import google.auth.transport.requests
from google.oauth2 import service_account
from pydantic import BaseModel, ValidationError

from ...config import VERTEX_LOCATION, MODEL_NAME, LLM_TIMEOUT, MAX_OUTPUT_TOKENS

logger = logging.getLogger("llm_client")

T = TypeVar("T", bound=BaseModel)


class LLMRequestError(RuntimeError):
    """The model endpoint could not be reached or returned an error status."""


class SchemaValidationError(ValueError):
    """The model output could not be coerced to the requested schema."""


class LLMClient(Protocol):
    """Capability interface the interview services depend on."""

    def generate_text(self, prompt: str) -> str: ...

    def generate_object(self, schema: Type[T], prompt: str, system: Optional[str] = None) -> T: ...


class VertexRestClient:
    """REST-based client for Vertex AI Gemini models."""

    def __init__(self,
                 project: str,
                 location: str = VERTEX_LOCATION,
                 model: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 timeout: int = LLM_TIMEOUT):
        self.project = project
        self.location = location
        self.model = model
        self.credentials_json = credentials_json
        self.base_url = f"https://{self.location}-aiplatform.googleapis.com/v1"
        self.model_resource = f"projects/{self.project}/locations/{self.location}/publishers/google/models/{self.model}"
        self._token = None
        self.timeout = timeout

    def _refresh_token(self):
        """Refresh the OAuth token for API calls."""
        if self.credentials_json:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_json,
                scopes=["https://www.googleapis.com/auth/cloud-platform"],
            )
        else:
            creds, _ = google.auth.default(scopes=["https://www.googleapis.com/auth/cloud-platform"])

        auth_req = google.auth.transport.requests.Request()
        creds.refresh(auth_req)
        self._token = creds.token

    def _ensure_token(self):
        """Ensure we have a valid token, refreshing if needed."""
        if not self._token:
            self._refresh_token()

    def generate_content(
        self,
        prompt_text: str,
        temperature: float = 0.0,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
        system_instruction: Optional[str] = None,
        response_mime_type: Optional[str] = None,
        stop_sequences: Optional[List[str]] = None,
    ) -> str:
        """Generate content using the Vertex AI REST API."""
        try:
            self._ensure_token()
        except (google.auth.exceptions.GoogleAuthError, OSError) as e:
            raise LLMRequestError(f"Vertex credentials unavailable: {e}") from e
        url = f"{self.base_url}/{self.model_resource}:generateContent"

        body: Dict[str, Any] = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt_text}],
                }
            ],
            "generationConfig": {
                "temperature": float(temperature),
                "maxOutputTokens": int(max_output_tokens),
            },
        }

        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if response_mime_type:
            body["generationConfig"]["responseMimeType"] = response_mime_type
        if stop_sequences:
            body["generationConfig"]["stopSequences"] = list(stop_sequences)

        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

        try:
            resp = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise LLMRequestError(f"Vertex REST request failed: {e}") from e
        if resp.status_code >= 400:
            raise LLMRequestError(f"Vertex REST error {resp.status_code}: {resp.text}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise LLMRequestError(f"Vertex REST returned a non-JSON body: {e}") from e
        return self._parse_response_text(payload)

    def _parse_response_text(self, resp_json: Dict[str, Any]) -> str:
        """
        Parse response JSON to extract text content.
        Tries Vertex schema first, then falls back to alternatives.
        """
        # Vertex schema: candidates[0].content.parts[0].text
        cands = resp_json.get("candidates", [])
        if cands:
            content = cands[0].get("content", {})
            parts = content.get("parts", [])
            if parts and isinstance(parts, list):
                for p in parts:
                    if isinstance(p, dict) and isinstance(p.get("text"), str):
                        return p["text"]
            # Some responses put text directly in content
            if isinstance(content, dict) and isinstance(content.get("text"), str):
                return content["text"]

        # Direct text fallback
        if isinstance(resp_json.get("text"), str):
            return resp_json["text"]

        # Last resort: return JSON for inspection
        return json.dumps(resp_json, separators=(",", ":"))

    def generate_text(self, prompt: str) -> str:
        """Plain text completion."""
        text = self.generate_content(prompt, temperature=0.7)
        logger.debug("Raw LLM text output: %s", repr(text))
        return text

    def generate_object(self, schema: Type[T], prompt: str, system: Optional[str] = None) -> T:
        """
        Generate a response validated against a pydantic schema.

        The JSON schema is appended to the system instruction and the
        endpoint is asked for an application/json response.

        Raises:
            LLMRequestError: If the request itself fails
            SchemaValidationError: If the output does not match ``schema``
        """
        schema_json = json.dumps(schema.model_json_schema(), indent=2)
        schema_instruction = "Reply with a single JSON object matching this schema:\n" + schema_json
        system_instruction = f"{system.strip()}\n\n{schema_instruction}" if system else schema_instruction

        logger.debug("Sending structured prompt to LLM (schema=%s)...", schema.__name__)
        text = self.generate_content(
            prompt.strip(),
            temperature=0.0,
            system_instruction=system_instruction,
            response_mime_type="application/json",
        )
        logger.debug("Raw LLM output: %s", repr(text))
        return parse_structured_output(schema, text)


def parse_structured_output(schema: Type[T], text: str) -> T:
    """Validate raw model text against ``schema`` with defensive JSON extraction."""
    try:
        return schema.model_validate_json(text)
    except ValidationError as e:
        logger.warning("Direct schema validation failed: %s", e)
        last_error: Exception = e

    # Try extracting the JSON object from surrounding text or code fences
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        try:
            return schema.model_validate_json(text[start:end + 1])
        except ValidationError as e2:
            logger.warning("Substring validation also failed: %s", e2)
            last_error = e2

    raise SchemaValidationError(f"LLM output does not match {schema.__name__}: {last_error}") from last_error
