"""One text-generation adapter over Bedrock's Anthropic messages API."""
import json
import logging
import re
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import BedrockError, error_code

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "bedrock-2023-05-31"

M = TypeVar("M", bound=BaseModel)


class Message(BaseModel):
    role: str
    content: str


class Usage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class Completion(BaseModel):
    text: str
    usage: Usage = Usage()


class TextGenerationClient(Protocol):
    def generate(self, messages: List[Message], max_tokens: int = 1024, temperature: float = 0.7,
                 system: Optional[str] = None,
                 response_format: Optional[Dict[str, Any]] = None) -> Completion: ...


def _as_messages(messages) -> List[Message]:
    return [m if isinstance(m, Message) else Message(**m) for m in messages]


def _schema_instruction(response_format: Dict[str, Any]) -> str:
    schema = response_format.get("schema")
    if not schema:
        return "Respond ONLY with valid JSON, no markdown or extra text."
    return ("Respond ONLY with valid JSON, no markdown or extra text, matching this JSON schema:\n"
            + json.dumps(schema))


def extract_json(text: str) -> str:
    m = re.search(r"\{.*\}", text, flags=re.S)
    return m.group(0) if m else text


class BedrockTextClient:
    def __init__(self, client, model_id: str):
        self.client = client
        self.model_id = model_id

    def generate(self, messages, max_tokens: int = 1024, temperature: float = 0.7,
                 system: Optional[str] = None,
                 response_format: Optional[Dict[str, Any]] = None) -> Completion:
        msgs = _as_messages(messages)
        # Claude takes the system prompt separately from the turns
        systems = [m.content for m in msgs if m.role == "system"]
        if system:
            systems.insert(0, system)
        if response_format:
            systems.append(_schema_instruction(response_format))
        body: Dict[str, Any] = {
            "anthropic_version": ANTHROPIC_VERSION,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [
                {"role": m.role, "content": [{"type": "text", "text": m.content}]}
                for m in msgs if m.role != "system"
            ],
        }
        if systems:
            body["system"] = "\n\n".join(systems)
        try:
            r = self.client.invoke_model(
                modelId=self.model_id, accept="application/json",
                contentType="application/json", body=json.dumps(body)
            )
            data = json.loads(r["body"].read())
        except Exception as e:
            code = error_code(e)
            raise BedrockError(f"Bedrock API Error: {code}", code) from e
        out = ""
        for block in data.get("content", []):
            if block.get("type") == "text":
                out += block.get("text") or ""
        return Completion(text=out, usage=Usage(**data.get("usage", {})))

    def parse_with_schema(self, messages, model: Type[M], max_tokens: int = 1024,
                          temperature: float = 0.7, system: Optional[str] = None) -> M:
        c = self.generate(
            messages, max_tokens=max_tokens, temperature=temperature, system=system,
            response_format={"type": "json_object", "schema": model.model_json_schema()},
        )
        try:
            return model.model_validate_json(extract_json(c.text))
        except ValidationError as e:
            logger.warning("Schema parsing error for %s: %s", model.__name__, c.text[:200])
            raise BedrockError(f"Schema parsing error: {e.error_count()} problem(s)", "SchemaError") from e
