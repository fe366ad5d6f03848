import json

import pytest
from pydantic import BaseModel

from conftest import FakeBedrock, claude_reply, client_error
from langlab.errors import BedrockError
from langlab.llm import ANTHROPIC_VERSION, BedrockTextClient, extract_json


class Card(BaseModel):
    term: str
    definition: str


def test_generate_builds_messages_body():
    bedrock = FakeBedrock(claude_reply("Hola!", input_tokens=12, output_tokens=3))
    llm = BedrockTextClient(bedrock, "anthropic.claude-test")

    c = llm.generate(
        [{"role": "system", "content": "Be brief."}, {"role": "user", "content": "Say hi in Spanish"}],
        max_tokens=64, temperature=0.2, system="You are a tutor.",
    )

    call = bedrock.calls[0]
    assert call["modelId"] == "anthropic.claude-test"
    assert call["body"]["anthropic_version"] == ANTHROPIC_VERSION
    assert call["body"]["system"] == "You are a tutor.\n\nBe brief."
    assert call["body"]["messages"] == [
        {"role": "user", "content": [{"type": "text", "text": "Say hi in Spanish"}]},
    ]
    assert call["body"]["max_tokens"] == 64
    assert c.text == "Hola!"
    assert c.usage.total_tokens == 15


def test_defaults():
    bedrock = FakeBedrock(claude_reply("ok"))
    BedrockTextClient(bedrock, "m").generate([{"role": "user", "content": "hi"}])
    body = bedrock.calls[0]["body"]
    assert body["max_tokens"] == 1024
    assert body["temperature"] == 0.7
    assert "system" not in body


def test_client_error_becomes_bedrock_error():
    llm = BedrockTextClient(FakeBedrock(client_error("ThrottlingException", "InvokeModel")), "m")
    with pytest.raises(BedrockError) as info:
        llm.generate([{"role": "user", "content": "hi"}])
    assert info.value.code == "ThrottlingException"
    assert "Bedrock API Error" in str(info.value)


def test_parse_with_schema():
    reply = 'Here you go:\n{"term": "gato", "definition": "cat"}'
    bedrock = FakeBedrock(claude_reply(reply))
    card = BedrockTextClient(bedrock, "m").parse_with_schema([{"role": "user", "content": "one card"}], Card)

    assert card == Card(term="gato", definition="cat")
    system = bedrock.calls[0]["body"]["system"]
    assert "Respond ONLY with valid JSON" in system
    assert json.dumps(Card.model_json_schema()) in system


def test_parse_with_schema_rejects_bad_json():
    llm = BedrockTextClient(FakeBedrock(claude_reply('{"term": "gato"}')), "m")
    with pytest.raises(BedrockError) as info:
        llm.parse_with_schema([{"role": "user", "content": "x"}], Card)
    assert info.value.code == "SchemaError"


def test_extract_json_without_object():
    assert extract_json("no json here") == "no json here"
