import io
import json
import random

import pytest
from botocore.exceptions import ClientError

from langlab.cache import ArtifactCache
from langlab.clients import AwsClients
from langlab.config import Settings
from langlab.llm import BedrockTextClient
from langlab.services import wire
from langlab.speech import PollySpeechProducer
from langlab.storage import S3BlobStore

BUCKET = "test-bucket"


def client_error(code: str, op: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} happened"}}, op)


class FakeS3:
    def __init__(self):
        self.objects = {}
        self.puts = []
        self.head_error = None
        self.put_error = None
        self.sign_error = None

    def head_object(self, Bucket, Key):
        if self.head_error:
            raise self.head_error
        if (Bucket, Key) not in self.objects:
            raise client_error("404", "HeadObject")
        return {"ContentLength": len(self.objects[(Bucket, Key)][0])}

    def put_object(self, Bucket, Key, Body, ContentType):
        if self.put_error:
            raise self.put_error
        self.objects[(Bucket, Key)] = (Body, ContentType)
        self.puts.append(Key)
        return {"ETag": "etag"}

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):
        if self.sign_error:
            raise self.sign_error
        assert ClientMethod == "get_object"
        return f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}?X-Amz-Expires={ExpiresIn}"


class FakePolly:
    def __init__(self):
        self.calls = []
        self.error = None

    def synthesize_speech(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return {"AudioStream": io.BytesIO(b"mp3:" + kwargs["Text"].encode("utf-8"))}


class FakeBedrock:
    """Replies are consumed in order; an exception in the queue is raised."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def invoke_model(self, **kwargs):
        self.calls.append({**kwargs, "body": json.loads(kwargs["body"])})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return {"body": io.BytesIO(json.dumps(reply).encode("utf-8"))}


class FakeTranscribe:
    def __init__(self, *jobs):
        self.jobs = list(jobs)
        self.started = []
        self.polls = 0

    def start_transcription_job(self, **kwargs):
        self.started.append(kwargs)
        return {"TranscriptionJob": {"TranscriptionJobStatus": "IN_PROGRESS"}}

    def get_transcription_job(self, TranscriptionJobName):
        self.polls += 1
        job = self.jobs.pop(0) if len(self.jobs) > 1 else self.jobs[0]
        return {"TranscriptionJob": {"TranscriptionJobName": TranscriptionJobName, **job}}


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = 0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps += 1
        self.now += seconds


def claude_reply(text, input_tokens=10, output_tokens=5):
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    }


@pytest.fixture
def s3():
    return FakeS3()


@pytest.fixture
def store(s3):
    return S3BlobStore(s3, BUCKET, url_expiration=3600)


@pytest.fixture
def cache(store):
    return ArtifactCache(store)


@pytest.fixture
def polly():
    return FakePolly()


@pytest.fixture
def speech(polly):
    return PollySpeechProducer(polly, rng=random.Random(7))


@pytest.fixture
def bedrock():
    return FakeBedrock()


@pytest.fixture
def llm(bedrock):
    return BedrockTextClient(bedrock, "anthropic.test-model")


@pytest.fixture
def settings():
    return Settings(bucket_name=BUCKET, region="us-east-1")


@pytest.fixture
def services(settings, s3, polly, bedrock):
    return wire(settings, AwsClients(s3=s3, polly=polly, transcribe=FakeTranscribe({"TranscriptionJobStatus": "IN_PROGRESS"}), bedrock=bedrock), rng=random.Random(3))
