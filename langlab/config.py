import os
from typing import List

from pydantic import BaseModel

AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
AWS_S3_BUCKET_NAME = os.getenv("AWS_S3_BUCKET_NAME", "")
BEDROCK_TEXT_MODEL_ID = os.getenv("BEDROCK_TEXT_MODEL_ID", "anthropic.claude-3-5-sonnet-20240620-v1:0")
BEDROCK_IMAGE_MODEL_ID = os.getenv("BEDROCK_IMAGE_MODEL_ID", "stability.stable-diffusion-xl-v1")
S3_URL_EXPIRATION = int(os.getenv("S3_URL_EXPIRATION", "3600"))  # 1 hour
POLLY_ENGINE = os.getenv("POLLY_ENGINE", "neural")
POLLY_SAMPLE_RATE = os.getenv("POLLY_SAMPLE_RATE", "24000")
TRANSCRIBE_TIMEOUT_SECONDS = float(os.getenv("TRANSCRIBE_TIMEOUT_SECONDS", "60"))
TRANSCRIBE_POLL_SECONDS = float(os.getenv("TRANSCRIBE_POLL_SECONDS", "1"))

# Amazon Transcribe wants full locale codes
TRANSCRIBE_LANGUAGE_CODES = {
    "en": "en-US",
    "fr": "fr-FR",
    "es": "es-ES",
    "de": "de-DE",
    "it": "it-IT",
    "ja": "ja-JP",
    "ko": "ko-KR",
    "pt": "pt-BR",
    "zh": "zh-CN",
    "ar": "ar-SA",
    "he": "he-IL",
    "hi": "hi-IN",
    "id": "id-ID",
    "nl": "nl-NL",
    "pl": "pl-PL",
    "ru": "ru-RU",
    "sv": "sv-SE",
    "tr": "tr-TR",
}


class Settings(BaseModel):
    region: str = AWS_REGION
    bucket_name: str = AWS_S3_BUCKET_NAME
    text_model_id: str = BEDROCK_TEXT_MODEL_ID
    image_model_id: str = BEDROCK_IMAGE_MODEL_ID
    url_expiration: int = S3_URL_EXPIRATION
    polly_engine: str = POLLY_ENGINE
    polly_sample_rate: str = POLLY_SAMPLE_RATE
    transcribe_timeout: float = TRANSCRIBE_TIMEOUT_SECONDS
    transcribe_poll_interval: float = TRANSCRIBE_POLL_SECONDS

    @classmethod
    def from_env(cls) -> "Settings":
        # Re-read so tests and long-lived workers pick up the current environment
        return cls(
            region=os.getenv("AWS_REGION", "us-east-1"),
            bucket_name=os.getenv("AWS_S3_BUCKET_NAME", ""),
            text_model_id=os.getenv("BEDROCK_TEXT_MODEL_ID", BEDROCK_TEXT_MODEL_ID),
            image_model_id=os.getenv("BEDROCK_IMAGE_MODEL_ID", BEDROCK_IMAGE_MODEL_ID),
            url_expiration=int(os.getenv("S3_URL_EXPIRATION", "3600")),
            polly_engine=os.getenv("POLLY_ENGINE", "neural"),
            polly_sample_rate=os.getenv("POLLY_SAMPLE_RATE", "24000"),
            transcribe_timeout=float(os.getenv("TRANSCRIBE_TIMEOUT_SECONDS", "60")),
            transcribe_poll_interval=float(os.getenv("TRANSCRIBE_POLL_SECONDS", "1")),
        )

    def problems(self) -> List[str]:
        out = []
        if not self.bucket_name:
            out.append("Missing ENV Var: AWS_S3_BUCKET_NAME")
        if self.url_expiration <= 0:
            out.append(f"S3_URL_EXPIRATION must be positive, got {self.url_expiration}")
        return out
