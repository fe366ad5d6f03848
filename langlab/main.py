import logging
import os
from typing import List, Optional

from botocore.exceptions import ClientError
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .errors import (BedrockError, LanglabError, ProducerError, StoreError, TranscriptionError,
                     TranscriptionTimeout, error_code)
from .grammar import grade_sentence
from .images import card_image_url, should_generate_image
from .llm import Message
from .services import Services, build_services
from .speech import LessonType, generate_lesson_audio, generate_speech_url
from .voices import LANGUAGE_NAMES, VOICES

logger = logging.getLogger("langlab")


# ---- models -----------------------------------------------------------------
class SpeechIn(BaseModel):
    text: str
    lang: str = "en"
    gender: str = "N"
    speed: Optional[int] = None  # percent, 100 = normal


class LessonAudioIn(BaseModel):
    term: str
    definition: str
    lang: str = "en"
    gender: str = "N"
    lesson_type: LessonType = LessonType.LISTENING
    speed: Optional[int] = None


class TranscribeIn(BaseModel):
    audio: str = Field(max_length=1_000_000)  # data URI
    lang: str = "en"


class CardImageIn(BaseModel):
    term: str
    definition: str
    existing_image_count: Optional[int] = None  # user's illustrated cards so far


class GradeIn(BaseModel):
    term: str
    definition: str
    lang: str
    user_input: str


class ChatIn(BaseModel):
    messages: List[Message]
    system: Optional[str] = None
    max_tokens: int = 1024
    temperature: float = 0.7


# ---- app --------------------------------------------------------------------
def get_services(request: Request) -> Services:
    return request.app.state.services


def _fail(kind: str, e: Exception) -> HTTPException:
    code = getattr(e, "code", None) or error_code(e)
    logger.error("%s error %s: %s", kind, code, e)
    if isinstance(e, TranscriptionTimeout):
        return HTTPException(504, str(e))
    return HTTPException(500, f"{kind} error: {code} - {e}")


def create_app(services: Optional[Services] = None) -> FastAPI:
    app = FastAPI()
    app.state.services = services or build_services()
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.get("/api/health")
    def health():
        return {"ok": True}

    @app.get("/api/version")
    def version(svc: Services = Depends(get_services)):
        return {
            "build": os.getenv("APP_BUILD", "unknown"),
            "region": svc.settings.region,
            "text_model": svc.settings.text_model_id,
            "image_model": svc.settings.image_model_id,
            "polly_engine": svc.settings.polly_engine,
        }

    @app.get("/api/polly/voices")
    def list_voices():
        return {
            "voices": {
                lang.value: {g.value: names for g, names in table.items()}
                for lang, table in VOICES.items()
            },
            "languages": {lang.value: name for lang, name in LANGUAGE_NAMES.items()},
        }

    @app.post("/api/speech")
    def speech(payload: SpeechIn, svc: Services = Depends(get_services)):
        txt = payload.text.strip()
        if not txt:
            raise HTTPException(400, "Empty text")
        try:
            url = generate_speech_url(svc.cache, svc.speech, txt, payload.lang, payload.gender, payload.speed)
        except ProducerError as e:
            raise _fail("Polly", e)
        except StoreError as e:
            raise _fail("S3", e)
        return {"url": url}

    @app.post("/api/lesson-audio")
    def lesson_audio(payload: LessonAudioIn, svc: Services = Depends(get_services)):
        if not payload.term.strip() and not payload.definition.strip():
            raise HTTPException(400, "Empty card")
        try:
            url = generate_lesson_audio(
                svc.cache, svc.speech, payload.term, payload.definition,
                payload.lang, payload.gender, payload.lesson_type, payload.speed,
            )
        except ProducerError as e:
            raise _fail("Polly", e)
        except StoreError as e:
            raise _fail("S3", e)
        return {"url": url}

    @app.post("/api/transcribe")
    def transcribe(payload: TranscribeIn, svc: Services = Depends(get_services)):
        if not payload.audio.strip():
            raise HTTPException(400, "Empty audio")
        try:
            text = svc.transcriber.transcribe_b64(payload.audio, payload.lang)
        except (TranscriptionError, StoreError, ClientError) as e:
            raise _fail("Transcribe", e)
        return {"result": text}

    @app.post("/api/card-image")
    def card_image(payload: CardImageIn, svc: Services = Depends(get_services)):
        if not payload.term.strip():
            raise HTTPException(400, "Empty term")
        count = payload.existing_image_count
        if count is not None and not should_generate_image(count, svc.rng):
            return {"url": None}
        try:
            url = card_image_url(svc.cache, svc.llm, svc.images, payload.term, payload.definition)
        except LanglabError as e:
            raise _fail("Image", e)
        return {"url": url}

    @app.post("/api/grade")
    def grade(payload: GradeIn, svc: Services = Depends(get_services)):
        if not payload.user_input.strip():
            raise HTTPException(400, "Empty answer")
        try:
            outcome = grade_sentence(svc.llm, payload.term, payload.definition, payload.lang, payload.user_input)
        except BedrockError as e:
            raise _fail("Bedrock", e)
        return outcome.model_dump()

    @app.post("/api/chat")
    def chat(payload: ChatIn, svc: Services = Depends(get_services)):
        if not payload.messages:
            raise HTTPException(400, "No messages")
        try:
            c = svc.llm.generate(
                payload.messages, max_tokens=payload.max_tokens,
                temperature=payload.temperature, system=payload.system,
            )
        except BedrockError as e:
            raise _fail("Bedrock", e)
        return {"text": c.text, "usage": c.usage.model_dump() | {"total_tokens": c.usage.total_tokens}}

    return app
