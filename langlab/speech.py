import html
import logging
import random
import re
from enum import Enum
from typing import Dict, Optional

from .errors import ProducerError, error_code
from .voices import Gender, choose_voice

logger = logging.getLogger(__name__)

AUDIO_NAMESPACE = "lesson-audio"


# ---- Polly ------------------------------------------------------------------
def is_ssml(text: str) -> bool:
    return "<speak>" in text


def make_ssml(text: str, speed: Optional[int] = None) -> str:
    """Plain text -> SSML, slowing or speeding it by ``speed`` percent."""
    inner = html.escape(text)
    if speed and speed != 100:
        return f"<speak><prosody rate='{int(speed)}%'>{inner}</prosody></speak>"
    return f"<speak>{inner}</speak>"


class PollySpeechProducer:
    def __init__(self, client, engine: str = "neural", sample_rate: str = "24000",
                 rng: Optional[random.Random] = None):
        self.client = client
        self.engine = engine
        self.sample_rate = sample_rate
        self.rng = rng

    def synthesize(self, text: str, voice: str, speed: Optional[int] = None) -> bytes:
        if is_ssml(text):
            body, text_type = text, "ssml"
        elif speed and speed != 100:
            body, text_type = make_ssml(text, speed), "ssml"
        else:
            body, text_type = text, "text"
        try:
            r = self.client.synthesize_speech(
                Engine=self.engine, OutputFormat="mp3", SampleRate=self.sample_rate,
                Text=body, TextType=text_type, VoiceId=voice,
            )
            return r["AudioStream"].read()
        except Exception as e:
            raise ProducerError(f"Failed to synthesize speech: {error_code(e)}") from e

    def producer(self, text: str, lang_code: str, gender, speed: Optional[int] = None):
        """Zero-arg callable for ArtifactCache; the voice is drawn when it runs."""
        def produce() -> bytes:
            voice = choose_voice(lang_code, gender, self.rng)
            logger.debug("Polly voice %s for lang=%s gender=%s", voice, lang_code, gender)
            return self.synthesize(text, voice, speed)
        return produce


def generate_speech_url(cache, speech: PollySpeechProducer, text: str, lang_code: str,
                        gender, speed: Optional[int] = None) -> str:
    g = Gender.parse(gender).value
    # a non-default rate is a different artifact, so it goes into the key text
    if speed and speed != 100 and not is_ssml(text):
        text = make_ssml(text, speed)
    return cache.get_or_create(
        AUDIO_NAMESPACE, [text, lang_code, g], "mp3",
        speech.producer(text, lang_code, g, speed), "audio/mpeg",
    )


# ---- lesson audio -----------------------------------------------------------
class LessonType(str, Enum):
    LISTENING = "listening"
    SPEAKING = "speaking"
    NEW = "new"
    REMEDIAL = "remedial"


_DICTATION = (
    "<speak><prosody rate=\"{speed}%\">{term}</prosody><break time=\"0.4s\"/>"
    "<voice language=\"en-US\" gender=\"female\">{definition}</voice><break time=\"0.4s\"/></speak>"
)
LESSON_SSML: Dict[LessonType, str] = {
    LessonType.SPEAKING: "<speak><voice language=\"en-US\" gender=\"female\">{definition}</voice></speak>",
    LessonType.LISTENING: "<speak><prosody rate=\"{speed}%\">{term}</prosody></speak>",
    LessonType.NEW: _DICTATION,
    LessonType.REMEDIAL: _DICTATION,
}


def remove_parens(text: str) -> str:
    return re.sub(r"\s{2,}", " ", re.sub(r"\([^)]*\)", "", text)).strip()


def lesson_ssml(term: str, definition: str, lesson_type, speed: Optional[int] = None) -> str:
    return LESSON_SSML[LessonType(lesson_type)].format(
        term=html.escape(remove_parens(term)),
        definition=html.escape(remove_parens(definition)),
        speed=int(speed or 100),
    )


def generate_lesson_audio(cache, speech: PollySpeechProducer, term: str, definition: str,
                          lang_code: str, gender, lesson_type, speed: Optional[int] = None) -> str:
    ssml = lesson_ssml(term, definition, lesson_type, speed)
    return generate_speech_url(cache, speech, ssml, lang_code, gender, speed)
