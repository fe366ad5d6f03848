import pytest

from conftest import BUCKET, client_error
from langlab.errors import ProducerError
from langlab.keys import derive_key
from langlab.speech import generate_lesson_audio, generate_speech_url, lesson_ssml, remove_parens
from langlab.voices import VOICES, Gender, Lang


def test_speech_url_is_content_addressed(cache, speech, s3, polly):
    url = generate_speech_url(cache, speech, "hello", "en", "F")

    key = derive_key("lesson-audio", ["hello", "en", "F"], "mp3")
    assert url == f"https://{BUCKET}.s3.amazonaws.com/{key}?X-Amz-Expires=3600"
    assert s3.objects[(BUCKET, key)] == (b"mp3:hello", "audio/mpeg")

    call = polly.calls[0]
    assert call["TextType"] == "text"
    assert call["Engine"] == "neural"
    assert call["OutputFormat"] == "mp3"
    assert call["SampleRate"] == "24000"
    assert call["VoiceId"] in VOICES[Lang.EN][Gender.F]


def test_second_request_skips_polly(cache, speech, polly):
    first = generate_speech_url(cache, speech, "gracias", "es", "M")
    second = generate_speech_url(cache, speech, "gracias", "es", "M")
    assert first == second
    assert len(polly.calls) == 1


def test_ssml_is_sent_as_ssml(cache, speech, polly):
    generate_speech_url(cache, speech, "<speak>hi</speak>", "en", "N")
    assert polly.calls[0]["TextType"] == "ssml"
    assert polly.calls[0]["Text"] == "<speak>hi</speak>"


def test_speed_hint_wraps_plain_text(cache, speech, polly):
    generate_speech_url(cache, speech, "slow & steady", "en", "F", speed=80)
    assert polly.calls[0]["TextType"] == "ssml"
    assert polly.calls[0]["Text"] == "<speak><prosody rate='80%'>slow &amp; steady</prosody></speak>"


def test_speed_changes_key(cache, speech, polly, s3):
    normal = generate_speech_url(cache, speech, "hola", "es", "F")
    slow = generate_speech_url(cache, speech, "hola", "es", "F", speed=50)

    assert normal != slow
    assert len(polly.calls) == 2
    assert s3.puts == [
        derive_key("lesson-audio", ["hola", "es", "F"], "mp3"),
        derive_key("lesson-audio", ["<speak><prosody rate='50%'>hola</prosody></speak>", "es", "F"], "mp3"),
    ]
    assert generate_speech_url(cache, speech, "hola", "es", "F", speed=100) == normal
    assert len(polly.calls) == 2


def test_unknown_gender_keys_as_neutral(cache, speech, s3):
    generate_speech_url(cache, speech, "hello", "en", "?")
    assert s3.puts == [derive_key("lesson-audio", ["hello", "en", "N"], "mp3")]


def test_polly_failure_is_producer_error(cache, speech, polly, s3):
    polly.error = client_error("TextLengthExceededException", "SynthesizeSpeech")
    with pytest.raises(ProducerError, match="TextLengthExceededException"):
        generate_speech_url(cache, speech, "hello", "en", "F")
    assert s3.puts == []


def test_remove_parens():
    assert remove_parens("el gato (the cat) negro") == "el gato negro"
    assert remove_parens("(m) perro") == "perro"


def test_lesson_templates():
    assert lesson_ssml("gato (m)", "cat", "listening", 90) == '<speak><prosody rate="90%">gato</prosody></speak>'
    assert lesson_ssml("gato", "cat", "speaking") == (
        '<speak><voice language="en-US" gender="female">cat</voice></speak>'
    )
    dictation = lesson_ssml("gato", "cat", "new")
    assert dictation == lesson_ssml("gato", "cat", "remedial")
    assert '<prosody rate="100%">gato</prosody><break time="0.4s"/>' in dictation


def test_lesson_audio_goes_through_cache(cache, speech, polly, s3):
    url = generate_lesson_audio(cache, speech, "perro", "dog", "es", "M", "listening", 100)
    ssml = '<speak><prosody rate="100%">perro</prosody></speak>'
    assert polly.calls[0]["Text"] == ssml
    assert polly.calls[0]["TextType"] == "ssml"
    assert url.endswith(derive_key("lesson-audio", [ssml, "es", "M"], "mp3") + "?X-Amz-Expires=3600")


def test_unknown_lesson_type_rejected():
    with pytest.raises(ValueError):
        lesson_ssml("a", "b", "karaoke")
