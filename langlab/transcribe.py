import base64
import logging
import time
import uuid
from typing import Callable, Optional

import httpx

from .config import TRANSCRIBE_LANGUAGE_CODES
from .errors import TranscriptionError, TranscriptionFailed, TranscriptionTimeout, error_code
from .storage import S3BlobStore

logger = logging.getLogger(__name__)


def transcribe_language_code(lang: Optional[str]) -> str:
    return TRANSCRIBE_LANGUAGE_CODES.get((lang or "")[:2].lower(), "en-US")


def decode_data_uri(data_uri: str) -> bytes:
    """Accepts ``data:audio/wav;base64,....`` or bare base64."""
    payload = data_uri.split(";base64,")[-1]
    try:
        return base64.b64decode(payload, validate=False)
    except (ValueError, TypeError) as e:
        raise TranscriptionError(f"Audio is not valid base64: {e}") from e


class AwsTranscriber:
    """Batch speech-to-text: upload to S3, start a job, poll until it settles."""

    def __init__(self, client, store: S3BlobStore, timeout: float = 60.0, poll_interval: float = 1.0,
                 http: Optional[httpx.Client] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.client = client
        self.store = store
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.http = http
        self.clock = clock
        self.sleep = sleep

    def start(self, audio: bytes, lang: Optional[str]) -> str:
        uid = uuid.uuid4().hex[:8]
        key = f"transcriptions/{uid}.wav"
        job_name = f"transcription-{uid}"
        self.store.upload(key, audio, "audio/wav")
        try:
            self.client.start_transcription_job(
                TranscriptionJobName=job_name,
                Media={"MediaFileUri": f"s3://{self.store.bucket}/{key}"},
                LanguageCode=transcribe_language_code(lang),
                MediaFormat="wav",
            )
        except Exception as e:
            raise TranscriptionError(f"Could not start transcription job: {error_code(e)}") from e
        logger.info("Started transcription job %s", job_name)
        return job_name

    def wait(self, job_name: str) -> str:
        """Transcript text once the job completes.

        Gives up after ``timeout`` seconds; the job itself keeps running on AWS.
        """
        started = self.clock()
        while self.clock() - started < self.timeout:
            job = self.client.get_transcription_job(TranscriptionJobName=job_name)["TranscriptionJob"]
            status = job.get("TranscriptionJobStatus")
            if status == "COMPLETED":
                uri = (job.get("Transcript") or {}).get("TranscriptFileUri")
                return self._fetch_transcript(uri) if uri else ""
            if status == "FAILED":
                raise TranscriptionFailed(job.get("FailureReason"))
            self.sleep(self.poll_interval)
        raise TranscriptionTimeout(job_name, self.clock() - started)

    def _fetch_transcript(self, uri: str) -> str:
        http = self.http or httpx.Client(timeout=30)
        try:
            r = http.get(uri)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TranscriptionError(f"Could not read transcript: {e}") from e
        finally:
            if self.http is None:
                http.close()
        try:
            return data["results"]["transcripts"][0]["transcript"]
        except (KeyError, IndexError, TypeError) as e:
            raise TranscriptionError("Transcript document has no transcripts") from e

    def transcribe(self, audio: bytes, lang: Optional[str]) -> str:
        text = self.wait(self.start(audio, lang))
        return text.split("\n")[0]

    def transcribe_b64(self, data_uri: str, lang: Optional[str]) -> str:
        return self.transcribe(decode_data_uri(data_uri), lang)
