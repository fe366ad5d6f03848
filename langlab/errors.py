from typing import Optional

from botocore.exceptions import ClientError


class LanglabError(Exception):
    """Base class for failures surfaced by the media services."""


class ProducerError(LanglabError):
    """An external generation API failed or returned nothing usable."""


class EmptyArtifactError(ProducerError):
    pass


class StoreError(LanglabError):
    pass


class BedrockError(LanglabError):
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class TranscriptionError(LanglabError):
    pass


class TranscriptionFailed(TranscriptionError):
    def __init__(self, reason: Optional[str]):
        super().__init__(f"Transcription failed: {reason or 'unknown reason'}")
        self.reason = reason


class TranscriptionTimeout(TranscriptionError):
    def __init__(self, job_name: str, waited: float):
        super().__init__(f"Transcription timeout: {job_name} not finished after {waited:.0f}s")
        self.job_name = job_name
        self.waited = waited


def error_code(e: Exception, default: str = "ClientError") -> str:
    if isinstance(e, ClientError):
        return e.response.get("Error", {}).get("Code", default)
    return e.__class__.__name__
