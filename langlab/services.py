import logging
import random
from dataclasses import dataclass
from typing import Optional

from .cache import ArtifactCache
from .clients import AwsClients, build_clients
from .config import Settings
from .images import StableDiffusionProducer
from .llm import BedrockTextClient
from .speech import PollySpeechProducer
from .storage import S3BlobStore
from .transcribe import AwsTranscriber

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    store: S3BlobStore
    cache: ArtifactCache
    speech: PollySpeechProducer
    images: StableDiffusionProducer
    llm: BedrockTextClient
    transcriber: AwsTranscriber
    rng: Optional[random.Random] = None


def wire(settings: Settings, clients: AwsClients, rng: Optional[random.Random] = None) -> Services:
    store = S3BlobStore(clients.s3, settings.bucket_name, settings.url_expiration)
    return Services(
        settings=settings,
        store=store,
        cache=ArtifactCache(store),
        speech=PollySpeechProducer(clients.polly, settings.polly_engine, settings.polly_sample_rate, rng),
        images=StableDiffusionProducer(clients.bedrock, settings.image_model_id),
        llm=BedrockTextClient(clients.bedrock, settings.text_model_id),
        transcriber=AwsTranscriber(
            clients.transcribe, store,
            timeout=settings.transcribe_timeout, poll_interval=settings.transcribe_poll_interval,
        ),
        rng=rng,
    )


def build_services(settings: Optional[Settings] = None) -> Services:
    settings = settings or Settings.from_env()
    # Misconfiguration is reported, not fatal; affected requests fail later
    for problem in settings.problems():
        logger.error(problem)
    return wire(settings, build_clients(settings))
