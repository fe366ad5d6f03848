import base64
import json
import logging
import random
from typing import Optional

from .errors import EmptyArtifactError, ProducerError, error_code
from .llm import TextGenerationClient

logger = logging.getLogger(__name__)

IMAGE_NAMESPACE = "card-images"
NEGATIVE_PROMPT = "blurry, bad, text, watermark, signature, deformed, ugly, low quality"

# Share of cards skipped once a user already has plenty of illustrated ones
CHEAPNESS = 1  # percent
FREE_IMAGE_CARDS = 50

SINGLE_WORD_PROMPT = """You are a language learning flash card app.
Create a stable diffusion prompt to generate an image of the foreign language word.
Make it as realistic and accurate to the word's meaning as possible.
The illustration must convey the word's meaning to the student.
humans must be shown as anthropomorphized animals.
Do not add text. It will give away the answer!"""

SENTENCE_PROMPT = """You are a language learning flash card app.
You are creating a comic to help users remember the flashcard above.
It is a fun, single-frame comic that illustrates the sentence.
Create a stable diffusion prompt to create this comic for the card above.
Do not add speech bubbles or text. It will give away the answer!
All characters must be Koalas."""


class StableDiffusionProducer:
    def __init__(self, client, model_id: str):
        self.client = client
        self.model_id = model_id

    def request_body(self, prompt: str) -> dict:
        return {
            "text_prompts": [
                {"text": prompt, "weight": 1.0},
                {"text": NEGATIVE_PROMPT, "weight": -1.0},
            ],
            "height": 1024,
            "width": 1024,
            "cfg_scale": 7,
            "clip_guidance_preset": "FAST_BLUE",
            "sampler": "K_DPM_2_ANCESTRAL",
            "samples": 1,
            "steps": 50,
            "style_preset": "photographic",
        }

    def generate(self, prompt: str) -> bytes:
        try:
            r = self.client.invoke_model(
                modelId=self.model_id, accept="application/json",
                contentType="application/json", body=json.dumps(self.request_body(prompt))
            )
            data = json.loads(r["body"].read())
        except Exception as e:
            raise ProducerError(f"Failed to generate image: {error_code(e)}") from e
        artifacts = data.get("artifacts") or []
        if not artifacts or not artifacts[0].get("base64"):
            raise EmptyArtifactError("No image artifacts returned from Stable Diffusion")
        return base64.b64decode(artifacts[0]["base64"])


def create_image_prompt(llm: TextGenerationClient, term: str, definition: str) -> str:
    system = SINGLE_WORD_PROMPT if len(term.split()) < 2 else SENTENCE_PROMPT
    c = llm.generate(
        [{"role": "user", "content": f"TERM: {term}\nDEFINITION: {definition}"}],
        max_tokens=128, temperature=1.0, system=system,
    )
    prompt = c.text.strip()
    if not prompt:
        raise ProducerError("No image prompt generated.")
    return prompt


def card_image_url(cache, llm: TextGenerationClient, images: StableDiffusionProducer,
                   term: str, definition: str) -> str:
    def produce() -> bytes:
        prompt = create_image_prompt(llm, term, definition)
        logger.debug("image prompt for %r: %s", term, prompt)
        return images.generate(prompt)

    return cache.get_or_create(IMAGE_NAMESPACE, [term, definition], "png", produce, "image/png")


def should_generate_image(existing_image_count: int, rng: Optional[random.Random] = None) -> bool:
    if existing_image_count < FREE_IMAGE_CARDS:
        return True
    return not ((rng or random).random() < CHEAPNESS / 100)
