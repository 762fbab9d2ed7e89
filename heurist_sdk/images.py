"""Image generation requests against the sequencer ``submit_job`` endpoint."""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import requests

from .config import ClientConfig
from .http import new_session, post_json

logger = logging.getLogger(__name__)

MAX_SAFE_INTEGER = 2**53 - 1
IMAGE_JOB_DEADLINE = 30
IMAGE_JOB_PRIORITY = 1

IMAGE_MODELS = (
    "BrainDance",
    "BlazingDrive",
    "BluePencilRealistic",
    "YamersCartoonArcadia",
    "HelloWorldFilmGrain",
    "ArthemyComics",
    "ArthemyReal",
    "Aurora",
    "SDXLUnstableDiffusersV11",
    "AnimagineXL",
    "CyberRealisticXL",
    "DreamShaperXL",
    "AAMXLAnimeMix",
)


@dataclass
class ImageGenerateParams:
    model: str
    prompt: str = ""
    neg_prompt: Optional[str] = None
    num_iterations: Optional[int] = None
    guidance_scale: Optional[float] = None
    width: Optional[int] = None
    height: Optional[int] = None
    seed: Optional[int] = None


@dataclass
class Image:
    url: str
    model: str
    model_input: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.update(data.pop("model_input"))
        return data


def build_model_input(params: ImageGenerateParams) -> Dict[str, Any]:
    """Return the sparse ``SD`` model input; unset and zero values are left out."""

    model_input: Dict[str, Any] = {"prompt": params.prompt or ""}
    for name in ("neg_prompt", "num_iterations", "guidance_scale", "width", "height"):
        value = getattr(params, name)
        if value:
            model_input[name] = value
    if params.seed:
        seed = int(params.seed)
        model_input["seed"] = seed % MAX_SAFE_INTEGER if seed > MAX_SAFE_INTEGER else seed
    return model_input


class Images:
    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session or new_session()

    def generate(self, params: ImageGenerateParams) -> Image:
        model_input = build_model_input(params)
        job_id = f"imagine-{uuid.uuid4().hex[:10]}"
        body = {
            "job_id": job_id,
            "model_input": {"SD": model_input},
            "model_type": "SD",
            "model_id": params.model,
            "deadline": IMAGE_JOB_DEADLINE,
            "priority": IMAGE_JOB_PRIORITY,
        }
        url = f"{self.config.base_url.rstrip('/')}/submit_job"
        logger.debug("Submitting image job %s for %s", job_id, params.model)
        resp = post_json(
            self.session,
            url,
            body,
            timeout=self.config.request_timeout,
            headers={"Authorization": f"Bearer {self.config.api_key}"},
            endpoint="submit_job",
        )
        image_url = resp.text.strip().replace('"', "")
        return Image(url=image_url, model=params.model, model_input=model_input)


__all__ = ["IMAGE_MODELS", "Image", "ImageGenerateParams", "Images", "build_model_input"]
