"""Tests for the image generation resource."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock


ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(ROOT / "tests"))

from fakes import make_response  # type: ignore

from heurist_sdk.config import ClientConfig
from heurist_sdk.errors import APIError
from heurist_sdk.images import MAX_SAFE_INTEGER, ImageGenerateParams, Images, build_model_input


class BuildModelInputTests(unittest.TestCase):
    def test_unset_and_zero_fields_are_left_out(self) -> None:
        params = ImageGenerateParams(model="BrainDance", prompt="a koi pond", width=0, guidance_scale=7.5)
        self.assertEqual(build_model_input(params), {"prompt": "a koi pond", "guidance_scale": 7.5})

    def test_large_seed_is_reduced(self) -> None:
        params = ImageGenerateParams(model="Aurora", seed=MAX_SAFE_INTEGER + 5)
        self.assertEqual(build_model_input(params)["seed"], 5)


class ImagesGenerateTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = MagicMock()
        self.config = ClientConfig(api_key="tenant#secret", base_url="http://sequencer.test/")
        self.images = Images(self.config, self.session)

    def test_generate_posts_job_and_returns_url(self) -> None:
        self.session.post.return_value = make_response(200, '"https://cdn.test/out.png"', content_type="text/plain")
        image = self.images.generate(ImageGenerateParams(model="Aurora", prompt="a lantern", width=768, height=512))

        self.assertEqual(image.url, "https://cdn.test/out.png")
        self.assertEqual(
            image.to_dict(),
            {"url": "https://cdn.test/out.png", "model": "Aurora", "prompt": "a lantern", "width": 768, "height": 512},
        )
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "http://sequencer.test/submit_job")
        self.assertEqual(kwargs["headers"], {"Authorization": "Bearer tenant#secret"})
        body = kwargs["json"]
        self.assertRegex(body["job_id"], r"^imagine-[0-9a-f]{10}$")
        self.assertEqual(body["model_type"], "SD")
        self.assertEqual(body["model_id"], "Aurora")
        self.assertEqual(body["model_input"], {"SD": {"prompt": "a lantern", "width": 768, "height": 512}})
        self.assertEqual((body["deadline"], body["priority"]), (30, 1))

    def test_generate_failure_raises_api_error(self) -> None:
        self.session.post.return_value = make_response(503, {"message": "sequencer busy"})
        with self.assertRaises(APIError) as ctx:
            self.images.generate(ImageGenerateParams(model="Aurora", prompt="x"))
        self.assertEqual(ctx.exception.message, "sequencer busy")
        self.assertEqual(ctx.exception.error_type, "server_error")


if __name__ == "__main__":
    unittest.main()
