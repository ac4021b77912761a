"""Receipt text detection through an OpenAI vision model."""

import base64
import logging
from typing import Dict, List, Optional

from src.prompts import RECEIPT_OCR_PROMPT
from src.utils import extract_json

from .models import ImageRef

logger = logging.getLogger(__name__)


def _detect_content_type(img_data: bytes) -> str:
    if img_data.startswith(b"\x89PNG"):
        return "image/png"
    return "image/jpeg"


class GptTextReader:
    """
    Transcribes receipt lines with a GPT vision model.

    The client is created once by the caller and shared; passing None
    leaves the reader without text detection capability.
    """

    name = "openai_vision"

    def __init__(self, client=None, model: str = "gpt-4o-mini"):
        self.client = client
        self.model = (model or "gpt-4o-mini").strip() or "gpt-4o-mini"

    @property
    def has_text_detection(self) -> bool:
        return self.client is not None

    def detect_text(self, image: ImageRef) -> List[Dict[str, Optional[str]]]:
        """Return [{"description": line}] in reading order."""
        if not self.has_text_detection:
            raise RuntimeError("OpenAI client is not configured")

        if isinstance(image, (bytes, bytearray)):
            img_data = bytes(image)
        else:
            with open(image, "rb") as f:
                img_data = f.read()

        b64_img = base64.b64encode(img_data).decode("utf-8")
        content_type = _detect_content_type(img_data)

        logger.info(
            "Sending %.1fkb receipt image to model=%s",
            len(b64_img) / 1024,
            self.model,
        )
        response = self.client.chat.completions.create(
            model=self.model,
            temperature=0,
            max_tokens=1500,
            response_format={"type": "json_object"},
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": RECEIPT_OCR_PROMPT},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{content_type};base64,{b64_img}"},
                        },
                    ],
                }
            ],
        )

        text = response.choices[0].message.content or ""
        logger.info("OCR response received, length: %s", len(text))
        parsed = extract_json(text)

        lines = parsed.get("lines")
        if not isinstance(lines, list):
            raise ValueError("No lines in OCR response")

        return [{"description": line if isinstance(line, str) else None} for line in lines]
