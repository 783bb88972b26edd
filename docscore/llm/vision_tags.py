# docscore/llm/vision_tags.py
"""
Visual labels for images via an OpenAI-compatible vision model (vLLM, InternVL, ...).

The labels feed the image scorer's keyword corpus alongside OCR text, so
short concrete nouns work best ("bar chart", "handwriting", "diagram").
"""

from __future__ import annotations

import base64
import io
import json
import logging

from typing import Any, Dict, List, Optional

import openai

from openai import OpenAI
from PIL import Image

from docscore.errors import TransientNetworkError

logger = logging.getLogger(__name__)


TAG_PROMPT = """Describe what this image shows as a list of short visual labels
(objects, chart types, layout, handwriting vs. print, diagrams, etc.).

Return ONLY valid JSON:
{
  "labels": ["label one", "label two"]
}

Use at most MAX_LABELS labels, most salient first."""


def _image_to_data_url(img: Image.Image) -> str:
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    img_base64 = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{img_base64}"


def parse_labels(raw: str, *, max_labels: int) -> List[str]:
    """Pull the label list out of a model reply, tolerating code fences and prose."""
    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError:
        start = raw.find("{")
        end = raw.rfind("}")
        if start != -1 and end != -1 and end > start:
            data = json.loads(raw[start:end + 1])
        else:
            raise ValueError(f"Could not parse vision model response: {raw[:200]}")

    labels = data.get("labels", []) if isinstance(data, dict) else data
    if not isinstance(labels, list):
        return []

    out: List[str] = []
    for label in labels:
        label = str(label).strip()
        if label and label.lower() not in (x.lower() for x in out):
            out.append(label)
    return out[:max_labels]


class VisionTagger:
    """
    Long-lived handle on the vision endpoint. Create once per process and
    share; the OpenAI client keeps its own connection pool.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        model: str,
        max_labels: int = 10,
        temperature: float = 0.2,
        timeout: float = 60.0,
        client: Optional[OpenAI] = None,
    ):
        self.model = model
        self.max_labels = max_labels
        self.temperature = temperature
        self.client = client or OpenAI(base_url=base_url, api_key=api_key or "EMPTY", timeout=timeout)

    def tags(self, img: Image.Image) -> List[str]:
        """
        Label one image. A reply that is not parseable JSON yields no labels.

        Raises:
            TransientNetworkError: endpoint unreachable or timed out
        """
        content: List[Dict[str, Any]] = [
            {"type": "text", "text": TAG_PROMPT.replace("MAX_LABELS", str(self.max_labels))},
            {"type": "image_url", "image_url": {"url": _image_to_data_url(img), "detail": "low"}},
        ]

        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
                temperature=self.temperature,
                max_tokens=300,
            )
        except (openai.APIConnectionError, openai.APITimeoutError) as e:
            raise TransientNetworkError(f"Vision model unreachable: {e}") from e

        raw = resp.choices[0].message.content or ""
        try:
            labels = parse_labels(raw, max_labels=self.max_labels)
        except ValueError as e:
            # Labels are optional; score the image on OCR text alone
            logger.warning("Ignoring unparseable reply from vision model %s: %s", self.model, e)
            return []
        logger.debug("Vision model %s returned %d labels", self.model, len(labels))
        return labels

    def close(self) -> None:
        self.client.close()
