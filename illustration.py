"""
illustration.py
===============
Optional case illustrations.

An Illustrator turns the opening narration into an image reference the
presentation layer can display. The engine treats illustrations as a
nice-to-have: any failure is logged and the game starts without one.

OpenAIIllustrator works in two steps:
  1. The image-prompt agent rewrites the narration into a safe, purely
     atmospheric prompt (image APIs refuse violent content).
  2. The OpenAI images API renders it; the result is returned as a
     ``data:image/png;base64,...`` URL.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from openai import OpenAI

from agents import build_image_prompt_agent
from config import MODEL_CONFIG
from oracle import agent_text

logger = logging.getLogger("murder_mystery.illustration")

NOIR_STYLE = (
    "Style: Classic film noir artistic illustration, black and white photography "
    "aesthetic, dramatic lighting and shadows, vintage 1940s atmosphere, cinematic "
    "composition. Family-friendly artistic illustration suitable for all audiences.\n"
    "Visual elements: Architectural details, dramatic window lighting, urban "
    "streetscapes, vintage clothing, classic automobiles, atmospheric weather "
    "effects, period-appropriate interior design."
)


class Illustrator(Protocol):
    def illustrate(self, opening_text: str) -> str: ...


class OpenAIIllustrator:
    """
    Illustrator backed by a Groq prompt sanitiser and the OpenAI images API.

    Attributes:
        client:       OpenAI client (built from api_key unless injected).
        prompt_agent: Agent that writes the safe image prompt.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Any = None,
        prompt_agent: Any = None,
        groq_api_key: Optional[str] = None,
    ) -> None:
        self.client       = client if client is not None else OpenAI(api_key=api_key)
        self.prompt_agent = (
            prompt_agent if prompt_agent is not None else build_image_prompt_agent(groq_api_key)
        )

    def safe_prompt(self, opening_text: str) -> str:
        prompt = agent_text(
            self.prompt_agent.run(f"Case description: {opening_text}")
        ).strip()
        if not prompt:
            raise ValueError("Image prompt agent returned nothing.")
        return f"{prompt}\n\n{NOIR_STYLE}"

    def illustrate(self, opening_text: str) -> str:
        prompt = self.safe_prompt(opening_text)
        logger.debug("Requesting illustration — prompt chars=%d", len(prompt))

        response = self.client.images.generate(
            model=MODEL_CONFIG.image_model,
            prompt=prompt,
            size=MODEL_CONFIG.image_size,
        )
        data = response.data[0].b64_json if response.data else None
        if not data:
            raise ValueError("No image data received.")
        return f"data:image/png;base64,{data}"
