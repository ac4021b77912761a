import logging

from openai import OpenAI

logger = logging.getLogger(__name__)


def create_openai_client(api_key: str) -> OpenAI:
    """Build the OpenAI client; owned by the pipeline built at startup."""
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY is not set")
    logger.info("Initializing OpenAI client")
    return OpenAI(api_key=api_key)
