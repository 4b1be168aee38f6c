"""
Vocabulary extraction with OpenAI API integration
"""

import json
import logging
import uuid
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from .config import get_settings
from .core.session.models import Word
from .exceptions import WordExtractionError
from .utils import log_execution_time, strip_code_fences, truncate_text

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a helpful vocabulary assistant.
Extract every English vocabulary word found in the user's file content.
For each word provide:
1. "text": the English word
2. "phonetic": its IPA phonetic symbol, standard British pronunciation if possible
3. "definition": a concise Chinese definition; translate the word if the file has none

Respond with a JSON object of the form {"words": [{"text": ..., "phonetic": ..., "definition": ...}]}."""


class WordExtractor:
    """Turns uploaded word lists into Word objects using OpenAI"""

    def __init__(self, api_key: str | None = None):
        settings = get_settings()
        self.client = AsyncOpenAI(
            api_key=api_key or settings.openai_api_key, timeout=settings.api_timeout
        )
        self.model = settings.openai_model
        self.max_tokens = settings.openai_max_tokens
        self.temperature = settings.openai_temperature
        self.max_content_chars = settings.max_extract_chars

    @log_execution_time
    async def extract_words(self, file_name: str, content: str) -> list[Word]:
        """
        Extract vocabulary from the text content of a file

        Args:
            file_name: Name of the uploaded file, given to the model as context
            content: Text content of the file

        Returns:
            Words with freshly generated ids, in the order the model listed them

        Raises:
            WordExtractionError: API call failed or the reply was unusable
        """
        if not content or not content.strip():
            return []

        if len(content) > self.max_content_chars:
            logger.info(
                f"Truncating {file_name} from {len(content)} to {self.max_content_chars} characters"
            )
            content = content[: self.max_content_chars]

        logger.info(f"Extracting vocabulary from {file_name} ({len(content)} characters)")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": f'Filename: "{file_name}"\n\nFile Content:\n{content}',
                    },
                ],
                max_completion_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error(f"OpenAI request failed for {file_name}: {e}")
            raise WordExtractionError(f"Word extraction request failed: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            logger.error("Empty response content from OpenAI")
            raise WordExtractionError("Empty response from the extraction model")

        words = self._parse_response(response.choices[0].message.content)
        logger.info(f"Extracted {len(words)} words from {file_name}")
        return words

    def _parse_response(self, content: str) -> list[Word]:
        try:
            data = json.loads(strip_code_fences(content))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse OpenAI response as JSON: {e}")
            logger.debug(f"Response content: {truncate_text(content, 500)}")
            raise WordExtractionError("Extraction model returned invalid JSON") from e

        items = data.get("words") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise WordExtractionError("Extraction model returned no word list")

        words = []
        for item in items:
            word = self._item_to_word(item)
            if word is not None:
                words.append(word)
        return words

    @staticmethod
    def _item_to_word(item: Any) -> Word | None:
        if not isinstance(item, dict):
            return None

        text = str(item.get("text") or "").strip()
        if not text:
            logger.debug(f"Skipping extracted item without text: {item}")
            return None

        return Word(
            id=str(uuid.uuid4()),
            text=text,
            phonetic=str(item.get("phonetic") or "").strip(),
            definition=str(item.get("definition") or "").strip(),
        )


def get_word_extractor(api_key: str | None = None) -> WordExtractor:
    """Create a word extractor using configured credentials"""
    return WordExtractor(api_key)
