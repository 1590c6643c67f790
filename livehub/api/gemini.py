"""
Gemini API integration for Live Hub.
Turns an approved audience request into structured song lyrics.
"""

import json
import logging

import requests

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

SYSTEM_PROMPT = """\
You are the songwriter for a live rock/pop cover band.
Write a personalised song in {language} from the details provided.

Required structure:
- verse1: 4 lines
- chorus: 4 lines
- verse2: 4 lines
- bridge: 4 lines
- finalChorus: 4 lines

Every line must be at most 60 characters so it reads well on stage.
Output ONLY valid JSON, no other text.

Output format:
{{
  "lyrics": {{
    "title": "Song Title",
    "verse1": ["line1", "line2", "line3", "line4"],
    "chorus": ["line1", "line2", "line3", "line4"],
    "verse2": ["line1", "line2", "line3", "line4"],
    "bridge": ["line1", "line2", "line3", "line4"],
    "finalChorus": ["line1", "line2", "line3", "line4"]
  }},
  "genre": "italian-rock",
  "mood": "fun"
}}"""

USER_PROMPT = """\
Write a song for:

DEDICATED TO: {dedicatedTo}
OCCASION: {occasion}
PERSONALITY: {personality}
STORY/ANECDOTE: {story}

Make it fun, memorable and personal. Use details from the story so the lyrics feel unique."""


class GenerationError(Exception):
    """Raised when the lyrics generator fails or returns something unusable"""


def build_prompt(request, language="Italian"):
    """Build the full prompt text for an approved request"""
    user_prompt = USER_PROMPT.format(
        dedicatedTo=request.get("dedicatedTo", "N/A"),
        occasion=request.get("occasion", "N/A"),
        personality=", ".join(str(trait) for trait in request.get("personality") or []),
        story=request.get("story", ""),
    )
    return SYSTEM_PROMPT.format(language=language) + "\n\n" + user_prompt


class GeminiClient:
    """Thin client for the Gemini generateContent endpoint"""

    def __init__(self, api_key, model="gemini-2.0-flash", timeout=30, language="Italian"):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.language = language

    @property
    def url(self):
        return f"{GEMINI_BASE_URL}/{self.model}:generateContent"

    def generate(self, request):
        """Call Gemini once and return the parsed song payload"""
        if not self.api_key:
            raise GenerationError("GEMINI_API_KEY not configured")

        body = {
            "contents": [{"parts": [{"text": build_prompt(request, self.language)}]}],
            "generationConfig": {
                "temperature": 1.0,
                "maxOutputTokens": 2048,
                "responseMimeType": "application/json",
            },
        }

        try:
            response = requests.post(
                self.url,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
                timeout=(5, self.timeout)
            )
        except requests.RequestException as e:
            raise GenerationError(f"Gemini API request failed: {e}") from e

        if not response.ok:
            raise GenerationError(f"Gemini API error: {response.status_code} - {response.text}")

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationError("Invalid Gemini API response structure") from e

        try:
            song = json.loads(text)
        except ValueError as e:
            raise GenerationError(f"Failed to parse Gemini response as JSON: {e}") from e

        logger.info(f"Gemini returned lyrics for {request.get('dedicatedTo', 'N/A')}")
        return song
