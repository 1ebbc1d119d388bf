"""
Gemini Completion Service
Fallback for messages the intent classifier can't place. Gemini answers in
free text and may suggest capability calls, which the orchestrator executes.
"""
import copy

from google import genai
from google.genai import errors, types

from config import settings
from orchestration.types import CapabilityCall
from registry import TOOLS
from utils import get_logger

logger = get_logger(__name__)


class CompletionError(Exception):
    """Raised when the LLM completion fails"""
    pass


SYSTEM_PROMPT = """You're a shopping and marketing assistant for online sellers.

You can help people find products across marketplaces and write marketing copy for what they sell.
When the request needs product listings, call search_marketplace. When it needs marketing copy,
call get_taste_profile to understand the audience, then generate_ad_copy.

Keep replies short and friendly, like a colleague helping out. If the request is unrelated to
shopping or marketing, say what you can help with instead.
"""


def _sanitize_schema_for_gemini(schema: dict) -> dict:
    """
    Remove unsupported fields from JSON schema for Gemini compatibility.
    Gemini doesn't support: default, examples, $ref, additionalProperties, etc.
    """
    if not isinstance(schema, dict):
        return schema

    UNSUPPORTED_FIELDS = {"default", "examples", "$ref", "additionalProperties", "$schema", "definitions"}

    cleaned = {}
    for key, value in schema.items():
        if key in UNSUPPORTED_FIELDS:
            continue

        if key == "properties" and isinstance(value, dict):
            cleaned[key] = {
                prop_name: _sanitize_schema_for_gemini(prop_schema)
                for prop_name, prop_schema in value.items()
            }
        elif isinstance(value, dict):
            cleaned[key] = _sanitize_schema_for_gemini(value)
        else:
            cleaned[key] = value

    return cleaned


def build_gemini_tools() -> list[types.Tool]:
    """Convert registry tool definitions to Gemini's format."""
    function_declarations = [
        types.FunctionDeclaration(
            name=tool["name"],
            description=tool["description"],
            parameters=_sanitize_schema_for_gemini(copy.deepcopy(tool["input_schema"])),
        )
        for tool in TOOLS
    ]
    return [types.Tool(function_declarations=function_declarations)]


class GeminiCompletionClient:
    """Single-turn Gemini completion with function declarations attached."""

    def __init__(self, api_key: str | None = None, model_name: str | None = None):
        api_key = api_key or settings.GEMINI_API_KEY
        if not api_key:
            raise CompletionError("GEMINI_API_KEY not configured")

        self.client = genai.Client(api_key=api_key)
        self.model_name = model_name or settings.MODEL_NAME
        self.tools = build_gemini_tools()

    def complete(self, message: str) -> tuple[str, list[CapabilityCall]]:
        """
        Send the user message to Gemini.

        Returns:
            (response text, capability calls Gemini asked for)
        """
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=[types.Content(role="user", parts=[types.Part(text=message)])],
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_PROMPT,
                    tools=self.tools,
                    automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
                    temperature=0.7,
                ),
            )
        except errors.APIError as e:
            raise CompletionError(f"failed to create chat completion: {e}") from e

        if not response.candidates:
            raise CompletionError("no response choices returned")

        text_parts = []
        calls = []
        for candidate in response.candidates:
            # Check if content exists before iterating
            if not (candidate.content and candidate.content.parts):
                continue
            for part in candidate.content.parts:
                if part.text:
                    text_parts.append(part.text)
                if part.function_call and part.function_call.name:
                    calls.append(CapabilityCall(
                        name=part.function_call.name,
                        arguments=dict(part.function_call.args or {}),
                    ))

        logger.info(f"Gemini returned {len(calls)} function calls")
        return "".join(text_parts).strip(), calls
