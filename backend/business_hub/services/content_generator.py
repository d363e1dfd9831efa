"""
Generative Content Service

Calls an OpenAI-compatible chat completions endpoint with a structured prompt
and a declared output schema, and returns a validated Pydantic object:
1. Email drafting (goal + tone)
2. Meeting summarization (transcript)
3. Financial advice (transactions + optional question)
4. Startup assets (idea), with the logo and pitch deck URLs derived from the name

Any failure (transport, HTTP status, malformed JSON, schema mismatch) raises
GenerationFailure. There is no retry; the user re-triggers the action.
"""
import json
import logging
from typing import List, Literal, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from ..config import settings
from ..core.errors import GenerationFailure

logger = logging.getLogger("uvicorn.error")

T = TypeVar("T", bound=BaseModel)

EmailTone = Literal["formal", "friendly", "marketing"]


# ===== Output schemas =====
class EmailDraft(BaseModel):
    subject: str
    body: str


class MeetingSummary(BaseModel):
    summary: str
    notes: str


class FinancialAdvice(BaseModel):
    advice: str


class StartupDraft(BaseModel):
    """What the model is asked for; URLs are filled in locally"""
    startupName: str
    businessPlan: str
    workflow: str


class StartupAssets(StartupDraft):
    logoImageUrl: str
    pitchDeckUrl: str


def _encode_uri_component(value: str) -> str:
    return quote(value, safe="-_.!~*'()")


def pitch_deck_url(startup_name: str) -> str:
    title = _encode_uri_component(f"{startup_name} Pitch Deck")
    return f"https://docs.google.com/presentation/create?title={title}"


def logo_image_url(startup_name: str) -> str:
    return f"https://picsum.photos/seed/{_encode_uri_component(startup_name)}/512/512"


class GenerativeContentService:
    """Generative text service over chat completions"""

    def __init__(self):
        self.api_key = settings.openai_api_key
        self.model = settings.gpt_model
        self.api_url = settings.openai_api_url
        self.timeout = settings.generation_timeout

    def is_available(self) -> bool:
        """Check if API key is configured"""
        return bool(self.api_key)

    async def generate(
        self,
        system_prompt: str,
        user_content: Union[str, List[dict]],
        output_model: Type[T],
    ) -> T:
        """
        Run one prompt and parse the reply into `output_model`.

        The output model's JSON schema is appended to the system prompt and the
        endpoint is asked for a JSON object.
        """
        if not self.is_available():
            raise GenerationFailure("The AI service is not configured.")

        schema = json.dumps(output_model.model_json_schema())
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": f"{system_prompt}\n\nRespond with a JSON object matching this schema:\n{schema}"},
                {"role": "user", "content": user_content},
            ],
            "temperature": 0.7,
            "response_format": {"type": "json_object"},
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.api_url, headers=headers, json=payload)
                resp.raise_for_status()
                result = resp.json()
            content = result["choices"][0]["message"]["content"]
            return output_model.model_validate_json(content)
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            # pydantic's ValidationError and JSONDecodeError are ValueErrors
            logger.warning("[generator] %s generation failed: %r", output_model.__name__, e)
            raise GenerationFailure() from e

    # ---- templates ----
    async def generate_email(self, goal: str, tone: EmailTone) -> EmailDraft:
        system_prompt = (
            "You are an expert email copywriter. Generate a professional and effective email, "
            "including a subject line and a full body. The body should be ready to send, but use "
            "placeholders like [Your Name] or [Company Name] where appropriate."
        )
        user_prompt = f"The goal of the email is: {goal}\nThe desired tone is: {tone}"
        return await self.generate(system_prompt, user_prompt, EmailDraft)

    async def summarize_meeting(self, transcript: str) -> MeetingSummary:
        system_prompt = (
            "You are an AI assistant tasked with summarizing meetings and creating actionable notes. "
            "Write `summary` as a brief summary of the key points and decisions, and `notes` as "
            "actionable notes focusing on who needs to do what, and by when."
        )
        return await self.generate(system_prompt, f"Meeting Transcript:\n{transcript}", MeetingSummary)

    async def financial_advice(self, transactions: List[dict], question: Optional[str] = None) -> FinancialAdvice:
        system_prompt = (
            "You are an expert financial analyst. Analyze the user's transaction data and provide "
            "clear, concise, actionable advice to increase profit. Focus on top expense categories, "
            "opportunities for revenue growth and potential savings. Format `advice` with markdown."
        )
        lines = [
            f"- {t['type']} of {t['amount']} {t['currency']} in category '{t['category']}' on {t['date']}"
            for t in transactions
        ]
        user_prompt = "Transaction Data:\n" + "\n".join(lines)
        if question:
            user_prompt += (
                f'\n\nThe user has a specific question: "{question}"\n'
                "Answer this question first, then provide your general analysis and suggestions."
            )
        else:
            user_prompt += "\n\nProvide a general analysis and your top suggestions for improving profitability."
        return await self.generate(system_prompt, user_prompt, FinancialAdvice)

    async def startup_assets(self, idea: str) -> StartupAssets:
        system_prompt = (
            "You are an AI-powered business expert. Based on the startup idea, generate a catchy "
            "name for the startup, a concise business plan, and a step-by-step workflow to execute the idea."
        )
        draft = await self.generate(system_prompt, f"Startup Idea: {idea}", StartupDraft)
        return StartupAssets(
            **draft.model_dump(),
            logoImageUrl=logo_image_url(draft.startupName),
            pitchDeckUrl=pitch_deck_url(draft.startupName),
        )


# Global singleton
content_generator = GenerativeContentService()
