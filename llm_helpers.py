"""
LLMHelper – wraps all LLM calls in one place.

Every method takes plain strings and returns a plain Python value so the
rest of the app never has to touch provider SDK objects directly.

Providers:
  groq   – LangChain ChatOpenAI pointed at Groq's OpenAI-compatible API
  gemini – google-generativeai GenerativeModel

Provider exceptions are not caught here; the relay server classifies them.
"""

from typing import Optional

import google.generativeai as genai
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from config import LLM_MAX_TOKENS, LLM_TEMPERATURE, LLM_TOP_P, PROVIDERS, SYSTEM_PROMPT


class LLMHelper:
    def __init__(self, provider: str, api_key: str, model: Optional[str] = None):
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider {provider!r}; choose one of {sorted(PROVIDERS)}")
        if not api_key:
            raise ValueError(f"{PROVIDERS[provider]['display_name']} API key is required")
        self.provider = provider
        self.model = model or PROVIDERS[provider]["model"]

        if provider == "groq":
            self.llm = ChatOpenAI(
                model=self.model,
                api_key=api_key,
                base_url=PROVIDERS[provider]["base_url"],
                temperature=LLM_TEMPERATURE,
                max_tokens=LLM_MAX_TOKENS,
                top_p=LLM_TOP_P,
                max_retries=0,
            )
        else:
            genai.configure(api_key=api_key)
            self.llm = genai.GenerativeModel(
                model_name=self.model,
                system_instruction=SYSTEM_PROMPT,
                generation_config={
                    "temperature": LLM_TEMPERATURE,
                    "top_p": LLM_TOP_P,
                    "max_output_tokens": LLM_MAX_TOKENS,
                },
            )

    def complete(self, message: str) -> Optional[str]:
        """
        Answer a single user message. Returns None when the provider came
        back without a usable candidate.
        """
        if self.provider == "groq":
            return self._complete_chat(message)
        return self._complete_gemini(message)

    def _complete_chat(self, message: str) -> Optional[str]:
        messages = [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=message)]
        response = self.llm.invoke(messages)
        usage = getattr(response, "usage_metadata", None)
        if usage:
            print(
                f"  [llm] tokens used: {usage.get('total_tokens')} "
                f"(prompt: {usage.get('input_tokens')}, completion: {usage.get('output_tokens')})"
            )
        text = response.content if isinstance(response.content, str) else ""
        return text.strip() or None

    def _complete_gemini(self, message: str) -> Optional[str]:
        response = self.llm.generate_content(message)
        if not getattr(response, "candidates", None):
            return None
        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            print(
                f"  [llm] tokens used: {usage.total_token_count} "
                f"(prompt: {usage.prompt_token_count}, completion: {usage.candidates_token_count})"
            )
        try:
            text = response.text
        except ValueError:
            # Candidate without text parts, e.g. blocked by a safety filter.
            return None
        return text.strip() or None
