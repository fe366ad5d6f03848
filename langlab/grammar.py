"""Grades a learner's spoken answer against a flash card with the LLM."""
from typing import Literal

from pydantic import BaseModel, Field

from .llm import BedrockTextClient
from .voices import LANGUAGE_NAMES, Lang


class Explanation(BaseModel):
    yes_no: Literal["yes", "no"] = Field(alias="yesNo")
    why: str


class QuizOutcome(BaseModel):
    result: Literal["pass", "fail"]
    user_message: str


LANG_OVERRIDES = {
    Lang.KO: "For the sake of this discussion, let's say that formality levels don't need to be taken into consideration.",
}


def grading_prompt(term: str, definition: str, lang_code: str, user_input: str) -> str:
    lang = Lang.parse(lang_code)
    parts = [
        f"I am learning {LANGUAGE_NAMES[lang]}.",
        f'We know "{term}" means "{definition}" in English.',
        "Let's say I am in a situation that warrants the sentence above.",
        f'Could I say "{user_input}" instead (note: I entered it via speech-to-text)?',
        "Would that be OK?",
        LANG_OVERRIDES.get(lang, ""),
        "Explain in one tweet or less.",
    ]
    return " ".join(p for p in parts if p)


def grade_sentence(llm: BedrockTextClient, term: str, definition: str, lang_code: str,
                   user_input: str) -> QuizOutcome:
    exp = llm.parse_with_schema(
        [{"role": "user", "content": grading_prompt(term, definition, lang_code, user_input)}],
        Explanation, max_tokens=250, temperature=0.1,
    )
    return QuizOutcome(result="pass" if exp.yes_no == "yes" else "fail", user_message=exp.why)
