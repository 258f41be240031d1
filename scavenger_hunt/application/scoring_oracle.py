# scoring_oracle.py

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from scavenger_hunt.core.exceptions import OracleUnavailable
from scavenger_hunt.infrastructure.llm.llm_client import LLMClient

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 10

SCORE_PATTERN = re.compile(r"Score:\s*(-?\d+)", re.IGNORECASE)
EXPLANATION_PATTERN = re.compile(r"Explanation:\s*(.+)", re.IGNORECASE | re.DOTALL)

RESPONSE_FORMAT = (
    "Respond in this exact format:\n\n"
    "Score: [number 0-10]\n\n"
    "Explanation: [brief explanation]"
)


@dataclass(frozen=True)
class OracleVerdict:
    score: int
    explanation: str
    raw: str


def parse_verdict(text: str) -> OracleVerdict:
    """
    Pull "Score: N" and "Explanation: ..." out of a completion.

    A missing, unparseable or out-of-range score counts as 0; a malformed
    completion is a bad answer, not a failed request.
    """
    score = MIN_SCORE
    match = SCORE_PATTERN.search(text or "")
    if match:
        parsed = int(match.group(1))
        if MIN_SCORE <= parsed <= MAX_SCORE:
            score = parsed
        else:
            logger.warning(f"Oracle score {parsed} out of range, treating as {MIN_SCORE}")
    else:
        logger.warning("Oracle response had no parseable score, treating as 0")

    explanation_match = EXPLANATION_PATTERN.search(text or "")
    explanation = explanation_match.group(1).strip() if explanation_match else "Unable to parse AI response"
    return OracleVerdict(score=score, explanation=explanation, raw=text or "")


# ---------------------------
# Prompt Construction
# ---------------------------

def _option_label(question: Any, key: str) -> str:
    options = question.options or {}
    label = options.get(key)
    return f"{key} ({label})" if label else key


def build_text_prompt(question: Any, submission: str) -> str:
    """Comparison prompt for text and multiple-choice questions."""
    if question.type == "multiple_choice":
        answer_type = "multiple choice selection"
        user_input_term = "selection"
        expected = _option_label(question, question.expected_answer)
        given = _option_label(question, submission)
        options_text = "\n".join(f"- {key}: {label}" for key, label in (question.options or {}).items())
        content = f"{question.content}\nOptions:\n{options_text}"
    else:
        answer_type = "text answer"
        user_input_term = "answer"
        expected = question.expected_answer
        given = submission
        content = question.content

    return (
        f'The challenge is a {answer_type}: "{content}". '
        f'The expected {user_input_term} is: "{expected}". '
        f'The user\'s {user_input_term}: "{given}". '
        f"Rate the similarity between the user's {user_input_term} and the expected one "
        f"on a scale of 0 to 10. Provide a brief explanation of why you gave that score.\n\n"
        f"{RESPONSE_FORMAT}"
    )


def build_image_prompt(question: Any) -> str:
    """Prompt sent with the submitted photo as an image part."""
    description = question.image_description or question.expected_answer or ""
    return (
        f'The challenge is a photo task: "{question.content}". '
        f'The photo is expected to show: "{description}". '
        f"Analyze the attached image and rate how well it matches the expected description "
        f"on a scale of 0 to 10. Provide a brief explanation of why you gave that score.\n\n"
        f"{RESPONSE_FORMAT}"
    )


def _render_submission(submission: Any) -> str:
    if isinstance(submission, str):
        return submission
    return json.dumps(submission)


def build_hint_prompt(question: Any, attempts: Iterable[Any]) -> str:
    """
    Hint prompt with up to the last three attempts so hints can get more specific.
    """
    attempt_lines = [
        f'Attempt {i + 1}: "{_render_submission(a.submission)}" - Score: {a.ai_score}, Status: {a.status}'
        for i, a in enumerate(list(attempts)[:3])
    ]
    history = "\n".join(attempt_lines) if attempt_lines else "No previous attempts."
    expected = question.expected_answer or question.image_description or ""

    return (
        f'You are helping a user with a scavenger hunt question. The question is: "{question.content}". '
        f'The expected answer is: "{expected}".\n\n'
        f"Previous submissions and their scores (out of 10):\n{history}\n\n"
        f"Provide a helpful hint that guides the user toward the correct answer without giving it away "
        f"directly. The hint should be contextual based on their previous attempts. "
        f"Keep it concise and encouraging.\n\nHint:"
    )


# ---------------------------
# Oracle
# ---------------------------

class ScoringOracle:
    """
    Asks the configured LLM to grade a submission or write a hint.

    Calls run in a worker thread and are bounded by a timeout; timeouts,
    transport errors and empty completions all raise OracleUnavailable.
    """

    SCORING_SYSTEM_PROMPT = "You are an AI evaluator for scavenger hunt answers."
    HINT_SYSTEM_PROMPT = "You are a friendly scavenger hunt guide who gives hints, never answers."

    def __init__(
        self,
        scoring_llm: Optional[LLMClient],
        hint_llm: Optional[LLMClient] = None,
        *,
        timeout: float = 20.0,
    ):
        self._scoring_llm = scoring_llm
        self._hint_llm = hint_llm or scoring_llm
        self._timeout = timeout

    async def score(self, prompt: str, image_ref: Optional[str] = None) -> OracleVerdict:
        text = await self._complete(
            self._scoring_llm,
            system_prompt=self.SCORING_SYSTEM_PROMPT,
            user_prompt=prompt,
            image_url=image_ref,
        )
        verdict = parse_verdict(text)
        logger.info(f"Oracle verdict: score={verdict.score}")
        return verdict

    async def hint(self, prompt: str) -> str:
        return await self._complete(
            self._hint_llm,
            system_prompt=self.HINT_SYSTEM_PROMPT,
            user_prompt=prompt,
        )

    async def _complete(
        self,
        llm: Optional[LLMClient],
        *,
        system_prompt: str,
        user_prompt: str,
        image_url: Optional[str] = None,
    ) -> str:
        if llm is None:
            logger.error("Oracle called but no LLM client is configured")
            raise OracleUnavailable("No LLM client configured")

        logger.debug(f"Calling oracle, prompt length={len(user_prompt)} chars, image={'yes' if image_url else 'no'}")
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(
                    llm.generate,
                    system_prompt=system_prompt,
                    user_prompt=user_prompt,
                    image_url=image_url,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error(f"Oracle call timed out after {self._timeout}s")
            raise OracleUnavailable("Oracle timed out") from exc
        except Exception as exc:
            logger.error(f"Oracle call failed: {exc}", exc_info=True)
            raise OracleUnavailable(str(exc)) from exc

        if not text or not text.strip():
            logger.error("Oracle returned an empty completion")
            raise OracleUnavailable("Empty completion")
        return text.strip()
