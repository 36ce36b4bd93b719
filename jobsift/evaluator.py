"""Judge scraped postings against the candidate profile with an LLM.

Any OpenAI-compatible chat completion endpoint works (OpenAI itself, or Groq
via ``OPENAI_BASE_URL``). A failure on one posting yields ``None`` so the
batch carries on with the next one.
"""
from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from jobsift.config import Settings
from jobsift.errors import ConfigError
from jobsift.log import get_logger
from jobsift.models import JobEvaluation, RawJob

log = get_logger(__name__)

SYSTEM_PROMPT = "You're a helpful, intelligent job filtering assistant."

OUTPUT_INSTRUCTIONS = """\
--
Respond in this JSON format:
{"verdict":"true or false",
"reason":"",
"companyName":"",
"rating":1-10,
"skills":""}

If I'm a fit return true. If I'm not a fit return false (both strings)

Also give a short two sentence reasoning on the verdict either way. Why I am a good fit \
(what skills match or other reasons) or why I am a bad fit (missing skills, experience, etc.)

Return the company name

Return a rating 1-10 of how good of a fit I am for the job.

Return the primary skills that they are looking for in the job description."""


def build_user_prompt(profile_context: str, job: RawJob) -> str:
    return f"{profile_context.rstrip()}\n\nHere is the job description: \n\n{job.to_json()}\n\n{OUTPUT_INSTRUCTIONS}"


class EvaluationFailed(Exception):
    """Internal: why one evaluation produced no verdict."""


class JobEvaluator:
    def __init__(
        self,
        client: Any,
        *,
        model: str,
        profile_context: str,
        temperature: float = 0.1,
    ) -> None:
        self.client = client
        self.model = model
        self.profile_context = profile_context
        self.temperature = temperature

    def _complete(self, job: RawJob) -> str:
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(self.profile_context, job)},
            ],
            response_format={"type": "json_object"},
            temperature=self.temperature,
        )
        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise EvaluationFailed("no response content")
        return content

    def _parse(self, content: str) -> JobEvaluation:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise EvaluationFailed(f"malformed JSON ({exc.msg} at char {exc.pos})") from exc
        try:
            return JobEvaluation.model_validate(data)
        except ValidationError as exc:
            raise EvaluationFailed(f"response failed validation: {exc.error_count()} error(s)") from exc

    def evaluate(self, job: RawJob) -> JobEvaluation | None:
        try:
            evaluation = self._parse(self._complete(job))
        except EvaluationFailed as exc:
            log.warning("Could not evaluate %s at %s: %s", job.title, job.company_name, exc)
            return None
        except Exception as exc:  # noqa: BLE001 - transport/API errors of the client
            log.error("Error evaluating %s at %s: %s", job.title, job.company_name, exc)
            return None

        log.debug(
            "Evaluated %s at %s: fit=%s rating=%d",
            job.title, job.company_name, evaluation.is_fit, evaluation.rating,
        )
        return evaluation


def build_evaluator(settings: Settings) -> JobEvaluator:
    if not settings.openai_api_key:
        raise ConfigError("OPENAI_API_KEY is not set")

    from openai import OpenAI

    client = OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url or None,
        timeout=settings.request_timeout,
        max_retries=1,
    )
    return JobEvaluator(
        client,
        model=settings.openai_model,
        profile_context=settings.profile_context,
        temperature=settings.temperature,
    )
