"""Answer application-form questions for the applicant with an OpenAI-compatible model.

The oracle is text in, text out. It never raises for model problems: when the model
cannot be reached it falls back to the first offered option, or ``"Yes"``.
"""
from __future__ import annotations

import random
import re
from typing import Any, Sequence

from easyapply.config import ApplyPolicy
from easyapply.log import get_logger
from easyapply.models import UserProfile

log = get_logger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
FALLBACK_ANSWER = "Yes"

# Years claimed for a technology named in an experience question.
TECH_EXPERIENCE_YEARS: dict[tuple[str, ...], int] = {
    ("React", "Node.js", "TypeScript", "JavaScript"): 8,
    ("Cloud", "AWS", "GCP"): 5,
}
OTHER_SKILL_YEARS = 5
UNLISTED_TECH_YEARS = 1

EXPERIENCE_QUESTION_RE = re.compile(
    r"how many|combien|years|ann[ée]es|experience|exp[ée]rience", re.IGNORECASE
)
SALARY_QUESTION_RE = re.compile(r"salary|salaire|compensation|r[ée]mun[ée]ration", re.IGNORECASE)
_ECHO_PREFIX_RE = re.compile(r"^(option|answer|r[ée]ponse|phone)\s*:\s*", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d{1,3}(?:[,.\u00a0\u202f ]\d{3})+(?!\d)|\d+")
_QUOTE_PAIRS = (('"', '"'), ("'", "'"), ("“", "”"))


def _mentions(text: str, term: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(term)}(?!\w)", text, re.IGNORECASE) is not None


def first_number(text: str) -> str | None:
    """First integer in ``text`` with thousand separators removed (``"60,000 EUR"`` -> ``"60000"``)."""
    m = _NUMBER_RE.search(text)
    if not m:
        return None
    return re.sub(r"\D", "", m.group(0))


def clean_answer(raw: str) -> str:
    answer = _ECHO_PREFIX_RE.sub("", raw.strip()).strip()
    for opening, closing in _QUOTE_PAIRS:
        if len(answer) >= 2 and answer.startswith(opening) and answer.endswith(closing):
            answer = answer[1:-1].strip()
            break
    return answer


class AnswerOracle:
    def __init__(
        self,
        profile: UserProfile,
        *,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        base_url: str | None = None,
        client: Any = None,
        policy: ApplyPolicy | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.profile = profile
        self.model = model
        self.policy = policy or ApplyPolicy()
        self._rng = rng or random.Random()
        self._client = client
        self._api_key = api_key
        self._base_url = base_url

    def answer(self, question: str, options: Sequence[str] | None = None) -> str:
        options = list(options or [])
        question = " ".join(question.split())

        if not options:
            years = self.known_experience_years(question)
            if years is not None:
                log.info("[oracle] Q: %r -> A: %r (experience rule)", question, str(years))
                return str(years)

        try:
            raw = self._complete(self.build_prompt(question, options))
        except Exception as exc:
            log.warning("Oracle call failed (%s), using default answer", exc)
            return self._fallback(options)

        answer = clean_answer(raw)
        if not answer:
            log.warning("Oracle returned an empty answer for %r, using default answer", question)
            return self._fallback(options)

        if not options:
            answer = self._coerce_numeric(question, answer)

        log.info("[oracle] Q: %r -> A: %r", question, answer)
        return answer

    def known_experience_years(self, question: str) -> int | None:
        """Fixed years-of-experience answers, keyed by whether the profile lists the technology."""
        if not EXPERIENCE_QUESTION_RE.search(question):
            return None
        for techs, years in TECH_EXPERIENCE_YEARS.items():
            named = [t for t in techs if _mentions(question, t)]
            if named:
                return years if any(self.profile.has_skill(t) for t in named) else UNLISTED_TECH_YEARS
        if any(_mentions(question, skill) for skill in self.profile.skills):
            return OTHER_SKILL_YEARS
        return None

    def build_prompt(self, question: str, options: Sequence[str]) -> str:
        p = self.profile
        lo, hi = self.policy.salary_fallback
        rules = []
        for techs, years in TECH_EXPERIENCE_YEARS.items():
            rules.append(f"   - If asked about **{', '.join(techs)}**: Return \"{years}\".")
        rules.append(f"   - If asked about other tech in your skills: Return \"{OTHER_SKILL_YEARS}\".")
        rules.append(
            f"   - If asked about tech NOT in your skills: Return \"{UNLISTED_TECH_YEARS}\"."
        )
        options_line = f"Available options: {', '.join(options)}" if options else ""

        return f"""You are an intelligent assistant helping a user apply for jobs on LinkedIn.

User Profile:
First Name: {p.first_name}
Last Name: {p.last_name}
Email: {p.email}
Phone: {p.phone}
Headline: {p.headline}
Summary: {p.summary}
Experience: {p.experience}
Skills: {', '.join(p.skills)}
LinkedIn: {p.profile_url}

The user is filling out a job application form.
Question from the form: "{question}"
{options_line}

Instructions:
1. Answer the question truthfully based on the User Profile.
2. If options are provided, choose the best match from the options list strictly. Return ONLY the option text.
3. If the question asks for a number (e.g. years of experience), return ONLY the digit(s) (e.g. "5"). Do not add "years" or text.
4. Specific Years of Experience Rules:
{chr(10).join(rules)}
5. If the question asks for Salary expectations:
   - If the currency is EUR or not specified, provide a number between {lo} and {hi}.
   - Return ONLY the number (e.g. "{(lo + hi) // 2}").
6. If you don't know the answer and it's not in the profile, make a reasonable professional guess or say "0" for numbers if unsure.
7. Keep the answer concise."""

    def _complete(self, prompt: str) -> str:
        client = self._get_client()
        r = client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.3,
        )
        if not r.choices:
            return ""
        return (r.choices[0].message.content or "").strip()

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError("OPENAI_API_KEY is not set")
            from openai import OpenAI

            self._client = OpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    def _coerce_numeric(self, question: str, answer: str) -> str:
        if EXPERIENCE_QUESTION_RE.search(question) or SALARY_QUESTION_RE.search(question):
            number = first_number(answer)
            if number is not None:
                return number
        if SALARY_QUESTION_RE.search(question):
            lo, hi = self.policy.salary_fallback
            guess = round(self._rng.randint(lo, hi), -3)
            log.debug("No number in salary answer %r, using %d", answer, guess)
            return str(guess)
        return answer

    @staticmethod
    def _fallback(options: Sequence[str]) -> str:
        if options:
            return options[0]
        return FALLBACK_ANSWER
