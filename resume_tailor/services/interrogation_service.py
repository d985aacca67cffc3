from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from resume_tailor.ai import OracleClient, OracleResponseError, OracleTimeoutError, extract_json_object
from resume_tailor.schemas.interrogation import (
    ConversationTurn,
    DialogueStatus,
    InterrogationState,
    OracleTurn,
)
from resume_tailor.schemas.normalized import JobDescription, ResumeProfile
from resume_tailor.services.prompts import build_interrogation_messages
from resume_tailor.services.validation import (
    MAX_HISTORY_TURNS,
    InterrogationRequest,
    validate_interrogation_request,
)
from resume_tailor.taxonomy import TaxonomyProvider, get_default_taxonomy

logger = logging.getLogger(__name__)


class InterrogationStateError(RuntimeError):
    """The dialogue is not in a state that accepts the requested transition."""


class InterrogationBusyError(RuntimeError):
    """An answer was submitted while the previous one is still awaiting the oracle."""


def expand_quick_reply(reply: str, taxonomy: TaxonomyProvider | None = None) -> str:
    taxonomy = taxonomy or get_default_taxonomy()
    key = (reply or "").strip().lower()
    if key not in taxonomy.quick_replies:
        raise ValueError(f"Unknown quick reply '{reply}'")
    return taxonomy.quick_replies[key]


def parse_oracle_turn(raw: str | None) -> OracleTurn:
    """Read one dialogue reply from the oracle.

    A reply with no parseable JSON object is treated as a plain question with
    empty gap and skill lists. A JSON reply that carries neither a question
    nor a summary is rejected.
    """
    payload = extract_json_object(raw)
    if payload is None:
        text = (raw or "").strip()
        if not text:
            raise OracleResponseError("The AI service returned an empty reply.")
        logger.info("interrogation_reply_not_json chars=%s", len(text))
        return OracleTurn(question=text, gaps_identified=[], confirmed_skills=[])

    try:
        turn = OracleTurn.model_validate(payload)
    except ValidationError as exc:
        raise OracleResponseError("The AI service returned an unreadable reply.") from exc
    if turn.question is None and turn.summary is None:
        raise OracleResponseError("The AI service reply had no question or summary.")
    return turn


def local_summary(state: InterrogationState) -> str:
    confirmed = ", ".join(state.confirmed_skills) or "none"
    remaining = [gap for gap in state.gaps_identified if gap.casefold() not in {s.casefold() for s in state.confirmed_skills}]
    gaps = ", ".join(remaining) or "none"
    return (
        "We've covered the questions for this job. "
        f"Confirmed skills: {confirmed}. Remaining gaps: {gaps}."
    )


class InterrogationEngine:
    """Turn-based gap-analysis dialogue over a generative oracle.

    One engine belongs to one session. Turns are appended in submission order;
    a second answer while the oracle is still busy is rejected. On any failure
    the state is rolled back to what it was before the call so it can be retried.
    """

    def __init__(
        self,
        oracle: OracleClient,
        *,
        timeout_s: float = 45.0,
        max_turns: int = MAX_HISTORY_TURNS,
    ):
        self._oracle = oracle
        self._timeout_s = timeout_s
        self._max_turns = max(1, min(max_turns, MAX_HISTORY_TURNS))
        self._job_description: JobDescription | None = None
        self._resume: ResumeProfile | None = None
        self.state = InterrogationState()
        self.status = DialogueStatus.NOT_STARTED

    @property
    def is_complete(self) -> bool:
        return self.status == DialogueStatus.COMPLETE

    async def start(self, job_description: JobDescription, resume: ResumeProfile) -> InterrogationState:
        if self.status == DialogueStatus.AWAITING_ORACLE:
            raise InterrogationBusyError("The previous request is still in progress.")
        if self.status != DialogueStatus.NOT_STARTED:
            raise InterrogationStateError("The interrogation has already started.")

        request = validate_interrogation_request(job_description, resume, [])
        self.status = DialogueStatus.AWAITING_ORACLE
        try:
            reply = await self._exchange(request)
        except BaseException:
            self.status = DialogueStatus.NOT_STARTED
            raise

        self._job_description = job_description
        self._resume = resume
        self._apply(reply)
        logger.info(
            "interrogation_started status=%s gaps=%s",
            self.status.value,
            len(self.state.gaps_identified),
        )
        return self.state

    async def send_answer(self, text: str) -> InterrogationState:
        if self.status == DialogueStatus.AWAITING_ORACLE:
            raise InterrogationBusyError("Please wait for the current question to finish.")
        if self.status == DialogueStatus.NOT_STARTED:
            raise InterrogationStateError("The interrogation has not started yet.")
        if self.status == DialogueStatus.COMPLETE:
            raise InterrogationStateError("The interrogation is already complete.")

        answer = (text or "").strip()
        if not answer:
            raise ValueError("Answer must not be empty.")

        prior_turns = list(self.state.turns)
        if len(prior_turns) + 1 > self._max_turns:
            self.state.turns.append(ConversationTurn(role="user", content=answer))
            self._complete_locally()
            return self.state

        request = validate_interrogation_request(
            self._job_description, self._resume, prior_turns, user_answer=answer
        )
        self.state.turns.append(ConversationTurn(role="user", content=answer))
        self.status = DialogueStatus.AWAITING_ORACLE
        try:
            reply = await self._exchange(request)
        except BaseException:
            self.state.turns = prior_turns
            self.status = DialogueStatus.AWAITING_USER
            raise

        self._apply(reply)
        logger.info(
            "interrogation_turn turns=%s status=%s confirmed=%s",
            len(self.state.turns),
            self.status.value,
            len(self.state.confirmed_skills),
        )
        return self.state

    async def _exchange(self, request: InterrogationRequest) -> OracleTurn:
        messages = build_interrogation_messages(request)
        try:
            raw = await asyncio.wait_for(
                self._oracle.complete(messages, json_mode=True),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("interrogation_oracle_timeout timeout_s=%s", self._timeout_s)
            raise OracleTimeoutError("The AI service did not answer in time.") from exc
        return parse_oracle_turn(raw)

    def _apply(self, reply: OracleTurn) -> None:
        state = self.state
        if reply.gaps_identified is not None:
            state.gaps_identified = reply.gaps_identified
        if reply.confirmed_skills is not None:
            state.confirmed_skills = reply.confirmed_skills
        state.is_complete = reply.is_complete
        state.summary = reply.summary or state.summary

        if reply.is_complete and reply.summary:
            content = reply.summary
        else:
            content = reply.question or reply.summary or ""
        state.turns.append(
            ConversationTurn(
                role="assistant",
                content=content,
                skill_being_probed=reply.skill_being_probed,
                context=reply.context,
            )
        )
        self.status = DialogueStatus.COMPLETE if reply.is_complete else DialogueStatus.AWAITING_USER

    def _complete_locally(self) -> None:
        summary = local_summary(self.state)
        self.state.summary = summary
        self.state.is_complete = True
        self.state.turns.append(ConversationTurn(role="assistant", content=summary))
        self.status = DialogueStatus.COMPLETE
        logger.warning("interrogation_turn_cap_reached turns=%s", len(self.state.turns))
