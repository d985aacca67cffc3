import asyncio
import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_tailor.ai import OracleRateLimitedError, OracleResponseError, OracleTimeoutError  # noqa: E402
from resume_tailor.schemas.interrogation import DialogueStatus  # noqa: E402
from resume_tailor.schemas.normalized import JobDescription, ResumeProfile  # noqa: E402
from resume_tailor.services.interrogation_service import (  # noqa: E402
    InterrogationBusyError,
    InterrogationEngine,
    InterrogationStateError,
    expand_quick_reply,
)
from resume_tailor.services.validation import OracleRequestInvalid  # noqa: E402


class StubOracle:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []
        self.gate: asyncio.Event | None = None

    async def complete(self, messages, *, json_mode=False):
        self.calls.append(list(messages))
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


def _reply(**fields) -> str:
    return json.dumps(fields)


JD = JobDescription(title="Backend Engineer", company="Acme", skills=["python", "docker"])
RESUME = ResumeProfile(name="Jane Smith", title="Software Engineer", skills=["python"])


class InterrogationEngineTests(unittest.IsolatedAsyncioTestCase):
    async def test_start_records_first_question(self):
        oracle = StubOracle(
            _reply(
                question="Have you used Docker?",
                skillBeingProbed="docker",
                isComplete=False,
                gapsIdentified=["docker"],
                confirmedSkills=[],
            )
        )
        engine = InterrogationEngine(oracle)

        state = await engine.start(JD, RESUME)
        self.assertEqual(engine.status, DialogueStatus.AWAITING_USER)
        self.assertEqual(len(state.turns), 1)
        self.assertEqual(state.turns[0].role, "assistant")
        self.assertEqual(state.turns[0].content, "Have you used Docker?")
        self.assertEqual(state.turns[0].skill_being_probed, "docker")
        self.assertEqual(state.gaps_identified, ["docker"])
        self.assertIn("first clarifying question", oracle.calls[0][-1].content)

    async def test_skill_heavy_resume_can_start(self):
        crowded = ResumeProfile(name="Jane Smith", skills=[f"tool{i}" for i in range(60)])
        oracle = StubOracle(_reply(question="Have you used Docker?"))
        state = await InterrogationEngine(oracle).start(JD, crowded)
        self.assertEqual(state.turns[0].content, "Have you used Docker?")
        self.assertIn("tool49", oracle.calls[0][1].content)
        self.assertNotIn("tool50", oracle.calls[0][1].content)

    async def test_answer_merges_only_fields_present(self):
        oracle = StubOracle(
            _reply(question="Have you used Docker?", gapsIdentified=["docker", "aws"], confirmedSkills=[]),
            _reply(question="And AWS?", confirmedSkills=["docker"]),
        )
        engine = InterrogationEngine(oracle)
        await engine.start(JD, RESUME)

        state = await engine.send_answer("Yes, daily.")
        self.assertEqual([turn.role for turn in state.turns], ["assistant", "user", "assistant"])
        self.assertEqual(state.confirmed_skills, ["docker"])
        self.assertEqual(state.gaps_identified, ["docker", "aws"])
        sent = [message.content for message in oracle.calls[1]]
        self.assertTrue(any("Yes, daily." in content for content in sent))

    async def test_completion_rejects_further_answers(self):
        oracle = StubOracle(
            _reply(question="Have you used Docker?"),
            _reply(isComplete=True, summary="Docker confirmed.", confirmedSkills=["docker"]),
        )
        engine = InterrogationEngine(oracle)
        await engine.start(JD, RESUME)
        state = await engine.send_answer("Yes")

        self.assertEqual(engine.status, DialogueStatus.COMPLETE)
        self.assertTrue(state.is_complete)
        self.assertEqual(state.summary, "Docker confirmed.")
        self.assertEqual(state.turns[-1].content, "Docker confirmed.")
        with self.assertRaises(InterrogationStateError):
            await engine.send_answer("One more thing")
        self.assertEqual(len(oracle.calls), 2)

    async def test_immediate_completion_on_start(self):
        engine = InterrogationEngine(StubOracle(_reply(isComplete=True, summary="No gaps found.")))
        await engine.start(JD, RESUME)
        self.assertTrue(engine.is_complete)

    async def test_fenced_reply_is_parsed(self):
        reply = '```json\n{"question": "Which cloud have you used?", "isComplete": false}\n```'
        engine = InterrogationEngine(StubOracle(reply))
        state = await engine.start(JD, RESUME)
        self.assertEqual(state.turns[0].content, "Which cloud have you used?")

    async def test_plain_text_reply_becomes_question(self):
        engine = InterrogationEngine(StubOracle("Tell me about your Docker experience."))
        state = await engine.start(JD, RESUME)
        self.assertEqual(state.turns[0].content, "Tell me about your Docker experience.")
        self.assertEqual(state.gaps_identified, [])
        self.assertEqual(engine.status, DialogueStatus.AWAITING_USER)

    async def test_plain_text_reply_clears_gap_and_skill_lists(self):
        oracle = StubOracle(
            _reply(question="Have you used Docker?", gapsIdentified=["docker"], confirmedSkills=["python"]),
            "Thanks! Could you tell me more about your cloud work?",
        )
        engine = InterrogationEngine(oracle)
        await engine.start(JD, RESUME)

        state = await engine.send_answer("Yes, for three years.")
        self.assertEqual(state.turns[-1].content, "Thanks! Could you tell me more about your cloud work?")
        self.assertEqual(state.gaps_identified, [])
        self.assertEqual(state.confirmed_skills, [])
        self.assertEqual(engine.status, DialogueStatus.AWAITING_USER)

    async def test_failed_answer_leaves_state_unchanged(self):
        oracle = StubOracle(
            _reply(question="Have you used Docker?", gapsIdentified=["docker"]),
            OracleRateLimitedError("slow down"),
            _reply(gapsIdentified=["aws"]),
            _reply(question="Thanks. And AWS?"),
        )
        engine = InterrogationEngine(oracle)
        await engine.start(JD, RESUME)

        with self.assertRaises(OracleRateLimitedError):
            await engine.send_answer("Yes")
        self.assertEqual(len(engine.state.turns), 1)
        self.assertEqual(engine.status, DialogueStatus.AWAITING_USER)

        with self.assertRaises(OracleResponseError):
            await engine.send_answer("Yes")
        self.assertEqual(len(engine.state.turns), 1)
        self.assertEqual(engine.state.gaps_identified, ["docker"])

        state = await engine.send_answer("Yes")
        self.assertEqual(len(state.turns), 3)

    async def test_failed_start_can_be_retried(self):
        engine = InterrogationEngine(StubOracle(RuntimeError("network"), _reply(question="First?")))
        with self.assertRaises(RuntimeError):
            await engine.start(JD, RESUME)
        self.assertEqual(engine.status, DialogueStatus.NOT_STARTED)
        await engine.start(JD, RESUME)
        self.assertEqual(engine.state.turns[0].content, "First?")

    async def test_timeout_is_reported(self):
        oracle = StubOracle(_reply(question="Too late"))
        oracle.gate = asyncio.Event()
        engine = InterrogationEngine(oracle, timeout_s=0.01)
        with self.assertRaises(OracleTimeoutError):
            await engine.start(JD, RESUME)
        self.assertEqual(engine.status, DialogueStatus.NOT_STARTED)

    async def test_concurrent_answer_is_rejected(self):
        oracle = StubOracle(_reply(question="Docker?"), _reply(question="AWS?"))
        engine = InterrogationEngine(oracle)
        await engine.start(JD, RESUME)

        oracle.gate = asyncio.Event()
        pending = asyncio.create_task(engine.send_answer("Yes"))
        await asyncio.sleep(0)
        self.assertEqual(engine.status, DialogueStatus.AWAITING_ORACLE)
        with self.assertRaises(InterrogationBusyError):
            await engine.send_answer("Also yes")

        oracle.gate.set()
        state = await pending
        self.assertEqual([turn.content for turn in state.turns], ["Docker?", "Yes", "AWS?"])

    async def test_answer_before_start_is_rejected(self):
        engine = InterrogationEngine(StubOracle())
        with self.assertRaises(InterrogationStateError):
            await engine.send_answer("hello")

    async def test_oversized_answer_never_reaches_oracle(self):
        oracle = StubOracle(_reply(question="Docker?"))
        engine = InterrogationEngine(oracle)
        await engine.start(JD, RESUME)
        with self.assertRaises(OracleRequestInvalid):
            await engine.send_answer("x" * 2001)
        self.assertEqual(len(oracle.calls), 1)
        self.assertEqual(len(engine.state.turns), 1)

    async def test_turn_cap_completes_locally(self):
        oracle = StubOracle(
            _reply(question="Docker?", gapsIdentified=["docker", "aws"]),
            _reply(question="AWS?", confirmedSkills=["docker"]),
        )
        engine = InterrogationEngine(oracle, max_turns=3)
        await engine.start(JD, RESUME)
        await engine.send_answer("Yes")

        state = await engine.send_answer("No")
        self.assertTrue(state.is_complete)
        self.assertEqual(len(oracle.calls), 2)
        self.assertIn("docker", state.summary)
        self.assertIn("aws", state.summary)


class QuickReplyTests(unittest.TestCase):
    def test_quick_replies_expand_to_sentences(self):
        self.assertEqual(
            expand_quick_reply("yes"),
            "Yes, I have experience with that. Please add it to my resume.",
        )
        self.assertEqual(expand_quick_reply("NO"), "No, I don't have that specific experience. Let's skip it.")
        self.assertTrue(expand_quick_reply("edit").startswith("Let me provide more details"))

    def test_unknown_quick_reply(self):
        with self.assertRaises(ValueError):
            expand_quick_reply("maybe")


if __name__ == "__main__":
    unittest.main()
