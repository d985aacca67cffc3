import json
import os
import sys
import unittest
from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

# Keep API tests deterministic and independent of real AI credentials.
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SCORING_BACKEND", "heuristic")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from resume_tailor.ai import OracleQuotaExceededError, OracleRateLimitedError  # noqa: E402
from resume_tailor.api.v1.dependencies import get_oracle, get_scoring_client  # noqa: E402
from resume_tailor.core.config import settings  # noqa: E402
from resume_tailor.main import app  # noqa: E402
from resume_tailor.services.ats_service import ATSScoringClient, HeuristicScoringOracle  # noqa: E402

RESUME_TEXT = (
    "Jane Smith\n"
    "Senior Software Engineer\n"
    "- Developed scalable React applications\n"
    "- Led a team of 5 engineers"
)
JD_TEXT = (
    "Job Title: Backend Engineer\n"
    "Company: Acme\n"
    "Required Skills: Python, AWS\n"
    "- 5+ years experience with Python required\n"
    "- Will manage a small team"
)


class StubOracle:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = 0

    async def complete(self, messages, *, json_mode=False):
        self.calls += 1
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class ApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def _use_oracle(self, *replies) -> StubOracle:
        oracle = StubOracle(*replies)
        app.dependency_overrides[get_oracle] = lambda: oracle
        return oracle

    def _create_session(self) -> dict:
        response = self.client.post(
            "/v1/sessions",
            files={"resume": ("resume.txt", RESUME_TEXT.encode("utf-8"), "text/plain")},
            data={"job_description_text": JD_TEXT},
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_extract_document(self):
        response = self.client.post(
            "/v1/documents/extract",
            files={"file": ("resume.txt", RESUME_TEXT.encode("utf-8"), "text/plain")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["source_type"], "txt")
        self.assertEqual(body["characters"], len(RESUME_TEXT))
        self.assertEqual(body["text"], RESUME_TEXT)

    def test_upload_limit(self):
        small = replace(settings, max_upload_bytes=10)
        with patch("resume_tailor.api.v1.dependencies.settings", small):
            response = self.client.post(
                "/v1/documents/extract",
                files={"file": ("resume.txt", b"x" * 11, "text/plain")},
            )
        self.assertEqual(response.status_code, 413)

    def test_create_session_analyzes_both_documents(self):
        body = self._create_session()
        self.assertTrue(body["session_id"])
        self.assertEqual(body["resume"]["name"], "Jane Smith")
        self.assertEqual(body["resume"]["title"], "Senior Software Engineer")
        self.assertEqual(body["job_description"]["title"], "Backend Engineer")
        self.assertEqual(body["job_description"]["company"], "Acme")

    def test_create_session_requires_job_description(self):
        response = self.client.post(
            "/v1/sessions",
            files={"resume": ("resume.txt", RESUME_TEXT.encode("utf-8"), "text/plain")},
        )
        self.assertEqual(response.status_code, 400)

    def test_job_description_can_be_uploaded_as_file(self):
        response = self.client.post(
            "/v1/sessions",
            files={
                "resume": ("resume.txt", RESUME_TEXT.encode("utf-8"), "text/plain"),
                "job_description_file": ("jd.txt", JD_TEXT.encode("utf-8"), "text/plain"),
            },
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["job_description"]["company"], "Acme")

    def test_unknown_session(self):
        self.assertEqual(self.client.get("/v1/sessions/missing").status_code, 404)

    def test_original_upload_is_kept_per_session(self):
        session_id = self._create_session()["session_id"]
        response = self.client.get(f"/v1/sessions/{session_id}/original")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, RESUME_TEXT.encode("utf-8"))
        self.assertIn("resume.txt", response.headers["content-disposition"])

    def test_interrogation_flow(self):
        session_id = self._create_session()["session_id"]
        oracle = self._use_oracle(
            json.dumps({"question": "Have you used AWS?", "gapsIdentified": ["python", "aws"], "isComplete": False}),
            "```json\n"
            + json.dumps({"isComplete": True, "summary": "AWS confirmed.", "confirmedSkills": ["aws"]})
            + "\n```",
        )

        started = self.client.post(f"/v1/sessions/{session_id}/interrogation/start")
        self.assertEqual(started.status_code, 200, started.text)
        self.assertEqual(started.json()["status"], "awaiting_user")
        self.assertEqual(started.json()["turns"][0]["content"], "Have you used AWS?")

        answered = self.client.post(
            f"/v1/sessions/{session_id}/interrogation/answer",
            json={"quick_reply": "yes"},
        )
        self.assertEqual(answered.status_code, 200, answered.text)
        body = answered.json()
        self.assertEqual(body["status"], "complete")
        self.assertEqual(body["turns"][1]["content"], "Yes, I have experience with that. Please add it to my resume.")
        self.assertEqual(body["confirmed_skills"], ["aws"])

        again = self.client.post(
            f"/v1/sessions/{session_id}/interrogation/answer",
            json={"text": "one more"},
        )
        self.assertEqual(again.status_code, 409)
        self.assertEqual(oracle.calls, 2)

        scored = self.client.post(f"/v1/sessions/{session_id}/ats-score", json={})
        self.assertEqual(scored.status_code, 200, scored.text)
        comparison = scored.json()
        self.assertGreaterEqual(comparison["new_score"]["total"], comparison["original_score"]["total"])
        self.assertIn("aws", comparison["new_score"]["matched_skills"])

        session = self.client.get(f"/v1/sessions/{session_id}").json()
        self.assertEqual(session["status"], "completed")
        self.assertEqual(session["interrogation"]["summary"], "AWS confirmed.")
        self.assertIsNotNone(session["ats"])

    def test_answer_before_start(self):
        session_id = self._create_session()["session_id"]
        response = self.client.post(
            f"/v1/sessions/{session_id}/interrogation/answer",
            json={"text": "hello"},
        )
        self.assertEqual(response.status_code, 409)

    def test_answer_requires_exactly_one_input(self):
        session_id = self._create_session()["session_id"]
        response = self.client.post(
            f"/v1/sessions/{session_id}/interrogation/answer",
            json={"text": "hello", "quick_reply": "no"},
        )
        self.assertEqual(response.status_code, 422)

    def test_oracle_rate_limit_and_quota_are_distinct(self):
        session_id = self._create_session()["session_id"]
        self._use_oracle(OracleRateLimitedError("slow down"))
        limited = self.client.post(f"/v1/sessions/{session_id}/interrogation/start")
        self.assertEqual(limited.status_code, 429)
        self.assertEqual(limited.json()["detail"]["code"], "rate_limited")

        self._use_oracle(OracleQuotaExceededError("no credits"))
        exhausted = self.client.post(f"/v1/sessions/{session_id}/interrogation/start")
        self.assertEqual(exhausted.status_code, 402)

        self._use_oracle(json.dumps({"question": "Ready?"}))
        retried = self.client.post(f"/v1/sessions/{session_id}/interrogation/start")
        self.assertEqual(retried.status_code, 200)

    def test_ats_score_with_explicit_skills(self):
        session_id = self._create_session()["session_id"]
        app.dependency_overrides[get_scoring_client] = lambda: ATSScoringClient(HeuristicScoringOracle())
        response = self.client.post(
            f"/v1/sessions/{session_id}/ats-score",
            json={
                "confirmed_skills": ["python", "aws"],
                "tailored_experience": [{"text": "Built Python services on AWS", "is_modified": True}],
            },
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertGreaterEqual(body["improvement"], 0)
        self.assertEqual(body["new_score"]["missing_skills"], [])

    def test_ats_score_validation_errors_are_field_level(self):
        session_id = self._create_session()["session_id"]
        response = self.client.post(
            f"/v1/sessions/{session_id}/ats-score",
            json={"confirmed_skills": [f"skill{i}" for i in range(60)]},
        )
        self.assertEqual(response.status_code, 422)
        self.assertIn("confirmed_skills", response.json()["detail"]["field_errors"])

    def test_job_url_private_host_is_refused(self):
        self._use_oracle("unused")
        response = self.client.post("/v1/jobs/extract-from-url", json={"url": "http://localhost:8000/job"})
        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":
    unittest.main()
