"""
End-to-end tests of the HTTP surface against an in-memory database.
"""
import unittest

import httpx
import jwt

from learnhub.dependencies.db import get_database
from learnhub.dependencies.services import get_redis_client
from learnhub.main import app
from tests.base import INSTRUCTOR_ID, LEARNER_ID, DatabaseTestCase


def _auth(user_id: str) -> dict:
    token = jwt.encode({"sub": user_id}, "test-secret", algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


class TestApi(DatabaseTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()

        async def override_database():
            async with self.session_factory() as session:
                yield session

        async def override_redis_client():
            return self.lock_client

        app.dependency_overrides[get_database] = override_database
        app.dependency_overrides[get_redis_client] = override_redis_client
        self.client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    async def asyncTearDown(self):
        await self.client.aclose()
        app.dependency_overrides.clear()
        await super().asyncTearDown()

    async def test_health(self):
        response = await self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")
        self.assertTrue(response.json()["database"])
        self.assertFalse(response.json()["distributed_locks"])

    async def test_requires_token(self):
        response = await self.client.post("/api/v1/courses", json={"title": "No auth"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["status"], "ERROR")

        response = await self.client.post(
            "/api/v1/courses", json={"title": "Bad"}, headers={"Authorization": "Bearer not-a-jwt"}
        )
        self.assertEqual(response.status_code, 401)

    async def test_missing_course(self):
        response = await self.client.get("/api/v1/courses/missing")
        body = response.json()
        self.assertEqual(response.status_code, 404)
        self.assertEqual(body["code"], 404)
        self.assertIn("missing", body["message"])

    async def test_invalid_quiz_rejected(self):
        course = (await self.client.post(
            "/api/v1/courses", json={"title": "Quizzes"}, headers=_auth(INSTRUCTOR_ID)
        )).json()["data"]
        module = (await self.client.post(
            f"/api/v1/courses/{course['id']}/modules", json={"title": "M"}, headers=_auth(INSTRUCTOR_ID)
        )).json()["data"]
        lesson = (await self.client.post(
            f"/api/v1/modules/{module['id']}/lessons",
            json={"title": "Quiz", "content": {"content_type": "quiz"}},
            headers=_auth(INSTRUCTOR_ID),
        )).json()["data"]

        response = await self.client.put(
            f"/api/v1/quizzes/lesson/{lesson['id']}",
            json={"lesson_id": lesson["id"], "title": "Empty"},
            headers=_auth(INSTRUCTOR_ID),
        )
        self.assertEqual(response.status_code, 400)

    async def test_course_to_completion(self):
        instructor = _auth(INSTRUCTOR_ID)
        learner = _auth(LEARNER_ID)

        # Authoring
        response = await self.client.post(
            "/api/v1/courses", json={"title": "Python Basics", "is_published": True}, headers=instructor
        )
        self.assertEqual(response.status_code, 200)
        course = response.json()["data"]
        self.assertEqual(course["slug"], "python-basics")
        self.assertEqual(course["instructor_id"], INSTRUCTOR_ID)

        module = (await self.client.post(
            f"/api/v1/courses/{course['id']}/modules", json={"title": "Start"}, headers=instructor
        )).json()["data"]
        lesson = (await self.client.post(
            f"/api/v1/modules/{module['id']}/lessons",
            json={"title": "Checkpoint", "content": {"content_type": "quiz"}},
            headers=instructor,
        )).json()["data"]
        self.assertEqual(lesson["content"], {"content_type": "quiz"})

        draft = (await self.client.get(
            f"/api/v1/quizzes/lesson/{lesson['id']}", headers=instructor
        )).json()["data"]
        draft.update(
            title="Checkpoint",
            questions=[{
                "question_text": "2 + 2?",
                "answers": [
                    {"answer_text": "4", "is_correct": True, "order_index": 0},
                    {"answer_text": "5", "is_correct": False, "order_index": 1},
                ],
            }],
        )
        response = await self.client.put(
            f"/api/v1/quizzes/lesson/{lesson['id']}", json=draft, headers=instructor
        )
        self.assertEqual(response.status_code, 200)
        quiz_id = response.json()["data"]["quiz_id"]

        modules = (await self.client.get(f"/api/v1/courses/{course['id']}/modules")).json()["data"]
        self.assertEqual(modules[0]["lesson_count"], 1)

        # Attempt
        response = await self.client.post("/api/v1/attempts", json={"quiz_id": quiz_id}, headers=learner)
        attempt = response.json()["data"]
        question = attempt["quiz"]["questions"][0]
        self.assertNotIn("is_correct", question["answers"][0])

        response = await self.client.get(f"/api/v1/attempts/{attempt['attempt_id']}", headers=instructor)
        self.assertEqual(response.status_code, 403)

        response = await self.client.post(
            f"/api/v1/attempts/{attempt['attempt_id']}/submit",
            json={"selections": [
                {"question_id": question["id"], "answer_id": question["answers"][0]["id"]},
            ]},
            headers=learner,
        )
        result = response.json()["data"]
        self.assertEqual(result["score"], 100)
        self.assertTrue(result["passed"])
        self.assertTrue(result["persisted"])

        best = (await self.client.get(f"/api/v1/attempts/quiz/{quiz_id}/best", headers=learner)).json()
        self.assertEqual(best["data"]["score"], 100)

        # Progress
        response = await self.client.post(f"/api/v1/progress/courses/{course['id']}/enroll", headers=learner)
        self.assertEqual(response.json()["data"]["progress_percentage"], 0)

        response = await self.client.post(f"/api/v1/progress/lessons/{lesson['id']}/complete", headers=learner)
        enrollment = response.json()["data"]
        self.assertEqual(enrollment["progress_percentage"], 100)
        self.assertIsNotNone(enrollment["completed_at"])

        # Teardown through the API
        response = await self.client.delete(f"/api/v1/courses/{course['id']}", headers=instructor)
        self.assertEqual(response.status_code, 200)
        response = await self.client.get(f"/api/v1/courses/{course['id']}")
        self.assertEqual(response.status_code, 404)

    async def test_patch_module_clears_description(self):
        instructor = _auth(INSTRUCTOR_ID)
        course = (await self.client.post(
            "/api/v1/courses", json={"title": "Modules"}, headers=instructor
        )).json()["data"]
        module = (await self.client.post(
            f"/api/v1/courses/{course['id']}/modules",
            json={"title": "Start", "description": "Intro"},
            headers=instructor,
        )).json()["data"]

        response = await self.client.patch(
            f"/api/v1/modules/{module['id']}", json={"title": "Begin"}, headers=instructor
        )
        self.assertEqual(response.json()["data"]["description"], "Intro")

        response = await self.client.patch(
            f"/api/v1/modules/{module['id']}", json={"description": None}, headers=instructor
        )
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["data"]["description"])
        self.assertEqual(response.json()["data"]["title"], "Begin")

    async def test_reviews_and_discussions(self):
        instructor = _auth(INSTRUCTOR_ID)
        learner = _auth(LEARNER_ID)
        course = (await self.client.post(
            "/api/v1/courses", json={"title": "Community"}, headers=instructor
        )).json()["data"]
        reviews_url = f"/api/v1/courses/{course['id']}/reviews"

        response = await self.client.put(reviews_url, json={"rating": 5}, headers=learner)
        self.assertEqual(response.status_code, 403)

        await self.client.post(f"/api/v1/progress/courses/{course['id']}/enroll", headers=learner)
        response = await self.client.put(reviews_url, json={"rating": 9}, headers=learner)
        self.assertEqual(response.status_code, 400)
        response = await self.client.put(
            reviews_url, json={"rating": 4, "comment": "Clear"}, headers=learner
        )
        self.assertEqual(response.status_code, 200)

        stats = (await self.client.get(f"{reviews_url}/stats")).json()["data"]
        self.assertEqual(stats["total_reviews"], 1)
        self.assertEqual(stats["distribution"]["4"], 1)
        mine = (await self.client.get(f"{reviews_url}/me", headers=learner)).json()["data"]
        self.assertEqual(mine["comment"], "Clear")

        response = await self.client.post(
            f"/api/v1/courses/{course['id']}/discussions",
            json={"title": "Help", "content": "Stuck on lesson 2"},
            headers=learner,
        )
        thread = response.json()["data"]
        response = await self.client.post(
            f"/api/v1/discussions/{thread['id']}/replies", json={"content": ""}, headers=instructor
        )
        self.assertEqual(response.status_code, 400)
        await self.client.post(
            f"/api/v1/discussions/{thread['id']}/replies", json={"content": "Look again"}, headers=instructor
        )

        threads = (await self.client.get(f"/api/v1/courses/{course['id']}/discussions")).json()["data"]
        self.assertEqual(len(threads), 1)
        self.assertEqual(threads[0]["replies"][0]["content"], "Look again")

        response = await self.client.delete(f"/api/v1/discussions/{thread['id']}", headers=instructor)
        self.assertEqual(response.status_code, 403)
        response = await self.client.delete(f"/api/v1/discussions/{thread['id']}", headers=learner)
        self.assertEqual(response.status_code, 200)


if __name__ == '__main__':
    unittest.main()
