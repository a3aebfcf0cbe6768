"""Backend API end-to-end tests."""

import json
import uuid

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

import socratic_tutor.models  # noqa: F401
from socratic_tutor.ai.llm_base import LLMRateLimitError
from socratic_tutor.config import settings
from socratic_tutor.db.session import build_session_factory
from socratic_tutor.dependencies import get_db, get_tutor_service
from socratic_tutor.main import invalid_body_handler
from socratic_tutor.models.user import Base
from socratic_tutor.routers import (
    admin_router,
    announcements_router,
    auth_router,
    chat_router,
    conversations_router,
    student_router,
)
from tests.conftest import MockLLMProvider, make_tutor


def _auth_headers(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


async def _register_user(
    client: AsyncClient,
    *,
    email: str,
    username: str,
    role: str = "student",
    class_code: str | None = None,
    password: str = "StrongPass123",
) -> dict:
    response = await client.post(
        "/api/auth/register",
        json={
            "email": email,
            "username": username,
            "password": password,
            "full_name": username.title(),
            "role": role,
            "school_id": "001",
            "class_code": class_code,
        },
    )
    assert response.status_code == 200, response.text
    return response.json()


async def _register_class(client: AsyncClient) -> tuple[dict, str, dict]:
    """Register a teacher and one student in the teacher's class."""
    teacher = await _register_user(
        client, email="teacher@example.com", username="teacher", role="admin"
    )
    teacher_headers = _auth_headers(teacher["access_token"])
    me = await client.get("/api/auth/me", headers=teacher_headers)
    class_code = me.json()["class_code"]
    student = await _register_user(
        client, email="student@example.com", username="student", class_code=class_code
    )
    return teacher_headers, class_code, _auth_headers(student["access_token"])


async def _start_conversation(client: AsyncClient, headers: dict, **body) -> dict:
    payload = {"subject": "Algebra", "problem_statement": "Solve x + 2 = 5"}
    payload.update(body)
    response = await client.post("/api/conversations", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def llm() -> MockLLMProvider:
    return MockLLMProvider(replies=["What could you do to both sides?"])


@pytest_asyncio.fixture
async def e2e_client(monkeypatch: pytest.MonkeyPatch, tmp_path, llm: MockLLMProvider):
    """Create an isolated FastAPI app + SQLite database for end-to-end tests."""
    db_path = tmp_path / "e2e.sqlite3"
    monkeypatch.setattr(settings, "allowed_school_ids", "001")

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    session_factory = build_session_factory(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app = FastAPI(title="e2e-test-app")
    app.include_router(auth_router)
    app.include_router(conversations_router)
    app.include_router(chat_router)
    app.include_router(admin_router)
    app.include_router(student_router)
    app.include_router(announcements_router)
    app.add_exception_handler(RequestValidationError, invalid_body_handler)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    tutor = make_tutor(llm)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tutor_service] = lambda: tutor

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.mark.asyncio
async def test_e2e_auth_profile_refresh_logout_flow(e2e_client: AsyncClient) -> None:
    """Registration, profile, refresh, and logout should work as a full flow."""
    register_payload = await _register_user(
        e2e_client, email="Learner@Example.com", username="learner", class_code="CLS-ABCD12"
    )
    access_token = register_payload["access_token"]

    me_response = await e2e_client.get("/api/auth/me", headers=_auth_headers(access_token))
    assert me_response.status_code == 200
    profile = me_response.json()
    assert profile["email"] == "learner@example.com"
    assert profile["role"] == "student"
    assert profile["is_admin"] is False
    assert profile["class_code"] == "CLS-ABCD12"

    login_response = await e2e_client.post(
        "/api/auth/login", json={"email": "learner@example.com", "password": "StrongPass123"}
    )
    assert login_response.status_code == 200

    refresh_response = await e2e_client.post("/api/auth/refresh")
    assert refresh_response.status_code == 200
    assert refresh_response.json()["access_token"]

    logout_response = await e2e_client.post("/api/auth/logout")
    assert logout_response.status_code == 200

    refresh_after_logout = await e2e_client.post("/api/auth/refresh")
    assert refresh_after_logout.status_code == 401


@pytest.mark.asyncio
async def test_e2e_registration_rules(e2e_client: AsyncClient) -> None:
    await _register_user(
        e2e_client, email="taken@example.com", username="taken", class_code="CLS-ABCD12"
    )

    duplicate = await e2e_client.post(
        "/api/auth/register",
        json={
            "email": "taken@example.com",
            "username": "another",
            "password": "StrongPass123",
            "school_id": "001",
            "class_code": "CLS-ABCD12",
        },
    )
    assert duplicate.status_code == 409

    wrong_school = await e2e_client.post(
        "/api/auth/register",
        json={
            "email": "new@example.com",
            "username": "newbie",
            "password": "StrongPass123",
            "school_id": "999",
            "class_code": "CLS-ABCD12",
        },
    )
    assert wrong_school.status_code == 400
    assert wrong_school.json()["detail"] == "Invalid school ID"

    missing_class = await e2e_client.post(
        "/api/auth/register",
        json={
            "email": "new@example.com",
            "username": "newbie",
            "password": "StrongPass123",
            "school_id": "001",
        },
    )
    assert missing_class.status_code == 400
    assert missing_class.json()["detail"] == "Invalid body"

    bad_login = await e2e_client.post(
        "/api/auth/login", json={"email": "taken@example.com", "password": "WrongPass999"}
    )
    assert bad_login.status_code == 401


@pytest.mark.asyncio
async def test_e2e_teacher_registration_issues_class_code(e2e_client: AsyncClient) -> None:
    teacher_headers, class_code, _ = await _register_class(e2e_client)

    me = await e2e_client.get("/api/auth/me", headers=teacher_headers)
    assert me.json()["is_admin"] is True
    assert class_code.startswith("CLS-")
    assert len(class_code) == 10


@pytest.mark.asyncio
async def test_e2e_requests_without_token_are_rejected(e2e_client: AsyncClient) -> None:
    response = await e2e_client.get("/api/conversations")
    assert response.status_code == 401

    response = await e2e_client.get("/api/auth/me", headers=_auth_headers("not-a-jwt"))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_e2e_conversation_lifecycle(e2e_client: AsyncClient) -> None:
    _, _, student_headers = await _register_class(e2e_client)
    conversation = await _start_conversation(e2e_client, student_headers)
    assert conversation["status"] == "active"
    assert conversation["title"] == "Solve x + 2 = 5"
    conversation_id = conversation["id"]

    listing = await e2e_client.get("/api/conversations", headers=student_headers)
    assert listing.status_code == 200
    assert listing.json()["total"] == 1

    ended = await e2e_client.patch(
        f"/api/conversations/{conversation_id}", json={"status": "ended"}, headers=student_headers
    )
    assert ended.status_code == 200
    assert ended.json()["status"] == "ended"
    assert ended.json()["ended_at"] is not None

    reopened = await e2e_client.patch(
        f"/api/conversations/{conversation_id}", json={"status": "active"}, headers=student_headers
    )
    assert reopened.status_code == 400

    active_only = await e2e_client.get(
        "/api/conversations", params={"status": "active"}, headers=student_headers
    )
    assert active_only.json()["items"] == []

    deleted = await e2e_client.delete(
        f"/api/conversations/{conversation_id}", headers=student_headers
    )
    assert deleted.status_code == 200

    gone = await e2e_client.get(f"/api/conversations/{conversation_id}", headers=student_headers)
    assert gone.status_code == 404
    deleted_again = await e2e_client.delete(
        f"/api/conversations/{conversation_id}", headers=student_headers
    )
    assert deleted_again.status_code == 404
    patched = await e2e_client.patch(
        f"/api/conversations/{conversation_id}", json={"status": "deleted"}, headers=student_headers
    )
    assert patched.status_code == 404
    listing = await e2e_client.get("/api/conversations", headers=student_headers)
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_e2e_chat_turn_returns_reply_and_hint_level(
    e2e_client: AsyncClient, llm: MockLLMProvider
) -> None:
    teacher_headers, _, student_headers = await _register_class(e2e_client)
    saved = await e2e_client.post(
        "/api/admin/ai-restrictions",
        json={
            "explainDefinitions": False,
            "modelPhysicsEngineering": False,
            "showWorkings": False,
            "avoidDirectAnswers": True,
        },
        headers=teacher_headers,
    )
    assert saved.status_code == 200
    assert saved.json() == {"ok": True}

    conversation = await _start_conversation(e2e_client, student_headers)
    for _ in range(2):
        response = await e2e_client.post(
            "/api/ai/chat",
            json={"conversation_id": conversation["id"], "message": "Is x equal to 7?"},
            headers=student_headers,
        )
        assert response.status_code == 200, response.text
    body = response.json()
    assert body["reply"] == "What could you do to both sides?"
    assert body["hint_level"] == 2

    prompt = llm.calls[-1]["system_prompt"]
    assert "Definitions prohibited" in prompt
    assert "Never give final answers" in prompt
    assert "Subject: Algebra" in prompt
    assert "Suggest general methods" in prompt
    assert '- "What could you do to both sides"' in prompt

    detail = await e2e_client.get(
        f"/api/conversations/{conversation['id']}", headers=student_headers
    )
    messages = detail.json()["messages"]
    assert [m["role"] for m in messages] == ["user", "assistant", "user", "assistant"]
    assert [m["hint_level"] for m in messages] == [None, 1, None, 2]

    stats = await e2e_client.get("/api/student/stats", headers=student_headers)
    assert stats.json() == {
        "total_conversations": 1,
        "active_conversations": 1,
        "total_messages": 2,
    }


@pytest.mark.asyncio
async def test_e2e_chat_turn_error_mapping(
    e2e_client: AsyncClient, llm: MockLLMProvider
) -> None:
    _, _, student_headers = await _register_class(e2e_client)
    conversation = await _start_conversation(e2e_client, student_headers)

    missing = await e2e_client.post(
        "/api/ai/chat",
        json={"conversation_id": str(uuid.uuid4()), "message": "hello"},
        headers=student_headers,
    )
    assert missing.status_code == 404

    rejected = await e2e_client.post(
        "/api/ai/chat",
        json={"conversation_id": conversation["id"], "message": "my credit card number"},
        headers=student_headers,
    )
    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "Inappropriate content"

    empty = await e2e_client.post(
        "/api/ai/chat",
        json={"conversation_id": conversation["id"], "message": ""},
        headers=student_headers,
    )
    assert empty.status_code == 400
    assert empty.json()["detail"] == "Invalid body"

    llm.error = LLMRateLimitError("OpenAI rate limit hit (429). Please wait and try again.")
    upstream = await e2e_client.post(
        "/api/ai/chat",
        json={"conversation_id": conversation["id"], "message": "hello"},
        headers=student_headers,
    )
    assert upstream.status_code == 502
    assert "rate limit" in upstream.json()["detail"]


@pytest.mark.asyncio
async def test_e2e_ai_health_masks_key(e2e_client: AsyncClient) -> None:
    response = await e2e_client.get("/api/ai/health")
    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "provider": "openai",
        "has_key": True,
        "masked": "sk-tes...3456",
        "model": "gpt-4o-mini",
    }


@pytest.mark.asyncio
async def test_e2e_admin_sees_class_conversations_only(e2e_client: AsyncClient) -> None:
    teacher_headers, _, student_headers = await _register_class(e2e_client)
    outsider = await _register_user(
        e2e_client, email="out@example.com", username="outsider", class_code="CLS-OTHER1"
    )
    outsider_headers = _auth_headers(outsider["access_token"])
    mine = await _start_conversation(e2e_client, student_headers)
    theirs = await _start_conversation(e2e_client, outsider_headers)

    listing = await e2e_client.get("/api/conversations", headers=teacher_headers)
    items = listing.json()["items"]
    assert [item["id"] for item in items] == [mine["id"]]
    assert items[0]["student"]["username"] == "student"

    visible = await e2e_client.get(f"/api/conversations/{mine['id']}", headers=teacher_headers)
    assert visible.status_code == 200
    hidden = await e2e_client.get(f"/api/conversations/{theirs['id']}", headers=teacher_headers)
    assert hidden.status_code == 404

    not_owner = await e2e_client.patch(
        f"/api/conversations/{mine['id']}", json={"status": "ended"}, headers=teacher_headers
    )
    assert not_owner.status_code == 404


@pytest.mark.asyncio
async def test_e2e_admin_endpoints_require_admin_role(e2e_client: AsyncClient) -> None:
    _, _, student_headers = await _register_class(e2e_client)

    for method, path in [
        ("GET", "/api/admin/ai-restrictions"),
        ("GET", "/api/admin/usage-stats"),
        ("GET", "/api/admin/daily-insights"),
    ]:
        response = await e2e_client.request(method, path, headers=student_headers)
        assert response.status_code == 403, path

    post = await e2e_client.post(
        "/api/admin/class-planner",
        json={"subject": "Maths", "topic": "Fractions"},
        headers=student_headers,
    )
    assert post.status_code == 403


@pytest.mark.asyncio
async def test_e2e_restrictions_round_trip_and_validation(e2e_client: AsyncClient) -> None:
    teacher_headers, _, _ = await _register_class(e2e_client)

    initial = await e2e_client.get("/api/admin/ai-restrictions", headers=teacher_headers)
    assert initial.json() == {"settings": None}

    incomplete = await e2e_client.post(
        "/api/admin/ai-restrictions",
        json={"explainDefinitions": True},
        headers=teacher_headers,
    )
    assert incomplete.status_code == 400

    settings_body = {
        "explainDefinitions": True,
        "modelPhysicsEngineering": False,
        "showWorkings": True,
        "avoidDirectAnswers": False,
    }
    saved = await e2e_client.post(
        "/api/admin/ai-restrictions", json=settings_body, headers=teacher_headers
    )
    assert saved.status_code == 200

    stored = await e2e_client.get("/api/admin/ai-restrictions", headers=teacher_headers)
    assert stored.json() == {"settings": settings_body}


@pytest.mark.asyncio
async def test_e2e_usage_stats_for_class_and_student(e2e_client: AsyncClient) -> None:
    teacher_headers, _, student_headers = await _register_class(e2e_client)
    conversation = await _start_conversation(e2e_client, student_headers)
    await e2e_client.post(
        "/api/ai/chat",
        json={"conversation_id": conversation["id"], "message": "Is it 3?"},
        headers=student_headers,
    )

    class_usage = await e2e_client.get(
        "/api/admin/usage-stats", params={"days": 7}, headers=teacher_headers
    )
    assert class_usage.status_code == 200
    points = class_usage.json()["data"]
    assert len(points) == 8
    assert sum(p["count"] for p in points) == 1

    hourly = await e2e_client.get(
        "/api/student/usage-stats", params={"days": 1}, headers=student_headers
    )
    assert len(hourly.json()["data"]) == 25
    assert sum(p["count"] for p in hourly.json()["data"]) == 1

    out_of_range = await e2e_client.get(
        "/api/admin/usage-stats", params={"days": 0}, headers=teacher_headers
    )
    assert out_of_range.status_code == 400


@pytest.mark.asyncio
async def test_e2e_daily_insights(e2e_client: AsyncClient, llm: MockLLMProvider) -> None:
    teacher_headers, _, student_headers = await _register_class(e2e_client)
    conversation = await _start_conversation(e2e_client, student_headers)
    await e2e_client.post(
        "/api/ai/chat",
        json={"conversation_id": conversation["id"], "message": "How do fractions work?"},
        headers=student_headers,
    )
    llm.replies = [
        json.dumps(
            {
                "summary": "One student asked about fractions.",
                "strugglingTopics": ["fractions"],
                "teachingRecommendations": ["Use fraction strips"],
                "commonMisconceptions": [],
                "engagementLevel": "low",
            }
        )
    ]

    response = await e2e_client.get("/api/admin/daily-insights", headers=teacher_headers)

    assert response.status_code == 200
    insights = response.json()["insights"]
    assert len(insights) == 1
    assert insights[0]["total_questions"] == 1
    assert insights[0]["summary"] == "One student asked about fractions."
    assert insights[0]["top_topics"] == [{"topic": "fractions", "count": 1}]
    assert llm.calls[-1]["json_mode"] is True


@pytest.mark.asyncio
async def test_e2e_teaching_tools(e2e_client: AsyncClient, llm: MockLLMProvider) -> None:
    teacher_headers, _, _ = await _register_class(e2e_client)
    llm.replies = ['Sure! {"title": "Fractions 101", "duration": "45 minutes"}']

    plan = await e2e_client.post(
        "/api/admin/class-planner",
        json={"subject": "Maths", "topic": "Fractions", "grade_level": "5"},
        headers=teacher_headers,
    )
    assert plan.status_code == 200
    assert plan.json() == {"lesson_plan": {"title": "Fractions 101", "duration": "45 minutes"}}
    assert "Topic: Fractions" in llm.calls[-1]["messages"][0]["content"]

    llm.replies = ["not json at all"]
    rubric = await e2e_client.post(
        "/api/admin/rubric-builder",
        json={
            "assignment_title": "Essay",
            "assignment_description": "Persuasive essay",
            "number_of_levels": 3,
        },
        headers=teacher_headers,
    )
    assert rubric.status_code == 502
    assert rubric.json()["detail"] == "Failed to generate valid rubric"


@pytest.mark.asyncio
async def test_e2e_announcements_flow(e2e_client: AsyncClient) -> None:
    teacher_headers, class_code, student_headers = await _register_class(e2e_client)
    outsider = await _register_user(
        e2e_client, email="out@example.com", username="outsider", class_code="CLS-OTHER1"
    )
    outsider_headers = _auth_headers(outsider["access_token"])

    forbidden = await e2e_client.post(
        "/api/announcements",
        json={"subject": "Hi", "content": "Student post"},
        headers=student_headers,
    )
    assert forbidden.status_code == 403

    created = await e2e_client.post(
        "/api/announcements",
        json={"subject": "Quiz Friday", "content": "Revise chapter 3."},
        headers=teacher_headers,
    )
    assert created.status_code == 201
    announcement = created.json()
    assert announcement["class_code"] == class_code
    assert announcement["teacher"]["username"] == "teacher"

    feed = await e2e_client.get("/api/announcements", headers=student_headers)
    assert [a["id"] for a in feed.json()] == [announcement["id"]]
    assert (await e2e_client.get("/api/announcements", headers=outsider_headers)).json() == []

    reply = await e2e_client.post(
        f"/api/announcements/{announcement['id']}/responses",
        json={"content": "Which sections?"},
        headers=student_headers,
    )
    assert reply.status_code == 201
    assert reply.json()["sender"]["username"] == "student"

    responses = await e2e_client.get(
        f"/api/announcements/{announcement['id']}/responses", headers=teacher_headers
    )
    assert [r["content"] for r in responses.json()] == ["Which sections?"]

    blocked = await e2e_client.get(
        f"/api/announcements/{announcement['id']}/responses", headers=outsider_headers
    )
    assert blocked.status_code == 403

    missing = await e2e_client.get(
        f"/api/announcements/{uuid.uuid4()}/responses", headers=student_headers
    )
    assert missing.status_code == 404
