from unittest.mock import Mock, patch

import pytest
import requests

from fitbuddy.schemas.enums import ChatContext
from fitbuddy.utils import coach
from fitbuddy.utils.coach import (
    BASE_PROMPT,
    CONTEXT_PROMPTS,
    EMPTY_REPLY,
    FALLBACK_RESPONSES,
    CoachServiceError,
    build_gemini_payload,
    build_system_prompt,
    detect_context,
    generate_coach_reply,
    get_fallback_response,
)
from fitbuddy.utils.security import create_access_token

GEMINI_OK = {"candidates": [{"content": {"parts": [{"text": "Let's crush leg day!"}]}}]}


def gemini_response(status_code=200, body=GEMINI_OK):
    resp = Mock()
    resp.status_code = status_code
    resp.json.return_value = body
    resp.text = str(body)
    return resp


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(coach, "GEMINI_API_KEY", "test-key")


# ---------------- CONTEXT ----------------
@pytest.mark.parametrize("message,expected", [
    ("Give me a leg workout", ChatContext.WORKOUT),
    ("How should I TRAIN for a 5k?", ChatContext.WORKOUT),
    ("What food should I eat after the gym?", ChatContext.DIET),
    ("I'm losing motivation", ChatContext.MOTIVATION),
    ("Please inspire me", ChatContext.MOTIVATION),
    ("How much sleep do I need?", ChatContext.GENERAL),
    # workout keywords are checked first
    ("Should I eat before my workout?", ChatContext.WORKOUT),
])
def test_detect_context(message, expected):
    assert detect_context(message) == expected


def test_fallbacks_by_context():
    assert get_fallback_response("workout") == FALLBACK_RESPONSES[ChatContext.WORKOUT]
    assert "push-ups" in get_fallback_response(ChatContext.WORKOUT)
    assert get_fallback_response("nonsense") == FALLBACK_RESPONSES[ChatContext.GENERAL]


# ---------------- PROMPT ----------------
def test_prompt_without_profile():
    prompt = build_system_prompt("diet")
    assert prompt.startswith(BASE_PROMPT)
    assert prompt.endswith(CONTEXT_PROMPTS[ChatContext.DIET])
    assert "USER PROFILE" not in prompt


def test_prompt_with_profile():
    prompt = build_system_prompt("workout", {
        "name": "Sam",
        "age": 30,
        "weight": 70,
        "height": 175,
        "goals": ["muscle_gain", "endurance"],
        "equipment": [],
    })
    assert "- Name: Sam" in prompt
    assert "- Weight: 70 kg" in prompt
    assert "- Height: 175 cm" in prompt
    assert "- Goals: muscle_gain, endurance" in prompt
    assert "- Available Equipment: Not specified" in prompt
    assert "- Dietary Restrictions: None specified" in prompt


def test_payload_maps_history_roles():
    history = [
        {"message": "hi coach", "is_user": True},
        {"message": "hello!", "is_user": False},
    ]
    payload = build_gemini_payload("system", history, "what now?")
    assert [c["role"] for c in payload["contents"]] == ["user", "model", "user"]
    assert payload["contents"][-1]["parts"][0]["text"] == "what now?"
    assert payload["systemInstruction"]["parts"][0]["text"] == "system"
    assert payload["generationConfig"]["maxOutputTokens"] == 1000


# ---------------- GEMINI CALL ----------------
def test_reply_from_gemini(api_key):
    with patch("fitbuddy.utils.coach.requests.post", return_value=gemini_response()) as post:
        reply = generate_coach_reply("leg day?", "workout")
    assert reply == "Let's crush leg day!"
    assert post.call_args.kwargs["params"] == {"key": "test-key"}
    assert post.call_args.kwargs["json"]["contents"][-1]["parts"][0]["text"] == "leg day?"


def test_empty_candidate_gives_default_reply(api_key):
    with patch("fitbuddy.utils.coach.requests.post", return_value=gemini_response(body={"candidates": []})):
        assert generate_coach_reply("hello", "general") == EMPTY_REPLY


def test_http_error_raises(api_key):
    with patch("fitbuddy.utils.coach.requests.post", return_value=gemini_response(status_code=500, body={})):
        with pytest.raises(CoachServiceError):
            generate_coach_reply("hello", "general")


def test_network_error_raises(api_key):
    with patch("fitbuddy.utils.coach.requests.post", side_effect=requests.ConnectionError("down")):
        with pytest.raises(CoachServiceError):
            generate_coach_reply("hello", "general")


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.setattr(coach, "GEMINI_API_KEY", None)
    with patch("fitbuddy.utils.coach.requests.post") as post:
        with pytest.raises(CoachServiceError):
            generate_coach_reply("hello", "general")
    post.assert_not_called()


# ---------------- ENDPOINTS ----------------
def test_coach_endpoint_requires_message(client, headers):
    r = client.post("/coach/chat", json={"userId": "user-1"}, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Message and userId are required"}


def test_coach_endpoint_requires_token(client):
    r = client.post("/coach/chat", json={"message": "hi", "userId": "user-1"})
    assert r.status_code == 401


def test_coach_endpoint_reply(client, headers, api_key):
    with patch("fitbuddy.utils.coach.requests.post", return_value=gemini_response()):
        r = client.post(
            "/coach/chat",
            json={"message": "leg day?", "userId": "user-1", "context": "workout"},
            headers=headers,
        )
    assert r.status_code == 200
    assert r.json() == {"message": "Let's crush leg day!", "context": "workout", "hasProfile": False}


def test_coach_endpoint_falls_back(client, headers, api_key):
    with patch("fitbuddy.utils.coach.requests.post", side_effect=requests.Timeout("slow")):
        r = client.post(
            "/coach/chat",
            json={"message": "what to eat?", "userId": "user-1", "context": "diet"},
            headers=headers,
        )
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == FALLBACK_RESPONSES[ChatContext.DIET]
    assert body["error"] == "AI service temporarily unavailable"


def test_chat_exchange_is_stored(client, headers, api_key):
    with patch("fitbuddy.utils.coach.requests.post", return_value=gemini_response()) as post:
        r = client.post("/chat/messages", json={"message": "Plan my workout"}, headers=headers)
    assert r.status_code == 201
    body = r.json()
    assert body["fallback"] is False
    assert body["user_message"]["context"] == "workout"
    assert body["reply"]["message"] == "Let's crush leg day!"
    assert body["reply"]["is_user"] is False
    # no earlier history, so only the new message is sent
    assert len(post.call_args.kwargs["json"]["contents"]) == 1

    with patch("fitbuddy.utils.coach.requests.post", return_value=gemini_response()) as post:
        client.post("/chat/messages", json={"message": "And after?"}, headers=headers)
    roles = [c["role"] for c in post.call_args.kwargs["json"]["contents"]]
    assert roles == ["user", "model", "user"]

    history = client.get("/chat/messages", headers=headers).json()
    assert [m["is_user"] for m in history] == [True, False, True, False]

    r = client.delete("/chat/messages", headers=headers)
    assert r.status_code == 200
    assert client.get("/chat/messages", headers=headers).json() == []


def test_chat_stores_fallback_when_coach_fails(client, headers, monkeypatch):
    monkeypatch.setattr(coach, "GEMINI_API_KEY", None)
    r = client.post("/chat/messages", json={"message": "I need motivation"}, headers=headers)
    assert r.status_code == 201
    body = r.json()
    assert body["fallback"] is True
    assert body["reply"]["message"] == FALLBACK_RESPONSES[ChatContext.MOTIVATION]


def test_coach_endpoint_rejects_other_users_id(client, headers, api_key):
    other = {"Authorization": f"Bearer {create_access_token({'sub': 'user-2'})}"}
    client.post("/profile/", json={"name": "Private Name"}, headers=other)

    with patch("fitbuddy.utils.coach.requests.post", return_value=gemini_response()) as post:
        r = client.post("/coach/chat", json={"message": "hi", "userId": "user-2"}, headers=headers)
    assert r.status_code == 403
    post.assert_not_called()

    # the owner can still reach their own coach
    with patch("fitbuddy.utils.coach.requests.post", return_value=gemini_response()) as post:
        r = client.post("/coach/chat", json={"message": "hi", "userId": "user-2"}, headers=other)
    assert r.json()["hasProfile"] is True
    assert "Private Name" in post.call_args.kwargs["json"]["systemInstruction"]["parts"][0]["text"]
