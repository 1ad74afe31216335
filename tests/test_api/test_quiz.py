from unittest.mock import patch
import json

import pytest

from nexus.domain.errors import AIClientError


def test_generate_quiz_success(client, quiz_payload):
    with patch('nexus.services.quiz_service.ai_client') as mock_ai_client:
        mock_ai_client.generate_json.return_value = json.dumps(quiz_payload)

        response = client.post('/api/generateQuiz', json={"text": "Support handbook text", "numQuestions": 2})

        assert response.status_code == 200
        assert response.json["title"] == "Customer Support Basics"
        assert len(response.json["questions"]) == 2
        assert response.json["questions"][0]["correctAnswer"] == "Greet the customer"
        assert "explanation" not in response.json["questions"][1]


def test_generate_quiz_repairs_correct_answer(client, quiz_payload):
    quiz_payload["questions"][1]["correctAnswer"] = "Sometimes"
    with patch('nexus.services.quiz_service.ai_client') as mock_ai_client:
        mock_ai_client.generate_json.return_value = json.dumps(quiz_payload)

        response = client.post('/api/generateQuiz', json={"text": "Support handbook text"})

        assert response.status_code == 200
        for question in response.json["questions"]:
            assert question["correctAnswer"] in question["options"]
        assert response.json["questions"][1]["correctAnswer"] == "Never"


def test_generate_quiz_missing_title_returns_500(client, quiz_payload):
    del quiz_payload["title"]
    with patch('nexus.services.quiz_service.ai_client') as mock_ai_client:
        mock_ai_client.generate_json.return_value = json.dumps(quiz_payload)

        response = client.post('/api/generateQuiz', json={"text": "Support handbook text"})

        assert response.status_code == 500
        assert response.json == {"error": "The AI generated an invalid quiz format. Please try again."}


def test_generate_quiz_invalid_question_returns_500(client, quiz_payload):
    del quiz_payload["questions"][0]["options"]
    with patch('nexus.services.quiz_service.ai_client') as mock_ai_client:
        mock_ai_client.generate_json.return_value = json.dumps(quiz_payload)

        response = client.post('/api/generateQuiz', json={"text": "Support handbook text"})

        assert response.status_code == 500
        assert response.json == {"error": "The AI generated an invalid question format. Please try again."}


def test_generate_quiz_unparseable_output_returns_500(client):
    with patch('nexus.services.quiz_service.ai_client') as mock_ai_client:
        mock_ai_client.generate_json.return_value = "Sure! Here is your quiz:"

        response = client.post('/api/generateQuiz', json={"text": "Support handbook text"})

        assert response.status_code == 500
        assert 'error' in response.json


def test_generate_quiz_upstream_error_returns_500(client):
    with patch('nexus.services.quiz_service.ai_client') as mock_ai_client:
        mock_ai_client.generate_json.side_effect = AIClientError("The AI service failed to process the request: 503")

        response = client.post('/api/generateQuiz', json={"text": "Support handbook text"})

        assert response.status_code == 500
        assert "503" in response.json["error"]


@pytest.mark.parametrize("body", [{}, {"text": ""}, {"text": 42}])
def test_generate_quiz_requires_text(client, body):
    response = client.post('/api/generateQuiz', json=body)
    assert response.status_code == 400
    assert response.json == {"error": "Text is required"}


def test_generate_quiz_clamps_question_count_and_overrides_title(client, quiz_payload):
    with patch('nexus.services.quiz_service.ai_client') as mock_ai_client:
        mock_ai_client.generate_json.return_value = json.dumps(quiz_payload)

        response = client.post('/api/generateQuiz', json={
            "text": "Support handbook text",
            "numQuestions": 99,
            "quizType": "true-false",
            "language": "Français",
            "title": "Onboarding check",
        })

        assert response.status_code == 200
        assert response.json["title"] == "Onboarding check"
        prompt = mock_ai_client.generate_json.call_args[0][0]
        assert "exactly 20 questions" in prompt
        assert '"True" and "False"' in prompt
        assert "Français" in prompt
        assert "Support handbook text" in prompt


def test_generate_quiz_rejects_unknown_quiz_type(client):
    response = client.post('/api/generateQuiz', json={"text": "Support handbook text", "quizType": "essay"})
    assert response.status_code == 400
    assert "quizType" in response.json["error"]


@pytest.mark.parametrize("requested,expected", [(0, 1), (50, 20), (-3, 1), (7, 7)])
def test_fallback_quiz_clamps_question_count(client, requested, expected):
    response = client.post('/api/fallbackQuiz', json={"numQuestions": requested})

    assert response.status_code == 200
    assert len(response.json["questions"]) == expected


def test_fallback_quiz_defaults_to_five_questions(client):
    response = client.post('/api/fallbackQuiz', json={})

    assert response.status_code == 200
    assert response.json["title"] == "Sample Quiz"
    assert len(response.json["questions"]) == 5
    for question in response.json["questions"]:
        assert question["correctAnswer"] in question["options"]


def test_fallback_quiz_is_deterministic(client):
    first = client.post('/api/fallbackQuiz', json={"numQuestions": 4})
    second = client.post('/api/fallbackQuiz', json={"numQuestions": 4})
    assert first.json == second.json


def test_fallback_quiz_never_calls_ai(client):
    with patch('nexus.services.quiz_service.ai_client') as mock_ai_client:
        client.post('/api/fallbackQuiz', json={"numQuestions": 3})
        mock_ai_client.generate_json.assert_not_called()


def test_fallback_quiz_rejects_non_numeric_count(client):
    response = client.post('/api/fallbackQuiz', json={"numQuestions": "many"})
    assert response.status_code == 400
    assert 'error' in response.json
