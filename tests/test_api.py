"""
Integration tests for API endpoints
"""
import pytest
from sqlmodel import Session

from quizforge.config import MAX_QUESTIONS
from quizforge.db import engine
from quizforge.services.extraction import VIDEO_PLACEHOLDER
from quizforge.services.repository import create_document


BIOLOGY = (
    "The cell membrane controls what enters and leaves the cell. "
    "Mitochondria release energy from glucose during cellular respiration. "
    "Chloroplasts capture light energy and convert it into chemical energy. "
    "The nucleus stores genetic information in long strands of DNA. "
    "Ribosomes assemble proteins from amino acids inside the cytoplasm. "
    "Enzymes speed up chemical reactions without being used up themselves."
)


@pytest.fixture
def document_id(client):
    with Session(engine) as session:
        return create_document(session, "biology.pdf", 4096, "pdf", BIOLOGY).id


def quiz_request(file_ids, **overrides):
    config = {"title": "Cells", "type": "multiple-choice", "numberOfQuestions": 3, "difficulty": "medium"}
    config.update(overrides)
    return {"config": config, "fileIds": file_ids}


class TestHealthEndpoints:
    def test_health_check(self, client):
        """Test health check endpoint"""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert "status" in data
        assert "timestamp" in data
        assert set(data["checks"]) == {"database", "cache", "ocr"}

    def test_metrics_endpoint(self, client):
        """Test metrics endpoint"""
        response = client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "quiz_generation_requests_total" in response.text


class TestUploadEndpoints:
    def test_upload_video(self, client):
        response = client.post("/api/upload", files=[("files", ("lecture.mp4", b"video-bytes", "video/mp4"))])
        assert response.status_code == 200
        data = response.json()
        assert data["failures"] == []
        assert len(data["files"]) == 1
        stored = data["files"][0]
        assert stored["originalName"] == "lecture.mp4"
        assert stored["type"] == "video"
        assert stored["characters"] == len(VIDEO_PLACEHOLDER)

    def test_partial_failure_keeps_good_files(self, client):
        response = client.post("/api/upload", files=[
            ("files", ("lecture.mp4", b"more-video-bytes", "video/mp4")),
            ("files", ("notes.txt", b"plain text", "text/plain")),
        ])
        assert response.status_code == 200
        data = response.json()
        assert [f["originalName"] for f in data["files"]] == ["lecture.mp4"]
        assert [f["filename"] for f in data["failures"]] == ["notes.txt"]

    def test_all_files_failing(self, client):
        response = client.post("/api/upload", files=[("files", ("notes.txt", b"plain text", "text/plain"))])
        assert response.status_code == 422
        assert response.json()["files"] == []

    def test_no_files(self, client):
        response = client.post("/api/upload")
        assert response.status_code == 400

    def test_get_uploaded_file(self, client):
        uploaded = client.post("/api/upload", files=[("files", ("clip.mp4", b"clip-bytes", "video/mp4"))])
        file_id = uploaded.json()["files"][0]["id"]

        response = client.get(f"/api/files/{file_id}")
        assert response.status_code == 200
        assert response.json()["originalName"] == "clip.mp4"

    def test_unknown_file(self, client):
        response = client.get("/api/files/999999")
        assert response.status_code == 404


class TestQuizEndpoints:
    def test_generate_quiz(self, client, document_id):
        response = client.post("/api/generate-quiz", json=quiz_request([document_id]))
        assert response.status_code == 200
        data = response.json()

        assert data["title"] == "Cells"
        assert data["includeAnswerKey"] is True
        assert 1 <= len(data["questions"]) <= 3
        for question in data["questions"]:
            assert question["type"] == "multiple-choice"
            assert len(question["choices"]) == 4
            assert question["choices"].count(question["correctAnswer"]) == 1
            assert question["sourceFileId"] in (document_id, None)

    def test_string_file_ids_are_accepted(self, client, document_id):
        response = client.post("/api/generate-quiz", json=quiz_request([str(document_id), "abc", 999999]))
        assert response.status_code == 200

    def test_stored_quiz_can_be_fetched(self, client, document_id):
        created = client.post("/api/generate-quiz", json=quiz_request([document_id], type="true-false")).json()

        response = client.get(f"/api/quizzes/{created['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["publicId"] == created["publicId"]
        assert data["numberOfQuestions"] == 3
        assert [q["id"] for q in data["questions"]] == [q["id"] for q in created["questions"]]

    def test_answer_key_hidden_when_disabled(self, client, document_id):
        response = client.post(
            "/api/generate-quiz",
            json=quiz_request([document_id], type="short-answer", includeAnswerKey=False),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["includeAnswerKey"] is False
        assert all(q["correctAnswer"] is None for q in data["questions"])

    def test_missing_config(self, client, document_id):
        response = client.post("/api/generate-quiz", json={"fileIds": [document_id]})
        assert response.status_code == 400

    def test_missing_file_ids(self, client):
        response = client.post("/api/generate-quiz", json={"config": {"type": "mixed"}, "fileIds": []})
        assert response.status_code == 400

    def test_invalid_config(self, client, document_id):
        response = client.post("/api/generate-quiz", json=quiz_request([document_id], difficulty="impossible"))
        assert response.status_code == 400

    def test_non_positive_count(self, client, document_id):
        response = client.post("/api/generate-quiz", json=quiz_request([document_id], numberOfQuestions=0))
        assert response.status_code == 400

    def test_count_above_cap(self, client, document_id):
        response = client.post("/api/generate-quiz", json=quiz_request([document_id], numberOfQuestions=MAX_QUESTIONS + 1))
        assert response.status_code == 400
        assert str(MAX_QUESTIONS) in response.json()["detail"]

    def test_unknown_files(self, client):
        response = client.post("/api/generate-quiz", json=quiz_request([999999]))
        assert response.status_code == 404

    def test_unknown_quiz(self, client):
        response = client.get("/api/quizzes/999999")
        assert response.status_code == 404
