import json

from mfms import create_app
from mfms.extensions import db
from mfms.models import EmailLog, Feedback, FeedbackQuestionAssociation
from mfms.services.errors import BusinessRuleViolation, NotFound


def _payload(device_id=9):
    return json.dumps({
        "feedbackRequest": {
            "feedbackEmployeeId": 7,
            "feedbackMerchantId": 3,
            "feedbackDeviceId": device_id,
            "feedbackRating": 4.0,
            "feedback": "Works fine",
            "feedbackImage1": "s3://feedback/img-1.jpg",
        },
        "questionAnswers": [{"questionId": i, "questionAnswer": f"a{i}"} for i in range(1, 11)],
    })


def test_feedback_submit_from_stdin(app, seed):
    result = app.test_cli_runner().invoke(args=["feedback", "submit", "-"], input=_payload())

    assert result.exit_code == 0, result.output
    out = json.loads(result.output)
    assert out["created"] is True
    assert out["states"][-1] == "DONE"
    assert Feedback.query.count() == 1
    # only the two catalog questions are stored
    assert FeedbackQuestionAssociation.query.count() == 2
    assert EmailLog.query.filter_by(status="sent").count() == 1


def test_feedback_submit_reports_workflow_error(app, seed):
    result = app.test_cli_runner().invoke(args=["feedback", "submit", "-"], input=_payload(device_id=5))

    assert result.exit_code != 0
    assert "BusinessRuleViolation" in result.output
    assert Feedback.query.count() == 0


def test_feedback_submit_rejects_short_answer_list(app, seed):
    payload = json.loads(_payload())
    payload["questionAnswers"] = payload["questionAnswers"][:3]

    result = app.test_cli_runner().invoke(args=["feedback", "submit", "-"], input=json.dumps(payload))

    assert result.exit_code != 0
    assert "expected 10 answers" in result.output


def test_feedback_submit_rejects_bad_json(app, seed):
    result = app.test_cli_runner().invoke(args=["feedback", "submit", "-"], input="{nope")
    assert result.exit_code != 0
    assert "Invalid JSON payload" in result.output


def test_feedback_list_and_answers(app, seed):
    runner = app.test_cli_runner()
    runner.invoke(args=["feedback", "submit", "-"], input=_payload())
    fb = Feedback.query.one()

    listed = runner.invoke(args=["feedback", "list", "--device-id", "9"])
    assert listed.exit_code == 0, listed.output
    assert [item["uuid"] for item in json.loads(listed.output)] == [fb.uuid]

    answers = runner.invoke(args=["feedback", "answers", str(fb.id)])
    assert answers.exit_code == 0, answers.output
    assert json.loads(answers.output) == [
        {"question_id": 1, "question_description": "Is the device easy to use?", "answer": "a1"},
        {"question_id": 2, "question_description": "Does the printer work reliably?", "answer": "a2"},
    ]

    missing = runner.invoke(args=["feedback", "list", "--merchant-id", "99"])
    assert missing.exit_code != 0
    assert "Merchant with ID: 99 is not found" in missing.output


def test_reports_commands(app, seed):
    runner = app.test_cli_runner()
    runner.invoke(args=["feedback", "submit", "-"], input=_payload())

    counts = runner.invoke(args=["reports", "employee-counts"])
    assert json.loads(counts.output) == [
        {"employee_id": 7, "employee_email": "emp7@example.com", "feedback_count": 1}
    ]

    averages = runner.invoke(args=["reports", "device-averages"])
    assert json.loads(averages.output) == [{"device_id": 9, "average_rating": 4.0}]

    per_device = runner.invoke(args=["reports", "device-counts"])
    assert json.loads(per_device.output) == [{"device_id": 9, "feedback_count": 1}]


def test_healthz(app):
    resp = app.test_client().get("/healthz")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_workflow_errors_map_to_json():
    local = create_app()

    @local.get("/boom/missing")
    def missing():
        raise NotFound("Device", 5)

    @local.get("/boom/unassigned")
    def unassigned():
        raise BusinessRuleViolation.device_not_assigned(5, 3)

    client = local.test_client()

    resp = client.get("/boom/missing")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "not_found", "detail": "Device with ID: 5 is not found", "code": 404}

    resp = client.get("/boom/unassigned")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "business_rule"
