"""
Unit tests for the example monitored function.
"""

ERRORS = "function_errors"
RUNS = "function_runs"


def test_success_records_a_run(client, fake_store):
    response = client.post("/jobs/test-alert", headers={"X-Business-Day": "2024-01-05"})

    assert response.status_code == 200
    assert response.json() == {"message": "Alert processed", "business_day": "2024-01-05"}
    (run,) = fake_store.rows(RUNS)
    assert run["function_name"] == "test-alert"
    assert run["business_day"] == "2024-01-05"
    assert fake_store.rows(ERRORS) == []


def test_failure_files_a_pending_error(client, fake_store):
    response = client.get("/jobs/test-alert?fail=1&business_day=2024-01-07")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error", "function_name": "test-alert"}
    (error,) = fake_store.rows(ERRORS)
    assert error["function_name"] == "test-alert"
    assert error["business_day"] == "2024-01-07"
    assert error["status"] == "pending"
    assert error["project_name"] == "Test Project"


def test_filed_error_is_announced_by_next_batch(client, fake_store, fake_chat):
    client.post("/jobs/test-alert?fail=1", headers={"X-Business-Day": "2024-01-05"})

    response = client.post("/monitor-errors")

    assert response.json() == {"reported": [{"date": "2024-01-05", "count": 1}]}
    assert fake_store.rows(ERRORS)[0]["status"] == "notified"
    buttons = fake_chat.sent[0].components[0]["components"]
    assert buttons[0]["custom_id"] == "retry_all:2024-01-05"
