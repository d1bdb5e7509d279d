import pytest

from emi_calc.engine import compute_emi
from emi_calc_web.app import app, parse_form_list

HOME_LOAN = {"principal": "2500000", "rate": "8.5", "tenure": "240", "loan_type": "home"}


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_index_renders_form(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"EMI Calculator" in response.data


def test_index_post_truncates_long_schedule(client):
    response = client.post("/", data=HOME_LOAN)
    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert "₹21,695" in body
    assert "120 more rows not shown." in body


def test_index_post_full_schedule(client):
    response = client.post("/", data={**HOME_LOAN, "show_full_schedule": "1"})
    body = response.get_data(as_text=True)
    assert "more rows not shown" not in body
    assert "<td>240</td>" in body


def test_index_post_preview_stops_at_row_limit(client):
    body = client.post("/", data=HOME_LOAN).get_data(as_text=True)
    assert "<td>120</td>" in body
    assert "<td>121</td>" not in body


def test_index_post_reports_invalid_input(client):
    response = client.post("/", data={**HOME_LOAN, "principal": "abc"})
    assert response.status_code == 200
    assert "Invalid principal" in response.get_data(as_text=True)


def test_api_loan(client):
    response = client.post(
        "/api/loan",
        json={"principal": 2500000, "rate": 8.5, "tenure": 240, "loan_type": "home"},
    )
    assert response.status_code == 200
    data = response.get_json()
    assert len(data["schedule"]) == 240
    assert data["schedule"][-1]["balance"] == 0
    assert data["summary"]["emi"] == float(compute_emi(2_500_000, 8.5, 240))
    assert data["summary"]["tax_benefit"] == 105000.0


def test_api_loan_with_prepayments(client):
    response = client.post(
        "/api/loan",
        json={"principal": "25L", "rate": "8.5", "tenure": 240, "prepayments": ["12:500000:reduce-tenure"]},
    )
    assert response.status_code == 200
    data = response.get_json()
    assert len(data["schedule"]) < 240
    assert data["summary"]["total_prepayment"] == 500000.0


@pytest.mark.parametrize(
    "payload",
    [
        {"principal": "nan", "rate": 8.5, "tenure": 240},
        {"principal": 2500000, "rate": "high", "tenure": 240},
        {"principal": 2500000, "rate": 8.5, "tenure": 12.5},
        {"principal": 2500000, "rate": 8.5, "tenure": 240, "prepayments": ["soon"]},
        {"principal": 2500000, "rate": 8.5, "tenure": 240, "prepayments": [{"month": 2, "amount": 1000}]},
        {"principal": 2500000, "rate": 8.5, "tenure": 240, "prepayments": "12:1L"},
        {"principal": 2500000, "rate": 8.5, "tenure": 240, "prepayments": 5},
    ],
)
def test_api_loan_rejects_bad_input(client, payload):
    response = client.post("/api/loan", json=payload)
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_api_solve_rejects_fractional_tenure(client):
    response = client.post(
        "/api/solve",
        json={"principal": "1000000", "rate": 10, "tenure": 120, "change": "tenure", "value": 12.5, "hold": "rate"},
    )
    assert response.status_code == 400


def test_app_keeps_no_session_state():
    assert app.secret_key is None


def test_api_solve(client):
    response = client.post(
        "/api/solve",
        json={"principal": "1000000", "rate": 10, "tenure": 120, "change": "rate", "value": 12, "hold": "tenure"},
    )
    assert response.status_code == 200
    data = response.get_json()
    assert data["emi"] == float(compute_emi(1_000_000, 12, 120))
    assert data["tenure"] == 120


def test_api_solve_rejects_same_variable(client):
    response = client.post(
        "/api/solve",
        json={"principal": "1000000", "rate": 10, "tenure": 120, "change": "rate", "value": 12, "hold": "rate"},
    )
    assert response.status_code == 400


def test_export_csv(client):
    response = client.post("/export/csv", data=HOME_LOAN)
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    lines = response.get_data(as_text=True).splitlines()
    assert len(lines) == 241


def test_export_pdf(client):
    response = client.post("/export/pdf", data=HOME_LOAN)
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.data.startswith(b"%PDF")


def test_export_json(client):
    response = client.post("/export/json", data=HOME_LOAN)
    assert response.status_code == 200
    assert response.get_json()["summary"]["payments"] == 240


def test_export_unknown_format(client):
    response = client.post("/export/xml", data=HOME_LOAN)
    assert response.status_code == 404


def test_export_invalid_input(client):
    response = client.post("/export/csv", data={**HOME_LOAN, "rate": "x"})
    assert response.status_code == 400


def test_parse_form_list():
    assert parse_form_list("12:1L\n 24:2L ,\n") == ["12:1L", "24:2L"]
    assert parse_form_list("") == []
