"""Tests for finance transactions and aggregation."""

from __future__ import annotations

from datetime import datetime

import pytest

from daybook.errors import ValidationFailed
from daybook.infra.repositories.common import MAX_PAGE, PageRequest
from daybook.services import finance as finance_service

MAY = {"startDate": "2024-05-01", "endDate": "2024-05-31"}


def _add(client, headers, **overrides):
    payload = {"type": "expense", "amount": 10, "category": "Food", "date": "2024-05-10T12:00:00Z"}
    payload.update(overrides)
    return client.post("/api/finance", json=payload, headers=headers)


# =============================================================================
# Pure helpers
# =============================================================================


def test_resolve_category_requires_label_for_other():
    with pytest.raises(ValidationFailed, match='Please specify a name for "Other"'):
        finance_service.resolve_category("expense", "Other", "   ")

    assert finance_service.resolve_category("expense", "Other", " Pets ") == "Pets"


def test_resolve_category_drops_label_for_named_categories():
    assert finance_service.resolve_category("income", "Salary", "ignored") is None


def test_resolve_category_checks_enum_for_type():
    with pytest.raises(ValidationFailed, match="Invalid category for income"):
        finance_service.resolve_category("income", "Food", None)


def test_build_breakdown_percentages_sum_to_hundred():
    rows = [("Rent", 1000.0, 1), ("Food", 333.33, 7), ("Bills", 166.67, 2)]

    breakdown = finance_service.build_breakdown(rows)

    assert [item["category"] for item in breakdown] == ["Rent", "Food", "Bills"]
    assert sum(item["percentage"] for item in breakdown) == pytest.approx(100, abs=0.05)
    assert breakdown[0]["percentage"] == pytest.approx(66.67)


def test_build_breakdown_empty():
    assert finance_service.build_breakdown([]) == []


def test_build_trends_pivots_types_per_month():
    rows = [
        (2024, 4, "income", 3000.0),
        (2024, 4, "expense", 1200.0),
        (2024, 5, "expense", 400.0),
    ]

    assert finance_service.build_trends(rows) == [
        {"year": 2024, "month": 4, "income": 3000.0, "expenses": 1200.0, "savings": 1800.0},
        {"year": 2024, "month": 5, "income": 0.0, "expenses": 400.0, "savings": -400.0},
    ]


def test_summarize_totals_savings_rate():
    assert finance_service.summarize_totals({"income": 2000.0, "expense": 500.0}) == {
        "income": 2000.0,
        "expenses": 500.0,
        "savings": 1500.0,
        "savingsRate": 75.0,
    }
    assert finance_service.summarize_totals({"expense": 50.0})["savingsRate"] == 0


# =============================================================================
# HTTP endpoints
# =============================================================================


def test_food_expense_breakdown_example(client, auth_headers):
    created = _add(client, auth_headers, amount=250.00, category="Food")
    assert created.status_code == 201
    assert created.get_json()["message"] == "Expense added successfully"

    response = client.get(
        "/api/finance/breakdown/expenses", query_string=MAY, headers=auth_headers
    )

    assert response.status_code == 200
    breakdown = response.get_json()["data"]["breakdown"]
    assert len(breakdown) == 1
    assert breakdown[0]["category"] == "Food"
    assert breakdown[0]["amount"] == 250
    assert breakdown[0]["percentage"] == 100
    assert breakdown[0]["count"] == 1


def test_other_category_groups_under_custom_label(client, auth_headers):
    _add(client, auth_headers, amount=30, category="Other", customCategory="Pets")
    _add(client, auth_headers, amount=10, category="Other", customCategory="Pets")
    _add(client, auth_headers, amount=60, category="Rent")

    breakdown = client.get(
        "/api/finance/breakdown/expenses", query_string=MAY, headers=auth_headers
    ).get_json()["data"]["breakdown"]

    assert breakdown == [
        {"category": "Rent", "amount": 60.0, "count": 1, "percentage": 60.0},
        {"category": "Pets", "amount": 40.0, "count": 2, "percentage": 40.0},
    ]


def test_income_breakdown(client, auth_headers):
    _add(client, auth_headers, type="income", amount=900, category="Salary")
    _add(client, auth_headers, type="income", amount=100, category="Freelance")

    breakdown = client.get(
        "/api/finance/breakdown/income", query_string=MAY, headers=auth_headers
    ).get_json()["data"]["breakdown"]

    assert [(item["category"], item["percentage"]) for item in breakdown] == [
        ("Salary", 90.0),
        ("Freelance", 10.0),
    ]


def test_custom_category_dropped_for_named_category(client, auth_headers):
    response = _add(client, auth_headers, category="Food", customCategory="Snacks")

    assert response.get_json()["data"]["transaction"]["customCategory"] is None


@pytest.mark.parametrize(
    ("overrides", "fragment"),
    [
        ({"amount": 0}, "Amount must be greater than 0"),
        ({"amount": -5}, "Amount must be greater than 0"),
        ({"amount": 10.123}, "at most 2 decimal places"),
        ({"type": "transfer"}, "Validation Error"),
        ({"category": "Salary"}, "Invalid category for expense"),
        ({"category": "Other"}, 'Please specify a name for "Other"'),
        ({"date": "yesterday"}, "Enter a valid date"),
    ],
)
def test_create_transaction_validation(client, auth_headers, overrides, fragment):
    response = _add(client, auth_headers, **overrides)

    assert response.status_code == 400
    assert fragment in response.get_json()["error"]


def test_summary_for_range(client, auth_headers):
    _add(client, auth_headers, type="income", amount=2000, category="Salary")
    _add(client, auth_headers, amount=500, category="Rent")
    _add(client, auth_headers, amount=999, category="Rent", date="2024-06-02")

    data = client.get("/api/finance/summary", query_string=MAY, headers=auth_headers).get_json()["data"]

    assert data["summary"] == {
        "income": 2000.0,
        "expenses": 500.0,
        "savings": 1500.0,
        "savingsRate": 75.0,
    }
    assert data["period"]["startDate"] == "2024-05-01T00:00:00.000Z"
    assert data["period"]["endDate"] == "2024-05-31T23:59:59.999Z"


def test_list_transactions_filters_and_paginates(client, auth_headers):
    _add(client, auth_headers, amount=10, date="2024-05-01")
    _add(client, auth_headers, amount=20, date="2024-05-02")
    _add(client, auth_headers, type="income", amount=30, category="Salary", date="2024-05-03")

    expenses = client.get(
        "/api/finance?type=expense", headers=auth_headers
    ).get_json()["data"]
    assert [t["amount"] for t in expenses["transactions"]] == [20.0, 10.0]
    assert expenses["pagination"]["total"] == 2

    by_amount = client.get(
        "/api/finance?sort=amount&limit=2", headers=auth_headers
    ).get_json()["data"]
    assert [t["amount"] for t in by_amount["transactions"]] == [10.0, 20.0]
    assert by_amount["pagination"]["pages"] == 2


def test_update_transaction(client, auth_headers):
    txn = _add(client, auth_headers, amount=10).get_json()["data"]["transaction"]

    response = client.put(
        f"/api/finance/{txn['id']}",
        json={"amount": 12.5, "category": "Other", "customCategory": "Gifts", "notes": " bday "},
        headers=auth_headers,
    )

    assert response.status_code == 200
    updated = response.get_json()["data"]["transaction"]
    assert updated["amount"] == 12.5
    assert updated["category"] == "Other"
    assert updated["customCategory"] == "Gifts"
    assert updated["notes"] == "bday"
    assert updated["type"] == "expense"

    back = client.put(f"/api/finance/{txn['id']}", json={"category": "Food"}, headers=auth_headers)
    assert back.get_json()["data"]["transaction"]["customCategory"] is None


def test_update_transaction_validates(client, auth_headers):
    txn = _add(client, auth_headers).get_json()["data"]["transaction"]

    bad_category = client.put(f"/api/finance/{txn['id']}", json={"category": "Salary"}, headers=auth_headers)
    bad_amount = client.put(f"/api/finance/{txn['id']}", json={"amount": -1}, headers=auth_headers)

    assert bad_category.status_code == 400
    assert bad_amount.status_code == 400


def test_transaction_ownership(client, auth_headers, other_headers):
    txn = _add(client, auth_headers).get_json()["data"]["transaction"]

    forbidden = client.delete(f"/api/finance/{txn['id']}", headers=other_headers)
    assert forbidden.status_code == 403
    assert forbidden.get_json()["error"] == "Access denied. Not your transaction."

    deleted = client.delete(f"/api/finance/{txn['id']}", headers=auth_headers)
    assert deleted.status_code == 200
    missing = client.delete(f"/api/finance/{txn['id']}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "Transaction not found"


def test_trends_service(session_factory, user):
    for when, txn_type, category, amount in [
        (datetime(2024, 1, 15), "income", "Salary", 1000.0),
        (datetime(2024, 3, 3), "income", "Salary", 1000.0),
        (datetime(2024, 3, 9), "expense", "Food", 250.0),
        (datetime(2024, 4, 1), "expense", "Rent", 800.0),
    ]:
        finance_service.create_transaction(
            user.id,
            txn_type=txn_type,
            amount=amount,
            category=category,
            date=when,
            session_factory=session_factory,
        )

    trends = finance_service.monthly_trends(
        user.id, months=2, session_factory=session_factory, now=datetime(2024, 4, 20)
    )

    assert trends == [
        {"year": 2024, "month": 3, "income": 1000.0, "expenses": 250.0, "savings": 750.0},
        {"year": 2024, "month": 4, "income": 0.0, "expenses": 800.0, "savings": -800.0},
    ]


def test_financial_stats_service(session_factory, user):
    now = datetime(2024, 4, 20)
    finance_service.create_transaction(
        user.id, txn_type="income", amount=3000.0, category="Salary",
        date=datetime(2024, 3, 1), session_factory=session_factory,
    )
    finance_service.create_transaction(
        user.id, txn_type="expense", amount=1000.0, category="Rent",
        date=datetime(2024, 4, 2), session_factory=session_factory,
    )

    stats = finance_service.financial_stats(
        user.id, months=6, session_factory=session_factory, now=now
    )

    assert stats["currentMonth"]["summary"]["expenses"] == 1000.0
    assert stats["currentMonth"]["expenseBreakdown"][0]["category"] == "Rent"
    assert stats["currentMonth"]["incomeBreakdown"] == []
    assert stats["averages"] == {"monthlyIncome": 1500, "monthlyExpenses": 500, "monthlySavings": 1000}
    assert stats["metadata"]["totalTransactions"] == 2
    assert "Education" in stats["metadata"]["categories"]["expenses"]


def test_trends_and_stats_endpoints(client, auth_headers):
    _add(client, auth_headers, date=None)

    trends = client.get("/api/finance/trends?months=3", headers=auth_headers).get_json()["data"]
    stats = client.get("/api/finance/stats", headers=auth_headers).get_json()["data"]

    assert trends["months"] == 3
    assert len(trends["trends"]) == 1
    assert trends["trends"][0]["expenses"] == 10.0
    assert set(stats) == {"trends", "currentMonth", "averages", "metadata"}
    assert stats["metadata"]["months"] == 6


def test_trend_lookback_is_capped(client, auth_headers):
    _add(client, auth_headers, date=None)

    trends = client.get("/api/finance/trends?months=30000", headers=auth_headers)
    stats = client.get("/api/finance/stats?months=30000", headers=auth_headers)

    assert trends.status_code == 200
    assert trends.get_json()["data"]["months"] == finance_service.MAX_TREND_MONTHS
    assert len(trends.get_json()["data"]["trends"]) == 1
    assert stats.status_code == 200
    assert stats.get_json()["data"]["metadata"]["months"] == finance_service.MAX_TREND_MONTHS


def test_huge_page_number_returns_empty_page(client, auth_headers):
    _add(client, auth_headers)

    response = client.get(f"/api/finance?page={10**18}", headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["transactions"] == []
    assert data["pagination"]["page"] == MAX_PAGE
    assert data["pagination"]["total"] == 1


@pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN"])
def test_non_finite_amounts_are_rejected(client, auth_headers, literal):
    headers = {**auth_headers, "Content-Type": "application/json"}
    created = client.post(
        "/api/finance",
        data=f'{{"type": "expense", "amount": {literal}, "category": "Food"}}',
        headers=headers,
    )
    txn = _add(client, auth_headers).get_json()["data"]["transaction"]
    updated = client.put(f"/api/finance/{txn['id']}", data=f'{{"amount": {literal}}}', headers=headers)

    assert created.status_code == 400
    assert created.get_json()["error"].startswith("Validation Error: amount")
    assert updated.status_code == 400
    listed = client.get("/api/finance", headers=auth_headers).get_json()["data"]["transactions"]
    assert [t["amount"] for t in listed] == [10.0]


def test_page_request_caps_page_and_limit():
    request = PageRequest.from_args({"page": str(10**18), "limit": "500"})

    assert request.page == MAX_PAGE
    assert request.limit == 100
    assert request.offset == (MAX_PAGE - 1) * 100
