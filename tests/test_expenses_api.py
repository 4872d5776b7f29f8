from decimal import Decimal

import pytest

from app.models import ExpenseCategory, OperationalExpense


@pytest.fixture
def make_expense(session):
    def _make(category: ExpenseCategory, *, amount: str, quantity: int = 1, year: int = 2026,
              month: int = 3) -> OperationalExpense:
        expense = OperationalExpense(
            user_id=category.user_id,
            expense_category_id=category.id,
            quantity=quantity,
            unit="month",
            amount=Decimal(amount),
            total_amount=Decimal(amount) * quantity,
            year=year,
            month=month,
        )
        session.add(expense)
        session.commit()
        session.refresh(expense)
        return expense

    return _make


class TestExpenseCategories:
    def test_create(self, client, user, headers):
        response = client.post(
            "/api/expense-categories",
            headers=headers,
            json={"name": "Staff", "is_salary": True},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["is_salary"] is True
        assert data["user_id"] == user.id

    def test_list_with_totals(self, client, user, headers, make_category, make_expense):
        rent = make_category(user, name="Rent")
        staff = make_category(user, name="Staff", is_salary=True)
        make_expense(rent, amount="500000")
        make_expense(staff, amount="2000000", quantity=3)

        body = client.get("/api/expense-categories", headers=headers).json()

        by_name = {category["name"]: category for category in body["data"]}
        assert by_name["Rent"]["total_amount"] == "500000.00"
        assert by_name["Rent"]["total_employees"] is None
        assert by_name["Staff"]["total_amount"] == "6000000.00"
        assert by_name["Staff"]["total_employees"] == 1
        assert body["summary"] == {
            "total_salary": "6000000.00",
            "total_operational": "500000.00",
            "grand_total": "6500000.00",
        }

    def test_category_without_expenses(self, client, user, headers, make_category):
        category = make_category(user)

        data = client.get(f"/api/expense-categories/{category.id}", headers=headers).json()["data"]

        assert data["total_amount"] == "0.00"

    def test_foreign_category(self, client, headers, other_user, make_category):
        category = make_category(other_user)

        assert client.get(f"/api/expense-categories/{category.id}", headers=headers).status_code == 404

    def test_delete_blocked_by_expenses(self, client, session, user, headers, make_category, make_expense):
        category = make_category(user)
        make_expense(category, amount="10")

        response = client.delete(f"/api/expense-categories/{category.id}", headers=headers)

        assert response.status_code == 422
        assert session.query(ExpenseCategory).count() == 1

    def test_delete_unused(self, client, session, user, headers, make_category):
        category = make_category(user)

        assert client.delete(f"/api/expense-categories/{category.id}", headers=headers).status_code == 200
        assert session.query(ExpenseCategory).count() == 0


class TestOperationalExpenses:
    def test_create_computes_total(self, client, user, headers, make_category):
        category = make_category(user)

        response = client.post(
            "/api/operational-expenses",
            headers=headers,
            json={"expense_category_id": category.id, "quantity": 2, "unit": "month", "amount": 150000.5,
                  "year": 2026, "month": 4},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["total_amount"] == 300001.0
        assert (data["year"], data["month"]) == (2026, 4)

    def test_one_expense_per_category_and_month(self, client, user, headers, make_category, make_expense):
        category = make_category(user)
        make_expense(category, amount="10", year=2026, month=4)

        response = client.post(
            "/api/operational-expenses",
            headers=headers,
            json={"expense_category_id": category.id, "quantity": 1, "unit": "month", "amount": 20,
                  "year": 2026, "month": 4},
        )

        assert response.status_code == 422
        assert "expense_category_id" in response.json()["errors"]

    def test_foreign_category_is_not_found(self, client, headers, other_user, make_category):
        category = make_category(other_user)

        response = client.post(
            "/api/operational-expenses",
            headers=headers,
            json={"expense_category_id": category.id, "quantity": 1, "unit": "month", "amount": 20},
        )

        assert response.status_code == 404

    def test_month_out_of_range(self, client, user, headers, make_category):
        category = make_category(user)

        response = client.post(
            "/api/operational-expenses",
            headers=headers,
            json={"expense_category_id": category.id, "quantity": 1, "unit": "month", "amount": 20,
                  "year": 2026, "month": 13},
        )

        assert response.status_code == 422
        assert "month" in response.json()["errors"]

    def test_list_for_period(self, client, user, headers, make_category, make_expense):
        rent = make_category(user, name="Rent")
        staff = make_category(user, name="Staff", is_salary=True)
        make_expense(rent, amount="300", year=2026, month=3)
        make_expense(staff, amount="1000", quantity=2, year=2026, month=3)
        make_expense(rent, amount="999", year=2025, month=12)

        body = client.get("/api/operational-expenses", headers=headers, params={"year": 2026, "month": 3}).json()

        assert len(body["data"]) == 2
        summary = body["summary"]
        assert summary["total_salary"] == 2000.0
        assert summary["total_operational"] == 300.0
        assert summary["grand_total"] == 2300.0
        assert summary["total_employees"] == 1
        assert [detail["category_name"] for detail in summary["details"]] == ["Rent", "Staff"]
        assert body["filters"]["available_years"] == [2026, 2025]
        assert body["filters"]["available_months"] == [3]

    def test_update_recomputes_total(self, client, user, headers, make_category, make_expense):
        expense = make_expense(make_category(user), amount="100", quantity=2)

        response = client.put(f"/api/operational-expenses/{expense.id}", headers=headers, json={"quantity": 5})

        assert response.json()["data"]["total_amount"] == 500.0

    def test_delete(self, client, session, user, headers, make_category, make_expense):
        expense = make_expense(make_category(user), amount="100")

        assert client.delete(f"/api/operational-expenses/{expense.id}", headers=headers).status_code == 200
        assert session.query(OperationalExpense).count() == 0
