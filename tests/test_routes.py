from datetime import date

import pytest

from app.models.commission import CalculatedCommissionModel
from app.services.commission_service import CommissionService
from tests.helpers import seed_period, make_tier, end_to_end_sales, END_TO_END_TIERS, END_TO_END_PARAMETERS


async def seed_end_to_end(session, **kwargs):
    tiers = [make_tier(*tier) for tier in END_TO_END_TIERS]
    return await seed_period(session, end_to_end_sales(), tiers=tiers, parameters=END_TO_END_PARAMETERS, **kwargs)


class TestCalculateRoute:

    async def test_success_envelope(self, client, db_session, auth_headers):
        period_id = await seed_end_to_end(db_session)

        response = await client.post("/commission/calculate", json={"period_id": period_id}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["code"] == 200
        assert body["success"] is True
        assert body["msg"] == "Success"
        assert body["data"] == {
            "period_id": period_id,
            "salesperson_count": 2,
            "sale_count": 2,
            "total_mrr": 5000.0,
            "goal_met": True
        }

    async def test_requires_token(self, client, db_session):
        period_id = await seed_end_to_end(db_session)

        response = await client.post("/commission/calculate", json={"period_id": period_id})

        assert response.status_code == 401
        assert response.json()["code"] == 401
        assert response.json()["success"] is False

    async def test_rejects_invalid_token(self, client):
        response = await client.post("/commission/calculate", json={"period_id": "x"},
                                     headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    async def test_missing_period_id(self, client, auth_headers):
        response = await client.post("/commission/calculate", json={}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["code"] == 400
        assert response.json()["success"] is False

    async def test_blank_period_id(self, client, auth_headers):
        response = await client.post("/commission/calculate", json={"period_id": ""}, headers=auth_headers)
        assert response.status_code == 400

    async def test_unknown_period(self, client, auth_headers):
        response = await client.post("/commission/calculate", json={"period_id": "missing"}, headers=auth_headers)

        assert response.status_code == 404
        assert "missing" in response.json()["msg"]

    async def test_closed_period(self, client, db_session, auth_headers):
        period_id = await seed_end_to_end(db_session, status="closed")

        response = await client.post("/commission/calculate", json={"period_id": period_id}, headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["code"] == 409

    async def test_malformed_parameter_is_a_server_error(self, client, db_session, auth_headers):
        period_id = await seed_period(db_session, end_to_end_sales(), parameters={"headcount": "two"})

        response = await client.post("/commission/calculate", json={"period_id": period_id}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["success"] is False

    async def test_database_failure_is_a_server_error(self, client, db_session, auth_headers, monkeypatch):
        period_id = await seed_end_to_end(db_session)
        monkeypatch.setattr(
            CommissionService, "build_commission_rows",
            staticmethod(lambda period_id, aggregates: [
                CalculatedCommissionModel(period_id=period_id, salesperson=None)
            ])
        )

        response = await client.post("/commission/calculate", json={"period_id": period_id}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["msg"] == "Database error occurred while calculating commissions"


class TestReadRoutes:

    async def _calculated_period(self, client, db_session, auth_headers):
        period_id = await seed_end_to_end(db_session)
        await client.post("/commission/calculate", json={"period_id": period_id}, headers=auth_headers)
        return period_id

    async def test_list_includes_adjustments(self, client, db_session, auth_headers):
        period_id = await self._calculated_period(client, db_session, auth_headers)
        added = await client.post("/commission/add_adjustment", headers=auth_headers, json={
            "period_id": period_id, "salesperson": "B", "kind": "debit",
            "amount": "25", "description": "Cancelled contract"
        })
        assert added.status_code == 200
        assert added.json()["data"]["created_by"] == "finance.user"

        response = await client.get("/commission/list", params={"period_id": period_id}, headers=auth_headers)

        data = response.json()["data"]
        assert data["period"]["goal_met"] is True
        assert [item["salesperson"] for item in data["data"]] == ["A", "B"]
        assert data["data"][1]["adjusted_total"] == 400.0
        assert data["total_payable"] == 1125.0

    async def test_list_unknown_period(self, client, auth_headers):
        response = await client.get("/commission/list", params={"period_id": "missing"}, headers=auth_headers)
        assert response.status_code == 404

    async def test_detail(self, client, db_session, auth_headers):
        period_id = await self._calculated_period(client, db_session, auth_headers)

        response = await client.get("/commission/detail", params={"period_id": period_id, "salesperson": "A"},
                                    headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["commission"]["total_payable"] == 725.0

    async def test_detail_unknown_salesperson(self, client, db_session, auth_headers):
        period_id = await self._calculated_period(client, db_session, auth_headers)

        response = await client.get("/commission/detail", params={"period_id": period_id, "salesperson": "Z"},
                                    headers=auth_headers)

        assert response.status_code == 404

    async def test_invalid_adjustment_amount(self, client, db_session, auth_headers):
        period_id = await seed_end_to_end(db_session)

        response = await client.post("/commission/add_adjustment", headers=auth_headers, json={
            "period_id": period_id, "salesperson": "A", "amount": "-5", "description": "x"
        })

        assert response.status_code == 400

    async def test_adjustment_lifecycle(self, client, db_session, auth_headers):
        period_id = await seed_end_to_end(db_session)
        added = await client.post("/commission/add_adjustment", headers=auth_headers, json={
            "period_id": period_id, "salesperson": "A", "amount": "10", "description": "Referral"
        })
        adjustment_id = added.json()["data"]["id"]

        listed = await client.get("/commission/adjustments", params={"period_id": period_id},
                                  headers=auth_headers)
        assert [a["id"] for a in listed.json()["data"]] == [adjustment_id]

        deleted = await client.delete("/commission/delete_adjustment", params={"adjustment_id": adjustment_id},
                                      headers=auth_headers)
        assert deleted.status_code == 200

        missing = await client.delete("/commission/delete_adjustment", params={"adjustment_id": adjustment_id},
                                      headers=auth_headers)
        assert missing.status_code == 404

    async def test_close_then_recalculate(self, client, db_session, auth_headers):
        period_id = await self._calculated_period(client, db_session, auth_headers)

        closed = await client.post("/commission/close", json={"period_id": period_id}, headers=auth_headers)
        assert closed.status_code == 200
        assert closed.json()["data"]["status"] == "closed"

        again = await client.post("/commission/close", json={"period_id": period_id}, headers=auth_headers)
        assert again.status_code == 409

        recalculated = await client.post("/commission/calculate", json={"period_id": period_id},
                                         headers=auth_headers)
        assert recalculated.status_code == 409

    @pytest.mark.parametrize("method, path, params, service_method", [
        ("get", "/commission/list", {"period_id": "p"}, "get_commissions_by_period"),
        ("get", "/commission/detail", {"period_id": "p", "salesperson": "A"}, "get_commission_detail"),
        ("get", "/commission/adjustments", {"period_id": "p"}, "get_adjustments"),
        ("get", "/commission/periods", {}, "get_periods"),
        ("delete", "/commission/delete_adjustment", {"adjustment_id": "a"}, "delete_adjustment"),
        ("delete", "/commission/delete_period", {"period_id": "p"}, "delete_period"),
    ])
    async def test_unexpected_error_keeps_envelope(self, client, auth_headers, monkeypatch,
                                                   method, path, params, service_method):
        async def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(CommissionService, service_method, staticmethod(broken))

        response = await getattr(client, method)(path, params=params, headers=auth_headers)

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == 500
        assert body["success"] is False
        assert "boom" in body["msg"]


class TestPeriodRoutes:

    async def test_history_newest_first(self, client, db_session, auth_headers):
        older = await seed_period(db_session, tiers=[], reference_month=date(2025, 1, 1), status="closed")
        newer = await seed_period(db_session, tiers=[], reference_month=date(2025, 2, 1))
        await seed_period(db_session, tiers=[], reference_month=date(2024, 6, 1))

        response = await client.get("/commission/periods", params={"year": 2025}, headers=auth_headers)

        assert response.status_code == 200
        assert [p["period_id"] for p in response.json()["data"]] == [newer, older]

        closed = await client.get("/commission/periods", params={"status": "closed"}, headers=auth_headers)
        assert [p["period_id"] for p in closed.json()["data"]] == [older]

    async def test_history_rejects_unknown_status(self, client, auth_headers):
        response = await client.get("/commission/periods", params={"status": "archived"}, headers=auth_headers)
        assert response.status_code == 400

    async def test_delete_period(self, client, db_session, auth_headers):
        period_id = await seed_end_to_end(db_session)

        deleted = await client.delete("/commission/delete_period", params={"period_id": period_id},
                                      headers=auth_headers)
        assert deleted.status_code == 200

        listed = await client.get("/commission/list", params={"period_id": period_id}, headers=auth_headers)
        assert listed.status_code == 404

    async def test_delete_closed_period(self, client, db_session, auth_headers):
        period_id = await seed_end_to_end(db_session, status="closed")

        response = await client.delete("/commission/delete_period", params={"period_id": period_id},
                                       headers=auth_headers)

        assert response.status_code == 409

    async def test_delete_unknown_period(self, client, auth_headers):
        response = await client.delete("/commission/delete_period", params={"period_id": "missing"},
                                       headers=auth_headers)
        assert response.status_code == 404


class TestReportRoute:

    async def test_json_statement(self, client, db_session, auth_headers):
        period_id = await seed_end_to_end(db_session)
        await client.post("/commission/calculate", json={"period_id": period_id}, headers=auth_headers)

        response = await client.get("/report/data", params={"period_id": period_id}, headers=auth_headers)

        data = response.json()["data"]
        assert data["period_id"] == period_id
        assert data["summary"]["data"][0]["total_payable"] == 1150.0
        assert data["commissions"]["field_translations"]["team_bonus"]["pt"] == "Bônus Meta Equipe"

    async def test_excel_statement(self, client, db_session, auth_headers):
        period_id = await seed_end_to_end(db_session)
        await client.post("/commission/calculate", json={"period_id": period_id}, headers=auth_headers)

        response = await client.get("/report/data", params={"period_id": period_id, "format": "excel"},
                                    headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-disposition"] == \
               'attachment; filename="commission_statement_2025-03-01.xlsx"'
        assert response.content[:2] == b"PK"

    async def test_unknown_period(self, client, auth_headers):
        response = await client.get("/report/data", params={"period_id": "missing"}, headers=auth_headers)
        assert response.status_code == 404


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
