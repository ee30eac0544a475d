"""
HTTP API tests against a stubbed service container

Run with: pytest tests/test_api.py -v
"""

from fleet_models import Alert, AlertKind, AlertSeverity, RiskTier


def _add_alert(container, machine_id="MCH-001", severity=AlertSeverity.MEDIUM):
    return container.alerts.add(
        Alert(
            machine_id=machine_id,
            machine_name="Precision Mill X1",
            kind=AlertKind.THRESHOLD_EXCEEDED,
            severity=severity,
            message="Maintenance warning",
        )
    )


class TestHealth:
    def test_health(self, api_client):
        response = api_client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["scheduler"]["machines"] == 25
        assert data["settings"]["escalation_threshold"] == 85
        assert "api_key" not in data["settings"]


class TestFleetEndpoints:
    def test_fleet_summary(self, api_client, container):
        data = api_client.get("/api/fleet").json()

        assert data["total_machines"] == 25
        assert (
            data["healthy_count"] + data["warning_count"] + data["critical_count"] == 25
        )
        assert data["total_potential_savings"] == sum(
            s.cost.potential_savings for s in container.fleet.snapshots()
        )
        assert len(data["machines"]) == 25
        assert "history" not in data["machines"][0]

    def test_fleet_search_filter(self, api_client):
        data = api_client.get("/api/fleet", params={"search": "turbine"}).json()
        assert data["total_machines"] == 25
        assert len(data["machines"]) == 5
        assert all(m["type"] == "Turbine Generator" for m in data["machines"])

    def test_fleet_status_filter(self, api_client, container):
        data = api_client.get("/api/fleet", params={"status": "critical"}).json()
        assert len(data["machines"]) == data["critical_count"]
        assert all(m["status"] == "critical" for m in data["machines"])

    def test_invalid_status(self, api_client):
        assert api_client.get("/api/fleet", params={"status": "broken"}).status_code == 422

    def test_machine_detail(self, api_client):
        response = api_client.get("/api/machines/MCH-001")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "MCH-001"
        assert data["type"] == "CNC Mill"
        assert len(data["history"]) == 20
        assert data["logs"] == []

    def test_unknown_machine(self, api_client):
        response = api_client.get("/api/machines/MCH-999")
        assert response.status_code == 404

    def test_add_maintenance_log(self, api_client):
        response = api_client.post(
            "/api/machines/MCH-002/logs",
            json={"action": "Replaced seal", "notes": "Leak at flange", "operator": "Kim"},
        )
        assert response.status_code == 201
        assert response.json()["operator"] == "Kim"

        api_client.post("/api/machines/MCH-002/logs", json={"action": "Inspection"})
        logs = api_client.get("/api/machines/MCH-002").json()["logs"]
        assert [entry["action"] for entry in logs] == ["Inspection", "Replaced seal"]
        assert logs[0]["operator"] == "System"

    def test_log_validation(self, api_client):
        response = api_client.post("/api/machines/MCH-002/logs", json={"action": ""})
        assert response.status_code == 422

    def test_log_unknown_machine(self, api_client):
        response = api_client.post("/api/machines/NOPE/logs", json={"action": "x"})
        assert response.status_code == 404

    def test_analysis(self, api_client, stub_analyzer):
        response = api_client.post("/api/machines/MCH-003/analysis")
        assert response.status_code == 200
        assert response.json()["urgency"] == "immediate"
        snapshot = stub_analyzer.analyze_machine.call_args[0][0]
        assert snapshot.machine_id == "MCH-003"

    def test_machine_chat(self, api_client, stub_analyzer):
        response = api_client.post("/api/machines/MCH-003/chat", json={"query": "Status?"})
        assert response.json() == {"answer": "Machine answer"}
        query, snapshot = stub_analyzer.ask_machine_chat.call_args[0]
        assert query == "Status?"
        assert snapshot.machine_id == "MCH-003"

    def test_deep_diagnostic(self, api_client, stub_analyzer):
        response = api_client.post("/api/machines/MCH-003/diagnostic")
        assert response.status_code == 200
        assert response.json() == {"machine_id": "MCH-003", "diagnostic": "Diagnostic text"}
        snapshot = stub_analyzer.deep_diagnostic.call_args[0][0]
        assert snapshot.machine_id == "MCH-003"

    def test_deep_diagnostic_unknown_machine(self, api_client, stub_analyzer):
        assert api_client.post("/api/machines/NOPE/diagnostic").status_code == 404
        stub_analyzer.deep_diagnostic.assert_not_called()

    def test_remove_machine(self, api_client):
        assert api_client.delete("/api/machines/MCH-001").status_code == 204
        assert api_client.get("/api/machines/MCH-001").status_code == 404
        assert api_client.get("/api/fleet").json()["total_machines"] == 24
        assert api_client.delete("/api/machines/MCH-001").status_code == 404

    def test_remove_machine_clears_escalation(self, container, snapshot_factory):
        engine = container.alert_engine
        engine.process(RiskTier.CRITICAL, snapshot_factory(90, machine_id="MCH-001"))
        assert engine.hysteresis("MCH-001").escalated
        assert engine.drain(timeout=5)

        container.remove_machine("MCH-001")

        assert not engine.hysteresis("MCH-001").escalated
        assert "MCH-001" not in engine._hysteresis


class TestAlertEndpoints:
    def test_list_and_read_state(self, api_client, container):
        first = _add_alert(container)
        _add_alert(container, machine_id="MCH-002")

        alerts = api_client.get("/api/alerts").json()
        assert len(alerts) == 2
        assert alerts[1]["id"] == first.id
        assert api_client.get("/api/alerts/unread-count").json() == {"unread": 2}

        assert api_client.post(f"/api/alerts/{first.id}/read").status_code == 200
        assert api_client.get("/api/alerts/unread-count").json() == {"unread": 1}
        unread = api_client.get("/api/alerts", params={"unread_only": True}).json()
        assert [a["machine_id"] for a in unread] == ["MCH-002"]

        assert api_client.post("/api/alerts/read-all").json() == {"marked": 1}

    def test_mark_unknown_alert(self, api_client):
        assert api_client.post("/api/alerts/missing/read").status_code == 404

    def test_filter_and_clear(self, api_client, container):
        _add_alert(container, machine_id="MCH-001")
        _add_alert(container, machine_id="MCH-005")

        alerts = api_client.get("/api/alerts", params={"machine_id": "MCH-005"}).json()
        assert len(alerts) == 1

        assert api_client.delete("/api/alerts").json() == {"status": "cleared"}
        assert api_client.get("/api/alerts").json() == []


class TestNotificationEndpoints:
    def test_register_and_clear(self, api_client, container):
        assert api_client.get("/api/notifications/endpoint").json() == {
            "endpoint": None,
            "sms_configured": False,
        }

        response = api_client.put(
            "/api/notifications/endpoint", json={"phone_number": "+15551234567"}
        )
        assert response.json()["endpoint"] == "+15551234567"
        assert container.dispatcher.endpoint == "+15551234567"

        response = api_client.delete("/api/notifications/endpoint")
        assert response.json()["endpoint"] is None


class TestReportEndpoints:
    def test_fleet_report(self, api_client, stub_analyzer):
        data = api_client.post("/api/reports/fleet").json()
        assert data["report"] == "Fleet report text"
        assert data["machine_count"] == 25
        snapshots = stub_analyzer.generate_fleet_report.call_args[0][0]
        assert len(snapshots) == 25

    def test_assistant(self, api_client):
        response = api_client.post("/api/assistant", json={"query": "Which machine first?"})
        assert response.json() == {"answer": "Fleet answer"}

    def test_assistant_requires_query(self, api_client):
        assert api_client.post("/api/assistant", json={"query": ""}).status_code == 422
