from app.main import create_app


def _get_health_route(app):
    for route in app.routes:
        if getattr(route, "path", None) == "/health" and "GET" in getattr(
            route, "methods", set()
        ):
            return route
    raise AssertionError("Health route not registered")


def test_health_endpoint(monkeypatch, tmp_path):
    monkeypatch.setenv("ORG_MCP_WORKFLOW_FILE", str(tmp_path / "workflow.org"))
    app = create_app()

    route = _get_health_route(app)

    assert route.status_code == 200
    assert route.endpoint() == {"status": "ok"}


def test_task_routes_registered(monkeypatch, tmp_path):
    monkeypatch.setenv("ORG_MCP_WORKFLOW_FILE", str(tmp_path / "workflow.org"))
    app = create_app()

    paths = {getattr(route, "path", None) for route in app.routes}

    assert {
        "/tool:list_tasks",
        "/tool:get_task_context",
        "/tool:set_task_state",
        "/tool:append_task_log",
        "/tools",
    } <= paths
