from fastapi.testclient import TestClient

from app.main import create_app


def test_tools_endpoint_returns_tool_definitions(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ORG_MCP_WORKFLOW_FILE", str(tmp_path / "workflow.org"))
    monkeypatch.setenv("ORG_MCP_STATES", "OPEN,CLOSED")
    monkeypatch.delenv("ORG_MCP_SERVICE_TOKEN", raising=False)

    app = create_app()
    with TestClient(app) as client:
        response = client.get("/tools")

    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    tools = {tool["function"]["name"]: tool for tool in payload["data"]["tools"]}
    assert set(tools) == {
        "list_tasks",
        "get_task_context",
        "set_task_state",
        "append_task_log",
    }
    state_schema = tools["set_task_state"]["function"]["parameters"]["properties"]["state"]
    assert state_schema["enum"] == ["OPEN", "CLOSED"]
