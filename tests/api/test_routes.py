import asyncio
import os

import httpx
import pytest
from fastapi.testclient import TestClient

from irbridge.api.app import create_app
from irbridge.codegen.client import CodegenClient
from irbridge.codegen.service import CompilationService
from irbridge.orchestration import PipelineCoordinator
from irbridge.pipeline.adapter import StageAdapter
from irbridge.pipeline.results import FailureKind, StageName


@pytest.fixture
def service(fake_llc, work_dir):
    return CompilationService(fake_llc, work_dir=str(work_dir))


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def coordinator_for(service):
    transport = httpx.ASGITransport(app=create_app(service))
    return PipelineCoordinator(StageAdapter(), CodegenClient("http://irbridge.test", transport=transport))


# ---------------------------------------------------------------------------
# Wire contract
# ---------------------------------------------------------------------------

def test_health(client):
    res = client.get("/health")

    assert res.status_code == 200
    assert res.json() == {"ok": True, "service": "irbridge-codegen", "in_flight": 0}


def test_capabilities(client, fake_llc):
    body = client.get("/capabilities").json()

    assert {c["name"] for c in body["stages"]} >= {"lex", "ast", "ir", "optimize", "codegen"}
    assert body["llc_available"] is True
    assert body["llc"] == fake_llc

    language = {c["name"]: c for c in body["language"]}
    assert language["float"]["supported"] is False
    assert "char declarations are rejected" in language["float"]["notes"]
    assert language["type checking"]["supported"] is False


def test_compile_ir_success_shape(client):
    res = client.post("/compile-ir", json={"ir": "define i32 @main() {\nentry:\n  ret i32 42\n}\n"})

    assert res.status_code == 200
    assert set(res.json()) == {"asm"}
    assert "main:" in res.json()["asm"]
    assert '\\t.globl' in res.text  # tabs travel escaped


def test_compile_ir_failure_shape(client, work_dir):
    res = client.post("/compile-ir", json={"ir": "; FAIL_LLC\ndefine i32 @main() {\n}\n"})

    assert res.status_code == 500
    assert set(res.json()) == {"error"}
    assert "expected top-level entity" in res.json()["error"]
    assert str(work_dir) not in res.text
    assert os.listdir(work_dir) == []


def test_compile_ir_requires_ir_field(client):
    assert client.post("/compile-ir", json={"code": "x"}).status_code == 422


def test_lone_surrogate_gets_error_shape(client, work_dir):
    res = client.post(
        "/compile-ir",
        content=b'{"ir": "\\ud800"}',
        headers={"content-type": "application/json"},
    )

    assert res.status_code == 500
    assert res.json() == {"error": "input is not valid UTF-8 text"}
    assert os.listdir(work_dir) == []


# ---------------------------------------------------------------------------
# End to end: coordinator -> client -> service -> fake llc
# ---------------------------------------------------------------------------

def test_return_42_end_to_end(service):
    run = asyncio.run(coordinator_for(service).compile_and_run("int main() { return 42; }"))

    assert run.success
    assert "main:" in run.artifact.assembly
    assert "\\t" not in run.artifact.assembly
    assert run.execution == "Execution result: 42"
    assert run.output.endswith("Execution result: 42\n")


def test_end_to_end_is_deterministic(service):
    coordinator = coordinator_for(service)
    src = "int add(int a, int b) { return a + b; } int main() { return add(40, 2); }"

    first = asyncio.run(coordinator.compile_and_run(src))
    second = asyncio.run(coordinator.compile_and_run(src))

    assert first.artifact.assembly == second.artifact.assembly


def test_codegen_rejection_end_to_end(work_dir):
    service = CompilationService("/nonexistent/llc", work_dir=str(work_dir))

    run = asyncio.run(coordinator_for(service).compile_and_run("int main() { return 1; }"))

    assert not run.success
    assert run.failure.stage == StageName.CODEGEN
    assert run.failure.kind == FailureKind.DIAGNOSTIC
    assert "failed to launch code generator" in run.failure.message


def test_simultaneous_runs_get_their_own_assembly(service):
    coordinator = coordinator_for(service)
    sources = [
        f"int main() {{ int v{i} = {i}; return v{i} + 0; }} int marker{i}() {{ return 0; }}"
        for i in range(6)
    ]

    async def all_runs():
        return await asyncio.gather(*(coordinator.compile_and_run(s) for s in sources))

    runs = asyncio.run(all_runs())

    for i, run in enumerate(runs):
        assert run.success
        assert f"marker{i}:" in run.artifact.assembly
        assert not any(f"marker{j}:" in run.artifact.assembly for j in range(6) if j != i)
        assert run.execution == f"Execution result: {i}"
