import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from irbridge.codegen.service import CompilationService, ServiceState, WorkingContext
from irbridge.errors import ResourceError

MAIN_IR = "define i32 @main() {\nentry:\n  ret i32 42\n}\n"


def test_compiles_ir_to_assembly(fake_llc, work_dir):
    service = CompilationService(fake_llc, work_dir=str(work_dir))

    outcome = service.compile(MAIN_IR)

    assert outcome.ok
    assert outcome.state == ServiceState.RESPONDED
    assert "main:" in outcome.asm
    assert outcome.error is None


def test_working_context_is_released(fake_llc, work_dir):
    service = CompilationService(fake_llc, work_dir=str(work_dir))

    service.compile(MAIN_IR)
    service.compile("FAIL_LLC\n" + MAIN_IR)

    assert os.listdir(work_dir) == []
    assert service.in_flight == 0


def test_nonzero_exit_is_failure_even_with_partial_output(fake_llc, work_dir):
    service = CompilationService(fake_llc, work_dir=str(work_dir))

    outcome = service.compile("; FAIL_LLC\n" + MAIN_IR)

    assert not outcome.ok
    assert outcome.state == ServiceState.FAILED
    assert outcome.asm is None
    assert "expected top-level entity" in outcome.error


def test_diagnostics_do_not_leak_paths(fake_llc, work_dir):
    service = CompilationService(fake_llc, work_dir=str(work_dir))

    outcome = service.compile("; FAIL_LLC\n")

    assert "input.ll:1:1: error" in outcome.error
    assert str(work_dir) not in outcome.error
    assert "irbridge-" not in outcome.error


def test_stderr_output_alone_means_failure(fake_llc, work_dir):
    service = CompilationService(fake_llc, work_dir=str(work_dir))

    outcome = service.compile("; WARN_LLC\n" + MAIN_IR)

    assert not outcome.ok
    assert outcome.error == "fake-llc: warning: ignoring debug info in input.ll"


def test_missing_output_is_a_resource_error(fake_llc, work_dir):
    service = CompilationService(fake_llc, work_dir=str(work_dir))

    outcome = service.compile("; NO_OUTPUT\n")

    assert not outcome.ok
    assert outcome.error == "code generator produced no output"
    assert os.listdir(work_dir) == []


def test_launch_failure_is_reported_and_cleaned_up(work_dir):
    service = CompilationService("/nonexistent/bin/llc-99", work_dir=str(work_dir))

    outcome = service.compile(MAIN_IR)

    assert not outcome.ok
    assert outcome.error.startswith("failed to launch code generator 'llc-99'")
    assert "/nonexistent" not in outcome.error
    assert os.listdir(work_dir) == []


def test_timeout_kills_codegen(fake_llc, work_dir):
    service = CompilationService(fake_llc, timeout=0.5, work_dir=str(work_dir))

    outcome = service.compile("; SLEEP_LONG\n" + MAIN_IR)

    assert not outcome.ok
    assert "timed out after 0.5 s" in outcome.error
    assert os.listdir(work_dir) == []


def test_extra_llc_args_are_passed_before_paths(work_dir):
    service = CompilationService("llc", llc_args=["-O2", "-march=x86-64"])

    with WorkingContext("abc", root=str(work_dir)) as ctx:
        cmd = service.command(ctx)

    assert cmd[:3] == ["llc", "-O2", "-march=x86-64"]
    assert cmd[3].endswith("input.ll")
    assert cmd[4:] == ["-o", str(ctx.output_path)]


def test_working_contexts_are_distinct(work_dir):
    a = WorkingContext("same-id", root=str(work_dir))
    b = WorkingContext("same-id", root=str(work_dir))
    try:
        assert a.directory != b.directory
        assert a.input_path != b.input_path
    finally:
        a.release()
        b.release()

    assert os.listdir(work_dir) == []


def test_working_context_creation_failure(tmp_path):
    with pytest.raises(ResourceError):
        WorkingContext("x", root=str(tmp_path / "missing" / "dir"))


def test_concurrent_requests_stay_isolated(fake_llc, work_dir):
    service = CompilationService(fake_llc, work_dir=str(work_dir))
    payloads = [
        f"; SLEEP_SHORT request-{i}\ndefine i32 @main() {{\nentry:\n  ret i32 {i}\n}}\n"
        for i in range(8)
    ]

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(service.compile, payloads))

    for i, outcome in enumerate(outcomes):
        assert outcome.ok
        assert f"request-{i}\n" in outcome.asm
        assert f"ret i32 {i}\n" in outcome.asm
        others = [j for j in range(8) if j != i]
        assert not any(f"request-{j}\n" in outcome.asm for j in others)

    assert len({o.request_id for o in outcomes}) == 8
    assert os.listdir(work_dir) == []


def test_repeated_compilation_is_deterministic(fake_llc, work_dir):
    service = CompilationService(fake_llc, work_dir=str(work_dir))

    assert service.compile(MAIN_IR).asm == service.compile(MAIN_IR).asm


def test_unencodable_ir_fails_with_resource_error(fake_llc, work_dir):
    service = CompilationService(fake_llc, work_dir=str(work_dir))

    outcome = service.compile("define i32 @main() {\n  ; \ud800\n}\n")

    assert not outcome.ok
    assert outcome.state == ServiceState.FAILED
    assert outcome.error == "input is not valid UTF-8 text"
    assert os.listdir(work_dir) == []
