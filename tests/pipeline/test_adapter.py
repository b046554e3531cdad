import pytest

from irbridge.errors import StageError
from irbridge.pipeline.adapter import StageAdapter, error_message
from irbridge.pipeline.results import StageName


def test_reference_library_happy_path():
    stages = StageAdapter()
    src = "int main() { return 40 + 2; }"

    assert 'TOKEN(INTEGER, "40")' in stages.lex(src)
    assert "Semantic analysis passed." in stages.parse(src)
    ir = stages.generate_ir(src)
    optimized = stages.optimize_ir(ir)
    assert "ret i32 42" in optimized
    assert stages.execute(optimized) == "Execution result: 42"


def test_unbalanced_braces_fail_ir_stage():
    with pytest.raises(StageError) as info:
        StageAdapter().generate_ir("int main() { return 42; ")

    assert info.value.stage == "ir"
    assert "reached end of input" in info.value.message


def test_semantic_errors_fail_ast_stage():
    with pytest.raises(StageError) as info:
        StageAdapter().parse("int main() { return x; }")

    assert info.value.stage == "ast"
    assert info.value.message == "Undeclared variable: x"


def test_execution_error_is_a_stage_error():
    with pytest.raises(StageError, match="division by zero"):
        StageAdapter().execute("define i32 @main() {\nentry:\n  %t1 = sdiv i32 1, 0\n  ret i32 %t1\n}\n")


def test_empty_output_is_not_a_failure():
    assert StageAdapter().lex("   ") == ""


def test_word_error_inside_valid_output_is_not_a_failure():
    class Library:
        def lex(self, source):
            return 'TOKEN(IDENTIFIER, "error")\n'

    assert StageAdapter(Library()).run(StageName.LEX, "error") == 'TOKEN(IDENTIFIER, "error")\n'


def test_library_exceptions_are_normalized():
    class ExplodingLibrary:
        def generate_ir(self, source):
            raise RuntimeError("boom")

    stages = StageAdapter(ExplodingLibrary())
    with pytest.raises(StageError) as info:
        stages.generate_ir("int main() {}")

    assert info.value.stage == "ir"
    assert "boom" in info.value.message
    assert isinstance(info.value.__cause__, RuntimeError)


def test_non_text_output_is_rejected():
    class NoneLibrary:
        def optimize_ir(self, ir):
            return None

    with pytest.raises(StageError, match="expected text"):
        StageAdapter(NoneLibrary()).optimize_ir("define i32 @main() {}")


def test_codegen_is_not_a_library_stage():
    with pytest.raises(ValueError):
        StageAdapter().run(StageName.CODEGEN, "")


@pytest.mark.parametrize(
    "stage,output,expected",
    [
        (StageName.IR, "Error: ir: bad", "ir: bad"),
        (StageName.IR, "define i32 @error() {", None),
        (StageName.EXECUTE, "Execution error: nope", "nope"),
        (StageName.EXECUTE, "Execution result: 3", None),
        (StageName.LEX, "--- Semantic Errors ---", None),
    ],
)
def test_error_message_shapes(stage, output, expected):
    assert error_message(stage, output) == expected
