import asyncio

import pytest

from app.features.execution.schemas import (
    CompileFailure,
    ExecutionSuccess,
    RuntimeFailure,
    TransportFailure,
    UnsupportedLanguageError,
)
from app.features.judge.schemas import SubmissionStatus, TestCase, Verdict
from app.features.judge.service import JudgeService, JudgeValidationError

TWO_SUM_CASES = [
    TestCase(input="2 7 11 15\n9", output="0 1"),
    TestCase(input="3 2 4\n6", output="1 2"),
]


def _judge(executor):
    return JudgeService(executor=executor)


def test_run_accepts_trimmed_equality(scripted_executor):
    executor = scripted_executor(lambda req: ExecutionSuccess(stdout="0 1", elapsed_ms=4))
    judge = _judge(executor)

    results = asyncio.run(judge.run_against_samples("print('0 1')", "python", [TestCase(input="", output="0 1\n")]))

    assert len(results) == 1
    assert results[0].verdict is Verdict.ACCEPTED
    assert results[0].output == "0 1"
    assert results[0].error == ""


def test_run_does_not_normalise_internal_whitespace_or_case(scripted_executor):
    executor = scripted_executor(lambda req: ExecutionSuccess(stdout="0  1"))
    judge = _judge(executor)

    cases = [TestCase(input="", output="0 1"), TestCase(input="", output="0  1")]
    results = asyncio.run(judge.run_against_samples("x", "python", cases))

    assert [r.verdict for r in results] == [Verdict.WRONG_ANSWER, Verdict.ACCEPTED]

    upper = _judge(scripted_executor(lambda req: ExecutionSuccess(stdout="TRUE")))
    [result] = asyncio.run(upper.run_against_samples("x", "python", [TestCase(input="", output="true")]))
    assert result.verdict is Verdict.WRONG_ANSWER


def test_run_reports_every_case_in_order(scripted_executor):
    def respond(req):
        if req.stdin == "boom":
            return RuntimeFailure(stdout="", stderr="IndexError", exit_code=1)
        return ExecutionSuccess(stdout=req.stdin.upper())

    executor = scripted_executor(respond)
    cases = [
        TestCase(input="a", output="A"),
        TestCase(input="boom", output="X"),
        TestCase(input="c", output="nope"),
        TestCase(input="d", output="D"),
    ]

    results = asyncio.run(_judge(executor).run_against_samples("x", "python", cases))

    assert len(executor.calls) == 4
    assert [r.input for r in results] == ["a", "boom", "c", "d"]
    assert [r.verdict for r in results] == [
        Verdict.ACCEPTED,
        Verdict.WRONG_ANSWER,
        Verdict.WRONG_ANSWER,
        Verdict.ACCEPTED,
    ]
    assert results[1].error == "IndexError"
    assert results[2].expected == "nope"


def test_run_with_no_cases_returns_empty(scripted_executor):
    executor = scripted_executor()
    assert asyncio.run(_judge(executor).run_against_samples("x", "python", [])) == []
    assert executor.calls == []


def test_submit_stops_at_first_wrong_answer(scripted_executor):
    executor = scripted_executor(lambda req: ExecutionSuccess(stdout="1 2", elapsed_ms=7))

    verdict = asyncio.run(_judge(executor).submit_for_judging("print('1 2')", "python", TWO_SUM_CASES))

    assert verdict.success is False
    assert verdict.status is SubmissionStatus.WRONG_ANSWER
    assert verdict.failed_case.index == 1
    assert verdict.failed_case.input == "2 7 11 15\n9"
    assert verdict.expected_output == "0 1"
    assert verdict.output == "1 2"
    assert len(executor.calls) == 1


@pytest.mark.parametrize("fail_at", [1, 2, 3])
def test_submit_never_runs_past_failing_case(scripted_executor, fail_at):
    def respond(req):
        return ExecutionSuccess(stdout="bad" if req.stdin == str(fail_at) else "ok")

    executor = scripted_executor(respond)
    cases = [TestCase(input=str(i), output="ok") for i in range(1, 6)]

    verdict = asyncio.run(_judge(executor).submit_for_judging("x", "cpp", cases))

    assert verdict.failed_case.index == fail_at
    assert len(executor.calls) == fail_at


def test_submit_halts_on_execution_failure(scripted_executor):
    executor = scripted_executor(
        lambda req: CompileFailure(raw_output="error: expected ';'", stderr="error: expected ';'", elapsed_ms=120)
    )

    verdict = asyncio.run(_judge(executor).submit_for_judging("int main(", "c", TWO_SUM_CASES))

    assert verdict.success is False
    assert verdict.status is SubmissionStatus.COMPILATION_ERROR
    assert verdict.error == "error: expected ';'"
    assert verdict.failed_case is None
    assert verdict.execution_time == "120ms"
    assert len(executor.calls) == 1


def test_submit_surfaces_transport_failure_without_retry(scripted_executor):
    executor = scripted_executor(lambda req: TransportFailure(message="connection refused", elapsed_ms=2))

    verdict = asyncio.run(_judge(executor).submit_for_judging("x", "javascript", TWO_SUM_CASES))

    assert verdict.status is SubmissionStatus.ERROR
    assert verdict.error == "connection refused"
    assert len(executor.calls) == 1


def test_submit_accepts_when_all_cases_pass(scripted_executor):
    answers = {"2 7 11 15\n9": "0 1\n", "3 2 4\n6": "1 2"}
    executor = scripted_executor(lambda req: ExecutionSuccess(stdout=answers[req.stdin].strip()))

    verdict = asyncio.run(_judge(executor).submit_for_judging("x", "java", TWO_SUM_CASES))

    assert verdict.success is True
    assert verdict.status is SubmissionStatus.ACCEPTED
    assert verdict.output == "All test cases passed."
    assert verdict.to_payload() == {"success": True, "status": "Accepted", "output": "All test cases passed."}
    assert len(executor.calls) == 2


def test_wrong_answer_payload_uses_app_field_names(scripted_executor):
    executor = scripted_executor(lambda req: ExecutionSuccess(stdout="1 2", elapsed_ms=15))

    verdict = asyncio.run(_judge(executor).submit_for_judging("x", "python", TWO_SUM_CASES))
    payload = verdict.to_payload()

    assert payload["status"] == "Wrong Answer"
    assert payload["expectedOutput"] == "0 1"
    assert payload["failedCase"] == {"index": 1, "input": "2 7 11 15\n9"}
    assert payload["executionTime"] == "15ms"
    assert "execution_time_ms" not in payload


@pytest.mark.parametrize("code, language", [("", "python"), ("print(1)", ""), (None, "python"), ("x", None)])
def test_missing_code_or_language_is_rejected_before_execution(scripted_executor, code, language):
    executor = scripted_executor()
    judge = _judge(executor)

    with pytest.raises(JudgeValidationError, match="Missing code or language"):
        asyncio.run(judge.submit_for_judging(code, language, TWO_SUM_CASES))
    with pytest.raises(JudgeValidationError):
        asyncio.run(judge.run_against_samples(code, language, TWO_SUM_CASES))

    assert executor.calls == []


def test_unsupported_language_rejected_before_execution(scripted_executor):
    executor = scripted_executor()

    with pytest.raises(UnsupportedLanguageError):
        asyncio.run(_judge(executor).submit_for_judging("puts 1", "ruby", TWO_SUM_CASES))

    assert executor.calls == []


def test_rerun_yields_same_verdict(scripted_executor):
    executor = scripted_executor(lambda req: ExecutionSuccess(stdout="42"))
    judge = _judge(executor)
    cases = [TestCase(input="", output="42")]

    first = asyncio.run(judge.run_against_samples("x", "python", cases))
    second = asyncio.run(judge.run_against_samples("x", "python", cases))

    assert first == second


def test_case_model_is_not_collected_by_pytest():
    assert TestCase.__test__ is False
    assert TestCase(input="1", output="2").expected_output == "2"
