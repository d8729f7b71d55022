from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from app.Core.config import get_settings
from app.features.execution.languages import resolve_language
from app.features.execution.schemas import ExecutionRequest
from app.features.execution.service import PistonService, piston_service
from .comparison import normalise_output, verdict_for
from .schemas import (
    CaseVerdict,
    FailedCase,
    SubmissionStatus,
    SubmissionVerdict,
    TestCase,
    Verdict,
)

logger = logging.getLogger("judge.service")

ALL_PASSED_MESSAGE = "All test cases passed."


class JudgeValidationError(ValueError):
    """Request is missing code or language; nothing was executed."""


class JudgeService:
    """Run/submit orchestration on top of the execution client.

    Both operations are stateless. ``run_against_samples`` executes every case
    and reports each one; ``submit_for_judging`` walks the cases in order and
    stops at the first failure.
    """

    def __init__(self, executor: Optional[PistonService] = None):
        self.settings = get_settings()
        self.executor = executor or piston_service

    @staticmethod
    def _validate(code: Optional[str], language: Optional[str]) -> None:
        if not code or not language:
            raise JudgeValidationError("Missing code or language")
        resolve_language(language)

    def _request_for(self, code: str, language: str, case: TestCase) -> ExecutionRequest:
        return ExecutionRequest(
            source_code=code,
            language=language,
            stdin=case.input or "",
            compile_timeout_ms=self.settings.compile_timeout_ms,
            run_timeout_ms=self.settings.run_timeout_ms,
        )

    async def run_against_samples(
        self,
        code: Optional[str],
        language: Optional[str],
        testcases: Sequence[TestCase],
    ) -> List[CaseVerdict]:
        self._validate(code, language)
        requests = [self._request_for(code, language, case) for case in testcases]
        results = await self.executor.execute_many(requests)

        verdicts: List[CaseVerdict] = []
        for case, result in zip(testcases, results):
            actual = normalise_output(result.output)
            verdicts.append(
                CaseVerdict(
                    input=case.input,
                    expected=case.expected_output,
                    output=actual,
                    verdict=verdict_for(actual, case.expected_output),
                    error=result.error or "",
                )
            )
        logger.info(
            "run language=%s cases=%d accepted=%d",
            language,
            len(verdicts),
            sum(1 for v in verdicts if v.verdict is Verdict.ACCEPTED),
        )
        return verdicts

    async def submit_for_judging(
        self,
        code: Optional[str],
        language: Optional[str],
        testcases: Sequence[TestCase],
    ) -> SubmissionVerdict:
        self._validate(code, language)

        for index, case in enumerate(testcases, start=1):
            result = await self.executor.execute(self._request_for(code, language, case))

            if not result.ok:
                logger.info("submit language=%s halted case=%d status=%s", language, index, result.status)
                return SubmissionVerdict(
                    success=False,
                    status=SubmissionStatus(result.status),
                    output=result.output or "",
                    error=result.error or "",
                    execution_time_ms=result.elapsed_ms or None,
                )

            expected = normalise_output(case.expected_output)
            actual = normalise_output(result.output)
            if expected != actual:
                logger.info("submit language=%s wrong_answer case=%d", language, index)
                return SubmissionVerdict(
                    success=False,
                    status=SubmissionStatus.WRONG_ANSWER,
                    output=actual,
                    expected_output=expected,
                    failed_case=FailedCase(index=index, input=case.input or ""),
                    execution_time_ms=result.elapsed_ms or None,
                )

        logger.info("submit language=%s accepted cases=%d", language, len(testcases))
        return SubmissionVerdict(
            success=True,
            status=SubmissionStatus.ACCEPTED,
            output=ALL_PASSED_MESSAGE,
        )


judge_service = JudgeService()
