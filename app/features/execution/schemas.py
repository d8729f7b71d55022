from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class UnsupportedLanguageError(ValueError):
    """Raised before any network call when a language has no runtime mapping."""

    def __init__(self, language: object) -> None:
        self.language = language
        super().__init__(f"Unsupported language: {language}")


class LanguageConfig(BaseModel):
    key: str
    runtime: str
    version: str
    file_name: str
    display_name: str


class ExecutionRequest(BaseModel):
    source_code: str
    language: str
    stdin: str = ""
    compile_timeout_ms: int = 10000
    run_timeout_ms: int = 5000


class PistonFile(BaseModel):
    name: str
    content: str


class PistonExecuteRequest(BaseModel):
    language: str
    version: str
    files: List[PistonFile]
    stdin: str = ""
    args: List[str] = Field(default_factory=list)
    compile_timeout: int
    run_timeout: int


class PistonStage(BaseModel):
    """One phase (``compile`` or ``run``) of a Piston response."""

    code: Optional[int] = None
    output: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    signal: Optional[str] = None


class PistonRuntime(BaseModel):
    language: str
    version: str
    aliases: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Normalised execution outcome (exactly one variant per execution)
# ---------------------------------------------------------------------------

class _ResultBase(BaseModel):
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return False

    @property
    def output(self) -> str:
        return ""

    @property
    def error(self) -> str:
        return ""


class CompileFailure(_ResultBase):
    kind: Literal["compile_error"] = "compile_error"
    status: Literal["Compilation Error"] = "Compilation Error"
    raw_output: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        return self.raw_output

    @property
    def error(self) -> str:
        return self.stderr or "Compilation failed"


class RuntimeFailure(_ResultBase):
    kind: Literal["runtime_error"] = "runtime_error"
    status: Literal["Runtime Error"] = "Runtime Error"
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None

    @property
    def output(self) -> str:
        return self.stdout

    @property
    def error(self) -> str:
        return self.stderr or f"Exit code: {self.exit_code}"


class ExecutionSuccess(_ResultBase):
    kind: Literal["success"] = "success"
    status: Literal["Ran"] = "Ran"
    stdout: str = ""

    @property
    def ok(self) -> bool:
        return True

    @property
    def output(self) -> str:
        return self.stdout


class TransportFailure(_ResultBase):
    kind: Literal["transport_error"] = "transport_error"
    status: Literal["Error"] = "Error"
    message: str = ""

    @property
    def error(self) -> str:
        return self.message


class ProviderFailure(_ResultBase):
    """The provider answered, but with neither a compile failure nor a run phase."""

    kind: Literal["provider_error"] = "provider_error"
    status: Literal["Error"] = "Error"
    message: str = "Unknown error"

    @property
    def error(self) -> str:
        return self.message


ExecutionResult = Annotated[
    Union[CompileFailure, RuntimeFailure, ExecutionSuccess, TransportFailure, ProviderFailure],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# HTTP payloads
# ---------------------------------------------------------------------------

class QuickExecuteRequest(BaseModel):
    code: Optional[str] = None
    language: Optional[str] = None
    stdin: str = ""


class QuickExecuteResponse(BaseModel):
    success: bool
    status: str
    output: str = ""
    error: Optional[str] = None
    execution_time: Optional[str] = None


class LanguageInfo(BaseModel):
    key: str
    name: str
    runtime: str
    version: str
    file_name: str
    starter_code: str
