from pydantic import BaseModel, Field
from typing import Optional


class HealthResponse(BaseModel):
    ok: bool = True
    service: str = "irbridge-codegen"
    in_flight: int = 0


class CompileIRRequest(BaseModel):
    ir: str = Field(..., description="Optimized LLVM IR text")


class CompileIRResponse(BaseModel):
    asm: str


class CompileIRError(BaseModel):
    error: str


class CapabilityOut(BaseModel):
    name: str
    supported: bool
    notes: str = ""


class CapabilitiesResponse(BaseModel):
    stages: list[CapabilityOut]
    language: list[CapabilityOut]
    codegen: list[CapabilityOut]
    llc_available: bool
    llc: Optional[str] = None
