from __future__ import annotations

import shutil
from dataclasses import asdict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from irbridge.api.schemas import (
    CapabilitiesResponse,
    CompileIRError,
    CompileIRRequest,
    CompileIRResponse,
    HealthResponse,
)
from irbridge.capabilities import get_capabilities
from irbridge.codegen.service import CompilationService

router = APIRouter()


def get_service(request: Request) -> CompilationService:
    return request.app.state.compilation_service


@router.get("/health", response_model=HealthResponse)
def health(service: CompilationService = Depends(get_service)):
    return HealthResponse(ok=True, in_flight=service.in_flight)


@router.get("/capabilities", response_model=CapabilitiesResponse)
def capabilities(service: CompilationService = Depends(get_service)):
    caps = get_capabilities()
    llc = shutil.which(service.llc_path)
    return CapabilitiesResponse(
        stages=[asdict(c) for c in caps["stages"]],
        language=[asdict(c) for c in caps["language"]],
        codegen=[asdict(c) for c in caps["codegen"]],
        llc_available=llc is not None,
        llc=service.llc_path,
    )


# Sync handler: FastAPI runs it in its worker threadpool, so a slow llc
# only blocks the request that started it.
@router.post(
    "/compile-ir",
    response_model=CompileIRResponse,
    responses={500: {"model": CompileIRError}},
)
def compile_ir(req: CompileIRRequest, service: CompilationService = Depends(get_service)):
    outcome = service.compile(req.ir)
    if outcome.ok:
        return CompileIRResponse(asm=outcome.asm)
    return JSONResponse(status_code=500, content=CompileIRError(error=outcome.error).model_dump())
