from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from irbridge import __version__
from irbridge.api.config import Settings, settings as default_settings
from irbridge.api.routes import router
from irbridge.codegen.service import CompilationService


def create_app(
    service: Optional[CompilationService] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="irbridge compilation service",
        description="LLVM IR in, target assembly out",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.compilation_service = service or CompilationService(
        settings.llc_path,
        llc_args=settings.llc_args,
        timeout=settings.codegen_timeout,
        work_dir=settings.work_dir,
    )
    app.include_router(router)
    return app
