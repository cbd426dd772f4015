"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from installment_engine.api.routes import deferrals, schedules, settlements
from installment_engine.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Installment Engine",
    description="Payment schedules for declining-ownership rental and amortized financing",
    version="0.1.0",
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schedules.router)
app.include_router(deferrals.router)
app.include_router(settlements.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
