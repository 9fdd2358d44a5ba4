"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from kure import obs
from kure.api import ops
from kure.groups.api import router as groups_router
from kure.infra import postgres


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="kure groups", lifespan=lifespan)
obs.init(app)
app.include_router(ops.router)
app.include_router(groups_router)
