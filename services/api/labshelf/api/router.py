from __future__ import annotations

import importlib

from fastapi import APIRouter

api_router = APIRouter()


def _include(module_path: str) -> None:
    mod = importlib.import_module(module_path)
    api_router.include_router(mod.router)


# Keep this list in the order you want routes registered.
for _mod in (
    "labshelf.api.routes.books",
    "labshelf.api.routes.catalog",
    "labshelf.api.routes.columns",
    "labshelf.api.routes.lookup",
):
    _include(_mod)
