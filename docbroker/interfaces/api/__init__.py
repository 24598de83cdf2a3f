from fastapi import APIRouter

from .routes.auth import router as auth_router
from .routes.documents import router as documents_router
from .routes.editor import router as editor_router
from .routes.uploads import router as uploads_router

router = APIRouter(prefix="/api")
router.include_router(auth_router)
router.include_router(editor_router)
router.include_router(documents_router)
router.include_router(uploads_router)
