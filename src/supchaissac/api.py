from fastapi import APIRouter

from supchaissac.modules.admin import router as admin_router
from supchaissac.modules.attachments import router as attachments_router
from supchaissac.modules.auth import router as auth_router
from supchaissac.modules.pacte import router as pacte_router
from supchaissac.modules.quotas import router as quotas_router
from supchaissac.modules.sessions import router as sessions_router
from supchaissac.modules.students import router as students_router
from supchaissac.modules.teachers import router as teachers_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(sessions_router, prefix="/sessions", tags=["Sessions"])

api_router.include_router(attachments_router, prefix="/attachments", tags=["Attachments"])

api_router.include_router(students_router, prefix="/students", tags=["Students"])

api_router.include_router(teachers_router, prefix="/teachers", tags=["Teachers"])

api_router.include_router(pacte_router, prefix="/pacte", tags=["PACTE"])

api_router.include_router(quotas_router, prefix="/quotas", tags=["Quotas"])

api_router.include_router(admin_router, prefix="/admin", tags=["Admin"])
