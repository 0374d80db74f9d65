from fastapi import APIRouter

from osas.modules.accounts.admin_router import profile_router as admin_profile_router
from osas.modules.accounts.admin_router import router as admin_accounts_router
from osas.modules.accounts.router import router as student_accounts_router
from osas.modules.applications.admin_router import router as admin_applications_router
from osas.modules.applications.router import router as student_applications_router
from osas.modules.auth import router as auth_router
from osas.modules.scholarships.admin_router import router as admin_scholarships_router
from osas.modules.scholarships.router import router as student_scholarships_router

api_router = APIRouter()

api_router.include_router(auth_router, tags=["Authentication"])

api_router.include_router(student_accounts_router, prefix="/student", tags=["Student"])
api_router.include_router(student_scholarships_router, prefix="/student", tags=["Student"])
api_router.include_router(student_applications_router, prefix="/student", tags=["Student"])

api_router.include_router(
    admin_applications_router,
    prefix="/admin",
    tags=["Admin - Applications"],
)

api_router.include_router(
    admin_scholarships_router,
    prefix="/admin/scholarship",
    tags=["Admin - Scholarships"],
)

api_router.include_router(
    admin_accounts_router,
    prefix="/admin/accounts",
    tags=["Admin - Accounts"],
)

api_router.include_router(
    admin_profile_router,
    prefix="/admin",
    tags=["Admin - Profile"],
)
