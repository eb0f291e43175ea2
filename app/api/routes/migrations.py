from fastapi import APIRouter, Depends

from app.api.dependencies import require_capability, require_db
from app.core.policy import Capability
from app.cqrs.commands import migrations
from app.models.schemas import MigrationRunResponse

router = APIRouter(prefix="/migrations", tags=["migrations"])


@router.post(
    "/run",
    response_model=MigrationRunResponse,
    dependencies=[Depends(require_capability(Capability.SETTINGS_MANAGE))],
)
def run_migrations():
    require_db()
    return migrations.run_migrations()
