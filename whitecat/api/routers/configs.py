from __future__ import annotations

from fastapi import APIRouter, Depends

from whitecat.api.deps import get_get_server_config_use_case, get_list_server_configs_use_case
from whitecat.api.schemas.configs import (
    ServerConfigDetailResponse,
    ServerConfigListResponse,
    ServerConfigResponse,
)
from whitecat.application.use_cases.server_configs import (
    GetServerConfigUseCase,
    ListServerConfigsUseCase,
)
from whitecat.domain.entities.server_config import ServerConfig


router = APIRouter()


def config_response(config: ServerConfig) -> ServerConfigResponse:
    return ServerConfigResponse(
        id=config.id,
        name=config.name,
        cpu_cores=config.cpu_cores,
        ram_gb=config.ram_gb,
        storage_gb=config.storage_gb,
        storage_type=config.storage_type,
        bandwidth_gb=config.bandwidth_gb,
        price_monthly=config.price_monthly,
        max_websites=config.max_websites,
        features=list(config.features),
        is_active=config.is_active,
        created_at=config.created_at,
        updated_at=config.updated_at,
    )


@router.get("/api/configs", response_model=ServerConfigListResponse)
def list_server_configs(
    use_case: ListServerConfigsUseCase = Depends(get_list_server_configs_use_case),
):
    return ServerConfigListResponse(data=[config_response(item) for item in use_case.execute()])


@router.get("/api/configs/{config_id}", response_model=ServerConfigDetailResponse)
def get_server_config(
    config_id: int,
    use_case: GetServerConfigUseCase = Depends(get_get_server_config_use_case),
):
    return ServerConfigDetailResponse(data=config_response(use_case.execute(config_id=config_id)))
