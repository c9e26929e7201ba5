"""Service catalogue endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from salon.application.schemas import ServiceCreate, ServiceResponse, ServiceUpdate
from salon.application.services import SalonService
from salon.domain.exceptions import EntityNotFoundError, WriteRejectedError
from salon.infrastructure.dependencies import get_salon_service

router = APIRouter(prefix="/services", tags=["Services"])


@router.get("", response_model=list[ServiceResponse])
async def list_services(
    service: SalonService = Depends(get_salon_service),
) -> list[ServiceResponse]:
    return [ServiceResponse.model_validate(s, from_attributes=True) for s in service.list_services()]


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    data: ServiceCreate,
    service: SalonService = Depends(get_salon_service),
) -> ServiceResponse:
    try:
        created = await service.add_service(data)
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return ServiceResponse.model_validate(created, from_attributes=True)


@router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    data: ServiceUpdate,
    service: SalonService = Depends(get_salon_service),
) -> ServiceResponse:
    try:
        updated = await service.update_service(service_id, data)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return ServiceResponse.model_validate(updated, from_attributes=True)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: str,
    service: SalonService = Depends(get_salon_service),
) -> None:
    try:
        await service.remove_service(service_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
