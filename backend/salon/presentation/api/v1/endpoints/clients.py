"""Client endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from salon.application.schemas import (
    AppointmentDetailsResponse,
    ClientCreate,
    ClientResponse,
    ClientUpdate,
)
from salon.application.services import SalonService
from salon.domain.exceptions import EntityNotFoundError, WriteRejectedError
from salon.infrastructure.dependencies import get_salon_service

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("", response_model=list[ClientResponse])
async def list_clients(
    service: SalonService = Depends(get_salon_service),
) -> list[ClientResponse]:
    """All clients, alphabetically."""
    return [ClientResponse.model_validate(c, from_attributes=True) for c in service.list_clients()]


@router.get("/search", response_model=list[ClientResponse])
async def search_clients(
    q: str = Query("", description="Name fragment; case and spaces are ignored"),
    service: SalonService = Depends(get_salon_service),
) -> list[ClientResponse]:
    return [
        ClientResponse.model_validate(c, from_attributes=True) for c in service.search_clients(q)
    ]


@router.get("/{client_id}/history", response_model=list[AppointmentDetailsResponse])
async def client_history(
    client_id: str,
    service: SalonService = Depends(get_salon_service),
) -> list[AppointmentDetailsResponse]:
    """A client's visits, most recent first."""
    return [
        AppointmentDetailsResponse.from_details(d) for d in service.client_history(client_id)
    ]


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    service: SalonService = Depends(get_salon_service),
) -> ClientResponse:
    try:
        client = await service.add_client(data)
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return ClientResponse.model_validate(client, from_attributes=True)


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    service: SalonService = Depends(get_salon_service),
) -> ClientResponse:
    try:
        client = await service.update_client(client_id, data)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return ClientResponse.model_validate(client, from_attributes=True)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: str,
    service: SalonService = Depends(get_salon_service),
) -> None:
    try:
        await service.remove_client(client_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WriteRejectedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
