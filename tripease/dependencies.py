from typing import Annotated

from fastapi import Depends, Request

from tripease.config import Settings
from tripease.services.aggregation import AggregationService
from tripease.services.catalog import CatalogStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_aggregation_service(request: Request) -> AggregationService:
    return request.app.state.aggregation_service


def get_catalog_store(request: Request) -> CatalogStore:
    return request.app.state.catalog_store


SettingsDep = Annotated[Settings, Depends(get_settings)]
AggregationDep = Annotated[AggregationService, Depends(get_aggregation_service)]
CatalogDep = Annotated[CatalogStore, Depends(get_catalog_store)]
