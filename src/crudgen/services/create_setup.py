"""CreateSetupService: a blank DTO ready for a create form."""

from __future__ import annotations

from typing import Any

from crudgen.domain.functions import ServiceFunctions, WhatItShouldBe
from crudgen.services.base import DtoService, ServiceFacade
from crudgen.services.dto import EntityDto
from crudgen.services.result import SuccessOrErrors
from crudgen.services.telemetry import traced


class DtoCreateSetupService[TEntity, TDto: EntityDto[Any]](DtoService[TEntity, TDto]):
    @traced
    def get_dto(self) -> SuccessOrErrors[TDto]:
        status: SuccessOrErrors[TDto] = self._dto_cls.check_supported(ServiceFunctions.CREATE)
        if status.is_valid:
            status.result = self._dto_cls.create_dto(self._db)
        return status


class CreateSetupService(ServiceFacade):
    """Only DTOs have a create form, so entities are rejected."""

    dto_service = DtoCreateSetupService

    def get_dto(self, dto_cls: type[EntityDto[Any]]) -> SuccessOrErrors[Any]:
        return self._resolve(dto_cls, WhatItShouldBe.DTO_ONLY).get_dto()
