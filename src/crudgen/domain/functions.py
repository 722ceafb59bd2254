"""Capability flags declared by DTOs and expectation tags used by resolution.

``ServiceFunctions`` is what a DTO says it supports. ``WhatItShouldBe`` is
what a call site is prepared to accept when it resolves a type argument to a
concrete service.
"""

from __future__ import annotations

from enum import Flag, auto


class ServiceFunctions(Flag):
    """Operations a DTO supports, plus setup hints."""

    NONE = 0
    LIST = auto()
    DETAIL = auto()
    CREATE = auto()
    UPDATE = auto()
    DELETE = auto()
    # The DTO has no secondary data, so setup_secondary_data is never called
    DOES_NOT_NEED_SETUP = auto()

    READ_LIST = LIST
    READ_SINGLE = DETAIL

    ALL_CRUD = LIST | DETAIL | CREATE | UPDATE | DELETE
    ALL_CRUD_BUT_CREATE = LIST | DETAIL | UPDATE | DELETE
    ALL_CRUD_BUT_LIST = DETAIL | CREATE | UPDATE | DELETE


class WhatItShouldBe(Flag):
    """Shapes of type argument a call site accepts."""

    ENTITY = auto()
    SPECIFIC_DTO = auto()

    ENTITY_OR_DTO = ENTITY | SPECIFIC_DTO
    DTO_ONLY = SPECIFIC_DTO
    ENTITY_ONLY = ENTITY

    def describe(self) -> str:
        """Human-readable form for configuration error messages."""
        parts = []
        if WhatItShouldBe.ENTITY in self:
            parts.append("a mapped entity class")
        if WhatItShouldBe.SPECIFIC_DTO in self:
            parts.append("an EntityDto bound to a mapped entity")
        return " or ".join(parts)
