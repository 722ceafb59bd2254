"""Service layer: CRUD operations returning SuccessOrErrors.

Services may import from domain and infrastructure layers.
Each verb has a façade that takes the type at call time and two concrete
services: one for bare entities, one for DTOs bound to an entity.
"""
