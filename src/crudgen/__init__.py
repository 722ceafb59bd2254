"""crudgen: generic CRUD services over SQLAlchemy entities and pydantic DTOs."""

__version__ = "0.1.0"
