"""Infrastructure layer: SQLAlchemy engine, key filters, persistence context.

This layer depends on stdlib and third-party libs (SQLAlchemy).
It must never import from domain or services, with the single exception
of the result type that ``DbContext.save_changes_with_validation`` returns.
"""
