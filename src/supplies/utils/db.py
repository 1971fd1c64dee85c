"""Schema management and store helpers for the Supplies domain."""

from protean.domain import Domain
from protean.utils.query import Q
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _register_models(domain: Domain, provider_name: str) -> None:
    # Touching the repository's DAO registers the SQLAlchemy model for each
    # aggregate and projection owned by this provider.
    for record in (
        *domain.registry.aggregates.values(),
        *domain.registry.projections.values(),
    ):
        if record.cls.meta_.provider == provider_name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain):
    """Create tables for every SQL provider configured on the domain."""
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] in _SQL_PROVIDERS:
                _register_models(domain, name)
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop tables for every SQL provider configured on the domain."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _SQL_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)


def iterate_all(query, page_size: int = 100):
    """Yield every record matched by ``query``, one page at a time.

    Protean querysets default to a page of 100 records; sweeps and reports
    need the full result.
    """
    offset = 0
    while True:
        page = query.offset(offset).limit(page_size).all()
        yield from page.items
        if len(page.items) < page_size:
            return
        offset += page_size


def update_where(dao, criteria: dict, **values) -> int:
    """Write ``values`` to every record matching ``criteria`` in one store call.

    Returns the number of records matched, so callers can use it as a
    compare-and-set: zero means another writer changed the row first.
    """
    return dao._update_all(Q(**criteria), **values)
