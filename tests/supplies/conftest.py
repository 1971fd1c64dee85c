import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def supplies_bed():
    from supplies.domain import supplies

    bed = DomainFixture(supplies)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(supplies_bed):
    from supplies.ledger import reset_ledger

    with supplies_bed.domain_context():
        reset_ledger()
        yield
        reset_ledger()

        # Clear all databases and drain event stores
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
