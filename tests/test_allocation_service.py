import pytest

from stockflow.api_client import ApiError
from stockflow.allocation.allocation_service import AllocationService
from stockflow.allocation.models import OpportunityStatus, SelectionState
from stockflow.allocation.selection import set_allocation_quantity, start_selection, toggle_demand
from stockflow.errors import (
    CommitFailure,
    ConstraintViolation,
    InvalidTransitionError,
    ValidationError,
)

from tests.conftest import make_demand, make_opportunity


@pytest.fixture
def service(fake_client):
    return AllocationService(client=fake_client)


def test_allocate_posts_selected_lines(service, fake_client, opportunity):
    selection = toggle_demand(opportunity, start_selection(opportunity), 'a')

    service.allocate(opportunity, selection)

    assert fake_client.posts == [(
        '/inventory/allocation-opportunities/opp-1/allocate',
        {'allocations': [{'transactionId': 'tx-a', 'lineItemId': 'a', 'quantity': 30}]},
    )]


def test_allocate_result_reflects_the_commit(service, opportunity):
    selection = toggle_demand(opportunity, start_selection(opportunity), 'a')

    result = service.allocate(opportunity, selection)

    assert result.total_allocated == 30
    assert result.opportunity.quantity_allocated == 30
    assert result.opportunity.quantity_remaining == 20
    assert result.opportunity.status == OpportunityStatus.ALLOCATED
    assert [d.line_item_id for d in result.still_waiting] == ['b']

    # the caller's record is untouched
    assert opportunity.quantity_remaining == 50
    assert opportunity.is_pending


def test_allocate_uses_quantity_overrides(service, fake_client, opportunity):
    selection = toggle_demand(opportunity, start_selection(opportunity), 'a')
    selection = set_allocation_quantity(opportunity, selection, 'a', 45)

    result = service.allocate(opportunity, selection)

    assert fake_client.posts[0][1]['allocations'][0]['quantity'] == 45
    assert result.opportunity.quantity_remaining == 5


def test_allocate_over_the_pool_is_a_constraint_violation(service, fake_client, opportunity):
    selection = SelectionState(opportunity_id='opp-1', selected_demand_ids=('a', 'b'))

    with pytest.raises(ConstraintViolation) as exc_info:
        service.allocate(opportunity, selection)

    assert exc_info.value.requested == 55
    assert exc_info.value.available == 50
    assert fake_client.posts == []


def test_allocate_with_nothing_selected_is_rejected(service, fake_client, opportunity):
    with pytest.raises(ValidationError) as exc_info:
        service.allocate(opportunity, start_selection(opportunity))

    assert not isinstance(exc_info.value, ConstraintViolation)
    assert exc_info.value.errors == ["No waiting transactions selected"]
    assert fake_client.posts == []


def test_allocate_failure_keeps_everything_for_a_retry(service, fake_client, opportunity):
    selection = toggle_demand(opportunity, start_selection(opportunity), 'a')
    fake_client.fail_with = ApiError('POST returned 503', status_code=503)

    with pytest.raises(CommitFailure) as exc_info:
        service.allocate(opportunity, selection)

    assert isinstance(exc_info.value.cause, ApiError)
    assert opportunity.quantity_remaining == 50
    assert opportunity.is_pending
    assert selection.selected_demand_ids == ('a',)

    fake_client.fail_with = None
    result = service.allocate(opportunity, selection)
    assert result.opportunity.quantity_remaining == 20
    assert len(fake_client.posts) == 2


@pytest.mark.parametrize('status', ['allocated', 'dismissed'])
def test_only_pending_opportunities_can_be_committed(service, fake_client, status):
    opportunity = make_opportunity(50, [make_demand('a', 30)], received=80, status=status)
    selection = SelectionState(opportunity_id='opp-1', selected_demand_ids=('a',))

    with pytest.raises(InvalidTransitionError):
        service.allocate(opportunity, selection)
    with pytest.raises(InvalidTransitionError):
        service.dismiss(opportunity)
    assert fake_client.posts == []


def test_dismiss_leaves_waiting_demand_alone(service, fake_client, opportunity):
    result = service.dismiss(opportunity)

    assert fake_client.posts == [('/inventory/allocation-opportunities/opp-1/dismiss', None)]
    assert result.opportunity.status == OpportunityStatus.DISMISSED
    assert result.opportunity.quantity_remaining == 50
    assert result.still_waiting == opportunity.waiting_transactions
    assert result.allocations == ()


def test_dismiss_failure_keeps_opportunity_pending(service, fake_client, opportunity):
    fake_client.fail_with = ApiError('request timed out')

    with pytest.raises(CommitFailure):
        service.dismiss(opportunity)
    assert opportunity.is_pending
