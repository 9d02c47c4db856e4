"""
Unit tests for the shortlinks shell layer (run_* functions).
"""

import pytest

from shortlink.components.shortlinks import (
    CreateLinkInput,
    DeleteLinkInput,
    EditLimitInput,
    ListLinksInput,
    OpenLinkInput,
    run_bulk_delete_mine,
    run_cleanup,
    run_create,
    run_delete,
    run_edit_limit,
    run_list,
    run_open,
)
from shortlink.domain.entities import LinkStatus
from shortlink.rules.models import Rules


@pytest.fixture
def service(make_service):
    return make_service("alice", rules=Rules.model_validate({"cleanup": {"on_each_op": False}}))


def test_run_create_success(service):
    output = run_create(CreateLinkInput(long_url="https://example.com"), service)

    assert output.success
    assert output.errors == ()
    assert output.message == f"Short link: cli://{output.link.short_code}"


def test_run_create_failure(service):
    output = run_create(CreateLinkInput(long_url="nope", click_limit=5), service)

    assert not output.success
    assert output.link is None
    assert output.errors[0].code == "url_invalid"


def test_run_open(service):
    created = run_create(CreateLinkInput(long_url="https://example.com"), service)

    result = run_open(OpenLinkInput(code=created.link.short_code), service)

    assert result.outcome == "opened"


def test_run_edit_limit_message(service):
    created = run_create(CreateLinkInput(long_url="https://example.com"), service)

    output = run_edit_limit(EditLimitInput(code=created.link.short_code, new_limit=None), service)

    assert output.success
    assert output.message == "Limit updated: unlimited. Status: ACTIVE"


def test_run_delete(service, make_service):
    created = run_create(CreateLinkInput(long_url="https://example.com"), service)
    code = created.link.short_code

    refused = run_delete(DeleteLinkInput(code=code), make_service("bob"))
    deleted = run_delete(DeleteLinkInput(code=code), service)

    assert not refused.success
    assert refused.errors[0].code == "not_owner"
    assert deleted.success
    assert deleted.message == "Deleted."


def test_run_list_filters_and_sorts(service, link_repo, make_link):
    link_repo.add(make_link(short_code="low", click_count=1))
    link_repo.add(make_link(short_code="high", click_count=8))
    link_repo.add(make_link(short_code="exp", status=LinkStatus.EXPIRED))
    link_repo.add(make_link(short_code="bob", owner_uuid="bob"))

    everything = run_list(ListLinksInput(sort="clicks"), service)
    expired = run_list(ListLinksInput(status=LinkStatus.EXPIRED), service)

    assert everything.total == 3
    assert [link.short_code for link in everything.links] == ["high", "low", "exp"]
    assert [link.short_code for link in expired.links] == ["exp"]


def test_run_cleanup_and_bulk_delete(service, link_repo, make_link, clock):
    link_repo.add(make_link(short_code="a-exp", expires_at=clock.now()))
    link_repo.add(make_link(short_code="b-full", owner_uuid="bob", click_limit=1, click_count=1))
    link_repo.add(make_link(short_code="a-full", click_limit=1, click_count=1))

    mine = run_bulk_delete_mine(service)
    rest = run_cleanup(service)

    assert (mine.expired, mine.limit_reached, mine.total) == (1, 1, 2)
    assert (rest.expired, rest.limit_reached) == (0, 1)
    assert link_repo.list_all() == []
