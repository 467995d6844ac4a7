"""Credential store: principal resolution and login lookups."""

import uuid

import pytest

from bizdir.auth.jwt import PrincipalKind
from bizdir.auth.store import CredentialStore
from conftest import PASSWORD, make_admin_user, make_agent, make_operator


@pytest.mark.asyncio
async def test_active_operator_resolves(db_session):
    operator = await make_operator(db_session)
    found = await CredentialStore(db_session).find_active_principal(
        PrincipalKind.OPERATOR, str(operator.id)
    )
    assert found is operator


@pytest.mark.asyncio
async def test_inactive_operator_is_not_found(db_session):
    operator = await make_operator(db_session, is_active=False)
    store = CredentialStore(db_session)
    assert await store.find_active_principal(PrincipalKind.OPERATOR, str(operator.id)) is None
    assert await store.authenticate(PrincipalKind.OPERATOR, operator.email, PASSWORD) is None


@pytest.mark.asyncio
async def test_unknown_or_malformed_id(db_session):
    store = CredentialStore(db_session)
    assert await store.find_active_principal(PrincipalKind.AGENT, str(uuid.uuid4())) is None
    assert await store.find_active_principal(PrincipalKind.AGENT, "not-a-uuid") is None
    assert await store.find_active_principal(PrincipalKind.AGENT, None) is None


@pytest.mark.asyncio
async def test_id_of_another_kind_does_not_resolve(db_session):
    agent = await make_agent(db_session)
    store = CredentialStore(db_session)
    assert await store.find_active_principal(PrincipalKind.OPERATOR, str(agent.id)) is None


@pytest.mark.asyncio
async def test_agent_login_by_email_or_phone(db_session):
    agent = await make_agent(db_session)
    store = CredentialStore(db_session)
    assert await store.authenticate(PrincipalKind.AGENT, agent.email.upper(), PASSWORD) is agent
    assert await store.authenticate(PrincipalKind.AGENT, f" {agent.phone} ", PASSWORD) is agent
    assert await store.authenticate(PrincipalKind.AGENT, agent.email, "wrong-pass") is None
    assert await store.authenticate(PrincipalKind.AGENT, "", PASSWORD) is None


@pytest.mark.asyncio
async def test_admin_login_by_email(db_session):
    user = await make_admin_user(db_session, role="editor")
    store = CredentialStore(db_session)
    assert await store.authenticate(PrincipalKind.ADMIN_USER, user.email, PASSWORD) is user
