"""
Stock Ledger — Root conftest for pytest

Shared fixtures available to all test modules.

@file conftest.py
"""

import pytest
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from stock.permissions import AUDITOR_GROUP, WAREHOUSE_GROUP
from tests.factories import SuperuserFactory, UserFactory


@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Active user with no group; read-only access. Password TestPass2026!"""
    return UserFactory()


@pytest.fixture
def admin_user(db):
    """Superuser with default password TestPass2026!"""
    return SuperuserFactory()


@pytest.fixture
def warehouse_user(db):
    user = UserFactory(username='warehouse-clerk')
    group, _ = Group.objects.get_or_create(name=WAREHOUSE_GROUP)
    user.groups.add(group)
    return user


@pytest.fixture
def auditor_user(db):
    user = UserFactory(username='stock-auditor')
    group, _ = Group.objects.get_or_create(name=AUDITOR_GROUP)
    user.groups.add(group)
    return user


@pytest.fixture
def authenticated_client(api_client, user):
    """API client authenticated as a regular user."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    """API client authenticated as a superuser."""
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def warehouse_client(api_client, warehouse_user):
    api_client.force_authenticate(user=warehouse_user)
    return api_client


@pytest.fixture
def auditor_client(api_client, auditor_user):
    api_client.force_authenticate(user=auditor_user)
    return api_client
