"""Shared fixtures: a view-model wired to mocked collaborators."""

from unittest.mock import AsyncMock

import pytest

from repairhub.services.auth import SignupSuccess
from repairhub.services.directory import StaticRegionDirectory
from repairhub.viewmodels.signup import SignupViewModel


@pytest.fixture
def auth_service():
    auth = AsyncMock()
    auth.signup.return_value = SignupSuccess(token="tok1")
    return auth


@pytest.fixture
def token_store():
    return AsyncMock()


@pytest.fixture
def directory():
    return StaticRegionDirectory()


@pytest.fixture
def vm(auth_service, token_store, directory):
    return SignupViewModel(auth_service, token_store, directory)


def fill_valid_form(vm, **overrides):
    """Fill every field with values that pass validation, then apply overrides."""
    values = {
        "name": "Abel",
        "email": "a@b.com",
        "password": "secret1",
        "role": "Citizen",
        "region": "Amhara",
        "city": "Bahir Dar",
    }
    values.update(overrides)
    vm.set_name(values["name"])
    vm.set_email(values["email"])
    vm.set_password(values["password"])
    vm.set_role(values["role"])
    vm.select_region(values["region"])
    vm.select_city(values["city"])


@pytest.fixture
def fill_form():
    return fill_valid_form
