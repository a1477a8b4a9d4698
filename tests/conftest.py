"""Shared fixtures for featuregate tests."""

import pytest
from featuregate import FlagResolver, User, build_flag_table

SCENARIO_FLAGS = {
    "A": True,
    "B": False,
    "C": [
        {"percentageOfUsers": 0.25, "userRoles": ["user"]},
        {"userRoles": ["admin", "tester"]},
    ],
}


@pytest.fixture
def scenario_resolver() -> FlagResolver:
    return FlagResolver(build_flag_table(SCENARIO_FLAGS))


@pytest.fixture
def admin() -> User:
    return User(id="u1", role="admin")


@pytest.fixture
def regular_user() -> User:
    return User(id="u1", role="user")


@pytest.fixture
def scenario_flags() -> dict:
    return SCENARIO_FLAGS
