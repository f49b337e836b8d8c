"""Fixtures for users."""

import pytest

from app.models.user import User


def make_user(db, faker):
    user = User(
        username=faker.unique.user_name()[:50],
        phone_number=f"+1555{faker.unique.numerify('#######')}",
        display_name=faker.name(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def setup_user(db, faker):
    """The user most tests act as."""
    return make_user(db, faker)


@pytest.fixture(scope="function")
def setup_another_user(db, faker):
    return make_user(db, faker)
