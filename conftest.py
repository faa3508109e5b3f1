import itertools

import pytest

from accounts.models import User
from kitchen.choices import RegistrationStatus

_phones = itertools.count(5012340000)


@pytest.fixture
def make_member(db):
    """Creates an approved member with a unique phone and e-mail; override any field by keyword."""
    def make(**kwargs):
        phone = str(next(_phones))
        fields = {
            "username": f"member{phone}@example.com",
            "email": f"member{phone}@example.com",
            "phone": phone,
            "full_name": "Anjali Menon",
            "role": User.Role.MEMBER,
            "status": RegistrationStatus.APPROVED,
            "password": "curryleaf123",
        }
        fields.update(kwargs)
        return User.objects.create_user(**fields)
    return make


@pytest.fixture
def kitchen_admin(db):
    return User.objects.create_user(
        username="admin@keralakitchen.com",
        email="admin@keralakitchen.com",
        password="admin12345",
        role=User.Role.ADMIN,
        full_name="Kitchen Admin",
        status=RegistrationStatus.APPROVED,
    )


@pytest.fixture
def admin_client(client, kitchen_admin):
    client.force_login(kitchen_admin)
    return client
