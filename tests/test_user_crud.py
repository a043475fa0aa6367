import pytest

from app.crud.errors import Conflict, NotFound, ValidationError
from app.crud.user_crud import get_user, is_institutional_email, register_user


@pytest.mark.parametrize(
    "email,expected",
    [
        ("jane@harvard.edu", True),
        ("Jane@College.Harvard.edu", True),
        ("jane@gmail.com", False),
        ("jane@notharvard.edu", False),
        ("@harvard.edu", False),
        ("jane@@harvard.edu", False),
    ],
)
def test_institutional_email(email, expected):
    assert is_institutional_email(email, ["harvard.edu", "college.harvard.edu"]) is expected


def test_register_and_get(db):
    user = register_user(db, name=" Jane ", email="jane@harvard.edu", user_id="u-jane")
    db.commit()
    assert user.name == "Jane"
    assert get_user(db, "u-jane").email == "jane@harvard.edu"


def test_register_generates_id(db):
    user = register_user(db, name="Kim", email="kim@harvard.edu")
    db.commit()
    assert user.id


def test_register_rejects_outside_domain(db):
    with pytest.raises(ValidationError):
        register_user(db, name="Eve", email="eve@gmail.com")


def test_register_rejects_blank_name(db):
    with pytest.raises(ValidationError):
        register_user(db, name="  ", email="eve@harvard.edu")


def test_duplicate_email_conflicts(db):
    register_user(db, name="Jane", email="jane@harvard.edu")
    db.commit()
    with pytest.raises(Conflict):
        register_user(db, name="Jane again", email="JANE@harvard.edu")


def test_unknown_user(db):
    with pytest.raises(NotFound):
        get_user(db, "nobody")
