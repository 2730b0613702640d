"""Tests for the User entity."""

import pytest

from wishin.core.errors import InvalidAttributeError
from wishin.domain.user import User

USER_ID = "550e8400-e29b-41d4-a716-446655440000"
OTHER_ID = "7c9e6679-7425-40de-944b-e07fc1f90ae7"


def _create(**overrides):
    props = {"id": USER_ID, "email": "alice@example.com", "username": "alice_s"}
    props.update(overrides)
    return User.create(**props)


class TestCreate:
    def test_valid_user(self):
        user = _create(bio="Hi", image_url="https://cdn.example.com/a.png")
        assert user.email == "alice@example.com"
        assert user.bio == "Hi"

    def test_fields_trimmed(self):
        user = _create(email=" alice@example.com ", username=" alice ", bio=" hi ")
        assert (user.email, user.username, user.bio) == ("alice@example.com", "alice", "hi")

    def test_id_must_be_uuid(self):
        with pytest.raises(InvalidAttributeError, match="UUID"):
            _create(id="user_abc123")

    @pytest.mark.parametrize("email", ["alice", "alice@example", "al ice@example.com"])
    def test_email_format(self, email):
        with pytest.raises(InvalidAttributeError, match="email format"):
            _create(email=email)

    @pytest.mark.parametrize("username", ["al", "a" * 31])
    def test_username_length(self, username):
        with pytest.raises(InvalidAttributeError, match="username length"):
            _create(username=username)

    def test_username_format(self):
        with pytest.raises(InvalidAttributeError, match="Alphanumeric"):
            _create(username="alice smith")

    def test_separators_allowed(self):
        assert _create(username="a.l-i_ce").username == "a.l-i_ce"

    def test_long_bio(self):
        with pytest.raises(InvalidAttributeError, match="bio"):
            _create(bio="x" * 501)

    def test_bad_image_url(self):
        with pytest.raises(InvalidAttributeError, match="image_url"):
            _create(image_url="http://exa mple.com/a.png")


class TestReconstitute:
    def test_legacy_values_load(self):
        user = User.reconstitute({"id": USER_ID, "email": "legacy", "username": "x"})
        assert user.email == "legacy"
        assert user.username == "x"

    def test_id_still_checked(self):
        with pytest.raises(InvalidAttributeError, match="UUID"):
            User.reconstitute({"id": "bad", "email": "a@b.co", "username": "alice"})

    def test_empty_email(self):
        with pytest.raises(InvalidAttributeError, match="email"):
            User.reconstitute({"id": USER_ID, "email": "", "username": "alice"})

    def test_missing_key(self):
        with pytest.raises(InvalidAttributeError, match="Missing email"):
            User.reconstitute({"id": USER_ID, "username": "alice"})

    def test_round_trip(self):
        user = _create(bio="Hello")
        assert User.reconstitute(user.to_props()) == user


class TestUpdate:
    def test_update_username(self):
        user = _create()
        updated = user.update(username="alice_new")
        assert updated.username == "alice_new"
        assert user.username == "alice_s"
        assert updated.has_same_identity(user)

    def test_none_values_ignored(self):
        user = _create(bio="Keep me")
        assert user.update(bio=None).bio == "Keep me"

    def test_same_identity_fields_tolerated(self):
        user = _create()
        assert user.update(id=USER_ID, email=user.email, bio="x").bio == "x"

    def test_id_change_rejected(self):
        with pytest.raises(InvalidAttributeError, match="Cannot update entity ID"):
            _create().update(id=OTHER_ID)

    def test_email_change_rejected(self):
        with pytest.raises(InvalidAttributeError, match="Cannot update email"):
            _create().update(email="bob@example.com")

    def test_unknown_field(self):
        with pytest.raises(InvalidAttributeError, match="Unknown field"):
            _create().update(password="secret")

    def test_strict_rules_apply(self):
        with pytest.raises(InvalidAttributeError, match="bio"):
            _create().update(bio="x" * 501)
