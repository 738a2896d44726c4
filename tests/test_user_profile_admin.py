from datetime import date
from uuid import uuid4

from conftest import audit_entries, make_profile, notifications_in

from lending_admin.models.user_profile import UserActivationProfile

REASON = "Corrected details after document verification"


def _url(user_id) -> str:
    return f"/api/v1/admin/users/{user_id}/profile"


def _body(actor, **fields) -> dict:
    return {"reason": REASON, "adminId": actor.actor_id, **fields}


def test_profile_update_notifies_owner_and_masks_response(client, store, admin_actor):
    profile = store.put(make_profile())

    response = client.put(
        _url(profile.user_id), json=_body(admin_actor, fullName="Jane Doe", nationality="Canadian")
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["profile"]["fullName"] == "Jane Doe"
    assert payload["profile"]["idNumber"] == "****6789"
    assert payload["profile"]["accountNumber"] == "****7890"
    assert payload["notification"] == {"sent": True, "type": "profile_updated"}

    row = store.row(UserActivationProfile, profile.id)
    assert row["full_name"] == "Jane Doe"
    assert row["nationality"] == "Canadian"

    [notification] = notifications_in(store)
    assert notification["user_id"] == profile.user_id
    assert notification["message"] == (
        "Your profile information has been updated by an administrator: full name, nationality."
    )


def test_activation_status_change_is_a_profile_update(client, store, admin_actor):
    profile = store.put(make_profile())

    response = client.put(_url(profile.user_id), json=_body(admin_actor, activationStatus="completed"))

    assert response.status_code == 200
    assert response.json()["profile"]["activationStatus"] == "completed"
    assert response.json()["notification"]["type"] == "profile_updated"


def test_birth_date_is_stored_as_a_date(client, store, admin_actor):
    profile = store.put(make_profile())

    response = client.put(_url(profile.user_id), json=_body(admin_actor, dateOfBirth="1985-03-20"))

    assert response.status_code == 200
    assert store.row(UserActivationProfile, profile.id)["date_of_birth"] == date(1985, 3, 20)
    assert response.json()["profile"]["dateOfBirth"] == "1985-03-20"


def test_invalid_fields_are_reported_together(client, store, admin_actor):
    profile = store.put(make_profile())

    response = client.put(_url(profile.user_id), json=_body(admin_actor, fullName="", dateOfBirth="invalid"))

    assert response.status_code == 400
    assert response.json()["errors"] == ["Full name is required", "Invalid date of birth"]
    assert store.row(UserActivationProfile, profile.id)["full_name"] == "John Doe"


def test_underage_birth_date_is_rejected(client, store, admin_actor):
    profile = store.put(make_profile())
    recent = date(date.today().year - 10, 1, 1).isoformat()

    response = client.put(_url(profile.user_id), json=_body(admin_actor, dateOfBirth=recent))

    assert response.status_code == 400
    assert response.json()["message"] == "User must be at least 18 years old"


def test_missing_admin_id_is_rejected(client, store):
    profile = store.put(make_profile())

    response = client.put(_url(profile.user_id), json={"reason": REASON, "fullName": "Jane Doe"})

    assert response.status_code == 400
    assert response.json()["message"] == "Admin ID is required"


def test_identical_values_change_nothing(client, store, admin_actor):
    profile = store.put(make_profile())

    response = client.put(_url(profile.user_id), json=_body(admin_actor, fullName="John Doe"))

    assert response.status_code == 400
    assert response.json()["message"] == "No changes detected"
    assert audit_entries(store) == []
    assert notifications_in(store) == []


def test_unknown_user_is_not_found(client, admin_actor):
    response = client.put(_url(uuid4()), json=_body(admin_actor, fullName="Jane Doe"))

    assert response.status_code == 404
    assert response.json()["message"] == "User profile not found"


def test_audit_entry_never_stores_raw_account_numbers(client, store, admin_actor):
    profile = store.put(make_profile())

    client.put(_url(profile.user_id), json=_body(admin_actor, accountNumber="5555444433"))

    [entry] = audit_entries(store)
    assert entry["target_type"] == "user_profile"
    assert entry["modification_type"] == "profile_update"
    assert entry["changes"]["account_number"] == {"from": "****7890", "to": "****4433"}
    assert "5555444433" not in str(entry)
