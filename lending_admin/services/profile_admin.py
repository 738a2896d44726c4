from __future__ import annotations

from datetime import datetime

from lending_admin.models.user_profile import UserActivationProfile
from lending_admin.schemas.audit import ModificationType, TargetType
from lending_admin.schemas.profile import ProfileMutationRequest
from lending_admin.services import validation
from lending_admin.services.authz import ActorIdentity
from lending_admin.services.mutations import MutationTarget
from lending_admin.services.transitions import TransitionPolicy

EDITABLE_FIELDS = (
    "full_name",
    "gender",
    "date_of_birth",
    "marital_status",
    "nationality",
    "residing_country",
    "state_region_province",
    "town_city",
    "id_type",
    "id_number",
    "account_type",
    "bank_name",
    "account_number",
    "account_holder_name",
)


class ProfileTarget(MutationTarget):
    """Admin edits of a user's activation profile, addressed by the user's id."""

    target_type = TargetType.USER_PROFILE.value
    model = UserActivationProfile
    lookup_column = "user_id"
    status_field = "activation_status"
    snapshot_fields = EDITABLE_FIELDS + ("activation_status",)
    tracked_fields = EDITABLE_FIELDS
    not_found_message = "User profile not found"

    def modification_type(self, request: ProfileMutationRequest) -> str:
        return ModificationType.PROFILE_UPDATE.value

    def validate(self, request: ProfileMutationRequest, actor: ActorIdentity) -> validation.ValidationResult:
        return validation.validate_profile_mutation(request, actor)

    def validate_current(
        self, profile: UserActivationProfile, request: ProfileMutationRequest, policy: TransitionPolicy
    ) -> list[str]:
        return validation.status_against_current(
            target_type=self.target_type,
            current=profile.activation_status,
            proposed=request.activation_status,
            explicit=validation.explicit_status_change(request, "activation_status"),
            policy=policy,
        )

    def apply(self, profile: UserActivationProfile, request: ProfileMutationRequest, now: datetime) -> None:
        supplied = request.model_fields_set
        for name in EDITABLE_FIELDS:
            if name not in supplied:
                continue
            value = getattr(request, name)
            if name == "date_of_birth":
                value = validation.parse_birth_date(value)
            elif isinstance(value, str):
                value = value.strip() or None
            setattr(profile, name, value)
        if request.activation_status is not None:
            profile.activation_status = request.activation_status


PROFILE_TARGET = ProfileTarget()
