from flask import Blueprint, request, g
from app.version import API_PREFIX
from app.utils import ok
from app.utils.auth import auth_required, load_session
from app.utils.validation import validate_schema
from app.schemas.profile import ProfileUpdate
from app.services import current_store, current_sink
from app.services.profile import ProfileService

profile_bp = Blueprint("profile", __name__, url_prefix=f"{API_PREFIX}/profile")
profile_bp.before_request(load_session)


@profile_bp.route("", methods=["GET"])
@auth_required
def get_profile():
    profile = ProfileService(current_store(), current_sink()).get_profile(g.session)
    return ok(profile.model_dump(mode="json") if profile else None)


@profile_bp.route("/update", methods=["POST"])
@auth_required
@validate_schema(ProfileUpdate)
def update_profile():
    changes: ProfileUpdate = request.validated_data
    profile = ProfileService(current_store(), current_sink()).update_profile(g.session, changes)
    return ok(profile.model_dump(mode="json"), message="Profile updated")
