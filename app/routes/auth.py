from flask import Blueprint, current_app, request, g
from flask_limiter.util import get_remote_address
from extensions import limiter
from app.version import API_PREFIX
from app.utils import ok
from app.utils.auth import auth_required, load_session
from app.utils.validation import validate_schema
from app.schemas.auth import LoginRequest, SignupRequest
from app.services import current_auth

auth_bp = Blueprint("auth", __name__, url_prefix=f"{API_PREFIX}/auth")
auth_bp.before_request(load_session)


# --- Sign up ---
@auth_bp.route("/signup", methods=["POST"])
@validate_schema(SignupRequest)
def signup():
    data: SignupRequest = request.validated_data
    tokens = current_auth().sign_up(data.email, data.password, data.username)
    return ok(tokens.model_dump(), message="Account created", status=201)


# --- Sign in ---
@auth_bp.route("/login", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["LOGIN_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many logins from this IP",
)
@validate_schema(LoginRequest)
def login():
    data: LoginRequest = request.validated_data
    tokens = current_auth().sign_in(data.email, data.password)
    return ok(tokens.model_dump(), message="Logged in")


# --- Sign out ---
@auth_bp.route("/logout", methods=["POST"])
@auth_required
def logout():
    current_auth().sign_out(g.session)
    return ok(message="Logged out")
