"""Authentication routes."""

from __future__ import annotations

from flask import g

from ...extensions import get_session_factory
from ...security import issue_token, login_required
from ...services import auth as auth_service
from ..common import parse_form, success
from . import bp
from .forms import LoginForm, PasswordForm, ProfileForm, RegisterForm


@bp.post("/register")
def register():
    form = parse_form(RegisterForm)
    user = auth_service.register_user(
        name=form.name,
        username=form.username,
        email=form.email,
        password=form.password,
        session_factory=get_session_factory(),
    )
    return success(
        {"user": user.profile(), "token": issue_token(user.id)},
        message="User registered successfully",
        status=201,
    )


@bp.post("/login")
def login():
    form = parse_form(LoginForm)
    user = auth_service.authenticate(
        email=form.email, password=form.password, session_factory=get_session_factory()
    )
    return success(
        {"user": user.profile(), "token": issue_token(user.id)}, message="Login successful"
    )


@bp.get("/me")
@login_required
def me():
    return success({"user": g.current_user.profile()})


@bp.put("/profile")
@login_required
def update_profile():
    form = parse_form(ProfileForm)
    user = auth_service.update_profile(
        g.current_user.id, changes=form.changes(), session_factory=get_session_factory()
    )
    return success({"user": user.profile()}, message="Profile updated successfully")


@bp.put("/password")
@login_required
def change_password():
    form = parse_form(PasswordForm)
    auth_service.change_password(
        g.current_user.id,
        current_password=form.current_password,
        new_password=form.new_password,
        session_factory=get_session_factory(),
    )
    return success(message="Password changed successfully")


@bp.post("/logout")
@login_required
def logout():
    # Tokens are stateless; the client discards its copy.
    return success(message="Logout successful")
