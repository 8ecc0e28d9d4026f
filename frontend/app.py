"""
Flask application for the Tintern web frontend.

Thin surface over the Tintern backend:
- Route guard on every request (before_request), driven by the session
  cookies
- Login/logout endpoints that write/clear the session cookies
- Profile and job pages rendered as JSON (layout lives in the browser)

Stack: Flask (async views) + tintern client library
"""

import asyncio
import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from flask import Flask, g, jsonify, redirect, request

from tintern.client import ClientContext
from tintern.common.config import ClientSettings, get_settings, validate_config_on_startup
from tintern.common.errors import TinternError
from tintern.common.logger import get_logger, setup_logging
from tintern.jobs.service import filter_jobs
from tintern.navigation.guard import GuardAction, RouteGuard
from tintern.navigation.navigator import Navigator
from tintern.session.store import SessionStore
from version import __version__ as APP_VERSION

from .cookie_storage import CookieStorage, apply_cookie_ops

setup_logging(get_settings().log_level, get_settings().log_format)
logger = get_logger(__name__, scope="web")

# Routes reachable without a session in addition to the configured ones
EXTRA_PUBLIC_PATHS = ("/health",)


class FlaskNavigator(Navigator):
    """Records the navigation target; after_request turns it into a redirect."""

    def navigate(self, location: str) -> None:
        g.redirect_to = location


def _session_store(settings: ClientSettings) -> SessionStore:
    return SessionStore(
        CookieStorage(settings),
        token_key=settings.token_cookie_name,
        user_key=settings.user_cookie_name,
        ttl_days=settings.session_ttl_days,
    )


def create_app(
    settings: Optional[ClientSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Flask:
    """
    Build the Flask app.

    Args:
        settings: Client settings (defaults to the cached environment settings)
        transport: Optional httpx transport for the backend (tests pass a
            MockTransport)

    Raises:
        ValueError: the settings fail startup validation
    """
    settings = validate_config_on_startup(settings)
    app = Flask(__name__)
    app.config["TINTERN_SETTINGS"] = settings
    app.config["BACKEND_TRANSPORT"] = transport

    # Session configuration
    secret_key = settings.flask_secret_key
    if not secret_key:
        logger.warning("FLASK_SECRET_KEY not set. Generating random key (flash data will not survive restarts)")
        secret_key = os.urandom(24).hex()
    app.secret_key = secret_key
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SECURE"] = settings.is_production
    app.config["SESSION_COOKIE_SAMESITE"] = "Strict"

    public_paths = list(settings.public_paths_list) + list(EXTRA_PUBLIC_PATHS)

    @asynccontextmanager
    async def client_context():
        """Per-request client bound to the request cookies."""
        ctx = ClientContext(
            settings,
            storage=CookieStorage(settings),
            navigator=FlaskNavigator(),
            transport=app.config["BACKEND_TRANSPORT"],
        )
        ctx.init()
        try:
            yield ctx
        finally:
            await ctx.aclose()

    # ========================================================================
    # Route guard
    # ========================================================================

    @app.before_request
    def guard_request():
        guard = RouteGuard(settings, public_paths=public_paths)
        guard.load(_session_store(settings))
        decision = guard.decide(request.path)
        if decision.action != GuardAction.REDIRECT:
            return None
        # For API endpoints, return JSON error instead of redirect
        if request.path.startswith("/api/"):
            return jsonify({"error": "Not authenticated", "redirect": decision.location}), 401
        return redirect(decision.location)

    @app.after_request
    def finalize_response(response):
        target = g.pop("redirect_to", None)
        if target and not request.path.startswith("/api/"):
            response = redirect(target)
        return apply_cookie_ops(response, settings)

    # ========================================================================
    # Auth API
    # ========================================================================

    @app.route("/api/auth/login", methods=["POST"])
    async def login():
        data = request.get_json(silent=True) or {}
        email = (data.get("email") or "").strip()
        password = data.get("password") or ""
        if not email or not password:
            return jsonify({"error": "email and password are required"}), 400

        async with client_context() as ctx:
            outcome = await ctx.auth.login(email, password, callback_url=data.get(settings.callback_param))
        g.pop("redirect_to", None)
        if not outcome.success:
            return jsonify({"error": outcome.message}), 401
        return jsonify({
            "success": True,
            "user": outcome.user.model_dump(by_alias=True),
            "redirect": outcome.redirect_to,
        })

    @app.route("/api/auth/signup", methods=["POST"])
    async def signup():
        data = request.get_json(silent=True) or {}
        async with client_context() as ctx:
            outcome = await ctx.auth.signup(data)
        g.pop("redirect_to", None)
        if not outcome.success:
            return jsonify({"error": outcome.message}), 400
        return jsonify({"success": True, "message": outcome.message, "redirect": outcome.redirect_to}), 201

    @app.route("/api/auth/logout", methods=["POST"])
    async def logout():
        async with client_context() as ctx:
            outcome = await ctx.auth.logout()
        g.pop("redirect_to", None)
        return jsonify({"success": True, "redirect": outcome.redirect_to})

    # ========================================================================
    # Pages
    # ========================================================================

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "healthy", "version": APP_VERSION})

    @app.route("/", methods=["GET"])
    def index():
        session = _session_store(settings).read()
        return jsonify({
            "app": "tintern",
            "authenticated": session.is_authenticated,
            "user": session.user.model_dump(by_alias=True) if session.user else None,
        })

    @app.route("/auth/login", methods=["GET"])
    def login_page():
        return jsonify({"page": "login", settings.callback_param: request.args.get(settings.callback_param)})

    @app.route("/auth/signup", methods=["GET"])
    def signup_page():
        return jsonify({"page": "signup"})

    @app.route("/profile", methods=["GET"])
    async def profile():
        async with client_context() as ctx:
            education, experience = await asyncio.gather(
                ctx.education.fetch_all(), ctx.experience.fetch_all()
            )
            user = ctx.auth.user
            return jsonify({
                "user": user.model_dump(by_alias=True) if user else None,
                "educations": [e.to_record() for e in ctx.education.items],
                "experiences": [e.to_record() for e in ctx.experience.items],
                "errors": [r.message for r in (education, experience) if not r.success],
            })

    @app.route("/jobs", methods=["GET"])
    async def jobs_page():
        async with client_context() as ctx:
            try:
                jobs = await ctx.jobs.list_jobs()
            except TinternError as e:
                logger.warning(f"Failed to fetch jobs: {e}")
                return jsonify({"jobs": [], "error": getattr(e, "message", None) or str(e)}), 502
        jobs = filter_jobs(
            jobs,
            keyword=request.args.get("keyword"),
            location=request.args.get("location"),
            industry=request.args.get("industry"),
        )
        return jsonify({"jobs": jobs, "count": len(jobs)})

    return app


app = create_app()
