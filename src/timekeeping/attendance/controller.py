from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.validators import require_limit
from ..core.constants import LOGOUT_NOTICE
from ..core.enums import NoticeKind
from ..core.exceptions import (
    AlreadyClockedIn,
    DomainError,
    InvalidOrdering,
    NoOpenSession,
    PersistenceFailure,
    ValidationError,
)
from ..container import Container

log = logging.getLogger(__name__)

MAX_HISTORY_LIMIT = 366

_STATUS_BY_ERROR = (
    (AlreadyClockedIn, 409),
    (NoOpenSession, 409),
    (InvalidOrdering, 422),
    (PersistenceFailure, 503),
    (ValidationError, 400),
)


def _notice(success: bool, message: str, kind: NoticeKind, **extra) -> dict:
    return {"success": success, "message": message, "kind": kind.value, **extra}


def _error_response(exc: DomainError):
    status = next((code for err_type, code in _STATUS_BY_ERROR if isinstance(exc, err_type)), 500)
    return jsonify(_notice(False, str(exc), exc.kind)), status


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                user_id = int(session["user_id"])
            except (KeyError, TypeError, ValueError):
                session.pop("user_id", None)
                body = _notice(False, "Please log in to continue", NoticeKind.WARNING, redirect=container.login_url)
                return jsonify(body), 401
            return view(user_id, *args, **kwargs)

        return wrapper

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in(user_id: int):
        try:
            record = service.clock_in(user_id)
        except DomainError as e:
            return _error_response(e)
        return jsonify(_notice(True, "Time in recorded", NoticeKind.SUCCESS, record=record.to_dict())), 201

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out(user_id: int):
        try:
            record = service.clock_out(user_id)
        except DomainError as e:
            return _error_response(e)
        return jsonify(_notice(True, "Time out recorded", NoticeKind.SUCCESS, record=record.to_dict())), 200

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today(user_id: int):
        try:
            record = service.get_today_record(user_id)
        except DomainError as e:
            return _error_response(e)
        message = "Timed in today" if record else "Not timed in yet today"
        return jsonify(_notice(True, message, NoticeKind.INFO, record=record.to_dict() if record else None))

    @app.route("/api/attendance/records", methods=["GET"], endpoint="attendance_records")
    @login_required
    def attendance_records(user_id: int):
        try:
            limit = require_limit(request.args.get("limit", service.history_limit), "limit", maximum=MAX_HISTORY_LIMIT)
            rows = service.get_history_ui(user_id, limit=limit)
        except DomainError as e:
            return _error_response(e)
        return jsonify(_notice(True, f"{len(rows)} record(s)", NoticeKind.INFO, records=rows))

    @app.route("/api/session/policy", methods=["GET"], endpoint="session_policy")
    def session_policy():
        return jsonify(
            {
                "idle_timeout_sec": container.idle_timeout_sec,
                "channels": list(container.activity_channels),
                "login_url": container.login_url,
                "logout_notice": LOGOUT_NOTICE,
            }
        )

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        user_id = session.get("user_id")
        session.clear()
        if user_id is not None:
            log.info("User %s logged out", user_id)
        return jsonify(_notice(True, "Logged out", NoticeKind.INFO, redirect=container.login_url))
