from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request
from loguru import logger

from ..core.exceptions import DomainError, RecordLoadError, ValidationError
from ..container import Container
from ..records.codec import raw_from_dict, record_from_dict, record_to_dict, result_to_dict


def register(app: Flask, container: Container) -> None:
    service = container.day_service

    def json_errors(view):
        @wraps(view)
        async def wrapper(*args, **kwargs):
            try:
                return await view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"success": False, "message": str(e)}), 400
            except RecordLoadError as e:
                return jsonify({"success": False, "message": str(e), "day_key": e.day_key}), 422
            except DomainError as e:
                logger.error(f"{request.method} {request.path} failed: {e}")
                return jsonify({"success": False, "message": str(e)}), 500

        return wrapper

    def _body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("request body must be a JSON object")
        return data

    @app.route("/api/days/evaluate", methods=["POST"], endpoint="api_days_evaluate")
    @json_errors
    async def api_days_evaluate():
        result = service.evaluate(raw_from_dict(_body()))
        return jsonify(result_to_dict(result))

    @app.route("/api/days", methods=["GET"], endpoint="api_days_list")
    @json_errors
    async def api_days_list():
        entries = await service.list_days()
        return jsonify([{"dayKey": e.day_key, **record_to_dict(e.record)} for e in entries])

    @app.route("/api/days/keys", methods=["GET"], endpoint="api_days_keys")
    @json_errors
    async def api_days_keys():
        return jsonify(await service.list_day_keys())

    @app.route("/api/days/history", methods=["GET"], endpoint="api_days_history")
    @json_errors
    async def api_days_history():
        entries = await service.list_days()
        return jsonify([service.summary_row(e) for e in entries])

    @app.route("/api/days/<day_key>", methods=["GET"], endpoint="api_days_get")
    @json_errors
    async def api_days_get(day_key: str):
        record = await service.load_day(day_key)
        if record is None:
            return jsonify({"success": False, "message": f"no data saved for {day_key}"}), 404
        return jsonify({"dayKey": day_key, **record_to_dict(record)})

    @app.route("/api/days/<day_key>", methods=["PUT"], endpoint="api_days_put")
    @json_errors
    async def api_days_put(day_key: str):
        data = _body()
        if "calculated" in data:
            # Client already evaluated the day; store its record as sent.
            record = await service.save_day(day_key, record_from_dict(data))
        else:
            record = await service.record_day(day_key, raw_from_dict(data))
        return jsonify({"dayKey": day_key, **record_to_dict(record)})

    @app.route("/api/days", methods=["DELETE"], endpoint="api_days_clear")
    @json_errors
    async def api_days_clear():
        await service.clear_all()
        return jsonify({"success": True})

    @app.route("/api/settings/autosave", methods=["GET"], endpoint="api_autosave_get")
    @json_errors
    async def api_autosave_get():
        return jsonify({"enabled": await service.get_autosave_enabled()})

    @app.route("/api/settings/autosave", methods=["PUT"], endpoint="api_autosave_put")
    @json_errors
    async def api_autosave_put():
        enabled = _body().get("enabled")
        if not isinstance(enabled, bool):
            raise ValidationError("enabled must be true or false")
        await service.set_autosave_enabled(enabled)
        return jsonify({"enabled": enabled})
