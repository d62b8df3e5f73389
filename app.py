# app.py
from flask import Flask, jsonify
from flask_restful import Resource, Api
import time
from dotenv import load_dotenv
from app_logging import setup_logger
from errors import ConfigError
from settings import load_settings, build_config
from rain_alarm import run_check, build_store
from snooze_control import SnoozeController, SNOOZED, EXPIRING
from snooze_store import location_key

app = Flask(__name__)
api = Api(app)  # Initialize Flask-RESTful
load_dotenv()
logger = setup_logger('app', 'app.log')


def error_response(error, status=500, details=None):
    body = {"error": error}
    if details:
        body["details"] = details
    response = jsonify(body)
    response.status_code = status
    return response


class CheckPrecipitation(Resource):
    def get(self):
        return self.check()

    def post(self):
        return self.check()

    def check(self):
        try:
            result = run_check()
        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            return error_response(str(e))
        except Exception as e:
            logger.error(f"Error checking precipitation: {e}")
            return error_response("Internal server error", details=str(e))

        response = jsonify(result.to_dict())
        response.status_code = 200 if result.success else 500
        return response


class SnoozeStatus(Resource):
    def controller(self):
        config = build_config(load_settings())
        store = build_store(config)
        if store is None:
            return None
        key = location_key(config.latitude, config.longitude)
        return SnoozeController(store, key, notifier=None, recipient=config.recipient)

    def get(self):
        try:
            controller = self.controller()
        except ConfigError as e:
            return error_response(str(e))
        if controller is None:
            return jsonify({"enabled": False})

        status, record = controller.state(time.time())
        return jsonify({
            "enabled": True,
            "location": controller.key,
            "status": status,
            "snoozedUntil": record.expires_at if status in (SNOOZED, EXPIRING) else None,
            "resumeNoticeSent": record.resume_notice_sent if record else False,
        })

    def delete(self):
        try:
            controller = self.controller()
        except ConfigError as e:
            return error_response(str(e))
        if controller is None:
            return error_response("Snooze store not configured", status=400)
        if not controller.clear():
            return error_response("Failed to clear snooze")
        logger.info(f"Snooze for {controller.key} cleared via API")
        return jsonify({"cleared": True, "location": controller.key})


api.add_resource(CheckPrecipitation, '/api/check-precipitation')
api.add_resource(SnoozeStatus, '/api/snooze')


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000)
