"""
Aura Planner - Flask Application
JSON API over the day planner
"""
from flask import Flask, request, jsonify, current_app
from datetime import datetime
import logging
import os

from aura_planner.cloud.ai_scheduler import AIScheduleClient
from aura_planner.cloud.supabase_client import get_cloud_db
from aura_planner.config import get_settings
from aura_planner.database import Database
from aura_planner.exceptions import (
    InvalidInputError,
    NoActivePlanError,
    NotReschedulableError,
    PlannerError,
    ScheduleConflictError,
    TaskNotFoundError,
)
from aura_planner.logic.balance_score import BalanceCalculator
from aura_planner.models import UserInput
from aura_planner.planner import DayPlanner
from aura_planner.session import UserSessionManager

logger = logging.getLogger(__name__)

ERROR_STATUS = [
    (InvalidInputError, 400),
    (TaskNotFoundError, 404),
    (NoActivePlanError, 404),
    (NotReschedulableError, 409),
    (ScheduleConflictError, 409),
]


def build_planner():
    """Planner wired from the environment"""
    settings = get_settings()
    session = UserSessionManager(
        Database(settings.db_path),
        cloud_db=get_cloud_db(),
        user_id=settings.user_id,
    )
    return DayPlanner(session, generator=AIScheduleClient(settings))


def get_planner() -> DayPlanner:
    """Planner for this app, built on first use"""
    planner = current_app.config.get('PLANNER')
    if planner is None:
        planner = build_planner()
        current_app.config['PLANNER'] = planner
    return planner


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return data


def _require(data: dict, *keys):
    missing = [k for k in keys if not data.get(k)]
    if missing:
        raise InvalidInputError(f"Missing field(s): {', '.join(missing)}")
    return [data[k] for k in keys]


def create_app(planner=None) -> Flask:
    """Application factory"""
    app = Flask(__name__)
    # built lazily on the first request when not injected
    app.config['PLANNER'] = planner

    # ============ ROUTES ============

    @app.route('/health')
    def health():
        """Liveness check"""
        return jsonify({'status': 'ok'})

    @app.route('/api/schedule', methods=['POST'])
    def create_schedule():
        """Generate today's plan"""
        data = _json_body()
        user_input = UserInput.from_dict(data)
        snapshot = get_planner().create_plan(
            user_input,
            feedback=data.get('feedback'),
            preferences=data.get('preferences'),
        )
        result = snapshot.to_dict()
        result['message'] = BalanceCalculator.score_message(snapshot.score)
        return jsonify(result), 201

    @app.route('/api/plan')
    def get_plan():
        """Today's plan with its balance score"""
        planner = get_planner()
        plan = planner.current_plan()
        return jsonify({
            'plan': plan.to_dict(),
            'balanceScore': planner.score(plan).to_dict(),
        })

    @app.route('/api/actions', methods=['POST'])
    def task_action():
        """Complete, skip or reschedule a schedule item"""
        data = _json_body()
        task_id, action = _require(data, 'taskId', 'action')
        report = get_planner().record_action(task_id, action, reason=data.get('reason'))
        return jsonify(report.to_dict())

    @app.route('/api/reschedule/manual', methods=['POST'])
    def manual_reschedule():
        """Move an item to a user-chosen slot"""
        data = _json_body()
        task_id, start_time, end_time = _require(data, 'taskId', 'startTime', 'endTime')
        report = get_planner().manual_reschedule(task_id, start_time, end_time)
        return jsonify(report.to_dict())

    @app.route('/api/reschedule/remaining', methods=['POST'])
    def reschedule_remaining():
        """Re-plan the rest of the day"""
        planner = get_planner()
        plan = planner.reschedule_remaining()
        return jsonify({
            'schedule': [item.to_dict() for item in plan.schedule],
            'balanceScore': planner.score(plan).to_dict(),
        })

    @app.route('/api/wellness')
    def wellness():
        """Wellness metrics and activity suggestion"""
        last_activity = request.args.get('lastActivityTime')
        try:
            last_activity_time = datetime.fromisoformat(last_activity) if last_activity else None
        except ValueError:
            raise InvalidInputError(f"Invalid lastActivityTime '{last_activity}'")
        return jsonify(get_planner().wellness_check(last_activity_time))

    @app.route('/api/wellness/activity', methods=['POST'])
    def wellness_activity():
        """Count a finished guided activity"""
        plan = get_planner().record_wellness_activity()
        return jsonify({'wellnessActivities': plan.wellness_activities})

    @app.route('/api/summary')
    def summary():
        """Spoken summary of today's plan"""
        return jsonify({'summary': get_planner().summary(request.args.get('name'))})

    # ============ ERROR HANDLERS ============

    @app.errorhandler(PlannerError)
    def planner_error(e):
        """Planner errors as JSON with a mapped status"""
        for error_type, status in ERROR_STATUS:
            if isinstance(e, error_type):
                return jsonify({'error': str(e)}), status
        logger.error("Unhandled planner error: %s", e)
        return jsonify({'error': str(e)}), 500

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({'error': 'Internal server error'}), 500

    return app


app = create_app()


# ============ MAIN ============

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    port = int(os.environ.get('PORT', 8080))
    debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    app.run(host='0.0.0.0', port=port, debug=debug)
