import logging

from flask import Flask, jsonify, request
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

from .config import Settings
from .errors import HealthLinkError


def create_app(settings: Settings = None, *, storage=None, brain=None, maps=None):
    """Build the Flask app.

    Services are constructed here (or injected, for tests) and shared with
    request code through ``app.extensions['healthlink']``.
    """
    load_dotenv()
    if settings is None:
        settings = Settings.from_env()

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config['HEALTHLINK_SETTINGS'] = settings
    app.logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    logging.getLogger('healthlink').setLevel(getattr(logging, settings.log_level, logging.INFO))

    from .brain import build_brain
    from .services.maps import MapsService
    from .storage import build_storage

    if storage is None:
        storage = build_storage(settings.storage)
    if brain is None:
        brain = build_brain(settings, storage)
    if maps is None:
        maps = MapsService(settings.maps)
        if not maps.is_configured():
            app.logger.info('GOOGLE_MAPS_API_KEY not set; Places and geocoding are disabled')

    app.extensions['healthlink'] = {
        'storage': storage,
        'brain': brain,
        'maps': maps,
    }

    @app.errorhandler(HealthLinkError)
    def _healthlink_error(e: HealthLinkError):
        if e.status_code >= 500:
            app.logger.error('%s %s failed: %s', request.method, request.path, e)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def _unhandled_error(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({'error': e.description or e.name}), e.code
        app.logger.exception('Unhandled error on %s %s', request.method, request.path)
        return jsonify({'error': 'Internal server error'}), 500

    @app.after_request
    def _security_headers(resp):
        if request.path.startswith('/api/'):
            resp.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate'
            resp.headers['Pragma'] = 'no-cache'
        resp.headers['Referrer-Policy'] = 'no-referrer'
        resp.headers['X-Content-Type-Options'] = 'nosniff'
        return resp

    # Blueprints
    from .blueprints.ai_api import bp as ai_bp
    from .blueprints.chat import bp as chat_bp
    from .blueprints.clinics import bp as clinics_bp
    from .blueprints.fitness import bp as fitness_bp
    from .blueprints.general import bp as general_bp
    from .blueprints.health_logs import bp as health_logs_bp
    from .blueprints.mental_health import bp as mental_health_bp
    from .blueprints.nutrition import bp as nutrition_bp
    from .blueprints.symptoms import bp as symptoms_bp

    app.register_blueprint(general_bp)
    app.register_blueprint(clinics_bp, url_prefix='/api')
    app.register_blueprint(health_logs_bp, url_prefix='/api')
    app.register_blueprint(symptoms_bp, url_prefix='/api/symptoms')
    app.register_blueprint(chat_bp, url_prefix='/api/chat')
    app.register_blueprint(nutrition_bp, url_prefix='/api/nutrition-analyses')
    app.register_blueprint(mental_health_bp, url_prefix='/api/mental-health-assessments')
    app.register_blueprint(fitness_bp, url_prefix='/api/fitness-plans')
    app.register_blueprint(ai_bp, url_prefix='/api/ai')

    return app
