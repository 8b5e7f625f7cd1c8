from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from datetime import timedelta
import logging
import os
from dotenv import load_dotenv

from weight_tracker.errors import WeightTrackerError
from weight_tracker.extensions import jwt, store

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = 'weight-tracker-session'


def create_app(config_name='development', config_path=None):
    # Load environment variables
    load_dotenv()

    # Initialize Flask app
    app = Flask(__name__)

    # Configure the app based on environment
    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SECRET_KEY'] = 'test-secret-key'
        app.config['JWT_SECRET_KEY'] = 'test-jwt-secret-key-long-enough-for-hs256-signing'
    else:
        app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev-key-please-change')
        app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'jwt-secret-key-please-change')

    # Data directory - configurable via env for Docker/Unraid
    app.config['CONFIG_PATH'] = str(config_path or os.getenv('CONFIG_PATH', '/config'))
    app.config['API_KEY'] = os.getenv('API_KEY') if config_name != 'testing' else None
    app.config['API_USER'] = os.getenv('API_USER', 'admin')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Session token lives in an HTTP-only cookie; headers are accepted for API clients
    app.config['JWT_TOKEN_LOCATION'] = ['cookies', 'headers']
    app.config['JWT_ACCESS_COOKIE_NAME'] = os.getenv('SESSION_COOKIE_NAME', SESSION_COOKIE_NAME)
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(days=30)
    app.config['JWT_SESSION_COOKIE'] = False
    app.config['JWT_COOKIE_SAMESITE'] = 'Lax'
    app.config['JWT_COOKIE_SECURE'] = config_name == 'production'
    app.config['JWT_COOKIE_CSRF_PROTECT'] = False

    if not app.config.get('TESTING'):
        logging.basicConfig(format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    logging.getLogger('weight_tracker').setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions with app
    store.init_app(app)
    CORS(app, supports_credentials=True)
    jwt.init_app(app)

    register_error_handlers(app)

    # Import routes after extensions are initialized
    from weight_tracker.routes.auth import auth_bp
    from weight_tracker.routes.user import user_bp
    from weight_tracker.routes.weight import weight_bp
    from weight_tracker.routes.settings import settings_bp
    from weight_tracker.routes.water import water_bp

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(user_bp, url_prefix='/api/users')
    app.register_blueprint(weight_bp, url_prefix='/api/entries')
    app.register_blueprint(settings_bp, url_prefix='/api/settings')
    app.register_blueprint(water_bp, url_prefix='/api/water')

    return app


def not_authenticated():
    return jsonify({'success': False, 'error': 'Not authenticated'}), 401


def register_error_handlers(app):
    @app.errorhandler(WeightTrackerError)
    def handle_domain_error(error):
        return jsonify({'success': False, 'error': str(error)}), error.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'success': False, 'error': error.description}), error.code
        logger.exception('Unhandled error')
        return jsonify({'success': False, 'error': str(error) or 'Internal server error'}), 500

    @jwt.unauthorized_loader
    def handle_missing_token(reason):
        return not_authenticated()

    @jwt.invalid_token_loader
    def handle_invalid_token(reason):
        return not_authenticated()

    @jwt.expired_token_loader
    def handle_expired_token(jwt_header, jwt_payload):
        return not_authenticated()


# Create the app instance
app = create_app(os.getenv('FLASK_ENV', 'development'))

if __name__ == '__main__':
    app.run(debug=True)
