# Creates the Flask app (App Factory)
import logging

from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .errors import ConfigurationError
from .github_store import GitHubContentStore
from .rate_limit import InMemoryCounterStore, RateLimiter
from .security import decode_secret

CORS_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS']
CORS_HEADERS = ['Content-Type', 'Authorization']

# Initialize JWT manager
jwt = JWTManager()


def _build_rate_limiter(app, counter_store):
    if counter_store is not None:
        return RateLimiter(counter_store)
    kind = app.config['RATE_LIMIT_STORE']
    if kind == 'memory':
        return RateLimiter(InMemoryCounterStore())
    if kind == 'none':
        app.logger.warning('Auth rate limiting is disabled (RATE_LIMIT_STORE=none)')
        return None
    raise ConfigurationError(f'Unknown RATE_LIMIT_STORE: {kind}')


# Application Factory Function
def create_app(config: dict = None, store=None, counter_store=None):
    """Build the relay app.

    ``store`` replaces the GitHub client and ``counter_store`` the rate
    limit backing store; both default to what the configuration describes.
    """
    app = Flask(__name__, static_folder=None)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    # Logging configuration
    logging.basicConfig(level=app.config['LOG_LEVEL'],
                        format='%(asctime)s %(levelname)s %(name)s - %(message)s')
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Client identity for rate limiting comes from the platform's X-Forwarded-For
    proxies = int(app.config.get('TRUSTED_PROXY_COUNT', 1))
    if proxies > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxies)

    # Extensions. Tokens are signed with the hex-decoded JWT_SECRET; an unset
    # secret leaves no key, so protected requests fail with 500.
    secret = app.config['JWT_SECRET']
    app.config['JWT_SECRET_KEY'] = decode_secret(secret) if secret else None
    app.config['JWT_ALGORITHM'] = 'HS256'
    jwt.init_app(app)

    allowed_origin = app.config['ALLOWED_ORIGIN']
    CORS(app, origins=[allowed_origin] if allowed_origin else [],
         methods=CORS_METHODS, allow_headers=CORS_HEADERS)

    if store is None:
        store = GitHubContentStore(
            token=app.config['GITHUB_TOKEN'],
            repo=app.config['GITHUB_REPO'],
            branch=app.config['GITHUB_BRANCH'],
            api_url=app.config['GITHUB_API_URL'],
            timeout=app.config['GITHUB_TIMEOUT'],
        )
    app.extensions['content_store'] = store
    app.extensions['rate_limiter'] = _build_rate_limiter(app, counter_store)

    # Import and register the blueprint from routes.py
    from .routes import api as api_blueprint
    app.register_blueprint(api_blueprint)

    if not allowed_origin:
        app.logger.warning('ALLOWED_ORIGIN is not set; every request will be rejected')
    app.logger.debug('Application created and configured')
    return app
