from dotenv import load_dotenv
from flask import Flask
from flasgger import Swagger
from .config import Config
from .errors import register_error_handlers
from .extensions import db, migrate, jwt, ma, mail
from .swagger_config import swagger_template
from .middleware.request_id import init_request_id

load_dotenv()

def create_app(config_class=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    Swagger(app, template=swagger_template(app))

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)
    mail.init_app(app)

    from . import models  # noqa: F401  (register tables with SQLAlchemy)
    from .services import init_services
    init_services(app)

    # Middleware + errors
    init_request_id(app)
    register_error_handlers(app)

    # Blueprints
    from .api.auth.routes import auth_bp
    app.register_blueprint(auth_bp, url_prefix=f"{app.config.get('API_PREFIX', '')}/auth")

    from .commands import register_commands
    register_commands(app)

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    return app
