import os
from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate

from coursemarket.config import config_dict
from coursemarket.models import db
from coursemarket.classes.errors import CourseMarketError

load_dotenv()

migrate = Migrate()


def create_app(env=None):
    env = (env or os.environ.get("FLASK_ENV", "production")).lower()

    app = Flask(__name__)
    app.config.from_object(config_dict.get(env, config_dict["production"]))
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"], "supports_credentials": True}})

    db.init_app(app)
    migrate.init_app(app, db)

    # Registers the certificate issuer on the completion signal
    import coursemarket.classes.certificate_manager  # noqa: F401

    from coursemarket.routes.authentication import auth_bp
    from coursemarket.routes.courses import course_bp
    from coursemarket.routes.instructors import instructor_bp
    from coursemarket.routes.students import student_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(course_bp, url_prefix='/api/courses')
    app.register_blueprint(instructor_bp, url_prefix='/api/instructor')
    app.register_blueprint(student_bp, url_prefix='/api/student')

    @app.errorhandler(CourseMarketError)
    def handle_course_market_error(error):
        if error.status_code >= 500:
            app.logger.error("%s: %s", error.code, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.route('/')
    def home():
        return "Welcome to the Course Marketplace!"

    app.logger.info("Environment: %s", env)
    return app
